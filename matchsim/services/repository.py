"""SQLAlchemy-backed roster, fixture and persistence collaborators.

Each call opens its own session from the factory so the sink can run in a
background task after the request session is gone.
"""

from typing import List
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..models import Player, Match, Round
from ..models import Fixture as FixtureRecord
from .agent_catalog import Agent, AgentCatalog
from .match_engine import Fixture
from .match_summary import MatchResult
from .providers import FixtureNotFound
from .team_strength import RosterMember

logger = logging.getLogger(__name__)

ACTIVE_ROSTER_SIZE = 5


class SQLRosterProvider:
    def __init__(self, session_factory, catalog: AgentCatalog = None):
        self.session_factory = session_factory
        self.catalog = catalog or AgentCatalog()

    async def get_team_roster(self, team_id: str) -> List[RosterMember]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Player)
                .where(Player.team_id == team_id, Player.roster_slot > 0)
                .order_by(Player.roster_slot)
                .limit(ACTIVE_ROSTER_SIZE)
            )
            players = result.scalars().all()

        return [
            RosterMember(
                id=p.id,
                name=p.name,
                role=p.role or "flex",
                aim=p.aim,
                game_iq=p.game_iq,
                clutch=p.clutch,
                teamwork=p.teamwork,
                positioning=p.positioning,
                morale=p.morale,
            )
            for p in players
        ]

    async def get_available_agents(self) -> List[Agent]:
        # Agents are reference data and are not stored in the database
        return self.catalog.list_agents()


class SQLFixtureProvider:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def get_fixture(self, fixture_id: str) -> Fixture:
        async with self.session_factory() as db:
            result = await db.execute(
                select(FixtureRecord).where(FixtureRecord.id == fixture_id)
            )
            record = result.scalar_one_or_none()

        if record is None:
            raise FixtureNotFound(fixture_id)
        return Fixture(
            id=record.id,
            home_team_id=record.home_team_id,
            away_team_id=record.away_team_id,
            scheduled_at=record.scheduled_at,
        )


class SQLPersistenceSink:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def save_match_result(self, result: MatchResult) -> bool:
        """Write the match, its rounds and mark the fixture completed.

        Returns False (after logging) if the write fails.
        """
        try:
            async with self.session_factory() as db:
                match = Match(
                    id=result.match_id,
                    fixture_id=result.match_id,
                    home_team_id=result.home_team_id,
                    away_team_id=result.away_team_id,
                    map_name=result.map_name,
                    home_score=result.home_score,
                    away_score=result.away_score,
                    final_score=f"{result.home_score}-{result.away_score}",
                    winner_id=result.winner_team_id,
                    mvp_player_id=result.mvp.player_id if result.mvp else None,
                    duration_seconds=result.duration_seconds,
                    player_stats=[s.as_dict() for s in result.player_stats],
                    analysis=list(result.analysis),
                    completed_at=result.completed_at,
                )
                match.rounds = [
                    Round(
                        round_number=r.round_number,
                        winner=r.winner.value,
                        winner_side=r.winner_side.value,
                        end_condition=r.end_condition.value,
                        duration_ms=int(r.duration * 1000),
                        home_credits=r.economy.home,
                        away_credits=r.economy.away,
                        kills=[
                            {
                                "killer_id": k.killer_id,
                                "victim_id": k.victim_id,
                                "weapon": k.weapon,
                                "headshot": k.is_headshot,
                                "timestamp": k.timestamp,
                            }
                            for k in r.kills
                        ],
                    )
                    for r in result.rounds
                ]
                db.add(match)

                fixture = await db.get(FixtureRecord, result.match_id)
                if fixture is not None:
                    fixture.status = "completed"

                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist match {result.match_id}: {e}")
            return False

        logger.info(f"Persisted match {result.match_id} ({len(result.rounds)} rounds)")
        return True
