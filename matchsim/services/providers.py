"""Collaborator interfaces the match engine depends on, plus in-memory
implementations used when no database is reachable (demo mode).
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Protocol
import logging

from .agent_catalog import Agent, AgentCatalog
from .match_engine import Fixture
from .match_summary import MatchResult
from .team_strength import RosterMember

logger = logging.getLogger(__name__)


class FixtureNotFound(Exception):
    """Raised when a fixture id is unknown to the provider."""

    def __init__(self, fixture_id: str):
        super().__init__(f"Fixture {fixture_id} not found")
        self.fixture_id = fixture_id


class RosterProvider(Protocol):
    async def get_team_roster(self, team_id: str) -> List[RosterMember]:
        ...

    async def get_available_agents(self) -> List[Agent]:
        ...


class FixtureProvider(Protocol):
    async def get_fixture(self, fixture_id: str) -> Fixture:
        ...


class PersistenceSink(Protocol):
    async def save_match_result(self, result: MatchResult) -> bool:
        ...


# Role baselines for generated players
ROLE_BASE_STATS = {
    "duelist": {"aim": 85, "game_iq": 70, "clutch": 80, "teamwork": 65, "positioning": 70},
    "initiator": {"aim": 75, "game_iq": 85, "clutch": 75, "teamwork": 80, "positioning": 80},
    "controller": {"aim": 70, "game_iq": 90, "clutch": 70, "teamwork": 85, "positioning": 85},
    "sentinel": {"aim": 75, "game_iq": 80, "clutch": 85, "teamwork": 75, "positioning": 90},
    "flex": {"aim": 80, "game_iq": 80, "clutch": 80, "teamwork": 80, "positioning": 80},
}

DEMO_ROLES = ["duelist", "initiator", "controller", "sentinel", "flex"]


def build_roster(team_id: str, names: Iterable[str], offset: int = 0) -> List[RosterMember]:
    """Five-player roster from the role baselines, shifted by `offset` (clamped to 50-99)."""
    roster = []
    for slot, (name, role) in enumerate(zip(names, DEMO_ROLES), start=1):
        base = ROLE_BASE_STATS[role]
        stats = {k: max(50, min(99, v + offset)) for k, v in base.items()}
        roster.append(RosterMember(id=f"{team_id}-p{slot}", name=name, role=role, **stats))
    return roster


DEMO_ROSTERS: Dict[str, List[RosterMember]] = {
    "falcons": build_roster("falcons", ["Blaze", "Echo", "Haze", "Warden", "Shift"], offset=2),
    "wolves": build_roster("wolves", ["Fang", "Scout", "Mist", "Bastion", "Drift"], offset=0),
}

DEMO_FIXTURES: Dict[str, Fixture] = {
    "demo": Fixture(
        id="demo",
        home_team_id="falcons",
        away_team_id="wolves",
        scheduled_at=datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc),
    ),
}


class InMemoryRosterProvider:
    def __init__(
        self,
        rosters: Optional[Dict[str, List[RosterMember]]] = None,
        catalog: Optional[AgentCatalog] = None,
    ):
        self.rosters = dict(DEMO_ROSTERS if rosters is None else rosters)
        self.catalog = catalog or AgentCatalog()

    async def get_team_roster(self, team_id: str) -> List[RosterMember]:
        # Unknown teams play with an empty roster (neutral strength)
        return list(self.rosters.get(team_id, []))

    async def get_available_agents(self) -> List[Agent]:
        return self.catalog.list_agents()


class InMemoryFixtureProvider:
    def __init__(self, fixtures: Optional[Dict[str, Fixture]] = None):
        self.fixtures = dict(DEMO_FIXTURES if fixtures is None else fixtures)

    async def get_fixture(self, fixture_id: str) -> Fixture:
        fixture = self.fixtures.get(fixture_id)
        if fixture is None:
            raise FixtureNotFound(fixture_id)
        return fixture

    def add_fixture(
        self, fixture_id: str, home_team_id: str, away_team_id: str,
        scheduled_at: Optional[datetime] = None,
    ) -> Fixture:
        fixture = Fixture(
            id=fixture_id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            scheduled_at=scheduled_at or datetime.now(timezone.utc) + timedelta(hours=1),
        )
        self.fixtures[fixture_id] = fixture
        return fixture


class InMemoryPersistenceSink:
    """Keeps results in a dict keyed by match id."""

    def __init__(self):
        self.results: Dict[str, MatchResult] = {}

    async def save_match_result(self, result: MatchResult) -> bool:
        self.results[result.match_id] = result
        logger.info(
            f"Stored result for match {result.match_id}: "
            f"{result.home_score}-{result.away_score} ({result.winner})"
        )
        return True
