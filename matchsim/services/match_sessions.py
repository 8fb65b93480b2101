"""Live match sessions.

The session manager is the host of the match engine: it keeps the current
MatchState per session, serialises commands on a per-session lock, and hands
completed matches to the persistence sink exactly once.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4
import asyncio
import logging

from .agent_catalog import AgentCatalog
from .match_engine import MatchEngine, MatchState
from .providers import (
    FixtureProvider, InMemoryFixtureProvider, InMemoryPersistenceSink,
    InMemoryRosterProvider, PersistenceSink, RosterProvider,
)
from .sides import TeamSide

logger = logging.getLogger(__name__)


class SessionNotFound(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"Match session {session_id} not found")
        self.session_id = session_id


@dataclass
class MatchSession:
    id: str
    state: MatchState
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    persistence_claimed: bool = False
    persisted: Optional[bool] = None  # None until the sink has answered


class MatchSessionManager:
    def __init__(
        self,
        engine: Optional[MatchEngine] = None,
        rosters: Optional[RosterProvider] = None,
        fixtures: Optional[FixtureProvider] = None,
        sink: Optional[PersistenceSink] = None,
    ):
        self.engine = engine or MatchEngine()
        self.rosters = rosters or InMemoryRosterProvider()
        self.fixtures = fixtures or InMemoryFixtureProvider()
        self.sink = sink or InMemoryPersistenceSink()
        self._sessions: Dict[str, MatchSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def list_sessions(self) -> List[MatchSession]:
        return list(self._sessions.values())

    def get(self, session_id: str) -> MatchSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def create(self, fixture_id: str) -> MatchSession:
        """Start a match for a fixture.

        The draft pool comes from the roster provider.

        Raises:
            FixtureNotFound: unknown fixture id.
            InsufficientAgentPool: the provider offers too few agents for a draft.
        """
        self.prune()
        fixture = await self.fixtures.get_fixture(fixture_id)
        home_roster = await self.rosters.get_team_roster(fixture.home_team_id)
        away_roster = await self.rosters.get_team_roster(fixture.away_team_id)

        if not home_roster or not away_roster:
            logger.warning(
                f"Fixture {fixture_id} has an empty roster "
                f"(home={len(home_roster)}, away={len(away_roster)}), strength will be neutral"
            )

        agents = AgentCatalog(await self.rosters.get_available_agents())
        state = self.engine.create_match(fixture, home_roster, away_roster, agents)
        session = MatchSession(id=str(uuid4()), state=state)
        self._sessions[session.id] = session
        return session

    async def apply(self, session_id: str, transition: Callable[..., MatchState], *args) -> MatchSession:
        """Run one engine transition against the session's state.

        The new state only replaces the old one if the transition returns;
        an exception (e.g. InvalidSelection) leaves the session untouched.
        """
        session = self.get(session_id)
        async with session.lock:
            session.state = transition(session.state, *args)
            session.updated_at = datetime.now(timezone.utc)
        return session

    async def tick(self, session_id: str, units: int = 1) -> MatchSession:
        return await self.apply(session_id, self.engine.tick, units)

    async def ban_agent(self, session_id: str, agent_id: int) -> MatchSession:
        return await self.apply(session_id, self.engine.ban_agent, agent_id)

    async def select_agent(self, session_id: str, side: TeamSide, agent_id: int) -> MatchSession:
        return await self.apply(session_id, self.engine.select_agent, side, agent_id)

    async def expire_draft_turn(self, session_id: str) -> MatchSession:
        return await self.apply(session_id, self.engine.expire_draft_turn)

    async def call_timeout(self, session_id: str, side: TeamSide) -> MatchSession:
        return await self.apply(session_id, self.engine.call_timeout, side)

    async def resume(self, session_id: str) -> MatchSession:
        return await self.apply(session_id, self.engine.resume_from_timeout)

    async def set_playing(self, session_id: str, playing: bool) -> MatchSession:
        return await self.apply(session_id, self.engine.set_playing, playing)

    async def exit(self, session_id: str) -> MatchState:
        """Abort the match and drop the session. Returns the reset state."""
        session = self.get(session_id)
        async with session.lock:
            reset = self.engine.exit_match(session.state)
            del self._sessions[session_id]
        return reset

    def claim_persistence(self, session: MatchSession) -> bool:
        """True exactly once per session, after it has completed."""
        if not session.state.is_completed or session.persistence_claimed:
            return False
        session.persistence_claimed = True
        return True

    async def persist(self, session: MatchSession):
        """Hand the result to the sink. Failures are logged, never raised."""
        result = session.state.result
        try:
            session.persisted = bool(await self.sink.save_match_result(result))
        except Exception as e:
            session.persisted = False
            logger.error(f"Persisting match {result.match_id} failed: {e}")
            return

        if not session.persisted:
            logger.error(f"Persistence sink rejected match {result.match_id}")

    def prune(self, now: Optional[datetime] = None) -> int:
        """Drop stale sessions. Returns how many were removed.

        A completed match stays readable for `completed_session_ttl_seconds`
        after it finished, and only goes once the sink has answered. Any
        other session goes after `idle_session_ttl_seconds` without a command.
        """
        now = now or datetime.now(timezone.utc)
        settings = self.engine.settings
        completed_ttl = timedelta(seconds=settings.completed_session_ttl_seconds)
        idle_ttl = timedelta(seconds=settings.idle_session_ttl_seconds)

        stale = []
        for session in self._sessions.values():
            if session.state.is_completed:
                finished_at = session.state.result.completed_at or session.updated_at
                if session.persisted is not None and now - finished_at > completed_ttl:
                    stale.append(session.id)
            elif now - session.updated_at > idle_ttl:
                stale.append(session.id)

        for session_id in stale:
            del self._sessions[session_id]
        if stale:
            logger.info(f"Pruned {len(stale)} stale match sessions, {len(self._sessions)} live")
        return len(stale)
