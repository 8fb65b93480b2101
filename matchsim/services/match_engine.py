"""Match State Machine.

Phase flow:

    map_selection -> draft -> map_ban -> simulation <-> timeout -> completed

(`strategy` is reserved and not entered by the default flow.)

The engine holds no timers and no match state of its own. Every operation
takes a MatchState snapshot and returns a new one; the caller's snapshot is
never modified. The host advances time by calling `tick(state, units)` on
its own schedule and forwards user commands (agent bans/picks, timeouts,
pause/resume, exit) as they arrive.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging
import random

from ..config import Settings, get_settings
from .agent_catalog import Agent, AgentCatalog
from .draft_negotiator import DraftNegotiator, DraftState, InvalidSelection
from .economy_engine import Economy
from .map_catalog import MapCatalog, MapLayout
from .match_summary import MatchResult, summarize
from .round_engine import (
    RoundResolutionEngine, RoundResult, StrengthInputs, side_for_round,
)
from .sides import TeamSide
from .team_strength import RosterMember

logger = logging.getLogger(__name__)

WINNING_SCORE = 13
WIN_MARGIN = 2

ROUND_EVENTS = [
    "Home team takes map control",
    "Away team secures pick",
    "Tactical timeout called",
    "Clutch situation developing",
    "Economy reset incoming",
    "Strategic repositioning",
    "Information gathering phase",
]
MAX_ROUND_EVENTS = 5


class MatchPhase(str, Enum):
    MAP_SELECTION = "map_selection"
    DRAFT = "draft"
    MAP_BAN = "map_ban"
    STRATEGY = "strategy"  # reserved
    SIMULATION = "simulation"
    TIMEOUT = "timeout"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Fixture:
    """A scheduled match between two teams."""
    id: str
    home_team_id: str
    away_team_id: str
    scheduled_at: Optional[datetime] = None


@dataclass
class MatchState:
    """Whole-match aggregate passed through the transition functions."""
    fixture: Fixture
    home_roster: List[RosterMember]
    away_roster: List[RosterMember]
    phase: MatchPhase = MatchPhase.MAP_SELECTION
    map_layout: Optional[MapLayout] = None

    # Draft
    agent_catalog: Optional[AgentCatalog] = field(default=None, repr=False)  # None = engine catalog
    draft: Optional[DraftState] = None
    home_agents: Tuple[Agent, ...] = ()
    away_agents: Tuple[Agent, ...] = ()
    banned_agent_ids: Tuple[int, ...] = ()

    # Score and economy
    home_score: int = 0
    away_score: int = 0
    current_round: int = 0  # rounds resolved so far
    economy: Economy = field(default_factory=Economy)
    timeouts: Dict[TeamSide, int] = field(
        default_factory=lambda: {TeamSide.HOME: 2, TeamSide.AWAY: 2}
    )

    # Clock
    phase_timer: int = 0  # map_selection / map_ban display delay
    round_timer: int = 120
    timeout_timer: int = 0
    is_playing: bool = False
    timeout_side: Optional[TeamSide] = None

    round_events: Tuple[str, ...] = ()
    history: Tuple[RoundResult, ...] = ()
    result: Optional[MatchResult] = None

    @property
    def match_id(self) -> str:
        return self.fixture.id

    @property
    def is_completed(self) -> bool:
        return self.phase == MatchPhase.COMPLETED

    def score_for(self, side: TeamSide) -> int:
        return self.home_score if side == TeamSide.HOME else self.away_score


def is_match_over(home_score: int, away_score: int) -> bool:
    """First to 13 with a 2-round margin; 12-12 plays on until someone leads by 2."""
    return (
        max(home_score, away_score) >= WINNING_SCORE
        and abs(home_score - away_score) >= WIN_MARGIN
    )


class MatchEngine:
    """Transition functions for the match state machine."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        agent_catalog: Optional[AgentCatalog] = None,
        map_catalog: Optional[MapCatalog] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.agent_catalog = agent_catalog or AgentCatalog()
        self.map_catalog = map_catalog or MapCatalog()
        if rng is None:
            rng = random.Random(self.settings.random_seed)
        self.rng = rng
        self.draft = DraftNegotiator(
            self.agent_catalog, rng, turn_units=self.settings.draft_turn_units
        )
        self.rounds = RoundResolutionEngine(rng)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_match(
        self,
        fixture: Fixture,
        home_roster: List[RosterMember],
        away_roster: List[RosterMember],
        agent_catalog: Optional[AgentCatalog] = None,
    ) -> MatchState:
        """New match in map_selection with a random map from the enabled pool.

        `agent_catalog` restricts the draft to a per-match agent pool.

        Raises:
            InsufficientAgentPool: the pool cannot fill every ban and pick.
        """
        DraftNegotiator.check_pool(self.agent_catalog if agent_catalog is None else agent_catalog)
        state = MatchState(
            fixture=fixture,
            home_roster=list(home_roster),
            away_roster=list(away_roster),
            agent_catalog=agent_catalog,
            economy=Economy(
                home=self.settings.starting_credits,
                away=self.settings.starting_credits,
            ),
            timeouts={
                TeamSide.HOME: self.settings.timeouts_per_side,
                TeamSide.AWAY: self.settings.timeouts_per_side,
            },
            round_timer=self.settings.round_time_units,
        )
        self._enter_map_selection(state)
        logger.info(
            f"Match {fixture.id} created: {fixture.home_team_id} vs {fixture.away_team_id} "
            f"on {state.map_layout.display_name}"
        )
        return state

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self, state: MatchState, units: int = 1) -> MatchState:
        """Advance the live timer of the current phase by `units`."""
        if state.is_completed or units <= 0:
            return state

        state = self._copy(state)
        for _ in range(units):
            if state.is_completed:
                break
            self._tick_once(state)
        return state

    def _tick_once(self, state: MatchState):
        if state.phase == MatchPhase.MAP_SELECTION:
            state.phase_timer -= 1
            if state.phase_timer <= 0:
                self._enter_draft(state)

        elif state.phase == MatchPhase.DRAFT:
            state.draft = self.draft.tick(state.draft, 1)
            self._check_draft_complete(state)

        elif state.phase == MatchPhase.MAP_BAN:
            state.phase_timer -= 1
            if state.phase_timer <= 0:
                self._enter_simulation(state)

        elif state.phase == MatchPhase.SIMULATION:
            if not state.is_playing:
                return
            if state.round_timer <= 1:
                self._play_round(state)
                return
            if state.round_timer % self.settings.round_event_interval == 0:
                self._emit_round_event(state)
            state.round_timer -= 1

        elif state.phase == MatchPhase.TIMEOUT:
            state.timeout_timer -= 1
            if state.timeout_timer <= 0:
                self._leave_timeout(state)

    # ------------------------------------------------------------------
    # User commands
    # ------------------------------------------------------------------

    def ban_agent(self, state: MatchState, agent_id: int) -> MatchState:
        """Ban for the acting side. Raises InvalidSelection; state is unchanged then."""
        self._require_draft(state, agent_id)
        new_draft = self.draft.ban_agent(state.draft, agent_id)
        return self._with_draft(state, new_draft)

    def select_agent(self, state: MatchState, side: TeamSide, agent_id: int) -> MatchState:
        """Pick for `side`. Raises InvalidSelection; state is unchanged then."""
        self._require_draft(state, agent_id)
        new_draft = self.draft.select_agent(state.draft, side, agent_id)
        return self._with_draft(state, new_draft)

    def expire_draft_turn(self, state: MatchState) -> MatchState:
        """Resolve the current draft turn as if its timer ran out."""
        if state.phase != MatchPhase.DRAFT:
            return state
        return self._with_draft(state, self.draft.expire_turn(state.draft))

    def suggest_agent(self, state: MatchState) -> Optional[Agent]:
        if state.phase != MatchPhase.DRAFT or state.draft is None:
            return None
        return self.draft.suggest(state.draft)

    def call_timeout(self, state: MatchState, side: TeamSide) -> MatchState:
        """Spend one of `side`'s timeouts. No-op outside simulation or with none left."""
        if state.phase != MatchPhase.SIMULATION:
            return state
        if state.timeouts.get(side, 0) <= 0:
            logger.debug(f"Match {state.match_id}: {side.value} has no timeouts left")
            return state

        state = self._copy(state)
        state.timeouts[side] -= 1
        state.phase = MatchPhase.TIMEOUT
        state.timeout_side = side
        state.timeout_timer = self.settings.timeout_units
        state.is_playing = False
        logger.info(
            f"Match {state.match_id}: timeout {side.value} "
            f"({state.timeouts[side]} left), round timer frozen at {state.round_timer}"
        )
        return state

    def resume_from_timeout(self, state: MatchState) -> MatchState:
        if state.phase != MatchPhase.TIMEOUT:
            return state
        state = self._copy(state)
        self._leave_timeout(state)
        return state

    def set_playing(self, state: MatchState, playing: bool) -> MatchState:
        """Pause/resume playback. The round timer keeps its value while paused."""
        if state.is_completed or state.is_playing == playing:
            return state
        return replace(self._copy(state), is_playing=playing)

    def exit_match(self, state: MatchState) -> MatchState:
        """Abort: throw away draft and round progress.

        Returns a fresh match for the same fixture and rosters. Completed
        matches are returned unchanged.
        """
        if state.is_completed:
            return state
        logger.info(
            f"Match {state.match_id} aborted in {state.phase.value} at "
            f"{state.home_score}-{state.away_score}"
        )
        return self.create_match(
            state.fixture, state.home_roster, state.away_roster, state.agent_catalog
        )

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def _enter_map_selection(self, state: MatchState):
        state.phase = MatchPhase.MAP_SELECTION
        state.map_layout = self.map_catalog.random_map(self.rng)
        state.phase_timer = self.settings.map_selection_delay_units

    def _enter_draft(self, state: MatchState):
        state.phase = MatchPhase.DRAFT
        state.draft = self.draft.start(state.agent_catalog)
        logger.info(f"Match {state.match_id}: draft started on {state.map_layout.name}")

    def _check_draft_complete(self, state: MatchState):
        if state.draft is None or not state.draft.is_complete:
            return
        draft = state.draft
        state.home_agents = tuple(self.draft.agents_for(draft, TeamSide.HOME))
        state.away_agents = tuple(self.draft.agents_for(draft, TeamSide.AWAY))
        state.banned_agent_ids = draft.banned
        state.draft = None
        state.phase = MatchPhase.MAP_BAN
        state.phase_timer = self.settings.map_ban_delay_units
        logger.info(
            f"Match {state.match_id}: draft complete - "
            f"home {[a.name for a in state.home_agents]}, away {[a.name for a in state.away_agents]}"
        )

    def _enter_simulation(self, state: MatchState):
        state.phase = MatchPhase.SIMULATION
        state.round_timer = self.settings.round_time_units
        state.is_playing = False

    def _leave_timeout(self, state: MatchState):
        state.phase = MatchPhase.SIMULATION
        state.timeout_side = None
        state.timeout_timer = 0
        state.is_playing = True

    def _emit_round_event(self, state: MatchState):
        event = self.rng.choice(ROUND_EVENTS)
        state.round_events = (state.round_events + (event,))[-MAX_ROUND_EVENTS:]

    def _play_round(self, state: MatchState):
        round_number = state.current_round + 1
        result = self.rounds.resolve_round(
            home=StrengthInputs(state.home_roster, list(state.home_agents), state.map_layout),
            away=StrengthInputs(state.away_roster, list(state.away_agents), state.map_layout),
            side=side_for_round(round_number),
            economy=state.economy,
            round_number=round_number,
            map_layout=state.map_layout,
        )

        if result.winner == TeamSide.HOME:
            state.home_score += 1
        else:
            state.away_score += 1
        state.history = state.history + (result,)
        state.current_round = round_number
        state.economy = result.economy
        state.round_timer = self.settings.round_time_units
        state.round_events = ()

        assert len(state.history) == state.current_round

        if is_match_over(state.home_score, state.away_score):
            self._complete(state)

    def _complete(self, state: MatchState):
        state.phase = MatchPhase.COMPLETED
        state.is_playing = False
        state.result = summarize(state, completed_at=datetime.now(timezone.utc))
        logger.info(
            f"Match {state.match_id} completed {state.home_score}-{state.away_score} "
            f"after {state.current_round} rounds, winner {state.result.winner}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _copy(state: MatchState) -> MatchState:
        # Nested values are immutable except the timeout budget
        return replace(state, timeouts=dict(state.timeouts))

    def _require_draft(self, state: MatchState, agent_id: int):
        if state.phase != MatchPhase.DRAFT or state.draft is None:
            raise InvalidSelection(
                f"Match is in {state.phase.value}, not draft", agent_id
            )

    def _with_draft(self, state: MatchState, draft: DraftState) -> MatchState:
        state = self._copy(state)
        state.draft = draft
        self._check_draft_complete(state)
        return state
