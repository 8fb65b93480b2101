"""Draft/Ban Negotiator.

Alternating-turn state machine between home and away:
- Ban phase: 6 turns (home, away, home, ...), each removes one agent from the pool
- Pick phase: 10 turns (home, away, home, ...), each adds one agent to the acting side
- Complete: both sides hold exactly 5 agents

Every turn runs on a fixed timer; when it elapses without a selection the
turn is auto-resolved with a uniformly random available agent, so a draft
always terminates even if a side never responds.

DraftState is immutable - every transition returns a new state.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple
import logging
import random

from .agent_catalog import Agent, AgentCatalog
from .sides import TeamSide

logger = logging.getLogger(__name__)

BAN_TURNS = 6
PICK_TURNS = 10
PICKS_PER_SIDE = PICK_TURNS // 2
TOTAL_TURNS = BAN_TURNS + PICK_TURNS
DEFAULT_TURN_UNITS = 20


class DraftPhase(str, Enum):
    BAN = "ban"
    PICK = "pick"
    COMPLETE = "complete"


class InvalidSelection(Exception):
    """A ban/pick that the current draft state does not allow.

    The caller rejects the action; the draft state is left unchanged.
    """

    def __init__(self, message: str, agent_id: Optional[int] = None):
        super().__init__(message)
        self.agent_id = agent_id


class InsufficientAgentPool(Exception):
    """The agent pool cannot fill every ban and pick of a draft."""

    def __init__(self, pool_size: int):
        super().__init__(
            f"Draft needs at least {TOTAL_TURNS} agents, pool has {pool_size}"
        )
        self.pool_size = pool_size


@dataclass(frozen=True)
class DraftState:
    """Snapshot of a draft."""
    phase: DraftPhase = DraftPhase.BAN
    turn_index: int = 0  # 0-5 bans, 6-15 picks, 16 = complete
    banned: Tuple[int, ...] = ()
    home_picks: Tuple[int, ...] = ()
    away_picks: Tuple[int, ...] = ()
    turn_timer: int = DEFAULT_TURN_UNITS
    # Per-match agent pool; None drafts from the negotiator's catalog
    catalog: Optional[AgentCatalog] = field(default=None, repr=False, compare=False)

    @property
    def is_complete(self) -> bool:
        return self.phase == DraftPhase.COMPLETE

    @property
    def phase_turn(self) -> int:
        """Turn index within the current phase's sub-sequence."""
        if self.phase == DraftPhase.BAN:
            return self.turn_index
        return self.turn_index - BAN_TURNS

    @property
    def acting_side(self) -> Optional[TeamSide]:
        if self.is_complete:
            return None
        return TeamSide.HOME if self.phase_turn % 2 == 0 else TeamSide.AWAY

    @property
    def used_ids(self) -> Tuple[int, ...]:
        return self.banned + self.home_picks + self.away_picks

    def picks_for(self, side: TeamSide) -> Tuple[int, ...]:
        return self.home_picks if side == TeamSide.HOME else self.away_picks


def phase_for_turn(turn_index: int) -> DraftPhase:
    if turn_index < BAN_TURNS:
        return DraftPhase.BAN
    if turn_index < TOTAL_TURNS:
        return DraftPhase.PICK
    return DraftPhase.COMPLETE


class DraftNegotiator:
    """Resolves the ban and pick phases for one match."""

    def __init__(
        self,
        catalog: AgentCatalog,
        rng: Optional[random.Random] = None,
        turn_units: int = DEFAULT_TURN_UNITS,
    ):
        self.catalog = catalog
        self.rng = rng or random.Random()
        # Hints draw from their own stream so they never shift auto-picks
        self.hint_rng = random.Random(self.rng.random())
        self.turn_units = turn_units

    @staticmethod
    def check_pool(catalog: AgentCatalog):
        """Raise InsufficientAgentPool unless `catalog` can fill every ban and pick."""
        if len(catalog) < TOTAL_TURNS:
            raise InsufficientAgentPool(len(catalog))

    def start(self, catalog: Optional[AgentCatalog] = None) -> DraftState:
        return DraftState(turn_timer=self.turn_units, catalog=catalog)

    def catalog_for(self, state: DraftState) -> AgentCatalog:
        return state.catalog if state.catalog is not None else self.catalog

    def available_agents(self, state: DraftState) -> List[Agent]:
        return self.catalog_for(state).available_agents(state.used_ids)

    def advance_turn(self, state: DraftState, agent_id: int) -> DraftState:
        """Resolve the current turn with `agent_id`.

        Raises:
            InvalidSelection: draft already complete, unknown agent, or agent
                already banned/picked.
        """
        if state.is_complete:
            raise InvalidSelection("Draft is already complete", agent_id)
        if agent_id not in self.catalog_for(state):
            raise InvalidSelection(f"Agent {agent_id} does not exist", agent_id)
        if agent_id in state.used_ids:
            raise InvalidSelection(f"Agent {agent_id} is not available", agent_id)

        side = state.acting_side
        if state.phase == DraftPhase.BAN:
            changes = {"banned": state.banned + (agent_id,)}
        elif side == TeamSide.HOME:
            changes = {"home_picks": state.home_picks + (agent_id,)}
        else:
            changes = {"away_picks": state.away_picks + (agent_id,)}

        next_turn = state.turn_index + 1
        new_state = replace(
            state,
            turn_index=next_turn,
            phase=phase_for_turn(next_turn),
            turn_timer=self.turn_units,
            **changes,
        )

        assert len(new_state.home_picks) <= PICKS_PER_SIDE
        assert len(new_state.away_picks) <= PICKS_PER_SIDE
        assert len(set(new_state.used_ids)) == len(new_state.used_ids)

        logger.debug(
            f"Draft turn {state.turn_index} ({state.phase.value}, {side.value}): agent {agent_id}"
        )
        return new_state

    def expire_turn(self, state: DraftState) -> DraftState:
        """Auto-resolve the current turn with a random available agent."""
        if state.is_complete:
            return state
        pool = self.available_agents(state)
        if not pool:
            raise InvalidSelection("No agents available for auto-selection")
        choice = self.rng.choice(pool)
        logger.info(
            f"Draft turn {state.turn_index} timed out, auto-selected {choice.name}"
        )
        return self.advance_turn(state, choice.id)

    def ban_agent(self, state: DraftState, agent_id: int) -> DraftState:
        """User ban - only valid during the ban phase."""
        if state.phase != DraftPhase.BAN:
            raise InvalidSelection("Bans are closed", agent_id)
        return self.advance_turn(state, agent_id)

    def select_agent(self, state: DraftState, side: TeamSide, agent_id: int) -> DraftState:
        """User pick - only valid for the acting side during the pick phase."""
        if state.phase != DraftPhase.PICK:
            raise InvalidSelection("Picks are not open", agent_id)
        if side != state.acting_side:
            raise InvalidSelection(f"It is not {side.value}'s turn to pick", agent_id)
        return self.advance_turn(state, agent_id)

    def suggest(self, state: DraftState) -> Optional[Agent]:
        """Advisory pick for the UI; never changes the draft."""
        pool = self.available_agents(state)
        if not pool:
            return None
        return self.hint_rng.choice(pool)

    def tick(self, state: DraftState, units: int = 1) -> DraftState:
        """Count down the turn timer, auto-resolving turns on expiry."""
        for _ in range(units):
            if state.is_complete:
                break
            remaining = state.turn_timer - 1
            if remaining <= 0:
                state = self.expire_turn(state)
            else:
                state = replace(state, turn_timer=remaining)
        return state

    def agents_for(self, state: DraftState, side: TeamSide) -> List[Agent]:
        catalog = self.catalog_for(state)
        return [catalog.get_agent(agent_id) for agent_id in state.picks_for(side)]
