"""Round Resolution Engine.

Resolves a single round from the two sides' strengths:
1. Raw strength per side from the Team Strength Model (home on the given side,
   away on the other)
2. Economy multiplier per side (0.8 / 1.0 / 1.2)
3. Home win probability = adjusted home / (adjusted home + adjusted away)
4. End condition by the winner's logical side
5. Cosmetic kill feed (does not affect strength)
6. Economy update with win/loss/plant bonuses, clamped to [0, 9000]
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import random

from .agent_catalog import Agent
from .economy_engine import EconomyEngine, Economy, EndCondition
from .map_catalog import MapLayout
from .sides import Side, TeamSide
from .team_strength import (
    RosterMember, TeamComposition, composition_from_agents, compute_strength,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KillEvent:
    """One entry of the round's kill feed."""
    killer_id: str
    killer_name: str
    killer_side: TeamSide
    victim_id: str
    victim_name: str
    weapon: str
    is_headshot: bool
    timestamp: float  # seconds into the round


@dataclass(frozen=True)
class RoundResult:
    """Outcome of a resolved round. Immutable once produced."""
    round_number: int
    winner: TeamSide
    winner_side: Side
    end_condition: EndCondition
    duration: float  # seconds
    kills: Tuple[KillEvent, ...]
    economy: Economy  # post-round credits
    home_win_probability: float


@dataclass
class StrengthInputs:
    """Everything the strength model needs for one team."""
    roster: List[RosterMember]
    agents: List[Agent] = field(default_factory=list)
    map_layout: Optional[MapLayout] = None

    @property
    def composition(self) -> TeamComposition:
        return composition_from_agents(self.agents)


class RoundResolutionEngine:
    """Probabilistic round resolver with an injectable random source."""

    WEAPONS = ['Vandal', 'Phantom', 'Operator', 'Sheriff', 'Spectre']

    MIN_KILLS = 2
    MAX_KILLS = 4
    WINNER_KILL_SHARE = 0.7
    HEADSHOT_CHANCE = 0.25
    KILL_FEED_WINDOW = 120.0

    ATTACK_EXPLODE_CHANCE = 0.3
    DEFENSE_ELIMINATION_CHANCE = 0.6
    DEFENSE_DEFUSE_CHANCE = 0.2  # remaining 0.2 is time

    MIN_ROUND_SECONDS = 45.0
    ROUND_SECONDS_SPREAD = 90.0

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @classmethod
    def win_probability(
        cls,
        home: StrengthInputs,
        away: StrengthInputs,
        side: Side,
        economy: Economy,
        map_layout: MapLayout,
    ) -> float:
        """Home win probability for a round with home on `side`."""
        home_strength = compute_strength(home.roster, home.composition, map_layout, side)
        away_strength = compute_strength(away.roster, away.composition, map_layout, side.opposite)

        adjusted_home = home_strength * EconomyEngine.economy_factor(economy.home)
        adjusted_away = away_strength * EconomyEngine.economy_factor(economy.away)

        total = adjusted_home + adjusted_away
        if total <= 0:
            return 0.5
        return max(0.0, min(1.0, adjusted_home / total))

    def determine_end_condition(self, winner_side: Side) -> EndCondition:
        roll = self.rng.random()
        if winner_side == Side.ATTACK:
            if roll < 1.0 - self.ATTACK_EXPLODE_CHANCE:
                return EndCondition.ELIMINATION
            return EndCondition.EXPLODE

        if roll < self.DEFENSE_ELIMINATION_CHANCE:
            return EndCondition.ELIMINATION
        if roll < self.DEFENSE_ELIMINATION_CHANCE + self.DEFENSE_DEFUSE_CHANCE:
            return EndCondition.DEFUSE
        return EndCondition.TIME

    def generate_kill_events(
        self,
        home_roster: List[RosterMember],
        away_roster: List[RosterMember],
        winner: TeamSide,
    ) -> List[KillEvent]:
        """2-4 flavor kills; the winner gets ~70% of them."""
        if not home_roster or not away_roster:
            return []

        kill_count = self.MIN_KILLS + self.rng.randrange(self.MAX_KILLS - self.MIN_KILLS + 1)
        home_kill_chance = self.WINNER_KILL_SHARE if winner == TeamSide.HOME else 1.0 - self.WINNER_KILL_SHARE

        kills = []
        for _ in range(kill_count):
            if self.rng.random() < home_kill_chance:
                killer_side = TeamSide.HOME
                killer = self.rng.choice(home_roster)
                victim = self.rng.choice(away_roster)
            else:
                killer_side = TeamSide.AWAY
                killer = self.rng.choice(away_roster)
                victim = self.rng.choice(home_roster)

            kills.append(KillEvent(
                killer_id=killer.id,
                killer_name=killer.name,
                killer_side=killer_side,
                victim_id=victim.id,
                victim_name=victim.name,
                weapon=self.rng.choice(self.WEAPONS),
                is_headshot=self.rng.random() < self.HEADSHOT_CHANCE,
                timestamp=self.rng.random() * self.KILL_FEED_WINDOW,
            ))

        kills.sort(key=lambda k: k.timestamp)
        return kills

    def resolve_round(
        self,
        home: StrengthInputs,
        away: StrengthInputs,
        side: Side,
        economy: Economy,
        round_number: int,
        map_layout: Optional[MapLayout] = None,
    ) -> RoundResult:
        """Resolve one round.

        Args:
            home: Home roster and drafted agents
            away: Away roster and drafted agents
            side: Logical side home plays this round (away gets the other)
            economy: Credits going into the round
            round_number: 1-based number of the round being played
            map_layout: Map for synergy; falls back to home.map_layout

        Returns:
            RoundResult with the post-round economy
        """
        layout = map_layout or home.map_layout or away.map_layout
        assert layout is not None, "a map is required to resolve a round"

        home_win_probability = self.win_probability(home, away, side, economy, layout)
        winner = TeamSide.HOME if self.rng.random() < home_win_probability else TeamSide.AWAY
        winner_side = side if winner == TeamSide.HOME else side.opposite

        end_condition = self.determine_end_condition(winner_side)
        kills = self.generate_kill_events(home.roster, away.roster, winner)
        duration = self.MIN_ROUND_SECONDS + self.rng.random() * self.ROUND_SECONDS_SPREAD

        new_economy = EconomyEngine.update_economy(economy, winner, end_condition)

        logger.debug(
            f"Round {round_number}: {winner.value} ({winner_side.value}) wins by "
            f"{end_condition.value}, p(home)={home_win_probability:.3f}, economy={new_economy.as_dict()}"
        )

        return RoundResult(
            round_number=round_number,
            winner=winner,
            winner_side=winner_side,
            end_condition=end_condition,
            duration=duration,
            kills=tuple(kills),
            economy=new_economy,
            home_win_probability=home_win_probability,
        )


def side_for_round(round_number: int, regulation_half: int = 12) -> Side:
    """Logical side home plays in a given (1-based) round.

    Home attacks the first half and defends the second; in overtime the
    sides swap every round, starting with home on attack.
    """
    if round_number <= regulation_half:
        return Side.ATTACK
    if round_number <= regulation_half * 2:
        return Side.DEFENSE
    overtime_round = round_number - regulation_half * 2
    return Side.ATTACK if overtime_round % 2 == 1 else Side.DEFENSE


def round_summary(result: RoundResult) -> Dict[str, object]:
    """Plain-dict view of a round for API responses and persistence."""
    return {
        "round_number": result.round_number,
        "winner": result.winner.value,
        "winner_side": result.winner_side.value,
        "end_condition": result.end_condition.value,
        "duration": round(result.duration, 2),
        "economy": result.economy.as_dict(),
        "home_win_probability": round(result.home_win_probability, 4),
        "kills": [
            {
                "killer_id": k.killer_id,
                "killer": k.killer_name,
                "killer_side": k.killer_side.value,
                "victim_id": k.victim_id,
                "victim": k.victim_name,
                "weapon": k.weapon,
                "headshot": k.is_headshot,
                "timestamp": round(k.timestamp, 2),
            }
            for k in result.kills
        ],
    }
