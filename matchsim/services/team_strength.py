"""Team Strength Model.

Computes a scalar combat strength for one side of a round from:
- Individual skill (mean of aim, game IQ, clutch, teamwork, positioning)
- Role-composition synergy against the map's ideal composition
- Side-specific role bonuses (duelists/initiators attack, sentinels/controllers defend)
- Morale

The economy multiplier is NOT applied here; see EconomyEngine.economy_factor.
"""

from dataclasses import dataclass, fields
from typing import Dict, Iterable, List, TYPE_CHECKING
import numpy as np

from .agent_catalog import Agent, Role
from .sides import Side

if TYPE_CHECKING:
    from .map_catalog import MapLayout


NEUTRAL_STRENGTH = 50.0
BASE_SYNERGY = 50.0
SYNERGY_WEIGHT = 0.3
COMPOSITION_WEIGHT = 20.0
TEAMWORK_WEIGHT = 0.3
ROLE_COVERAGE_BONUS = 10.0
MORALE_WEIGHT = 0.2
BASELINE_ATTRIBUTE = 75.0

# Side bonus per agent of a role
ATTACK_ROLE_BONUS = {"duelist": 5.0, "initiator": 3.0}
DEFENSE_ROLE_BONUS = {"sentinel": 5.0, "controller": 3.0}


@dataclass
class RosterMember:
    """A player as seen by the simulation (read-only during a match)."""
    id: str
    name: str
    role: str
    aim: float
    game_iq: float
    clutch: float
    teamwork: float
    positioning: float
    morale: float = 75.0

    @property
    def skill(self) -> float:
        return (self.aim + self.game_iq + self.clutch + self.teamwork + self.positioning) / 5


@dataclass
class TeamComposition:
    """Drafted agents per role for one side."""
    duelist: int = 0
    initiator: int = 0
    controller: int = 0
    sentinel: int = 0
    flex: int = 0

    @classmethod
    def roles(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def as_dict(self) -> Dict[str, int]:
        return {role: getattr(self, role) for role in self.roles()}

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())

    @property
    def roles_covered(self) -> int:
        return sum(1 for count in self.as_dict().values() if count > 0)


def composition_from_agents(agents: Iterable[Agent]) -> TeamComposition:
    """Count drafted agents per role; unknown roles count as flex."""
    counts = TeamComposition()
    known = {r.value for r in Role}
    for agent in agents:
        role = agent.role.value if isinstance(agent.role, Role) else str(agent.role)
        if role in known:
            setattr(counts, role, getattr(counts, role) + 1)
        else:
            counts.flex += 1
    return counts


def ideal_composition(map_layout: "MapLayout") -> TeamComposition:
    """Ideal role split for a map, based on its shape."""
    if len(map_layout.bomb_sites) == 3:
        # Three sites need more area control
        return TeamComposition(duelist=1, initiator=1, controller=2, sentinel=1, flex=0)
    if len(map_layout.choke_points) > 4:
        # Many chokes need more info gathering
        return TeamComposition(duelist=1, initiator=2, controller=1, sentinel=1, flex=0)
    return TeamComposition(duelist=1, initiator=1, controller=1, sentinel=1, flex=1)


def composition_score(actual: TeamComposition, ideal: TeamComposition) -> float:
    """Mean per-role closeness to the ideal, in [0, 1]."""
    roles = TeamComposition.roles()
    score = 0.0
    for role in roles:
        diff = abs(getattr(actual, role) - getattr(ideal, role))
        score += max(0.0, 1.0 - diff * 0.5)
    return score / len(roles)


def compute_synergy(
    composition: TeamComposition,
    roster: List[RosterMember],
    map_layout: "MapLayout",
) -> float:
    """Synergy score in [0, 100].

    An empty roster contributes no teamwork term.
    """
    synergy = BASE_SYNERGY

    synergy += composition_score(composition, ideal_composition(map_layout)) * COMPOSITION_WEIGHT

    if roster:
        avg_teamwork = float(np.mean([m.teamwork for m in roster]))
        synergy += (avg_teamwork - BASELINE_ATTRIBUTE) * TEAMWORK_WEIGHT

    if composition.roles_covered >= 4:
        synergy += ROLE_COVERAGE_BONUS

    return float(max(0.0, min(100.0, synergy)))


def side_bonus(composition: TeamComposition, side: Side) -> float:
    bonuses = ATTACK_ROLE_BONUS if side == Side.ATTACK else DEFENSE_ROLE_BONUS
    return sum(getattr(composition, role) * weight for role, weight in bonuses.items())


def compute_strength(
    roster: List[RosterMember],
    composition: TeamComposition,
    map_layout: "MapLayout",
    side: Side,
) -> float:
    """Raw team strength before the economy multiplier.

    Returns NEUTRAL_STRENGTH (50.0) for an empty roster or an empty composition.
    """
    if not roster or composition.total == 0:
        return NEUTRAL_STRENGTH

    attributes = np.array(
        [[m.aim, m.game_iq, m.clutch, m.teamwork, m.positioning] for m in roster],
        dtype=float,
    )
    avg_skill = float(attributes.mean(axis=1).mean())

    synergy = compute_synergy(composition, roster, map_layout)

    avg_morale = float(np.mean([m.morale for m in roster]))
    morale_bonus = (avg_morale - BASELINE_ATTRIBUTE) * MORALE_WEIGHT

    return avg_skill + synergy * SYNERGY_WEIGHT + side_bonus(composition, side) + morale_bonus


@dataclass
class MatchPrediction:
    home_win_chance: float
    confidence: float
    factors: List[str]


def predict_match_outcome(
    home_roster: List[RosterMember],
    away_roster: List[RosterMember],
    home_agents: List[Agent],
    away_agents: List[Agent],
    map_layout: "MapLayout",
) -> MatchPrediction:
    """Pre-match estimate with home on attack, away on defense."""
    home_strength = compute_strength(
        home_roster, composition_from_agents(home_agents), map_layout, Side.ATTACK
    )
    away_strength = compute_strength(
        away_roster, composition_from_agents(away_agents), map_layout, Side.DEFENSE
    )

    total = home_strength + away_strength
    home_win_chance = home_strength / total if total > 0 else 0.5

    strength_diff = abs(home_strength - away_strength)
    confidence = min(0.9, strength_diff / 50)

    factors = []
    if strength_diff > 20:
        factors.append("Significant skill gap")
    if any(m.morale > 90 for m in home_roster):
        factors.append("High team morale")
    if len(home_agents) != 5:
        factors.append("Incomplete agent selection")

    return MatchPrediction(
        home_win_chance=home_win_chance,
        confidence=confidence,
        factors=factors,
    )
