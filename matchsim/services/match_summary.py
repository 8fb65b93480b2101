"""Post-Match Summary.

Builds per-player statistics from the kill feed of every round, picks an
MVP and writes a few lines of analysis.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import numpy as np

from .round_engine import RoundResult
from .sides import TeamSide

if TYPE_CHECKING:
    from .match_engine import MatchState

REGULATION_ROUNDS = 24
LONG_MATCH_MINUTES = 60
CLUTCH_KILL_LIMIT = 2
CLUTCH_ROUND_SHARE = 0.3
DAMAGE_PER_KILL = 150


@dataclass
class PlayerStats:
    player_id: str
    name: str
    team: TeamSide
    kills: int = 0
    deaths: int = 0
    headshots: int = 0
    clutches: int = 0
    rounds_played: int = 0
    rating: float = 0.0
    adr: float = 0.0

    @property
    def kd(self) -> float:
        return self.kills / self.deaths if self.deaths > 0 else float(self.kills)

    def as_dict(self) -> Dict[str, object]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "team": self.team.value,
            "kills": self.kills,
            "deaths": self.deaths,
            "headshots": self.headshots,
            "clutches": self.clutches,
            "rounds_played": self.rounds_played,
            "rating": round(self.rating, 3),
            "adr": round(self.adr, 1),
            "kd": round(self.kd, 3),
        }


@dataclass
class MatchResult:
    """Final record of a completed match, handed to the persistence sink."""
    match_id: str
    home_team_id: str
    away_team_id: str
    winner: str  # "home", "away" or "tie"
    home_score: int
    away_score: int
    rounds_played: int
    mvp: Optional[PlayerStats]
    player_stats: List[PlayerStats]
    duration_seconds: float
    analysis: List[str]
    map_name: Optional[str] = None
    rounds: Tuple[RoundResult, ...] = ()
    completed_at: Optional[datetime] = None

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60

    @property
    def winner_team_id(self) -> Optional[str]:
        if self.winner == TeamSide.HOME.value:
            return self.home_team_id
        if self.winner == TeamSide.AWAY.value:
            return self.away_team_id
        return None


def mvp_score(stats: PlayerStats) -> float:
    return stats.rating * 0.4 + stats.kd * 0.3 + stats.adr * 0.002 + stats.clutches * 0.1


def calculate_mvp(player_stats: List[PlayerStats]) -> Optional[PlayerStats]:
    """Highest MVP score; ties go to the earlier player."""
    if not player_stats:
        return None
    scores = np.array([mvp_score(s) for s in player_stats])
    return player_stats[int(np.argmax(scores))]


def compute_player_stats(
    home_roster, away_roster, rounds: Tuple[RoundResult, ...]
) -> List[PlayerStats]:
    """Aggregate kills, deaths, headshots and clutches per player.

    Home players come first, in roster order.
    """
    stats: Dict[str, PlayerStats] = {}
    for team, roster in ((TeamSide.HOME, home_roster), (TeamSide.AWAY, away_roster)):
        for member in roster:
            stats[member.id] = PlayerStats(player_id=member.id, name=member.name, team=team)

    for result in rounds:
        for kill in result.kills:
            killer = stats.get(kill.killer_id)
            if killer is not None:
                killer.kills += 1
                if kill.is_headshot:
                    killer.headshots += 1
            victim = stats.get(kill.victim_id)
            if victim is not None:
                victim.deaths += 1

        if result.kills and len(result.kills) <= CLUTCH_KILL_LIMIT:
            last = result.kills[-1]
            if last.killer_side == result.winner and last.killer_id in stats:
                stats[last.killer_id].clutches += 1

    total_rounds = len(rounds)
    for player in stats.values():
        player.rounds_played = total_rounds
        if total_rounds:
            player.adr = DAMAGE_PER_KILL * player.kills / total_rounds
            player.rating = max(0.0, 1.0 + (player.kills - player.deaths) / total_rounds)

    return list(stats.values())


def generate_analysis(
    home_score: int, away_score: int, rounds: Tuple[RoundResult, ...], duration_minutes: float
) -> List[str]:
    analysis = []

    if home_score > away_score:
        analysis.append("Strong performance from the home team")
    elif away_score > home_score:
        analysis.append("Away team executed their game plan effectively")
    else:
        analysis.append("Neither team could find the decisive edge")

    total_rounds = len(rounds)
    if total_rounds > REGULATION_ROUNDS:
        analysis.append(f"Decided in overtime after {total_rounds} rounds")
    elif home_score != away_score:
        margin = abs(home_score - away_score)
        analysis.append(f"Won by a margin of {margin} rounds ({home_score}-{away_score})")

    if duration_minutes > LONG_MATCH_MINUTES:
        analysis.append("Long match indicates closely matched teams")

    clutch_rounds = sum(1 for r in rounds if len(r.kills) <= CLUTCH_KILL_LIMIT)
    if clutch_rounds > total_rounds * CLUTCH_ROUND_SHARE:
        analysis.append("Many clutch situations decided the outcome")

    return analysis


def summarize(state: "MatchState", completed_at: Optional[datetime] = None) -> MatchResult:
    """MatchResult for a finished (or aborted) match state."""
    rounds = tuple(state.history)
    player_stats = compute_player_stats(state.home_roster, state.away_roster, rounds)
    duration_seconds = float(sum(r.duration for r in rounds))

    if state.home_score > state.away_score:
        winner = TeamSide.HOME.value
    elif state.away_score > state.home_score:
        winner = TeamSide.AWAY.value
    else:
        winner = "tie"

    return MatchResult(
        match_id=state.match_id,
        home_team_id=state.fixture.home_team_id,
        away_team_id=state.fixture.away_team_id,
        winner=winner,
        home_score=state.home_score,
        away_score=state.away_score,
        rounds_played=len(rounds),
        mvp=calculate_mvp(player_stats),
        player_stats=player_stats,
        duration_seconds=duration_seconds,
        analysis=generate_analysis(
            state.home_score, state.away_score, rounds, duration_seconds / 60
        ),
        map_name=state.map_layout.name if state.map_layout else None,
        rounds=rounds,
        completed_at=completed_at,
    )
