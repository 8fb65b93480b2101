from .teams import Team, Player
from .matches import Fixture, Match, Round

__all__ = [
    "Team",
    "Player",
    "Fixture",
    "Match",
    "Round",
]
