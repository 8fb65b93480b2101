from enum import Enum


class TeamSide(str, Enum):
    """Which team of the fixture."""
    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> "TeamSide":
        return TeamSide.AWAY if self is TeamSide.HOME else TeamSide.HOME


class Side(str, Enum):
    """Logical side within a round."""
    ATTACK = "attack"
    DEFENSE = "defense"

    @property
    def opposite(self) -> "Side":
        return Side.DEFENSE if self is Side.ATTACK else Side.ATTACK
