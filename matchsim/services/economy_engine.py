"""Economy Engine for match simulations.

Handles per-side credit bookkeeping between rounds and the buy tier that a
side's bank translates to. Credits are tracked per side (not per player) and
are always kept within [0, 9000].
"""

from dataclasses import dataclass
from enum import Enum

from .sides import TeamSide


class BuyType(Enum):
    """Buy tier a side's bank can afford."""
    ECO = "eco"     # < 3000 credits
    HALF = "half"   # 3000-4999 credits
    FULL = "full"   # 5000+ credits


class EndCondition(str, Enum):
    """How a round ended."""
    ELIMINATION = "elimination"
    DEFUSE = "defuse"
    EXPLODE = "explode"
    TIME = "time"


@dataclass(frozen=True)
class Economy:
    """Credits for both sides."""
    home: int = 800
    away: int = 800

    def for_side(self, side: TeamSide) -> int:
        return self.home if side == TeamSide.HOME else self.away

    def as_dict(self) -> dict:
        return {"home": self.home, "away": self.away}


class EconomyEngine:
    """Round income and economy-factor rules."""

    WIN_BONUS = 3000
    LOSS_BONUS = 1900
    PLANT_BONUS = 800  # Winner's extra when the spike explodes

    MIN_CREDITS = 0
    MAX_CREDITS = 9000

    # Upper bounds (exclusive) for each buy tier
    BUY_THRESHOLDS = {
        BuyType.ECO: 3000,
        BuyType.HALF: 5000,
        BuyType.FULL: float('inf'),
    }

    ECONOMY_FACTORS = {
        BuyType.ECO: 0.8,
        BuyType.HALF: 1.0,
        BuyType.FULL: 1.2,
    }

    @classmethod
    def classify_buy_type(cls, credits: int) -> BuyType:
        """Classify the buy tier for a side's bank."""
        if credits < cls.BUY_THRESHOLDS[BuyType.ECO]:
            return BuyType.ECO
        elif credits < cls.BUY_THRESHOLDS[BuyType.HALF]:
            return BuyType.HALF
        return BuyType.FULL

    @classmethod
    def economy_factor(cls, credits: int) -> float:
        """Strength multiplier for a side's bank: 0.8, 1.0 or 1.2."""
        return cls.ECONOMY_FACTORS[cls.classify_buy_type(credits)]

    @classmethod
    def clamp(cls, credits: int) -> int:
        return max(cls.MIN_CREDITS, min(cls.MAX_CREDITS, credits))

    @classmethod
    def calculate_round_income(cls, won: bool, end_condition: EndCondition) -> int:
        """Credits earned this round.

        Args:
            won: Whether the side won the round
            end_condition: How the round ended

        Returns:
            Credits earned (never negative)
        """
        if not won:
            return cls.LOSS_BONUS

        income = cls.WIN_BONUS
        if end_condition == EndCondition.EXPLODE:
            income += cls.PLANT_BONUS
        return income

    @classmethod
    def update_economy(
        cls,
        economy: Economy,
        winner: TeamSide,
        end_condition: EndCondition,
    ) -> Economy:
        """Apply one round's income to both sides and clamp to [0, 9000]."""
        home_income = cls.calculate_round_income(winner == TeamSide.HOME, end_condition)
        away_income = cls.calculate_round_income(winner == TeamSide.AWAY, end_condition)

        return Economy(
            home=cls.clamp(economy.home + home_income),
            away=cls.clamp(economy.away + away_income),
        )
