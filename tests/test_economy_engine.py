"""Tests for economy_engine.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.services.economy_engine import EconomyEngine, Economy, BuyType, EndCondition
from matchsim.services.sides import TeamSide


class TestBuyTypeClassification:
    """Tests for buy type classification."""

    def test_eco_classification(self):
        assert EconomyEngine.classify_buy_type(0) == BuyType.ECO
        assert EconomyEngine.classify_buy_type(2999) == BuyType.ECO

    def test_half_buy_classification(self):
        assert EconomyEngine.classify_buy_type(3000) == BuyType.HALF
        assert EconomyEngine.classify_buy_type(4999) == BuyType.HALF

    def test_full_buy_classification(self):
        assert EconomyEngine.classify_buy_type(5000) == BuyType.FULL
        assert EconomyEngine.classify_buy_type(9000) == BuyType.FULL


class TestEconomyFactor:
    """Strength multipliers by bank."""

    def test_factor_examples(self):
        """2000 -> 0.8, 4000 -> 1.0, 7000 -> 1.2."""
        assert EconomyEngine.economy_factor(2000) == 0.8
        assert EconomyEngine.economy_factor(4000) == 1.0
        assert EconomyEngine.economy_factor(7000) == 1.2

    def test_factor_thresholds(self):
        assert EconomyEngine.economy_factor(2999) == 0.8
        assert EconomyEngine.economy_factor(3000) == 1.0
        assert EconomyEngine.economy_factor(5000) == 1.2


class TestRoundIncome:
    """Tests for per-round credit awards."""

    def test_loss_bonus(self):
        assert EconomyEngine.calculate_round_income(False, EndCondition.ELIMINATION) == 1900

    def test_loss_bonus_ignores_end_condition(self):
        assert EconomyEngine.calculate_round_income(False, EndCondition.EXPLODE) == 1900

    def test_win_bonus(self):
        assert EconomyEngine.calculate_round_income(True, EndCondition.DEFUSE) == 3000

    def test_plant_bonus_on_explode(self):
        assert EconomyEngine.calculate_round_income(True, EndCondition.EXPLODE) == 3800


class TestUpdateEconomy:
    """Tests for applying a round to both banks."""

    def test_broke_side_loses(self):
        """A side at 0 that loses ends at exactly 1900."""
        economy = EconomyEngine.update_economy(
            Economy(home=0, away=4000), TeamSide.AWAY, EndCondition.ELIMINATION
        )
        assert economy.home == 1900
        assert economy.away == 7000

    def test_explode_winner(self):
        economy = EconomyEngine.update_economy(
            Economy(home=1000, away=1000), TeamSide.HOME, EndCondition.EXPLODE
        )
        assert economy.home == 4800
        assert economy.away == 2900

    def test_cap_at_9000(self):
        economy = EconomyEngine.update_economy(
            Economy(home=8000, away=8500), TeamSide.HOME, EndCondition.EXPLODE
        )
        assert economy.home == 9000
        assert economy.away == 9000

    def test_input_not_mutated(self):
        before = Economy(home=800, away=800)
        EconomyEngine.update_economy(before, TeamSide.HOME, EndCondition.TIME)
        assert before == Economy(home=800, away=800)

    def test_bounds_over_many_rounds(self):
        economy = Economy()
        conditions = list(EndCondition)
        for i in range(200):
            winner = TeamSide.HOME if i % 3 else TeamSide.AWAY
            economy = EconomyEngine.update_economy(economy, winner, conditions[i % len(conditions)])
            assert 0 <= economy.home <= 9000
            assert 0 <= economy.away <= 9000

    def test_clamp_floor(self):
        assert EconomyEngine.clamp(-500) == 0

    def test_for_side(self):
        economy = Economy(home=1200, away=3400)
        assert economy.for_side(TeamSide.HOME) == 1200
        assert economy.for_side(TeamSide.AWAY) == 3400
        assert economy.as_dict() == {"home": 1200, "away": 3400}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
