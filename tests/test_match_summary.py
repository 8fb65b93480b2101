"""Tests for match_summary.py"""

import pytest
import sys
import os
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.services.economy_engine import Economy, EndCondition
from matchsim.services.map_catalog import MapCatalog
from matchsim.services.match_engine import Fixture, MatchPhase, MatchState
from matchsim.services.match_summary import (
    PlayerStats, calculate_mvp, compute_player_stats, generate_analysis, mvp_score, summarize,
)
from matchsim.services.round_engine import KillEvent, RoundResult
from matchsim.services.sides import Side, TeamSide
from matchsim.services.team_strength import RosterMember


def member(player_id):
    return RosterMember(player_id, player_id.upper(), "flex", 75, 75, 75, 75, 75)


HOME = [member("h1"), member("h2")]
AWAY = [member("a1"), member("a2")]


def kill(killer, victim, side, t, headshot=False):
    return KillEvent(
        killer_id=killer, killer_name=killer.upper(), killer_side=side,
        victim_id=victim, victim_name=victim.upper(),
        weapon="Vandal", is_headshot=headshot, timestamp=t,
    )


def round_result(number, winner, kills, duration=90.0):
    return RoundResult(
        round_number=number,
        winner=winner,
        winner_side=Side.ATTACK,
        end_condition=EndCondition.ELIMINATION,
        duration=duration,
        kills=tuple(kills),
        economy=Economy(),
        home_win_probability=0.5,
    )


class TestPlayerStats:
    """Per-player aggregation from the kill feed."""

    def test_kills_deaths_headshots(self):
        rounds = (
            round_result(1, TeamSide.HOME, [
                kill("h1", "a1", TeamSide.HOME, 10, headshot=True),
                kill("a2", "h2", TeamSide.AWAY, 20),
                kill("h1", "a2", TeamSide.HOME, 30),
            ]),
            round_result(2, TeamSide.AWAY, [
                kill("a1", "h1", TeamSide.AWAY, 5),
                kill("a1", "h2", TeamSide.AWAY, 15),
                kill("h2", "a1", TeamSide.HOME, 25),
            ]),
        )
        stats = {s.player_id: s for s in compute_player_stats(HOME, AWAY, rounds)}

        assert stats["h1"].kills == 2
        assert stats["h1"].deaths == 1
        assert stats["h1"].headshots == 1
        assert stats["h2"].deaths == 2
        assert stats["a1"].kills == 2
        assert stats["a1"].deaths == 2
        assert all(s.rounds_played == 2 for s in stats.values())

    def test_derived_rating_and_adr(self):
        rounds = (
            round_result(1, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1), kill("h1", "a2", TeamSide.HOME, 2), kill("h1", "a1", TeamSide.HOME, 3)]),
            round_result(2, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1), kill("a2", "h1", TeamSide.AWAY, 2), kill("h2", "a2", TeamSide.HOME, 3)]),
        )
        stats = {s.player_id: s for s in compute_player_stats(HOME, AWAY, rounds)}
        h1 = stats["h1"]
        assert h1.kills == 4 and h1.deaths == 1
        assert h1.adr == pytest.approx(150 * 4 / 2)
        assert h1.rating == pytest.approx(1 + 3 / 2)
        # a1 died 3 times without a kill: 1 - 3/2 floors at 0
        assert stats["a1"].rating == 0.0

    def test_clutch_requires_low_kill_round_won_and_final_kill(self):
        rounds = (
            # 2 kills, home wins, h2 has the last kill -> clutch for h2
            round_result(1, TeamSide.HOME, [kill("a1", "h1", TeamSide.AWAY, 1), kill("h2", "a1", TeamSide.HOME, 2)]),
            # 2 kills but the last killer's side lost -> no clutch
            round_result(2, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1), kill("a2", "h1", TeamSide.AWAY, 2)]),
            # 3 kills -> not a clutch round
            round_result(3, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1), kill("h1", "a2", TeamSide.HOME, 2), kill("h1", "a1", TeamSide.HOME, 3)]),
        )
        stats = {s.player_id: s for s in compute_player_stats(HOME, AWAY, rounds)}
        assert stats["h2"].clutches == 1
        assert stats["a2"].clutches == 0
        assert stats["h1"].clutches == 0

    def test_no_rounds(self):
        stats = compute_player_stats(HOME, AWAY, ())
        assert len(stats) == 4
        assert all(s.rating == 0 and s.adr == 0 for s in stats)


class TestMVP:
    """MVP selection."""

    def test_score_formula(self):
        stats = PlayerStats("p", "P", TeamSide.HOME, kills=10, deaths=5, clutches=2, rating=1.5, adr=100)
        assert mvp_score(stats) == pytest.approx(0.4 * 1.5 + 0.3 * 2 + 0.002 * 100 + 0.1 * 2)

    def test_kd_without_deaths_is_kills(self):
        stats = PlayerStats("p", "P", TeamSide.HOME, kills=3, deaths=0)
        assert stats.kd == 3.0

    def test_highest_score_wins(self):
        low = PlayerStats("a", "A", TeamSide.HOME, kills=1, deaths=3, rating=0.5)
        high = PlayerStats("b", "B", TeamSide.AWAY, kills=5, deaths=1, rating=1.8)
        assert calculate_mvp([low, high]) is high

    def test_tie_goes_to_earlier_player(self):
        first = PlayerStats("a", "A", TeamSide.HOME, kills=2, deaths=1, rating=1.0)
        second = PlayerStats("b", "B", TeamSide.AWAY, kills=2, deaths=1, rating=1.0)
        assert calculate_mvp([first, second]) is first

    def test_no_players(self):
        assert calculate_mvp([]) is None


class TestAnalysis:
    """Templated observations."""

    def test_home_win(self):
        rounds = tuple(round_result(i, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1)] * 3) for i in range(1, 14))
        analysis = generate_analysis(13, 0, rounds, 19.5)
        assert analysis[0] == "Strong performance from the home team"
        assert "Won by a margin of 13 rounds (13-0)" in analysis
        assert "Long match indicates closely matched teams" not in analysis
        assert "Many clutch situations decided the outcome" not in analysis

    def test_away_win_long_and_clutchy(self):
        rounds = tuple(round_result(i, TeamSide.AWAY, []) for i in range(1, 27))
        analysis = generate_analysis(12, 14, rounds, 65.0)
        assert analysis[0] == "Away team executed their game plan effectively"
        assert "Decided in overtime after 26 rounds" in analysis
        assert "Long match indicates closely matched teams" in analysis
        assert "Many clutch situations decided the outcome" in analysis


class TestSummarize:
    """End-to-end summary of a match state."""

    def test_summarize_state(self):
        rounds = tuple(
            round_result(i, TeamSide.HOME, [kill("h1", "a1", TeamSide.HOME, 1), kill("h1", "a2", TeamSide.HOME, 2), kill("h2", "a1", TeamSide.HOME, 3)], duration=100.0)
            for i in range(1, 14)
        )
        state = MatchState(
            fixture=Fixture(id="m9", home_team_id="t1", away_team_id="t2"),
            home_roster=HOME,
            away_roster=AWAY,
            phase=MatchPhase.COMPLETED,
            map_layout=MapCatalog().get_map("bind"),
            home_score=13,
            away_score=0,
            current_round=13,
            history=rounds,
        )
        completed_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
        result = summarize(state, completed_at=completed_at)

        assert result.match_id == "m9"
        assert result.winner == "home"
        assert result.winner_team_id == "t1"
        assert result.rounds_played == 13
        assert result.duration_seconds == pytest.approx(1300.0)
        assert result.duration_minutes == pytest.approx(1300.0 / 60)
        assert result.mvp.player_id == "h1"
        assert result.map_name == "bind"
        assert result.completed_at == completed_at
        assert [s.player_id for s in result.player_stats] == ["h1", "h2", "a1", "a2"]

    def test_tie_for_aborted_match(self):
        state = MatchState(
            fixture=Fixture(id="m10", home_team_id="t1", away_team_id="t2"),
            home_roster=HOME,
            away_roster=AWAY,
        )
        result = summarize(state)
        assert result.winner == "tie"
        assert result.winner_team_id is None
        assert result.rounds_played == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
