"""Tests for the ORM tables (models/)"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.models import Fixture, Match, Player, Round, Team


class TestTables:
    """Tables hold what the roster provider and result sink read and write."""

    def test_team_columns(self):
        assert set(Team.__table__.columns.keys()) == {"id", "name", "created_at", "updated_at"}

    def test_player_columns(self):
        assert set(Player.__table__.columns.keys()) == {
            "id", "team_id", "name", "role", "roster_slot",
            "aim", "game_iq", "clutch", "teamwork", "positioning", "morale",
            "created_at", "updated_at",
        }

    def test_result_tables(self):
        assert "status" in Fixture.__table__.columns
        assert {"player_stats", "analysis", "mvp_player_id"} <= set(Match.__table__.columns.keys())
        assert Round.__table__.c.match_id.foreign_keys


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
