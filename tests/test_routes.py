"""Tests for the HTTP API routes."""

import httpx
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.config import Settings
from matchsim.main import app
from matchsim.services.agent_catalog import AgentCatalog, DEFAULT_AGENTS
from matchsim.services.llm import AdvisoryServiceUnavailable, TacticalAdvisor
from matchsim.services.match_engine import MatchEngine
from matchsim.services.match_sessions import MatchSessionManager
from matchsim.services.providers import InMemoryRosterProvider

pytestmark = pytest.mark.anyio

BASE = "/api/v1"


class FailingClient:
    async def complete(self, prompt, system=""):
        raise AdvisoryServiceUnavailable("offline")

    async def close(self):
        pass


@pytest.fixture
def manager():
    return MatchSessionManager(engine=MatchEngine(Settings(), rng=random.Random(12)))


@pytest.fixture
async def client(manager):
    """Async client with demo-mode services set on app.state (mimics lifespan startup)."""
    app.state.match_sessions = manager
    app.state.advisor = TacticalAdvisor(client=FailingClient(), rng=random.Random(0))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def create_match(client):
    response = await client.post(f"{BASE}/matches/", json={"fixture_id": "demo"})
    assert response.status_code == 201
    return response.json()


async def tick(client, session_id, units):
    response = await client.post(f"{BASE}/matches/{session_id}/tick", json={"units": units})
    assert response.status_code == 200
    return response.json()


class TestCatalogRoutes:
    """Agents and maps."""

    async def test_list_agents(self, client):
        response = await client.get(f"{BASE}/agents/")
        assert response.status_code == 200
        assert len(response.json()) == 27

    async def test_filter_agents_by_role(self, client):
        response = await client.get(f"{BASE}/agents/", params={"role": "sentinel"})
        assert response.status_code == 200
        assert {a["role"] for a in response.json()} == {"sentinel"}

    async def test_get_agent(self, client):
        response = await client.get(f"{BASE}/agents/3")
        assert response.json()["name"] == "Reyna"

    async def test_unknown_agent(self, client):
        response = await client.get(f"{BASE}/agents/999")
        assert response.status_code == 404

    async def test_agents_come_from_roster_provider(self, client):
        app.state.match_sessions = MatchSessionManager(
            engine=MatchEngine(Settings(), rng=random.Random(1)),
            rosters=InMemoryRosterProvider(catalog=AgentCatalog(DEFAULT_AGENTS[:20])),
        )
        response = await client.get(f"{BASE}/agents/")
        assert [a["id"] for a in response.json()] == [a.id for a in DEFAULT_AGENTS[:20]]

        response = await client.get(f"{BASE}/agents/{DEFAULT_AGENTS[20].id}")
        assert response.status_code == 404

    async def test_list_maps(self, client):
        response = await client.get(f"{BASE}/maps/")
        assert response.status_code == 200
        assert len(response.json()) == 5

    async def test_get_map(self, client):
        response = await client.get(f"{BASE}/maps/Haven")
        assert response.status_code == 200
        data = response.json()
        assert data["bomb_sites"] == ["A", "B", "C"]
        assert data["tactical_info"]["recommended_composition"]["controller"] == 2

    async def test_unknown_map(self, client):
        response = await client.get(f"{BASE}/maps/lotus")
        assert response.status_code == 404


class TestMatchRoutes:
    """Driving a match over HTTP."""

    async def test_create_match(self, client):
        data = await create_match(client)
        assert data["phase"] == "map_selection"
        assert data["match_id"] == "demo"
        assert data["timeouts"] == {"home": 2, "away": 2}
        assert data["economy"] == {"home": 800, "away": 800}

    async def test_unknown_fixture(self, client):
        response = await client.post(f"{BASE}/matches/", json={"fixture_id": "nope"})
        assert response.status_code == 404

    async def test_pool_too_small(self, client):
        app.state.match_sessions = MatchSessionManager(
            engine=MatchEngine(Settings(), rng=random.Random(1)),
            rosters=InMemoryRosterProvider(catalog=AgentCatalog(DEFAULT_AGENTS[:10])),
        )
        response = await client.post(f"{BASE}/matches/", json={"fixture_id": "demo"})
        assert response.status_code == 422

    async def test_prediction_after_draft(self, client):
        session_id = (await create_match(client))["session_id"]
        response = await client.get(f"{BASE}/matches/{session_id}/prediction")
        assert response.status_code == 409

        await tick(client, session_id, 400)
        response = await client.get(f"{BASE}/matches/{session_id}/prediction")
        assert response.status_code == 200
        data = response.json()
        assert 0.0 <= data["home_win_chance"] <= 1.0
        assert 0.0 <= data["confidence"] <= 0.9
        assert "Incomplete agent selection" not in data["factors"]

    async def test_unknown_session(self, client):
        response = await client.get(f"{BASE}/matches/missing")
        assert response.status_code == 404

    async def test_draft_commands(self, client):
        session_id = (await create_match(client))["session_id"]
        data = await tick(client, session_id, 3)
        assert data["phase"] == "draft"
        assert data["draft"]["acting_side"] == "home"

        response = await client.post(f"{BASE}/matches/{session_id}/draft/ban", json={"agent_id": 1})
        assert response.status_code == 200
        assert response.json()["draft"]["banned"] == [1]

        response = await client.post(f"{BASE}/matches/{session_id}/draft/ban", json={"agent_id": 1})
        assert response.status_code == 409

        response = await client.post(
            f"{BASE}/matches/{session_id}/draft/select", json={"side": "away", "agent_id": 2}
        )
        assert response.status_code == 409

        state = (await client.get(f"{BASE}/matches/{session_id}")).json()
        assert state["draft"]["banned"] == [1]
        assert state["draft"]["turn_index"] == 1

        response = await client.get(f"{BASE}/matches/{session_id}/draft/suggestion")
        assert response.status_code == 200
        assert response.json()["agent"]["id"] != 1

        response = await client.post(f"{BASE}/matches/{session_id}/draft/expire")
        assert response.json()["draft"]["turn_index"] == 2

    async def test_timeout_and_resume(self, client):
        session_id = (await create_match(client))["session_id"]
        data = await tick(client, session_id, 400)
        assert data["phase"] == "simulation"

        response = await client.post(f"{BASE}/matches/{session_id}/timeout", json={"side": "home"})
        data = response.json()
        assert data["phase"] == "timeout"
        assert data["timeouts"]["home"] == 1
        assert data["timeout_side"] == "home"

        response = await client.post(
            f"{BASE}/matches/{session_id}/advice", json={"side": "home", "role": "coach"}
        )
        assert response.status_code == 200
        assert response.json()["source"] == "canned"

        response = await client.post(f"{BASE}/matches/{session_id}/resume")
        data = response.json()
        assert data["phase"] == "simulation"
        assert data["is_playing"] is True

    async def test_full_match_and_summary(self, client, manager):
        session_id = (await create_match(client))["session_id"]

        response = await client.get(f"{BASE}/matches/{session_id}/summary")
        assert response.status_code == 409

        await tick(client, session_id, 400)
        response = await client.post(f"{BASE}/matches/{session_id}/playing", json={"playing": True})
        assert response.json()["is_playing"] is True

        data = None
        for _ in range(20):
            data = await tick(client, session_id, 10000)
            if data["phase"] == "completed":
                break
        assert data["phase"] == "completed"
        assert data["result"] is not None
        assert data["last_round"]["round_number"] == data["current_round"]

        response = await client.get(f"{BASE}/matches/{session_id}/summary")
        assert response.status_code == 200
        summary = response.json()
        high, low = max(summary["home_score"], summary["away_score"]), min(summary["home_score"], summary["away_score"])
        assert high >= 13 and high - low >= 2
        assert summary["mvp"] is not None
        assert len(summary["player_stats"]) == 10

        assert "demo" in manager.sink.results
        assert manager.get(session_id).persisted is True

    async def test_exit_match(self, client):
        session_id = (await create_match(client))["session_id"]
        await tick(client, session_id, 50)
        response = await client.delete(f"{BASE}/matches/{session_id}")
        assert response.status_code == 200
        assert response.json()["phase"] == "map_selection"

        response = await client.get(f"{BASE}/matches/{session_id}")
        assert response.status_code == 404

    async def test_invalid_tick(self, client):
        session_id = (await create_match(client))["session_id"]
        response = await client.post(f"{BASE}/matches/{session_id}/tick", json={"units": 0})
        assert response.status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
