"""Tests for the timeout advisor (llm/advisor.py)"""

import asyncio
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.config import Settings
from matchsim.services.llm import (
    AdvisoryServiceUnavailable, CANNED_ADVICE, LLMClient, TacticalAdvisor, build_timeout_prompt,
)
from matchsim.services.match_engine import Fixture, MatchEngine
from matchsim.services.providers import DEMO_ROSTERS
from matchsim.services.sides import TeamSide


class FailingClient:
    async def complete(self, prompt, system=""):
        raise AdvisoryServiceUnavailable("service down")

    async def close(self):
        pass


class SlowClient:
    async def complete(self, prompt, system=""):
        await asyncio.sleep(5)
        return "too late"

    async def close(self):
        pass


class EchoClient:
    def __init__(self):
        self.calls = []

    async def complete(self, prompt, system=""):
        self.calls.append((prompt, system))
        return "Play for picks on B"

    async def close(self):
        pass


@pytest.fixture
def state():
    engine = MatchEngine(Settings(), rng=random.Random(2))
    fixture = Fixture(id="adv", home_team_id="falcons", away_team_id="wolves")
    return engine.create_match(fixture, DEMO_ROSTERS["falcons"], DEMO_ROSTERS["wolves"])


@pytest.mark.anyio
class TestFallback:
    """Canned lines replace failed or slow replies."""

    async def test_unavailable_service(self, state):
        advisor = TacticalAdvisor(client=FailingClient(), rng=random.Random(1))
        advice = await advisor.advise(state, TeamSide.HOME, role="analyst")
        assert advice.source == "canned"
        assert advice.role == "analyst"
        assert advice.text in CANNED_ADVICE["analyst"]

    async def test_timeout(self, state):
        advisor = TacticalAdvisor(
            client=SlowClient(), settings=Settings(advice_timeout_seconds=0.01), rng=random.Random(1)
        )
        advice = await advisor.advise(state, TeamSide.AWAY, role="coach")
        assert advice.source == "canned"
        assert advice.text in CANNED_ADVICE["coach"]

    async def test_agent_roles_speak_as_player(self, state):
        advisor = TacticalAdvisor(client=FailingClient(), rng=random.Random(1))
        advice = await advisor.advise(state, TeamSide.HOME, role="duelist")
        assert advice.role == "player"
        assert advice.text in CANNED_ADVICE["player"]

    async def test_unconfigured_client_falls_back(self, state):
        client = LLMClient(Settings(llm_provider="openai", openai_api_key=""))
        advisor = TacticalAdvisor(client=client, rng=random.Random(1))
        advice = await advisor.advise(state, TeamSide.HOME)
        assert advice.source == "canned"
        await advisor.close()


@pytest.mark.anyio
class TestLLMAdvice:
    """Replies from the service are passed through."""

    async def test_reply_used(self, state):
        client = EchoClient()
        advisor = TacticalAdvisor(client=client)
        advice = await advisor.advise(state, TeamSide.HOME, role="coach", question="Save or force?")
        assert advice.source == "llm"
        assert advice.text == "Play for picks on B"
        prompt, system = client.calls[0]
        assert "Save or force?" in prompt
        assert "head coach" in system


@pytest.mark.anyio
class TestClientConfiguration:
    """The lazily built client follows the advisor's own settings."""

    async def test_client_uses_advisor_settings(self):
        settings = Settings(llm_provider="openai", openai_api_key="test-key", llm_model="test-model")
        advisor = TacticalAdvisor(settings=settings)
        client = advisor.client
        assert isinstance(client, LLMClient)
        assert client.settings is settings
        assert client.model == "test-model"
        assert client.is_configured
        await advisor.close()


class TestPrompt:
    """The prompt describes the match from the caller's side."""

    def test_prompt_contents(self, state):
        prompt = build_timeout_prompt(state, TeamSide.AWAY)
        assert state.map_layout.display_name in prompt
        assert "Score: 0 - 0" in prompt
        assert "Our credits: 800" in prompt


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
