"""Tactical advice during timeouts.

Asks the LLM for a short call; if the service is unavailable or slow, the
team still gets a canned line for the speaker's role.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import asyncio
import logging
import random

from ...config import Settings, get_settings
from ..sides import TeamSide
from .client import AdvisoryClient, AdvisoryServiceUnavailable, LLMClient
from .prompts import build_timeout_prompt, get_system_prompt

if TYPE_CHECKING:
    from ..match_engine import MatchState

logger = logging.getLogger(__name__)


CANNED_ADVICE = {
    "player": [
        "I can pick a different agent next round if needed",
        "Their duelist is playing too aggressive, we can punish that",
        "I'll watch the flank this round",
        "Should I save my utility for the retake?",
        "I think we should stack site A",
        "They're forcing every round, let's play for picks",
        "I can entry frag if you smoke for me",
        "We need better communication on rotations",
    ],
    "analyst": [
        "Based on their economy, they'll likely force this round",
        "They're favoring long-range duels, let's close the distance",
        "Their controller is low on utility, now's our chance",
        "I recommend a fast push to site B",
        "They're predictable on anti-ecos",
        "Focus on map control in mid",
        "Their sentinel is out of position",
    ],
    "coach": [
        "Stay calm, we're still in this",
        "Remember our practice on this map",
        "Trust your aim and positioning",
        "They're tilted, keep the pressure up",
        "Focus on fundamentals",
        "Good teamwork so far, keep it up",
        "Reset mentally for this round",
    ],
}


@dataclass
class Advice:
    role: str
    text: str
    source: str  # "llm" or "canned"


def canned_role(role: str) -> str:
    """Player roles (duelist, sentinel, ...) and unknown roles speak as 'player'."""
    return role if role in CANNED_ADVICE else "player"


class TacticalAdvisor:
    def __init__(
        self,
        client: Optional[AdvisoryClient] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.rng = rng or random.Random()

    @property
    def client(self) -> AdvisoryClient:
        if self._client is None:
            self._client = LLMClient(self.settings)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.close()

    def canned_advice(self, role: str) -> Advice:
        role = canned_role(role)
        return Advice(role=role, text=self.rng.choice(CANNED_ADVICE[role]), source="canned")

    async def advise(
        self,
        state: "MatchState",
        side: TeamSide,
        role: str = "coach",
        question: str = "",
    ) -> Advice:
        """One line of advice for `side`, never raising on service failure."""
        prompt = build_timeout_prompt(state, side, question)
        try:
            text = await asyncio.wait_for(
                self.client.complete(prompt, system=get_system_prompt(canned_role(role))),
                timeout=self.settings.advice_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Advice for match {state.match_id} timed out after "
                f"{self.settings.advice_timeout_seconds}s, using canned {role} line"
            )
            return self.canned_advice(role)
        except AdvisoryServiceUnavailable as e:
            logger.warning(f"Advisory service unavailable for match {state.match_id}: {e}")
            return self.canned_advice(role)

        return Advice(role=canned_role(role), text=text, source="llm")
