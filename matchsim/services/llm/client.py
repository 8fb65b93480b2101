"""LLM client supporting multiple providers (Anthropic, OpenAI-compatible)."""

from typing import Optional, Protocol
import logging
import httpx

from ...config import Settings, get_settings

logger = logging.getLogger(__name__)


class AdvisoryServiceUnavailable(Exception):
    """The advisory text service could not produce a reply."""


class AdvisoryClient(Protocol):
    async def complete(self, prompt: str, system: str = "") -> str:
        ...

    async def close(self):
        ...


class LLMClient:
    """Unified async LLM client supporting multiple providers."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.provider = self.settings.llm_provider
        self.model = self.settings.llm_model

        if self.provider == "anthropic":
            import anthropic
            self.api_key = self.settings.anthropic_api_key
            self.client = anthropic.AsyncAnthropic(api_key=self.api_key) if self.api_key else None
        else:
            # OpenAI or other OpenAI-compatible providers
            self.api_key = self.settings.openai_api_key
            self.api_base = self.settings.openai_api_base
            self.client = httpx.AsyncClient(timeout=30.0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str, system: str = "") -> str:
        """Single-turn completion.

        Raises:
            AdvisoryServiceUnavailable: no API key, transport error or empty reply.
        """
        if not self.is_configured:
            raise AdvisoryServiceUnavailable(f"No API key configured for {self.provider}")

        messages = [{"role": "user", "content": prompt}]
        try:
            if self.provider == "anthropic":
                text = await self._anthropic_chat(messages, system)
            else:
                text = await self._openai_compatible_chat(messages, system)
        except AdvisoryServiceUnavailable:
            raise
        except Exception as e:
            raise AdvisoryServiceUnavailable(f"{self.provider} request failed: {e}") from e

        if not text.strip():
            raise AdvisoryServiceUnavailable(f"{self.provider} returned an empty reply")
        return text.strip()

    async def _anthropic_chat(self, messages: list[dict], system: str) -> str:
        """Anthropic Claude API call."""
        kwargs = {
            "model": self.model,
            "max_tokens": self.settings.llm_max_tokens,
            "temperature": self.settings.llm_temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system

        response = await self.client.messages.create(**kwargs)
        return "".join(block.text for block in response.content if block.type == "text")

    async def _openai_compatible_chat(self, messages: list[dict], system: str) -> str:
        """OpenAI-compatible chat completions call."""
        all_messages = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        payload = {
            "model": self.model,
            "messages": all_messages,
            "max_tokens": self.settings.llm_max_tokens,
            "temperature": self.settings.llm_temperature,
        }

        response = await self.client.post(
            f"{self.api_base}/chat/completions",
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        choice = response.json().get("choices", [{}])[0]
        return choice.get("message", {}).get("content", "") or ""

    async def close(self):
        """Close the client."""
        if self.client is None:
            return
        if self.provider == "anthropic":
            await self.client.close()
        else:
            await self.client.aclose()
