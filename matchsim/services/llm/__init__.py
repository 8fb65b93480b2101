"""LLM service module for timeout advice."""

from .client import LLMClient, AdvisoryClient, AdvisoryServiceUnavailable
from .prompts import SYSTEM_PROMPTS, build_timeout_prompt, get_system_prompt
from .advisor import Advice, TacticalAdvisor, CANNED_ADVICE

__all__ = [
    "LLMClient",
    "AdvisoryClient",
    "AdvisoryServiceUnavailable",
    "SYSTEM_PROMPTS",
    "build_timeout_prompt",
    "get_system_prompt",
    "Advice",
    "TacticalAdvisor",
    "CANNED_ADVICE",
]
