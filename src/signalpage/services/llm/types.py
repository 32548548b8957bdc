"""
Shared LLM types and defaults
"""

from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_MODELS: Dict[str, str] = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-20250514",
}

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


class GenerationError(Exception):
    """Raised when the LLM cannot produce a usable response"""


@dataclass
class LLMMessage:
    role: str  # "system" | "user" | "assistant"
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMConfig:
    """Per-call overrides; unset fields fall back to the provider defaults"""
    provider: Optional[str] = None
    model: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass
class LLMUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class LLMCompletionResult:
    content: str
    usage: Optional[LLMUsage] = None
    model: Optional[str] = None

