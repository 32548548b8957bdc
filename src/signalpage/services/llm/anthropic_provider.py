"""
Anthropic messages provider
"""

import logging
from typing import Dict, List, Optional, Tuple
from anthropic import AsyncAnthropic

from signalpage.config import settings
from signalpage.services.llm.types import (
    DEFAULT_MODELS, LLMCompletionResult, LLMConfig, LLMMessage, LLMUsage
)

logger = logging.getLogger(__name__)


def split_system_message(messages: List[LLMMessage]) -> Tuple[Optional[str], List[Dict[str, str]]]:
    """Anthropic takes the system prompt as a separate parameter"""
    system = next((m.content for m in messages if m.role == "system"), None)
    conversation = [m.as_dict() for m in messages if m.role != "system"]
    return system, conversation


class AnthropicProvider:
    provider = "anthropic"

    def __init__(self, api_key: str = None):
        api_key = api_key or settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not configured")
        self.client = AsyncAnthropic(api_key=api_key)

    async def complete(self, messages: List[LLMMessage], config: LLMConfig) -> LLMCompletionResult:
        model = config.model or DEFAULT_MODELS[self.provider]
        system, conversation = split_system_message(messages)

        kwargs = {
            "model": model,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "messages": conversation,
        }
        if system:
            kwargs["system"] = system

        response = await self.client.messages.create(**kwargs)

        text = next((block.text for block in response.content if block.type == "text"), "")
        usage = LLMUsage(
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens
        )

        logger.debug(f"Anthropic completion from {model}: {usage.total_tokens} tokens")
        return LLMCompletionResult(content=text, usage=usage, model=model)
