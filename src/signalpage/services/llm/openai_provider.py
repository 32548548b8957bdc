"""
OpenAI chat completions provider
"""

import logging
from typing import List
from openai import AsyncOpenAI

from signalpage.config import settings
from signalpage.services.llm.types import (
    DEFAULT_MODELS, LLMCompletionResult, LLMConfig, LLMMessage, LLMUsage
)

logger = logging.getLogger(__name__)

class OpenAIProvider:
    provider = "openai"

    def __init__(self, api_key: str = None):
        api_key = api_key or settings.OPENAI_API_KEY
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not configured")
        self.client = AsyncOpenAI(api_key=api_key)

    async def complete(self, messages: List[LLMMessage], config: LLMConfig) -> LLMCompletionResult:
        model = config.model or DEFAULT_MODELS[self.provider]

        response = await self.client.chat.completions.create(
            model=model,
            messages=[m.as_dict() for m in messages],
            temperature=config.temperature,
            max_tokens=config.max_tokens
        )

        usage = None
        if response.usage:
            usage = LLMUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens
            )

        logger.debug(f"OpenAI completion from {model}: {usage.total_tokens if usage else '?'} tokens")
        return LLMCompletionResult(
            content=response.choices[0].message.content or "",
            usage=usage,
            model=model
        )
