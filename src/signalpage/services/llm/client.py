"""
Provider-agnostic LLM client
"""

import logging
from typing import Dict, List, Optional

from signalpage.config import settings
from signalpage.services.llm.anthropic_provider import AnthropicProvider
from signalpage.services.llm.openai_provider import OpenAIProvider
from signalpage.services.llm.types import LLMCompletionResult, LLMConfig, LLMMessage

logger = logging.getLogger(__name__)

PROVIDERS = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

class LLMClient:
    """Dispatches completions to a provider; providers are built on first use and cached"""

    def __init__(self, default_provider: Optional[str] = None):
        self.default_provider = default_provider or settings.DEFAULT_LLM_PROVIDER or "openai"
        self._providers: Dict[str, object] = {}

    def get_provider(self, name: Optional[str] = None):
        name = name or self.default_provider
        if name not in self._providers:
            provider_class = PROVIDERS.get(name)
            if provider_class is None:
                raise ValueError(f"Unknown LLM provider: {name}")
            logger.info(f"Initializing LLM provider: {name}")
            self._providers[name] = provider_class()
        return self._providers[name]

    async def complete(self, messages: List[LLMMessage], config: Optional[LLMConfig] = None) -> LLMCompletionResult:
        config = config or LLMConfig()
        provider = self.get_provider(config.provider)
        return await provider.complete(messages, config)


# Global client instance
_llm_client: Optional[LLMClient] = None

def get_llm_client() -> LLMClient:
    """Get the global LLM client instance"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
