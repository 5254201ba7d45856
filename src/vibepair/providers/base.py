"""Generation provider abstraction with retry logic.

Providers implement ``complete()`` and return a ``CompletionResult`` instead of
raising. ``generate()`` is the collaborator-facing entry point: it retries
transient failures and converts a final failure into ``GenerationError``.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, runtime_checkable

from ..exceptions import GenerationError
from ..models.provider import CompletionResult, GenerationOptions, GenerationResponse
from ..utils.sanitize import sanitize_error

PROVIDER_NAMES = ("anthropic", "openai", "ollama", "mock")


@runtime_checkable
class GenerationService(Protocol):
    """Anything that turns a prompt into raw text."""

    async def generate(
        self, prompt: str, options: GenerationOptions
    ) -> GenerationResponse: ...


class BaseProvider:
    """Base class with shared retry logic and config handling."""

    name: str = "base"

    def __init__(self, provider_config: dict, common_config: dict):
        self.config = provider_config
        self.common = common_config
        self.max_attempts = common_config.get("retry_attempts", 3)
        self.retry_delay = common_config.get("retry_delay_seconds", 5)

    async def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str] = None,
    ) -> CompletionResult:
        raise NotImplementedError

    async def complete_with_retry(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str] = None,
    ) -> CompletionResult:
        """Wrap complete() with retry logic including rate-limit handling."""
        rate_limit_max = max(self.max_attempts, 5)
        last_result: Optional[CompletionResult] = None

        for attempt in range(1, rate_limit_max + 1):
            result = await self.complete(prompt, temperature, max_tokens, system_prompt)
            last_result = result

            if result.success:
                return result

            error_msg = result.error or ""
            is_rate_limit = "429" in error_msg
            is_retryable = (
                is_rate_limit
                or any(
                    code in error_msg.lower()
                    for code in ("500", "502", "503", "504", "timeout", "timed out")
                )
            ) and not any(code in error_msg for code in ("400", "401", "403", "404"))

            effective_max = rate_limit_max if is_rate_limit else self.max_attempts
            if not is_retryable or attempt >= effective_max:
                result.error = sanitize_error(error_msg)
                return result

            # Rate limits: 30s base. Others: standard backoff.
            base_delay = 30 if is_rate_limit else self.retry_delay
            await asyncio.sleep(base_delay * min(attempt, 3))

        return last_result or CompletionResult(success=False, error="Max retries exceeded")

    async def generate(
        self, prompt: str, options: GenerationOptions
    ) -> GenerationResponse:
        result = await self.complete_with_retry(
            prompt, options.temperature, options.max_tokens
        )
        if not result.success:
            raise GenerationError(f"{self.name}: {result.error or 'unknown error'}")
        return GenerationResponse(text=result.content or "", tokens_used=result.tokens_used)


def get_ai_provider(
    config: dict,
    provider_override: Optional[str] = None,
    model_override: Optional[str] = None,
) -> BaseProvider:
    """Factory function to create the configured provider."""
    ai_config = config.get("ai", {})
    provider_name = provider_override or ai_config.get("provider", "anthropic")

    provider_config = dict(ai_config.get(provider_name, {}))
    if model_override:
        provider_config["model"] = model_override

    # Common config is the ai section minus provider sub-configs
    common_config = {k: v for k, v in ai_config.items() if k not in PROVIDER_NAMES}

    if provider_name == "anthropic":
        from .anthropic import AnthropicProvider
        return AnthropicProvider(provider_config, common_config)
    elif provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(provider_config, common_config)
    elif provider_name == "ollama":
        from .ollama import OllamaProvider
        return OllamaProvider(provider_config, common_config)
    elif provider_name == "mock":
        from .mock import MockProvider
        return MockProvider(provider_config, common_config)
    else:
        raise ValueError(f"Unknown AI provider: {provider_name}")
