"""OpenAI chat completions provider."""

from __future__ import annotations

import os
from typing import Optional

import httpx

from ..models.provider import CompletionResult
from .base import BaseProvider


class OpenAIProvider(BaseProvider):
    name = "openai"
    API_URL = "https://api.openai.com/v1/chat/completions"

    def _get_api_key(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", "OPENAI_API_KEY")
        return os.environ.get(env_var)

    async def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str] = None,
    ) -> CompletionResult:
        api_key = self._get_api_key()
        if not api_key:
            env_var = self.config.get("api_key_env", "OPENAI_API_KEY")
            return CompletionResult(
                success=False,
                error=f"API key not found in environment variable: {env_var}",
            )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        body = {
            "model": self.config.get("model", "gpt-4o"),
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        timeout = self.common.get("timeout_seconds", 120)

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(
                    self.config.get("endpoint", self.API_URL), json=body, headers=headers
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            return CompletionResult(
                success=False,
                error=f"{e.response.status_code} | {e.response.text}",
            )
        except httpx.HTTPError as e:
            return CompletionResult(success=False, error=f"{type(e).__name__}: {e}")

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return CompletionResult(success=False, error="Malformed completion payload")

        usage = data.get("usage", {})
        return CompletionResult(
            success=True,
            content=content,
            tokens_used={
                "input": usage.get("prompt_tokens", 0),
                "output": usage.get("completion_tokens", 0),
            },
        )
