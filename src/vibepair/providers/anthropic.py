"""Anthropic Messages API provider."""

from __future__ import annotations

import os
from typing import Optional

import httpx

from ..models.provider import CompletionResult
from .base import BaseProvider


class AnthropicProvider(BaseProvider):
    name = "anthropic"
    API_URL = "https://api.anthropic.com/v1/messages"

    def _get_api_key(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", "ANTHROPIC_API_KEY")
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
            env_var = self.config.get("api_key_env", "ANTHROPIC_API_KEY")
            return CompletionResult(
                success=False,
                error=f"API key not found in environment variable: {env_var}",
            )

        body: dict = {
            "model": self.config.get("model", "claude-sonnet-4-5-20250929"),
            "max_tokens": max_tokens,
            # Anthropic caps temperature at 1.0
            "temperature": min(temperature, 1.0),
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            body["system"] = system_prompt

        headers = {
            "x-api-key": api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        timeout = self.common.get("timeout_seconds", 120)

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(self.API_URL, json=body, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            return CompletionResult(
                success=False,
                error=f"{e.response.status_code} | {e.response.text}",
            )
        except httpx.HTTPError as e:
            return CompletionResult(success=False, error=f"{type(e).__name__}: {e}")

        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        usage = data.get("usage", {})
        return CompletionResult(
            success=True,
            content=text,
            tokens_used={
                "input": usage.get("input_tokens", 0),
                "output": usage.get("output_tokens", 0),
            },
        )
