"""Ollama local inference provider."""

from __future__ import annotations

from typing import Optional

import httpx

from ..models.provider import CompletionResult
from .base import BaseProvider


class OllamaProvider(BaseProvider):
    name = "ollama"

    async def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str] = None,
    ) -> CompletionResult:
        endpoint = self.config.get("endpoint", "http://localhost:11434")
        timeout = self.common.get("timeout_seconds", 120)

        body: dict = {
            "model": self.config.get("model", "qwen2.5-coder:14b"),
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if system_prompt:
            body["system"] = system_prompt

        try:
            url = f"{endpoint.rstrip('/')}/api/generate"
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            return CompletionResult(
                success=False,
                error=f"{e.response.status_code} | {e.response.text}",
            )
        except httpx.HTTPError as e:
            return CompletionResult(success=False, error=f"{type(e).__name__}: {e}")

        return CompletionResult(
            success=True,
            content=data.get("response", ""),
            tokens_used={
                "input": data.get("prompt_eval_count", 0),
                "output": data.get("eval_count", 0),
            },
        )
