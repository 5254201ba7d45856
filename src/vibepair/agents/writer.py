"""Writer agent: generates code and refines it from review feedback."""

from __future__ import annotations

import re
from typing import Optional

from ..core.registry import AgentStateRegistry
from ..models.agent import AgentRole, WriterStatus
from ..models.provider import GenerationOptions
from ..models.workflow import GenerationResult, WorkflowContext
from ..providers.base import GenerationService
from .prompts import build_generation_prompt, build_refine_prompt

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?```\s*$")

GENERATE_CONFIDENCE = 0.85
REFINE_CONFIDENCE = 0.9


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    code = text.strip()
    code = _FENCE_OPEN.sub("", code)
    code = _FENCE_CLOSE.sub("", code)
    return code.strip()


class Writer:
    role = AgentRole.WRITER

    def __init__(
        self,
        generator: GenerationService,
        registry: AgentStateRegistry,
        config: Optional[dict] = None,
    ):
        config = config or {}
        self.generator = generator
        self.registry = registry
        self.generate_options = GenerationOptions(
            temperature=config.get("temperature", 0.91),
            max_tokens=config.get("max_tokens", 2048),
        )
        # Refinement runs slightly cooler than the first draft
        self.refine_options = GenerationOptions(
            temperature=config.get("refine_temperature", 0.85),
            max_tokens=config.get("max_tokens", 2048),
        )

    async def generate_code(
        self, prompt: str, context: Optional[WorkflowContext] = None
    ) -> GenerationResult:
        context = context or WorkflowContext()
        self.registry.set_status(self.role, WriterStatus.THINKING)

        full_prompt = build_generation_prompt(
            prompt,
            existing_code=context.existing_code,
            language=context.language,
            file_path=context.file_path,
        )

        self.registry.set_status(self.role, WriterStatus.CODING)
        try:
            response = await self.generator.generate(full_prompt, self.generate_options)
        except Exception:
            self.registry.set_status(self.role, WriterStatus.ERROR)
            raise

        self.registry.set_status(self.role, WriterStatus.SUCCESS)
        return GenerationResult(
            code=strip_code_fences(response.text),
            confidence=GENERATE_CONFIDENCE,
        )

    async def refine_code(
        self, code: str, feedback: str, context: Optional[WorkflowContext] = None
    ) -> GenerationResult:
        context = context or WorkflowContext()
        self.registry.set_status(self.role, WriterStatus.REFINING)

        prompt = build_refine_prompt(code, feedback, language=context.language)
        try:
            response = await self.generator.generate(prompt, self.refine_options)
        except Exception:
            self.registry.set_status(self.role, WriterStatus.ERROR)
            raise

        self.registry.set_status(self.role, WriterStatus.SUCCESS)
        return GenerationResult(
            code=strip_code_fences(response.text),
            explanation=f"Refined based on review feedback: {feedback}",
            confidence=REFINE_CONFIDENCE,
        )

    def reset(self) -> None:
        self.registry.set_status(self.role, WriterStatus.IDLE)
