"""A single schema-constrained generation call with a corrective retry loop."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from launchpath.ai.client import AIClient, StructuredOutputError
from launchpath.errors import QualityGateError
from launchpath.log import get_logger
from launchpath.workflows.quality import Validator, format_feedback

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_MAX_RETRIES = 2


class GenerationStep(Generic[T]):
    """Generate one ``schema`` object from a context string.

    Rejected output (schema failure or validator violations) is answered with
    the violations as feedback and regenerated, up to ``max_retries`` times.
    After that the step raises ``QualityGateError``.
    """

    def __init__(
        self,
        step_id: str,
        ai_client: AIClient,
        system_prompt: str,
        schema: type[T],
        validators: Sequence[Validator] = (),
        max_retries: int = DEFAULT_MAX_RETRIES,
        model: str | None = None,
    ):
        self.step_id = step_id
        self._ai = ai_client
        self._system_prompt = system_prompt
        self._schema = schema
        self._validators = list(validators)
        self._max_retries = max_retries
        self._model = model

    def _validate(self, result: T) -> list[str]:
        return [v for validator in self._validators for v in validator(result)]

    async def run(self, context: str) -> T:
        messages: list[dict[str, Any]] = [{"role": "user", "content": context}]
        violations: list[str] = []

        for attempt in range(self._max_retries + 1):
            rejected: T | None = None
            try:
                result = await self._ai.generate_structured(self._system_prompt, messages, self._schema, self._model)
            except StructuredOutputError as e:
                violations = e.errors
            else:
                violations = self._validate(result)
                if not violations:
                    if attempt:
                        logger.info("generation_accepted_after_retry", step=self.step_id, attempts=attempt + 1)
                    return result
                rejected = result

            logger.info("generation_rejected", step=self.step_id, attempt=attempt + 1, violations=violations)
            feedback = format_feedback(violations)
            if rejected is not None:
                messages = [
                    *messages,
                    {"role": "assistant", "content": rejected.model_dump_json()},
                    {"role": "user", "content": feedback},
                ]
            else:
                messages = [{"role": "user", "content": f"{context}\n\n{feedback}"}]

        logger.warning("quality_gate_exhausted", step=self.step_id, violations=violations)
        raise QualityGateError(self.step_id, violations)
