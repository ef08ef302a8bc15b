"""Map a typed free-text reply onto one of a card's option values."""

from __future__ import annotations

from typing import Any

from launchpath.ai.client import AIClient
from launchpath.ai.schemas import FreeformInterpretation
from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core.context import ToolContext
from launchpath.errors import GenerationError
from launchpath.log import get_logger

logger = get_logger(__name__)

INTERPRET_PROMPT = (
    "You map a user's free-text reply to one of a fixed set of values. "
    "Return the field name and the single best matching value from valid_values. "
    "If nothing matches with reasonable confidence, return value as null."
)


class InterpretFreeformTool(Tool):
    category = ToolCategory.UTILITY

    def __init__(self, ai_client: AIClient, model: str | None = None):
        self._ai = ai_client
        self._model = model

    @property
    def name(self) -> str:
        return "interpret_freeform_response"

    @property
    def description(self) -> str:
        return (
            "Interpret a typed reply to an option question. Returns {field, value} where value is "
            "one of valid_values, or null when the reply doesn't match any."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "expected_field": {"type": "string"},
                "user_text": {"type": "string"},
                "valid_values": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["expected_field", "user_text", "valid_values"],
        }

    async def execute(
        self,
        ctx: ToolContext,
        expected_field: str = "",
        user_text: str = "",
        valid_values: list[str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        values = [str(v) for v in valid_values or []]
        if not values or not user_text.strip():
            return {"field": expected_field, "value": None}

        message = (
            f"Field: {expected_field}\n"
            f"Valid values: {', '.join(values)}\n"
            f'User reply: "{user_text}"'
        )
        try:
            result = await self._ai.generate_structured(
                INTERPRET_PROMPT,
                [{"role": "user", "content": message}],
                FreeformInterpretation,
                model=self._model,
            )
        except GenerationError as e:
            logger.warning("freeform_interpretation_failed", field=expected_field, error=str(e))
            return {"field": expected_field, "value": None}

        value = result.value if result.value in values else None
        logger.debug("freeform_interpreted", field=expected_field, value=value)
        return {"field": expected_field, "value": value}
