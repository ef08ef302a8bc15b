"""Ad-hoc question tools for anything the named input tools don't cover."""

from __future__ import annotations

from typing import Any

from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core import events
from launchpath.core.context import ToolContext

MIN_CHOICES = 2
MAX_CHOICES = 6


class PresentChoicesTool(Tool):
    category = ToolCategory.DYNAMIC

    @property
    def name(self) -> str:
        return "present_choices"

    @property
    def description(self) -> str:
        return (
            "Show an ad-hoc multiple-choice card for a question no request_* tool covers. "
            "The user's reply arrives as [<field> selected: value] using the returned field."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Short identifier for this question"},
                "question": {"type": "string"},
                "options": {
                    "type": "array",
                    "minItems": MIN_CHOICES,
                    "maxItems": MAX_CHOICES,
                    "items": {
                        "type": "object",
                        "properties": {
                            "value": {"type": "string"},
                            "label": {"type": "string"},
                            "description": {"type": "string"},
                        },
                        "required": ["value", "label"],
                    },
                },
                "multi_select": {"type": "boolean", "default": False},
            },
            "required": ["id", "question", "options"],
        }

    async def execute(
        self,
        ctx: ToolContext,
        id: str = "",
        question: str = "",
        options: list[dict[str, Any]] | None = None,
        multi_select: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        cleaned = [
            {k: str(v) for k, v in o.items() if k in ("value", "label", "description")}
            for o in options or []
            if o.get("value") and o.get("label")
        ]
        if not question.strip() or not MIN_CHOICES <= len(cleaned) <= MAX_CHOICES:
            return {"error": f"present_choices needs a question and {MIN_CHOICES}-{MAX_CHOICES} options"}

        card_id, field = ctx.cards.dynamic(id or question)
        ctx.emit_card(
            events.option_selector_card(card_id, question, cleaned, field=field, multi_select=bool(multi_select))
        )
        return {"awaiting_user_input": True, "field": field}


class RequestInputTool(Tool):
    category = ToolCategory.DYNAMIC

    @property
    def name(self) -> str:
        return "request_input"

    @property
    def description(self) -> str:
        return (
            "Show an ad-hoc free-text card for a question no request_* tool covers. "
            'The reply arrives as [<field>: "text"] using the returned field.'
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Short identifier for this question"},
                "question": {"type": "string"},
                "placeholder": {"type": "string"},
                "multiline": {"type": "boolean", "default": False},
            },
            "required": ["id", "question"],
        }

    async def execute(
        self,
        ctx: ToolContext,
        id: str = "",
        question: str = "",
        placeholder: str = "",
        multiline: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        if not question.strip():
            return {"error": "request_input needs a question"}
        card_id, field = ctx.cards.dynamic(id or question)
        ctx.emit_card(
            events.text_input_card(card_id, question, placeholder=placeholder, field=field, multiline=bool(multiline))
        )
        return {"awaiting_user_input": True, "field": field}
