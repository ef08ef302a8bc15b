"""Named input-request tools: one card per branching-path question.

Each tool emits exactly one card and returns ``{awaiting_user_input, field}``
straight away. The user's answer arrives as the next chat message.
"""

from __future__ import annotations

from typing import Any

from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core import events
from launchpath.core.context import ToolContext
from launchpath.core.options import (
    DELIVERY_MODEL_FULL_OPTIONS,
    DELIVERY_MODEL_SIMPLE_OPTIONS,
    GROWTH_DIRECTION_OPTIONS,
    INDUSTRY_OPTIONS,
    INTENT_OPTIONS,
    LOCATION_TARGET_OPTIONS,
    OWN_IDEA_OPTIONS,
    PRICING_EXPANDED_OPTIONS,
    PRICING_STANDARD_OPTIONS,
    WHAT_WENT_WRONG_OPTIONS,
    Option,
)


def _awaiting(field: str) -> dict[str, Any]:
    return {"awaiting_user_input": True, "field": field}


def _card_base(field: str) -> str:
    return field.replace("_", "-")


class OptionRequestTool(Tool):
    """Shows a fixed option card for one collected field."""

    category = ToolCategory.INPUT_REQUEST

    def __init__(
        self,
        name: str,
        description: str,
        field: str,
        question: str,
        options: list[Option],
        multi_select: bool = False,
        max_select: int | None = None,
    ):
        self._name = name
        self._description = description
        self._field = field
        self._question = question
        self._options = options
        self._multi_select = multi_select
        self._max_select = max_select

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        ctx.emit_card(
            events.option_selector_card(
                ctx.cards.allocate(_card_base(self._field)),
                self._question,
                self._options,
                field=self._field,
                multi_select=self._multi_select,
                max_select=self._max_select,
            )
        )
        return _awaiting(self._field)


class TextRequestTool(Tool):
    """Shows a free-text card for one collected field."""

    category = ToolCategory.INPUT_REQUEST

    def __init__(
        self,
        name: str,
        description: str,
        field: str,
        question: str,
        placeholder: str = "",
        hint: str | None = None,
        multiline: bool = False,
    ):
        self._name = name
        self._description = description
        self._field = field
        self._question = question
        self._placeholder = placeholder
        self._hint = hint
        self._multiline = multiline

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        ctx.emit_card(
            events.text_input_card(
                ctx.cards.allocate(_card_base(self._field)),
                self._question,
                placeholder=self._placeholder,
                field=self._field,
                hint=self._hint,
                multiline=self._multiline,
            )
        )
        return _awaiting(self._field)


class FixOrPivotTool(Tool):
    category = ToolCategory.INPUT_REQUEST

    @property
    def name(self) -> str:
        return "request_fix_or_pivot"

    @property
    def description(self) -> str:
        return (
            "Ask a stuck user whether to fix their approach in the niche they tried or pivot to "
            "something new. The answer is saved as growth_direction ('fix' or 'pivot')."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "tried_niche": {"type": "string", "description": "The niche they previously tried"},
            },
            "required": ["tried_niche"],
        }

    async def execute(self, ctx: ToolContext, tried_niche: str = "", **kwargs: Any) -> dict[str, Any]:
        niche = tried_niche.strip() or "that niche"
        options = [
            {"value": "fix", "label": f"Fix my approach in {niche}", "description": "Same niche, better offer and outreach"},
            {"value": "pivot", "label": "Try something completely different", "description": "Find a stronger opportunity"},
        ]
        ctx.emit_card(
            events.option_selector_card(
                ctx.cards.allocate("fix-or-pivot"),
                f"Do you want to fix your approach in {niche}, or try something completely different?",
                options,
                field="growth_direction",
            )
        )
        return _awaiting("growth_direction")


class ModeOptionTool(Tool):
    """Option card whose question and option set depend on a ``mode`` argument."""

    category = ToolCategory.INPUT_REQUEST

    def __init__(
        self,
        name: str,
        description: str,
        field: str,
        modes: dict[str, tuple[str, list[Option]]],
    ):
        self._name = name
        self._description = description
        self._field = field
        self._modes = modes

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"mode": {"type": "string", "enum": list(self._modes)}},
            "required": ["mode"],
        }

    async def execute(self, ctx: ToolContext, mode: str = "", **kwargs: Any) -> dict[str, Any]:
        if mode not in self._modes:
            mode = next(iter(self._modes))
        question, options = self._modes[mode]
        ctx.emit_card(
            events.option_selector_card(
                ctx.cards.allocate(_card_base(self._field)),
                question,
                options,
                field=self._field,
            )
        )
        return _awaiting(self._field)


class LocationRequestTool(Tool):
    category = ToolCategory.INPUT_REQUEST

    @property
    def name(self) -> str:
        return "request_location"

    @property
    def description(self) -> str:
        return (
            "Ask for the user's city and target market. The reply is saved as "
            "location_city and location_target."
        )

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        ctx.emit_card(events.location_card(ctx.cards.allocate("location"), LOCATION_TARGET_OPTIONS))
        return _awaiting("location")


def input_request_tools() -> list[Tool]:
    return [
        OptionRequestTool(
            "request_intent_selection",
            "Ask what the user wants this system to achieve. Saved as intent.",
            "intent",
            "What's the goal for this system?",
            INTENT_OPTIONS,
        ),
        OptionRequestTool(
            "request_industry_interests",
            "Ask which industries interest the user (up to 2). Saved as industry_interests.",
            "industry_interests",
            "Any of these interest you? Pick up to 2.",
            INDUSTRY_OPTIONS,
            multi_select=True,
            max_select=2,
        ),
        OptionRequestTool(
            "request_own_idea",
            "Ask whether the user already has a niche idea or wants one found for them.",
            "own_idea",
            "Do you already have a niche idea, or should I find the best opportunity for you?",
            OWN_IDEA_OPTIONS,
        ),
        TextRequestTool(
            "request_own_idea_text",
            "Ask the user to describe their niche idea. Saved as own_idea.",
            "own_idea",
            "What's your niche idea?",
            placeholder="e.g. AI lead generation for HVAC companies",
            hint="Be specific: the more detail, the better the analysis.",
        ),
        TextRequestTool(
            "request_tried_niche",
            "Ask a stuck user which niche they have been working in. Saved as tried_niche.",
            "tried_niche",
            "What niche have you been working in or exploring?",
            placeholder="e.g. HVAC companies, dental practices, local restaurants...",
        ),
        OptionRequestTool(
            "request_what_went_wrong",
            "Ask a stuck user what their biggest challenge has been. Saved as what_went_wrong.",
            "what_went_wrong",
            "What's been the biggest challenge?",
            WHAT_WENT_WRONG_OPTIONS,
        ),
        FixOrPivotTool(),
        TextRequestTool(
            "request_current_business",
            (
                "Ask a user with clients to describe their current business. Save the answer as "
                "current_niche, current_clients and current_pricing."
            ),
            "current_business",
            "Tell me about your current setup.",
            placeholder="e.g. I work with dental practices, have 2 clients, charging £800/month each",
            hint="Include your niche, how many clients you have, and what you charge.",
            multiline=True,
        ),
        OptionRequestTool(
            "request_growth_direction",
            "Ask a user with clients how they want to grow. Saved as growth_direction.",
            "growth_direction",
            "What do you want to do?",
            GROWTH_DIRECTION_OPTIONS,
        ),
        ModeOptionTool(
            "request_delivery_model",
            (
                "Ask how the user wants to deliver their service. Use mode 'simple' for 5-15 hours "
                "a week and 'full' for more. Saved as delivery_model."
            ),
            "delivery_model",
            {
                "simple": ("With your available time, would you rather:", DELIVERY_MODEL_SIMPLE_OPTIONS),
                "full": ("How do you want to deliver your service?", DELIVERY_MODEL_FULL_OPTIONS),
            },
        ),
        ModeOptionTool(
            "request_pricing_direction",
            (
                "Ask how the user wants to structure pricing. Use mode 'standard' for a £3-5k goal "
                "and 'expanded' for £5k+. Saved as pricing_direction."
            ),
            "pricing_direction",
            {
                "standard": ("For pricing, do you lean toward:", PRICING_STANDARD_OPTIONS),
                "expanded": ("How do you want to structure your pricing?", PRICING_EXPANDED_OPTIONS),
            },
        ),
        LocationRequestTool(),
    ]
