"""Scripted stand-ins and sample payloads shared by the test modules."""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel

from launchpath.ai.client import AIClient, ReasoningDelta, RoundComplete, TextDelta, ToolCall
from launchpath.errors import GenerationError


class FakeAIClient(AIClient):
    """Replays queued stream rounds and structured results in order.

    A queued structured result may be a model instance, a dict (validated
    against the requested schema) or an exception to raise.
    """

    def __init__(self) -> None:
        self.rounds: list[list[Any]] = []
        self.structured: dict[type, list[Any]] = {}
        self.structured_calls: list[tuple[type, list[dict[str, Any]]]] = []
        self.stream_calls: list[list[dict[str, Any]]] = []

    def queue_round(self, *chunks: Any) -> None:
        self.rounds.append(list(chunks))

    def queue_structured(self, schema: type, *results: Any) -> None:
        self.structured.setdefault(schema, []).extend(results)

    def calls_for(self, schema: type) -> list[list[dict[str, Any]]]:
        return [messages for s, messages in self.structured_calls if s is schema]

    async def generate_structured(self, system, messages, schema, model=None):
        self.structured_calls.append((schema, copy.deepcopy(messages)))
        queue = self.structured.get(schema)
        if not queue:
            raise GenerationError(f"no scripted result for {schema.__name__}")
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, BaseModel):
            return result
        return schema.model_validate(result)

    async def stream_round(self, system, messages, tools):
        self.stream_calls.append(copy.deepcopy(messages))
        chunks = self.rounds.pop(0) if self.rounds else [RoundComplete(content=[])]
        for chunk in chunks:
            yield chunk


def text_round(text: str, thinking: str | None = None) -> list[Any]:
    chunks: list[Any] = []
    if thinking:
        chunks.append(ReasoningDelta(thinking))
    chunks.append(TextDelta(text))
    chunks.append(RoundComplete(content=[{"type": "text", "text": text}], stop_reason="end_turn"))
    return chunks


def tool_round(name: str, tool_input: dict[str, Any] | None = None, call_id: str = "toolu_1", text: str = "") -> list[Any]:
    tool_input = tool_input or {}
    content: list[dict[str, Any]] = []
    chunks: list[Any] = []
    if text:
        chunks.append(TextDelta(text))
        content.append({"type": "text", "text": text})
    content.append({"type": "tool_use", "id": call_id, "name": name, "input": tool_input})
    chunks.append(
        RoundComplete(
            content=content,
            tool_calls=[ToolCall(id=call_id, name=name, input=tool_input)],
            stop_reason="tool_use",
        )
    )
    return chunks


def recommendation(niche: str = "Roofing contractors", **overrides: Any) -> dict[str, Any]:
    rec = {
        "niche": niche,
        "score": 82,
        "target_segment": {
            "description": "Owner-operated roofing firms with 3-10 staff",
            "why": "High job values and seasonal demand",
        },
        "bottleneck": "missed calls from storm damage leads",
        "strategic_insight": "Speed to lead wins storm season",
        "your_solution": "Instant call-back and booking system",
        "revenue_potential": {"per_client": "£1,000/mo", "target_clients": 4, "monthly_total": "£4,000"},
        "why_for_you": "Matches your time and outreach comfort",
        "ease_of_finding": "Listed on every local directory",
        "segment_scores": {
            "roi_from_service": 22,
            "can_afford_it": 20,
            "guarantee_results": 20,
            "easy_to_find": 20,
            "total": 82,
        },
    }
    rec.update(overrides)
    return rec


def transformation(**overrides: Any) -> dict[str, Any]:
    data = {
        "transformation_from": "Owners lose storm damage jobs because missed calls go to voicemail all day",
        "transformation_to": "A full calendar of booked jobs every week",
        "system_description": "Every caller gets a text back in seconds and a booked inspection slot",
    }
    data.update(overrides)
    return data


def guarantee(**overrides: Any) -> dict[str, Any]:
    data = {
        "guarantee_text": "10 booked inspections in 60 days or we work free until you get them",
        "guarantee_type": "outcome_based",
        "confidence_notes": "Storm season volume makes this achievable",
    }
    data.update(overrides)
    return data


def pricing(**overrides: Any) -> dict[str, Any]:
    data = {
        "pricing_setup": 1500,
        "pricing_monthly": 800,
        "rationale": "One extra roof a month pays for the year",
        "comparable_services": [{"service": "Answering service", "price_range": "£200-£400/mo"}],
        "revenue_projection": {"clients_needed": 5, "monthly_revenue": "£4,000"},
    }
    data.update(overrides)
    return data


def offer(**overrides: Any) -> dict[str, Any]:
    data = {
        "segment": "Owner-operated roofing firms with 3-10 staff",
        **transformation(),
        "guarantee_text": guarantee()["guarantee_text"],
        "guarantee_type": "outcome_based",
        "guarantee_confidence": "Storm season volume makes this achievable",
        "pricing_setup": 1500,
        "pricing_monthly": 800,
        "pricing_rationale": "One extra roof a month pays for the year",
        "pricing_comparables": [],
        "revenue_projection": {"clients_needed": 5, "monthly_revenue": "£4,000"},
        "delivery_model": "build_once",
        "validation_status": "passed",
        "validation_notes": [],
    }
    data.update(overrides)
    return data


def demo_config(**overrides: Any) -> dict[str, Any]:
    data = {
        "hero_headline": "Get a full calendar of booked roofing jobs",
        "hero_subheadline": "Never miss a storm damage lead again",
        "transformation_headline": "From voicemail to booked inspections",
        "form_fields": [
            {"name": "business_name", "label": "Business name"},
            {"name": "email", "label": "Email", "type": "email"},
            {"name": "monthly_calls", "label": "Calls per month", "type": "number"},
        ],
        "scoring_prompt": (
            "Score the lead using business_name, email and monthly_calls. "
            "HIGH: monthly_calls above 50. MEDIUM: 20-50 calls. "
            "LOW: fewer than 20 calls or outside our service area."
        ),
        "cta_button_text": "See my booked jobs",
        "niche_slug": "Roofing Contractors!",
    }
    data.update(overrides)
    return data


async def drain(channel) -> list[dict[str, Any]]:
    """Close the channel and return everything emitted so far."""
    channel.close()
    return [event async for event in channel]
