"""Builders for the wire-level ServerEvent and CardData dictionaries.

Events are plain dicts so they serialize straight to ``data: <json>``
frames. Card keys follow the client contract (``multiSelect``, ``demoUrl``).
"""

from __future__ import annotations

from typing import Any

from launchpath.core.types import CardType, EventType, StepStatus, WorkflowEventType

Event = dict[str, Any]
Card = dict[str, Any]

TERMINAL_EVENTS = frozenset({EventType.DONE, EventType.ERROR})
WORKFLOW_TERMINAL_EVENTS = frozenset({WorkflowEventType.COMPLETE, WorkflowEventType.ERROR})


# -- conversation stream events --------------------------------------------


def text_delta(delta: str) -> Event:
    return {"type": EventType.TEXT_DELTA, "delta": delta}


def thinking(text: str) -> Event:
    return {"type": EventType.THINKING, "text": text}


def thinking_done() -> Event:
    return {"type": EventType.THINKING_DONE}


def card_event(card: Card) -> Event:
    return {"type": EventType.CARD, "card": card}


def progress(card_id: str, step_id: str, status: StepStatus, label: str | None = None) -> Event:
    event: Event = {"type": EventType.PROGRESS, "cardId": card_id, "stepId": step_id, "status": status}
    if label:
        event["label"] = label
    return event


def done(assistant_content: str) -> Event:
    return {"type": EventType.DONE, "assistantContent": assistant_content}


def error(message: str) -> Event:
    return {"type": EventType.ERROR, "message": message}


# -- standalone workflow stream events -------------------------------------


def workflow_progress(step_id: str, label: str) -> Event:
    return {"type": WorkflowEventType.PROGRESS, "stepId": step_id, "label": label}


def workflow_step_complete(step_id: str) -> Event:
    return {"type": WorkflowEventType.STEP_COMPLETE, "stepId": step_id}


def workflow_complete(**result: Any) -> Event:
    return {"type": WorkflowEventType.COMPLETE, **result}


def workflow_error(message: str) -> Event:
    return {"type": WorkflowEventType.ERROR, "error": message}


# -- cards -----------------------------------------------------------------


def option_selector_card(
    card_id: str,
    question: str,
    options: list[dict[str, str]],
    field: str | None = None,
    multi_select: bool = False,
    max_select: int | None = None,
) -> Card:
    card: Card = {
        "type": CardType.OPTION_SELECTOR,
        "id": card_id,
        "question": question,
        "options": options,
        "multiSelect": multi_select,
    }
    if max_select is not None:
        card["maxSelect"] = max_select
    if field:
        card["field"] = field
    return card


def text_input_card(
    card_id: str,
    question: str,
    placeholder: str = "",
    field: str | None = None,
    hint: str | None = None,
    multiline: bool = False,
) -> Card:
    card: Card = {
        "type": CardType.TEXT_INPUT,
        "id": card_id,
        "question": question,
        "placeholder": placeholder,
        "multiline": multiline,
    }
    if hint:
        card["hint"] = hint
    if field:
        card["field"] = field
    return card


def location_card(card_id: str, target_options: list[dict[str, str]]) -> Card:
    return {"type": CardType.LOCATION, "id": card_id, "field": "location", "targetOptions": target_options}


def progress_tracker_card(card_id: str, title: str, steps: list[tuple[str, str]]) -> Card:
    return {
        "type": CardType.PROGRESS_TRACKER,
        "id": card_id,
        "title": title,
        "steps": [{"id": step_id, "label": label, "status": StepStatus.PENDING} for step_id, label in steps],
    }


def score_cards_card(card_id: str, recommendations: list[dict[str, Any]]) -> Card:
    return {"type": CardType.SCORE_CARDS, "id": card_id, "field": "niche-choice", "recommendations": recommendations}


def editable_content_card(
    card_id: str,
    field: str,
    title: str,
    fields: list[dict[str, Any]],
    subtitle: str | None = None,
    confirm_label: str | None = None,
) -> Card:
    card: Card = {
        "type": CardType.EDITABLE_CONTENT,
        "id": card_id,
        "field": field,
        "title": title,
        "fields": fields,
    }
    if subtitle:
        card["subtitle"] = subtitle
    if confirm_label:
        card["confirmLabel"] = confirm_label
    return card


def offer_summary_card(card_id: str, offer: dict[str, Any]) -> Card:
    return {"type": CardType.OFFER_SUMMARY, "id": card_id, "field": "build-system", "offer": offer}


def system_ready_card(card_id: str, demo_url: str, offer: dict[str, Any]) -> Card:
    return {"type": CardType.SYSTEM_READY, "id": card_id, "demoUrl": demo_url, "offer": offer}
