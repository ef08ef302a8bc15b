"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class StepStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"


class SystemStatus(StrEnum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class DirectionPath(StrEnum):
    BEGINNER = "beginner"
    STUCK = "stuck"
    HAS_CLIENTS = "has_clients"


class CardType(StrEnum):
    OPTION_SELECTOR = "option-selector"
    TEXT_INPUT = "text-input"
    LOCATION = "location"
    PROGRESS_TRACKER = "progress-tracker"
    SCORE_CARDS = "score-cards"
    EDITABLE_CONTENT = "editable-content"
    OFFER_SUMMARY = "offer-summary"
    SYSTEM_READY = "system-ready"


class EventType(StrEnum):
    TEXT_DELTA = "text-delta"
    THINKING = "thinking"
    THINKING_DONE = "thinking-done"
    CARD = "card"
    PROGRESS = "progress"
    DONE = "done"
    ERROR = "error"


# Standalone workflow endpoints use this smaller vocabulary
class WorkflowEventType(StrEnum):
    PROGRESS = "progress"
    STEP_COMPLETE = "step-complete"
    COMPLETE = "complete"
    ERROR = "error"
