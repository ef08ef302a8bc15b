"""Conversation history validation and conversion to API message format."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from launchpath.errors import RequestValidationError


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[str] = None


class ChatRequest(BaseModel):
    messages: list[ConversationMessage] = Field(default_factory=list)
    userMessage: str = Field(min_length=1)


def validate_history(history: list[ConversationMessage]) -> None:
    """Reject histories that do not alternate user/assistant starting with user."""
    for index, message in enumerate(history):
        expected = "user" if index % 2 == 0 else "assistant"
        if message.role != expected:
            raise RequestValidationError(
                f"messages[{index}] has role '{message.role}', expected '{expected}'"
            )
    if len(history) % 2:
        raise RequestValidationError("messages must end with an assistant turn")


def build_messages(history: list[ConversationMessage], user_message: str) -> list[dict[str, Any]]:
    """Convert prior turns plus the new user message into Anthropic messages."""
    messages: list[dict[str, Any]] = [{"role": m.role, "content": m.content} for m in history]
    messages.append({"role": "user", "content": user_message})
    return messages


def summarize_assistant_turn(text: str, tools_used: list[str]) -> str:
    """Plain-text record of an assistant turn, naming the tools it called.

    The marker keeps later turns aware of cards that were shown, without
    replaying tool payloads.
    """
    text = text.strip()
    names = list(dict.fromkeys(tools_used))
    if names:
        marker = f"[tools:{','.join(names)}]"
        return f"{text}\n{marker}" if text else marker
    return text or "[card]"


def history_entry(role: str, content: str) -> dict[str, Any]:
    return {
        "role": role,
        "content": content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
