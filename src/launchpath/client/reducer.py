"""Client-side view of a conversation: decodes the event stream into chat messages.

The reducer mirrors what a browser chat UI does with ``ServerEvent`` frames,
so the same state machine can drive a terminal client, tests, or anything
else that needs the rendered message list.
"""

from __future__ import annotations

import json
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from launchpath.ai.prompts.strategist import CONVERSATION_START
from launchpath.core.types import CardType, EventType, StepStatus
from launchpath.log import get_logger

logger = get_logger(__name__)

ChatMessage = dict[str, Any]

_TOOL_MARKERS = [
    re.compile(r"\[tools?:[^\]]*\]", re.IGNORECASE),
    re.compile(r"\[card[^\]]*\]", re.IGNORECASE),
    re.compile(r"\[tool_?call[^\]]*\]", re.IGNORECASE),
    re.compile(r"\[tool[^\]]*\]", re.IGNORECASE),
    re.compile(r"\[awaiting[^\]]*\]", re.IGNORECASE),
    re.compile(r"\[waiting[^\]]*\]", re.IGNORECASE),
]

_NICHE_CHOICE_RE = re.compile(r"^\[niche-choice:\s*(\{.*\})\]$", re.DOTALL)
_SELECTED_RE = re.compile(r"^\[([\w-]+)\s+selected:\s*(.+)\]$", re.DOTALL)
_CITY_RE = re.compile(r'city="([^"]*)"')
_TEXT_REPLY_RE = re.compile(r'^\[([\w-]+):\s*"(.*)"\]$', re.DOTALL)
_STRUCTURED_RE = re.compile(r"^\[[\w-]+[\s:]")
_JSON_OBJECT_RE = re.compile(r"^\{.*\}$", re.DOTALL)

DISPLAY_TEXT_LIMIT = 60


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def strip_tool_markers(text: str) -> str:
    """Remove bracketed tool bookkeeping from assistant text before display."""
    for pattern in _TOOL_MARKERS:
        text = pattern.sub("", text)
    return text.strip()


def is_structured_reply(content: str) -> bool:
    trimmed = content.strip()
    return bool(_STRUCTURED_RE.match(trimmed) or _JSON_OBJECT_RE.match(trimmed))


def clean_card_response_display(raw: str) -> Optional[str]:
    """Human label for a structured card reply, or None for ordinary text."""
    trimmed = raw.strip()

    if trimmed.startswith("[offer-story confirmed:"):
        return "Confirmed: Your Business Story"
    if trimmed.startswith("[offer-pricing confirmed:"):
        return "Confirmed: Pricing & Guarantee"
    if trimmed.startswith("[build-system:"):
        return "Build My System"

    match = _NICHE_CHOICE_RE.match(trimmed)
    if match:
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError:
            return "Selected a niche"
        niche = data.get("niche") if isinstance(data, dict) else None
        return f"Selected: {niche or 'a niche'}"

    match = _SELECTED_RE.match(trimmed)
    if match:
        value = match.group(2).replace("_", " ")
        return value[:1].upper() + value[1:]

    if trimmed.startswith("[location:"):
        city = _CITY_RE.search(trimmed)
        return (city.group(1) if city else "") or "Location set"

    match = _TEXT_REPLY_RE.match(trimmed)
    if match:
        value = match.group(2)
        if len(value) > DISPLAY_TEXT_LIMIT:
            return value[: DISPLAY_TEXT_LIMIT - 3] + "..."
        return value or "Response submitted"

    if _STRUCTURED_RE.match(trimmed) and trimmed.endswith("]"):
        return "Response submitted"
    if _JSON_OBJECT_RE.match(trimmed):
        return "Response submitted"
    return None


def restore_messages(history: list[dict[str, Any]]) -> list[ChatMessage]:
    """Rebuild display messages from persisted history.

    The start signal is skipped, structured replies get their clean label and
    assistant turns that were only tool markers are dropped.
    """
    restored: list[ChatMessage] = []
    for entry in history:
        role = entry.get("role")
        content = entry.get("content") or ""
        timestamp = entry.get("timestamp")
        if role == "user":
            if content == CONVERSATION_START:
                continue
            label = clean_card_response_display(content)
            restored.append({
                "id": _new_id(),
                "role": "user",
                "content": label if label is not None else content,
                "isCardResponse": is_structured_reply(content),
                "timestamp": timestamp,
            })
            continue

        display = strip_tool_markers(content)
        if not display:
            continue
        restored.append({
            "id": _new_id(),
            "role": "assistant",
            "type": "text",
            "content": display,
            "isStreaming": False,
            "timestamp": timestamp,
        })
    return restored


def card_reply(card: dict[str, Any], value: Any) -> tuple[str, str]:
    """Build ``(display_text, structured_message)`` for a user's answer to a card.

    ``value`` depends on the card type: an option value or list of values, the
    typed text, a ``(city, target)`` pair, the confirmed field dict, or the
    chosen recommendation. Offer summary cards ignore it.
    """
    key = card.get("field") or card["id"]
    card_type = card["type"]

    if card_type == CardType.OPTION_SELECTOR:
        labels = {o["value"]: o["label"] for o in card.get("options", [])}
        if isinstance(value, list):
            if not value:
                raise ValueError("at least one option must be selected")
            display = "Selected: " + ", ".join(labels.get(v, v) for v in value)
            return display, f"[{key} selected: {', '.join(value)}]"
        return labels.get(value, value), f"[{key} selected: {value}]"

    if card_type == CardType.TEXT_INPUT:
        text = str(value).strip()
        if not text:
            raise ValueError("text input cannot be empty")
        return text, f'[{key}: "{text}"]'

    if card_type == CardType.LOCATION:
        city, target = value
        city = city.strip()
        targets = {o["value"]: o["label"] for o in card.get("targetOptions", [])}
        return (
            f"{city} · {targets.get(target, target)}",
            f'[location: city="{city}", target="{target}"]',
        )

    if card_type == CardType.EDITABLE_CONTENT:
        return f"Confirmed: {card['title']}", f"[{key} confirmed: {json.dumps(value)}]"

    if card_type == CardType.SCORE_CARDS:
        return f"I want to work in: {value['niche']}", f"[niche-choice: {json.dumps(value)}]"

    if card_type == CardType.OFFER_SUMMARY:
        return "Build my system", "[build-system: confirmed]"

    raise ValueError(f"Card type {card_type} does not take a response")


class ClientStreamReducer:
    """Ordered chat message list driven by server events.

    ``begin_turn`` opens a turn, ``apply`` folds in each event, and
    ``end_stream`` recovers when the connection closes without ``done``.
    The conversation history kept here is what the next request replays.
    """

    def __init__(
        self,
        history: list[dict[str, Any]] | None = None,
        display_messages: list[ChatMessage] | None = None,
    ):
        self.history: list[dict[str, Any]] = list(history or [])
        self.messages: list[ChatMessage] = (
            list(display_messages) if display_messages else restore_messages(self.history)
        )
        self.is_streaming = False
        self.is_typing = False
        self.is_thinking = False
        self.thinking_text = ""
        self._streaming_id: Optional[str] = None
        self._pending_user: Optional[str] = None
        self._turn_text = ""
        self._terminated = False

    # -- turn lifecycle --------------------------------------------------

    def begin_turn(self, text: str, add_bubble: bool = True) -> bool:
        """Start a turn for ``text``. Returns False while another turn is streaming."""
        if self.is_streaming:
            return False
        if add_bubble and text != CONVERSATION_START:
            self.messages.append({"id": _new_id(), "role": "user", "content": text, "timestamp": _now()})
        self.is_streaming = True
        self.is_typing = True
        self.is_thinking = False
        self.thinking_text = ""
        self._streaming_id = None
        self._pending_user = text
        self._turn_text = ""
        self._terminated = False
        return True

    def end_stream(self) -> None:
        """Called when the transport closes; a no-op after a terminal event."""
        if self._terminated or self._pending_user is None:
            return
        logger.warning("stream_ended_without_done", received_text=bool(self._turn_text))
        if self._turn_text:
            self._record_exchange(self._turn_text)
        self._close_streaming_message()
        self._reset_flags()
        self._pending_user = None

    def abort(self) -> None:
        """Transport failure: clear flags without touching history."""
        self._reset_flags()
        self._streaming_id = None
        self._pending_user = None

    def handle_card_response(self, card_id: str, display_text: str, structured_message: str) -> bool:
        """Collapse a card, echo the answer, and open the turn that sends it."""
        if self.is_streaming:
            return False
        for message in self.messages:
            if message.get("type") == "card" and message["card"]["id"] == card_id:
                message["completed"] = True
        self.messages.append({
            "id": _new_id(),
            "role": "user",
            "content": display_text,
            "isCardResponse": True,
            "timestamp": _now(),
        })
        return self.begin_turn(structured_message, add_bubble=False)

    def reset(self) -> None:
        self.history = []
        self.messages = []
        self.abort()

    # -- events ----------------------------------------------------------

    def apply(self, event: dict[str, Any]) -> None:
        match event.get("type"):
            case EventType.THINKING:
                self.is_typing = False
                self.is_thinking = True
                self.thinking_text += event.get("text", "")
            case EventType.THINKING_DONE:
                self.is_thinking = False
            case EventType.TEXT_DELTA:
                self._append_delta(event.get("delta", ""))
            case EventType.CARD:
                self._close_streaming_message()
                self.messages.append({
                    "id": _new_id(),
                    "role": "assistant",
                    "type": "card",
                    "card": event["card"],
                    "completed": False,
                    "timestamp": _now(),
                })
            case EventType.PROGRESS:
                self._update_progress(event["cardId"], event["stepId"], event["status"])
            case EventType.DONE:
                self._terminated = True
                if self._pending_user is not None:
                    self._record_exchange(event.get("assistantContent") or self._turn_text or "[card]")
                self._close_streaming_message()
                self._reset_flags()
                self._pending_user = None
            case EventType.ERROR:
                self._terminated = True
                self._reset_flags()
                self._close_streaming_message()
                self._pending_user = None
                self.messages.append({
                    "id": _new_id(),
                    "role": "assistant",
                    "type": "text",
                    "content": event.get("message", ""),
                    "isStreaming": False,
                    "timestamp": _now(),
                })
            case other:
                logger.debug("unknown_event_ignored", event_type=other)

    def _append_delta(self, delta: str) -> None:
        self.is_typing = False
        self.is_thinking = False
        self._turn_text += delta
        if self._streaming_id is None:
            self._streaming_id = _new_id()
            self.messages.append({
                "id": self._streaming_id,
                "role": "assistant",
                "type": "text",
                "content": delta,
                "isStreaming": True,
                "timestamp": _now(),
            })
            return
        for message in self.messages:
            if message["id"] == self._streaming_id:
                message["content"] += delta
                break

    def _update_progress(self, card_id: str, step_id: str, status: str) -> None:
        for message in self.messages:
            card = message.get("card")
            if message.get("type") != "card" or card["type"] != CardType.PROGRESS_TRACKER or card["id"] != card_id:
                continue
            for step in card["steps"]:
                if step["id"] == step_id:
                    step["status"] = status
                elif status == StepStatus.ACTIVE and step["status"] == StepStatus.ACTIVE:
                    step["status"] = StepStatus.DONE

    def _close_streaming_message(self) -> None:
        if self._streaming_id is None:
            return
        for message in self.messages:
            if message["id"] == self._streaming_id:
                message["isStreaming"] = False
                break
        self._streaming_id = None

    def _record_exchange(self, assistant_content: str) -> None:
        self.history.append({"role": "user", "content": self._pending_user, "timestamp": _now()})
        self.history.append({"role": "assistant", "content": assistant_content, "timestamp": _now()})

    def _reset_flags(self) -> None:
        self.is_streaming = False
        self.is_typing = False
        self.is_thinking = False


class SSEDecoder:
    """Incremental ``data: <json>`` frame decoder.

    Frames split across chunks are buffered. Blocks without the ``data: ``
    prefix and payloads that are not JSON objects are skipped.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> list[dict[str, Any]]:
        self._buffer += chunk
        *blocks, self._buffer = self._buffer.split("\n\n")
        decoded: list[dict[str, Any]] = []
        for block in blocks:
            if not block.startswith("data: "):
                continue
            raw = block[len("data: "):].strip()
            if not raw:
                continue
            try:
                event = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("malformed_frame_skipped", frame=raw[:80])
                continue
            if isinstance(event, dict) and "type" in event:
                decoded.append(event)
        return decoded
