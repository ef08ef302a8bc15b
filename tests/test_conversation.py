import pytest
from pydantic import ValidationError

from launchpath.ai.conversation import (
    ChatRequest,
    ConversationMessage,
    build_messages,
    summarize_assistant_turn,
    validate_history,
)
from launchpath.errors import RequestValidationError


def _history(*roles):
    return [ConversationMessage(role=r, content=f"{r} {i}") for i, r in enumerate(roles)]


def test_alternating_history_is_valid():
    validate_history([])
    validate_history(_history("user", "assistant", "user", "assistant"))


@pytest.mark.parametrize(
    "roles",
    [
        ("assistant",),
        ("user",),
        ("user", "user"),
        ("user", "assistant", "assistant", "user"),
    ],
)
def test_invalid_history_is_rejected(roles):
    with pytest.raises(RequestValidationError):
        validate_history(_history(*roles))


def test_chat_request_requires_user_message():
    with pytest.raises(ValidationError):
        ChatRequest.model_validate({"messages": []})
    with pytest.raises(ValidationError):
        ChatRequest.model_validate({"messages": [{"role": "system", "content": "x"}], "userMessage": "hi"})

    request = ChatRequest.model_validate(
        {"messages": [{"role": "user", "content": "a", "timestamp": "2025-01-01T00:00:00Z"}], "userMessage": "hi"}
    )
    assert request.messages[0].timestamp == "2025-01-01T00:00:00Z"


def test_build_messages_appends_the_new_message():
    messages = build_messages(_history("user", "assistant"), "[intent selected: first_client]")
    assert messages == [
        {"role": "user", "content": "user 0"},
        {"role": "assistant", "content": "assistant 1"},
        {"role": "user", "content": "[intent selected: first_client]"},
    ]


def test_summary_names_tools_once_in_call_order():
    summary = summarize_assistant_turn("  Pick one.  ", ["save_collected_answers", "request_location", "save_collected_answers"])
    assert summary == "Pick one.\n[tools:save_collected_answers,request_location]"


def test_summary_without_text():
    assert summarize_assistant_turn("", ["run_niche_analysis"]) == "[tools:run_niche_analysis]"
    assert summarize_assistant_turn("  ", []) == "[card]"
    assert summarize_assistant_turn("Hello", []) == "Hello"
