"""AI client abstraction over the Anthropic Messages API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any, TypeVar

import anthropic
from pydantic import BaseModel, ValidationError

from launchpath.config import AIConfig, AnthropicConfig
from launchpath.errors import GenerationError
from launchpath.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

STRUCTURED_TOOL_NAME = "submit_result"


@dataclass(frozen=True, slots=True)
class ReasoningDelta:
    text: str


@dataclass(frozen=True, slots=True)
class TextDelta:
    text: str


@dataclass(frozen=True, slots=True)
class ToolCall:
    id: str
    name: str
    input: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ToolResult:
    id: str
    name: str
    result: dict[str, Any]


@dataclass(slots=True)
class RoundComplete:
    """Terminal chunk of one streamed model round."""

    content: list[dict[str, Any]]
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str | None = None


Chunk = ReasoningDelta | TextDelta | ToolCall | ToolResult


class StructuredOutputError(GenerationError):
    """The model answered, but its payload does not fit the requested schema."""

    def __init__(self, schema_name: str, errors: list[str]):
        super().__init__(f"{schema_name} output failed schema validation: {'; '.join(errors)}")
        self.errors = errors


class AIClient(ABC):
    """Abstract generation capability."""

    @abstractmethod
    async def generate_structured(
        self,
        system: str,
        messages: list[dict[str, Any]],
        schema: type[T],
        model: str | None = None,
    ) -> T:
        """Produce one object conforming to ``schema``."""
        ...

    @abstractmethod
    def stream_round(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> AsyncIterator[ReasoningDelta | TextDelta | RoundComplete]:
        """Stream one model round, ending with a ``RoundComplete`` chunk."""
        ...


def _block_to_param(block: Any) -> dict[str, Any] | None:
    """Convert a response content block back into a request content block."""
    match block.type:
        case "text":
            return {"type": "text", "text": block.text}
        case "tool_use":
            return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
        case "thinking":
            return {"type": "thinking", "thinking": block.thinking, "signature": block.signature}
        case "redacted_thinking":
            return {"type": "redacted_thinking", "data": block.data}
        case _:
            return None


class AnthropicClient(AIClient):
    """Anthropic API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig, ai_config: AIConfig):
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )
        self._ai = ai_config

    async def generate_structured(
        self,
        system: str,
        messages: list[dict[str, Any]],
        schema: type[T],
        model: str | None = None,
    ) -> T:
        """Force a single tool call whose input schema is ``schema``."""
        model = model or self._ai.structured_model
        tool = {
            "name": STRUCTURED_TOOL_NAME,
            "description": f"Submit the final {schema.__name__} result.",
            "input_schema": schema.model_json_schema(),
        }

        logger.debug("structured_request", model=model, schema=schema.__name__, message_count=len(messages))
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=self._ai.max_tokens,
                system=system,
                messages=messages,
                tools=[tool],
                tool_choice={"type": "tool", "name": STRUCTURED_TOOL_NAME},
            )
        except anthropic.APIError as e:
            logger.error("structured_request_failed", model=model, schema=schema.__name__, error=str(e))
            raise GenerationError(f"Provider error while generating {schema.__name__}") from e

        logger.debug(
            "structured_response",
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )

        block = next((b for b in response.content if b.type == "tool_use"), None)
        if block is None:
            raise StructuredOutputError(schema.__name__, ["no structured result was returned"])
        try:
            return schema.model_validate(block.input)
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise StructuredOutputError(schema.__name__, errors) from e

    async def stream_round(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> AsyncIterator[ReasoningDelta | TextDelta | RoundComplete]:
        kwargs: dict[str, Any] = {
            "model": self._ai.model,
            "max_tokens": self._ai.max_tokens,
            "system": system,
            "messages": messages,
        }
        if tools:
            kwargs["tools"] = tools
        if self._ai.thinking_budget > 0:
            # extended thinking requires the default temperature
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": self._ai.thinking_budget}
        else:
            kwargs["temperature"] = self._ai.temperature

        logger.debug("stream_request", model=self._ai.model, message_count=len(messages))
        try:
            async with self._client.messages.stream(**kwargs) as stream:
                async for event in stream:
                    if event.type != "content_block_delta":
                        continue
                    if event.delta.type == "text_delta":
                        yield TextDelta(event.delta.text)
                    elif event.delta.type == "thinking_delta":
                        yield ReasoningDelta(event.delta.thinking)
                message = await stream.get_final_message()
        except anthropic.APIError as e:
            logger.error("stream_request_failed", model=self._ai.model, error=str(e))
            raise GenerationError("Provider error during conversation turn") from e

        content = [p for p in (_block_to_param(b) for b in message.content) if p is not None]
        tool_calls = [ToolCall(id=b.id, name=b.name, input=dict(b.input)) for b in message.content if b.type == "tool_use"]
        logger.debug(
            "stream_response",
            model=self._ai.model,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
            stop_reason=message.stop_reason,
            tool_calls=[c.name for c in tool_calls],
        )
        yield RoundComplete(content=content, tool_calls=tool_calls, stop_reason=message.stop_reason)
