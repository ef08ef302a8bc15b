"""Iterative tool execution loop over streamed model rounds."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

from launchpath.ai.client import AIClient, Chunk, RoundComplete, ToolCall, ToolResult
from launchpath.ai.tools.registry import ToolRegistry
from launchpath.core.context import ToolContext
from launchpath.errors import GenerationError
from launchpath.log import get_logger

logger = get_logger(__name__)

MAX_TOOL_ROUNDS = 20


async def _execute_one(registry: ToolRegistry, ctx: ToolContext, call: ToolCall) -> dict[str, Any]:
    tool = registry.get(call.name)
    if tool is None:
        return {"error": f"Unknown tool '{call.name}'"}
    try:
        return await tool.execute(ctx, **call.input)
    except Exception as e:
        logger.error("tool_execution_error", tool=call.name, system_id=ctx.system_id, error=str(e))
        return {"error": f"Error executing {call.name}"}


async def run_tool_loop(
    ai_client: AIClient,
    registry: ToolRegistry,
    ctx: ToolContext,
    system: str,
    messages: list[dict[str, Any]],
    max_rounds: int = MAX_TOOL_ROUNDS,
) -> AsyncIterator[Chunk]:
    """Stream model rounds, running tool calls in between, until a round ends without tools.

    Yields text and reasoning deltas as they arrive, plus a ``ToolCall`` and
    ``ToolResult`` around each tool execution. Tools in one round run in the
    order the model requested them. ``messages`` is extended in place.
    """
    tool_defs = registry.api_definitions()
    rounds = 0

    while rounds < max_rounds:
        final: RoundComplete | None = None
        async for chunk in ai_client.stream_round(system, messages, tool_defs):
            if isinstance(chunk, RoundComplete):
                final = chunk
            else:
                yield chunk

        if final is None:
            raise GenerationError("Model round ended without a final message")

        if final.content:
            messages.append({"role": "assistant", "content": final.content})
        if not final.tool_calls:
            return

        tool_result_content: list[dict[str, Any]] = []
        for call in final.tool_calls:
            yield call
            result = await _execute_one(registry, ctx, call)
            logger.debug("tool_executed", tool=call.name, system_id=ctx.system_id, error=result.get("error"))
            yield ToolResult(id=call.id, name=call.name, result=result)
            tool_result_content.append(
                {
                    "type": "tool_result",
                    "tool_use_id": call.id,
                    "content": json.dumps(result, default=str),
                }
            )

        messages.append({"role": "user", "content": tool_result_content})
        rounds += 1

    logger.warning("tool_round_limit_reached", system_id=ctx.system_id, rounds=rounds)
