"""Server-sent event framing for conversation and workflow streams."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

from fastapi.responses import StreamingResponse

from launchpath.core.context import EventChannel
from launchpath.core.events import Event


SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_event(event: Event) -> str:
    return f"data: {json.dumps(event)}\n\n"


async def sse_frames(channel: EventChannel) -> AsyncIterator[str]:
    """Frame every event on the channel until it closes.

    Closing the response early only stops the framing; the producer task
    keeps running.
    """
    async for event in channel:
        yield encode_event(event)


def sse_response(channel: EventChannel) -> StreamingResponse:
    return StreamingResponse(sse_frames(channel), media_type="text/event-stream", headers=SSE_HEADERS)
