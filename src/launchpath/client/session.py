"""HTTP consumer of the conversation stream, built on httpx."""

from __future__ import annotations

from typing import Any

import httpx

from launchpath.client.reducer import ClientStreamReducer, SSEDecoder
from launchpath.log import get_logger

logger = get_logger(__name__)


class ChatSession:
    """One client's view of a system's conversation.

    Replays the full local history on every turn and lets the reducer keep
    the message list current while frames arrive.
    """

    def __init__(self, client: httpx.AsyncClient, system_id: str):
        self._client = client
        self.system_id = system_id
        self.reducer = ClientStreamReducer()

    @property
    def messages(self) -> list[dict[str, Any]]:
        return self.reducer.messages

    @property
    def history(self) -> list[dict[str, Any]]:
        return self.reducer.history

    async def load(self) -> None:
        """Resume from the server's stored history and display messages."""
        response = await self._client.get(f"/api/chat/{self.system_id}")
        response.raise_for_status()
        data = response.json()
        self.reducer = ClientStreamReducer(
            history=data.get("conversationHistory") or [],
            display_messages=data.get("displayMessages") or [],
        )

    async def send(self, text: str) -> bool:
        """Send a typed message and consume the reply stream to completion."""
        if not self.reducer.begin_turn(text):
            return False
        await self._stream(text)
        return True

    async def respond_to_card(self, card_id: str, display_text: str, structured_message: str) -> bool:
        if not self.reducer.handle_card_response(card_id, display_text, structured_message):
            return False
        await self._stream(structured_message)
        return True

    async def start_over(self) -> None:
        await self._client.post(f"/api/chat/{self.system_id}/reset")
        await self._client.patch(f"/api/chat/{self.system_id}/display", json={"displayMessages": []})
        self.reducer.reset()

    async def _stream(self, text: str) -> None:
        # history already holds the new exchange once done arrives, so snapshot first
        body = {"messages": list(self.reducer.history), "userMessage": text}
        decoder = SSEDecoder()
        received_done = False
        try:
            async with self._client.stream("POST", f"/api/chat/{self.system_id}", json=body) as response:
                if response.status_code != 200:
                    await response.aread()
                    logger.warning("chat_request_rejected", status=response.status_code, body=response.text[:200])
                    self.reducer.abort()
                    return
                async for chunk in response.aiter_text():
                    for event in decoder.feed(chunk):
                        self.reducer.apply(event)
                        if event["type"] == "done":
                            received_done = True
        except httpx.HTTPError as e:
            logger.error("chat_stream_error", error=str(e))
            self.reducer.abort()
            return

        self.reducer.end_stream()
        if received_done:
            await self._save_display()

    async def _save_display(self) -> None:
        try:
            await self._client.patch(
                f"/api/chat/{self.system_id}/display",
                json={"displayMessages": self.reducer.messages},
            )
        except httpx.HTTPError as e:
            logger.warning("display_save_failed", error=str(e))
