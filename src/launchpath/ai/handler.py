"""Conversation engine: one user message in, one typed event stream out."""

from __future__ import annotations

import asyncio

from launchpath.ai.client import AIClient, ReasoningDelta, TextDelta, ToolCall
from launchpath.ai.conversation import (
    ConversationMessage,
    build_messages,
    history_entry,
    summarize_assistant_turn,
    validate_history,
)
from launchpath.ai.prompts.strategist import build_strategist_prompt
from launchpath.ai.tool_runner import run_tool_loop
from launchpath.ai.tools.registry import ToolRegistry
from launchpath.config import AIConfig
from launchpath.core import events
from launchpath.core.context import CardIdAllocator, EventChannel, ToolContext
from launchpath.errors import PersistenceError
from launchpath.log import bind_system, clear_bound, get_logger
from launchpath.storage.models import ProfileRecord
from launchpath.storage.system_repo import SystemRepository

logger = get_logger(__name__)

USER_SAFE_ERROR = "Something went wrong. Please try again."


class ConversationEngine:
    """Runs a conversation turn as a background task feeding an ``EventChannel``.

    The task is not tied to the HTTP response: if the client disconnects the
    turn still completes and persists.
    """

    def __init__(
        self,
        ai_client: AIClient,
        tool_registry: ToolRegistry,
        repo: SystemRepository,
        ai_config: AIConfig,
    ):
        self._ai_client = ai_client
        self._tool_registry = tool_registry
        self._repo = repo
        self._ai_config = ai_config
        self._tasks: set[asyncio.Task] = set()

    async def start_turn(
        self,
        system_id: str,
        history: list[ConversationMessage],
        user_message: str,
    ) -> EventChannel:
        """Validate the request, then start streaming.

        Raises ``RequestValidationError`` or ``SystemNotFoundError`` before any
        event is produced.
        """
        validate_history(history)
        system = await self._repo.require(system_id)
        profile = await self._repo.get_profile(system.profile_id)
        if profile is None:
            logger.warning("profile_missing", system_id=system_id, profile_id=system.profile_id)
            profile = ProfileRecord(id=system.profile_id)
        turn = await self._repo.claim_turn(system_id)

        channel = EventChannel()
        ctx = ToolContext(
            system_id=system_id,
            repo=self._repo,
            profile=profile,
            system=system,
            channel=channel,
            cards=CardIdAllocator(turn=turn),
        )
        task = asyncio.create_task(self._run(ctx, history, user_message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return channel

    async def _run(self, ctx: ToolContext, history: list[ConversationMessage], user_message: str) -> None:
        bind_system(ctx.system_id)
        segments: list[str] = []
        new_segment = True
        thinking_open = False

        def close_thinking() -> None:
            nonlocal thinking_open
            if thinking_open:
                ctx.emit(events.thinking_done())
                thinking_open = False

        try:
            logger.info("turn_started", turn=ctx.cards.turn, message_length=len(user_message))
            system_prompt = build_strategist_prompt(ctx.profile, ctx.system)
            messages = build_messages(history, user_message)

            async for chunk in run_tool_loop(
                self._ai_client,
                self._tool_registry,
                ctx,
                system_prompt,
                messages,
                max_rounds=self._ai_config.max_tool_rounds,
            ):
                match chunk:
                    case ReasoningDelta(text=text):
                        thinking_open = True
                        ctx.emit(events.thinking(text))
                    case TextDelta(text=text):
                        close_thinking()
                        if new_segment:
                            segments.append("")
                            new_segment = False
                        segments[-1] += text
                        ctx.emit(events.text_delta(text))
                    case ToolCall(name=name):
                        close_thinking()
                        ctx.tools_used.append(name)
                        new_segment = True
            close_thinking()

            text = "\n".join(s.strip() for s in segments if s.strip())
            assistant_content = summarize_assistant_turn(text, ctx.tools_used)
            updated = [
                *(m.model_dump(exclude_none=True) for m in history),
                history_entry("user", user_message),
                history_entry("assistant", assistant_content),
            ]
            try:
                await self._repo.patch(ctx.system_id, {"conversation_history": updated})
            except PersistenceError as e:
                logger.error("history_save_failed", error=str(e))

            ctx.emit(events.done(assistant_content))
            logger.info("turn_complete", tools=ctx.tools_used, length=len(text))
        except asyncio.CancelledError:
            logger.warning("turn_cancelled", turn=ctx.cards.turn)
            close_thinking()
            ctx.emit(events.error(USER_SAFE_ERROR))
            raise
        except Exception as e:
            logger.error("chat_stream_failed", error=str(e), error_type=type(e).__name__)
            close_thinking()
            ctx.emit(events.error(USER_SAFE_ERROR))
        finally:
            ctx.channel.close()
            clear_bound()

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
