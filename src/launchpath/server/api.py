"""FastAPI application exposing the conversation and workflow streams."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from launchpath.ai.conversation import ChatRequest
from launchpath.app import LaunchPathApp
from launchpath.errors import PersistenceError, PreconditionError, RequestValidationError, SystemNotFoundError
from launchpath.log import get_logger
from launchpath.server.sse import sse_response

logger = get_logger(__name__)

NO_NICHE_SELECTED = "No niche selected"
OFFER_MISSING = "Offer not found. Complete the offer step first."


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestValidationError("Request body must be valid JSON") from e


def create_api(launchpath: LaunchPathApp) -> FastAPI:
    """Build the HTTP app; its lifespan starts and stops ``launchpath``."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await launchpath.start()
        try:
            yield
        finally:
            await launchpath.stop()

    api = FastAPI(title="LaunchPath", lifespan=lifespan)
    if launchpath.config.server.cors_origins:
        api.add_middleware(
            CORSMiddleware,
            allow_origins=launchpath.config.server.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @api.exception_handler(RequestValidationError)
    async def _bad_request(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @api.exception_handler(SystemNotFoundError)
    async def _not_found(_: Request, exc: SystemNotFoundError) -> JSONResponse:
        return _error(404, "System not found")

    @api.exception_handler(PersistenceError)
    async def _storage_failed(_: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("request_storage_failed", error=str(exc))
        return _error(500, "Failed to save")

    # -- conversation --------------------------------------------------

    @api.post("/api/chat/{system_id}")
    async def chat(system_id: str, request: Request):
        body = await _json_body(request)
        try:
            chat_request = ChatRequest.model_validate(body)
        except ValidationError as e:
            logger.info("chat_request_invalid", system_id=system_id, errors=e.error_count())
            return _error(400, "Invalid request: messages and userMessage are required")

        channel = await launchpath.engine.start_turn(system_id, chat_request.messages, chat_request.userMessage)
        return sse_response(channel)

    @api.get("/api/chat/{system_id}")
    async def chat_state(system_id: str) -> dict[str, Any]:
        system = await launchpath.repo.require(system_id)
        return {
            "conversationHistory": system.conversation_history,
            "displayMessages": system.display_messages,
            "status": system.status,
            "demoUrl": system.demo_url,
        }

    @api.post("/api/chat/{system_id}/reset")
    async def reset(system_id: str) -> dict[str, Any]:
        await launchpath.repo.patch(system_id, {"conversation_history": [], "display_messages": []})
        logger.info("conversation_reset", system_id=system_id)
        return {"ok": True}

    @api.patch("/api/chat/{system_id}/display")
    async def save_display(system_id: str, request: Request):
        body = await _json_body(request)
        messages = body.get("displayMessages") if isinstance(body, dict) else None
        if not isinstance(messages, list):
            return _error(400, "displayMessages must be an array")
        await launchpath.repo.patch(system_id, {"display_messages": messages})
        return {"ok": True}

    # -- standalone workflows -------------------------------------------

    @api.post("/api/systems/{system_id}/offer")
    async def offer_stream(system_id: str):
        try:
            channel = await launchpath.workflow_streams.open_offer(system_id)
        except PreconditionError:
            return _error(400, NO_NICHE_SELECTED)
        return sse_response(channel)

    @api.post("/api/systems/{system_id}/demo")
    async def demo_stream(system_id: str):
        try:
            channel = await launchpath.workflow_streams.open_demo(system_id)
        except PreconditionError as e:
            return _error(400, NO_NICHE_SELECTED if "chosen_recommendation" in e.missing else OFFER_MISSING)
        return sse_response(channel)

    @api.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return api
