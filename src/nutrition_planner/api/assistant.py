"""Nutrition assistant chat endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from nutrition_planner.api.models import ChatRequest  # noqa: TC001
from nutrition_planner.domain.errors import AppError

if TYPE_CHECKING:
    from nutrition_planner.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["assistant"])


@router.post("/chat")
async def chat(payload: ChatRequest, request: Request) -> JSONResponse:
    """Relay the conversation to the language model and return its reply."""
    container: AppContainer = request.app.state.container
    if container.assistant_service is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"message": "AI assistant is not configured"},
        )
    try:
        reply = await container.assistant_service.chat(
            payload.messages, payload.user_preferences
        )
    except AppError:
        raise
    except Exception:
        logger.exception("Assistant chat failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Error processing request"},
        )
    return JSONResponse(content={"message": reply})
