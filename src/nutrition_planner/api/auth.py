"""Account endpoints: register, login, username checks and session lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from nutrition_planner.api.models import LoginRequest, RegisterRequest
from nutrition_planner.domain.errors import StoreUnavailable
from nutrition_planner.domain.users import UserView
from nutrition_planner.services.auth import AuthService  # noqa: TC001

if TYPE_CHECKING:
    from nutrition_planner.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_auth_service(request: Request) -> AuthService:
    container: AppContainer = request.app.state.container
    return container.auth_service


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest, service: AuthService = Depends(get_auth_service)
) -> dict[str, object]:
    """Create an account and return the user with a session token."""
    result = service.register(payload.email, payload.password, payload.name)
    return result.to_dict()


@router.post("/login")
def login(
    payload: LoginRequest, service: AuthService = Depends(get_auth_service)
) -> dict[str, object]:
    """Exchange email and password for a session token."""
    result = service.login(payload.email, payload.password)
    return result.to_dict()


@router.get("/check-username/{username}")
def check_username(
    username: str, service: AuthService = Depends(get_auth_service)
) -> JSONResponse:
    """Report whether a display name is still free."""
    try:
        availability = service.check_username_availability(username)
    except StoreUnavailable:
        logger.warning("Username check failed: user store unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "available": False,
                "message": "Error checking username availability",
            },
        )
    return JSONResponse(
        status_code=(
            status.HTTP_200_OK if availability.valid else status.HTTP_400_BAD_REQUEST
        ),
        content=availability.to_dict(),
    )


@router.get("/me")
def current_user(
    token: str | None = Depends(bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> dict[str, object]:
    """Return the user behind the bearer token."""
    record = service.authenticate(token)
    return {"user": UserView.from_record(record).to_dict()}
