"""Client-side session context for the nutrition planner API.

``AuthSession`` holds at most one signed-in user and its token. Every
transition (register, login, restore, logout) goes through it, and any call
rejected with 401 drops the session so callers can send the user back to the
login page.
"""

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from nutrition_planner.domain.users import UsernameAvailability, UserView


class SessionRequestError(Exception):
    """The API rejected a session call."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class AuthSession:
    """Session context implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    token: str | None = None
    user: UserView | None = None

    @classmethod
    def create(cls, base_url: str) -> "AuthSession":
        """Create a session with a managed httpx client."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    async def register(
        self, email: str, password: str, name: str | None = None
    ) -> UserView:
        """Create an account and sign in as it."""
        payload: dict[str, object] = {"email": email, "password": password}
        if name is not None:
            payload["name"] = name
        data = await self._post_json("/api/auth/register", payload)
        return self._start(data)

    async def login(self, email: str, password: str) -> UserView:
        """Sign in with email and password."""
        data = await self._post_json(
            "/api/auth/login", {"email": email, "password": password}
        )
        return self._start(data)

    async def restore(self, token: str) -> UserView | None:
        """Rehydrate the session from a stored token.

        Returns None and leaves the session empty when the token is no
        longer accepted. Any other failure also leaves the session empty.
        """
        self.logout()
        self.token = token
        try:
            response = await self.request("GET", "/api/auth/me")
            if response.status_code == httpx.codes.UNAUTHORIZED:
                return None
            _raise_for_status(response)
        except (httpx.HTTPError, SessionRequestError):
            self.logout()
            raise
        self.user = _to_view(response.json()["user"])
        return self.user

    def logout(self) -> None:
        """Forget the current user and token."""
        self.token = None
        self.user = None

    async def check_username(self, name: str) -> UsernameAvailability:
        """Ask whether a display name is free."""
        response = await self.http_client.get(
            f"{self.base_url}/api/auth/check-username/{quote(name, safe='')}",
            timeout=10,
        )
        data = response.json()
        return UsernameAvailability(
            available=bool(data.get("available")),
            message=str(data.get("message", "")),
            valid=response.status_code != httpx.codes.BAD_REQUEST,
        )

    async def request(
        self, method: str, path: str, **kwargs: object
    ) -> httpx.Response:
        """Send an API request with the bearer token attached."""
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self.http_client.request(
            method, f"{self.base_url}{path}", headers=headers, timeout=10, **kwargs
        )
        if response.status_code == httpx.codes.UNAUTHORIZED:
            self.logout()
        return response

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _post_json(self, path: str, payload: dict[str, object]) -> dict:
        response = await self.http_client.post(
            f"{self.base_url}{path}", json=payload, timeout=10
        )
        _raise_for_status(response)
        return response.json()

    def _start(self, data: dict) -> UserView:
        self.token = data["token"]
        self.user = _to_view(data["user"])
        return self.user


def _to_view(data: dict) -> UserView:
    return UserView(id=data["id"], email=data["email"], name=data.get("name"))


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        message = response.json().get("message", response.reason_phrase)
    except ValueError:
        message = response.reason_phrase
    raise SessionRequestError(response.status_code, message)
