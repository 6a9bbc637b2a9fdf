"""
HTTP client for the Playkers REST API.

Every call goes through ``PlaykersClient.request``: a non-2xx response raises
``ApiError`` (``UnauthorizedError`` for 401) carrying the server's ``error``
message. Nothing is retried; callers decide what to show with ``handle_error``.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
LOGIN_PATH = "/login"
REDIRECT_DELAY_SECONDS = 0.5


class ApiError(Exception):
    """A non-2xx response from the API."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class UnauthorizedError(ApiError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(401, message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or response.reason_phrase
    return response.reason_phrase


class PlaykersClient:
    """
    Thin wrapper over ``httpx.Client`` with one method per endpoint.

    Pass ``transport`` to talk to an in-process app (e.g. ``httpx.WSGITransport``).
    Session cookies are kept on the underlying client.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.Client(
            base_url=base_url,
            transport=transport,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def request(self, method: str, path: str, json: Any = None, params: Optional[Dict] = None) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        response = self._client.request(method, path, json=json, params=params or None)
        if response.status_code == 401:
            raise UnauthorizedError(_error_message(response))
        if response.is_error:
            message = _error_message(response)
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    def register(self, email: str, password: str, **profile) -> Dict:
        body = self.request("POST", "/api/auth/register", json={"email": email, "password": password, **profile})
        return body["user"]

    def login(self, email: str, password: str) -> Dict:
        return self.request("POST", "/api/auth/login", json={"email": email, "password": password})

    def logout(self) -> Dict:
        return self.request("POST", "/api/auth/logout")

    def current_user(self) -> Dict:
        return self.request("GET", "/api/auth/user")

    # Matches

    def get_match(self, match_id: str) -> Dict:
        return self.request("GET", f"/api/matches/{match_id}")

    def get_participants(self, match_id: str) -> list:
        return self.request("GET", f"/api/matches/{match_id}/participants")

    def get_roster(self, match_id: str) -> list:
        return self.request("GET", f"/api/matches/{match_id}/roster")

    def update_score(self, match_id: str, payload: Dict) -> Dict:
        return self.request("PUT", f"/api/matches/{match_id}", json=payload)

    def complete_match(self, match_id: str, payload: Optional[Dict] = None) -> Dict:
        return self.request("POST", f"/api/matches/{match_id}/complete", json=payload or {})

    # Notifications

    def list_notifications(self, status: Optional[str] = None) -> list:
        return self.request("GET", "/api/notifications", params={"status": status})

    def unread_count(self) -> int:
        return self.request("GET", "/api/notifications/unread-count")["count"]

    def update_notification_status(self, notification_id: str, status: str) -> Dict:
        return self.request("PATCH", f"/api/notifications/{notification_id}/status", json={"status": status})

    def mark_all_read(self) -> Dict:
        return self.request("PATCH", "/api/notifications/mark-all-read")

    def accept_notification(self, notification_id: str) -> Dict:
        return self.request("POST", f"/api/notifications/{notification_id}/accept")

    def accept_booking(self, notification_id: str) -> Dict:
        return self.request("POST", f"/api/notifications/{notification_id}/accept-booking")

    def delete_notification(self, notification_id: str) -> Dict:
        return self.request("DELETE", f"/api/notifications/{notification_id}")

    # Invitations

    def get_invitation(self, token: str) -> Dict:
        return self.request("GET", f"/api/invitations/token/{token}")

    def accept_invitation(self, token: str, guest_player: Optional[Dict] = None) -> Dict:
        body = {"guestPlayerData": guest_player} if guest_player else {}
        return self.request("POST", f"/api/invitations/{token}/accept", json=body)


def handle_error(
    error: Exception,
    toast: Callable[[str, str], None],
    redirect: Optional[Callable[[str], None]] = None,
    delay: float = REDIRECT_DELAY_SECONDS,
) -> Optional[threading.Timer]:
    """
    Report ``error`` through ``toast(title, message)``.

    For an ``UnauthorizedError`` a redirect to the login page is scheduled
    after ``delay`` seconds; the started timer is returned so callers can
    cancel or join it.
    """
    if isinstance(error, UnauthorizedError):
        toast("Unauthorized", "You are logged out. Logging in again...")
        if redirect is None:
            return None
        timer = threading.Timer(delay, redirect, args=(LOGIN_PATH,))
        timer.daemon = True
        timer.start()
        return timer

    message = getattr(error, "message", None) or str(error) or GENERIC_ERROR_MESSAGE
    logger.warning("request failed: %s", message)
    toast("Error", message)
    return None
