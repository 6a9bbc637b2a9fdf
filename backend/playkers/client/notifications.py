"""Client-side notification polling: the unread-count watcher and the bell inbox."""
import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from .api import ApiError, handle_error
from .cache import Poller, QueryCache

logger = logging.getLogger(__name__)

WATCHER_INTERVAL_SECONDS = 15.0
INBOX_INTERVAL_SECONDS = 30.0

NOTIFICATIONS_KEY = ("/api/notifications",)
UNREAD_COUNT_KEY = ("/api/notifications/unread-count",)
ACCEPT_INVALIDATES = (
    NOTIFICATIONS_KEY,
    UNREAD_COUNT_KEY,
    ("/api/bookings",),
    ("/api/matches",),
    ("/api/teams",),
)

Toast = Callable[[str, str], None]


def new_notifications_message(delta: int) -> str:
    if delta == 1:
        return "You have 1 new notification. Open the bell menu to view it."
    return f"You have {delta} new notifications. Open the bell menu to view them."


class NotificationWatcher:
    """
    Polls the unread count and toasts when it rises.

    The first poll only records a baseline. After that, every poll whose count
    is above the previous one produces exactly one toast for the difference.
    """

    def __init__(self, api, toast: Toast, cache: Optional[QueryCache] = None,
                 interval: float = WATCHER_INTERVAL_SECONDS):
        self.api = api
        self.toast = toast
        self.cache = cache or QueryCache()
        self.previous: Optional[int] = None
        self._poller = Poller(interval, self.poll_once, name="notification-watcher", on_error=self._report)

    def _report(self, exc: Exception) -> None:
        handle_error(exc, self.toast)

    def poll_once(self) -> int:
        count = self.cache.fetch(UNREAD_COUNT_KEY, self.api.unread_count, force=True)
        if self.previous is None:
            self.previous = count
            return count
        if count > self.previous:
            delta = count - self.previous
            logger.info("unread count %d -> %d", self.previous, count)
            self.toast("🔔 New notification", new_notifications_message(delta))
        self.previous = count
        return count

    def start(self) -> None:
        try:
            self.poll_once()
        except (ApiError, httpx.HTTPError) as exc:
            self._report(exc)
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop()


class NotificationInbox:
    """
    The bell-menu inbox.

    The unread count is polled in the background; the full list is fetched
    only while the inbox is open. Opening it marks unread ``booking_accepted``
    notifications as read. Mutations invalidate the affected query prefixes
    and report failures through ``toast``.
    """

    def __init__(
        self,
        api,
        toast: Toast,
        cache: Optional[QueryCache] = None,
        navigate: Optional[Callable[[str], None]] = None,
        interval: float = INBOX_INTERVAL_SECONDS,
    ):
        self.api = api
        self.toast = toast
        self.cache = cache or QueryCache()
        self.navigate = navigate
        self.is_open = False
        self._poller = Poller(interval, self.poll_count, name="notification-inbox", on_error=self._report)

    @property
    def unread_count(self) -> int:
        return self.cache.get(UNREAD_COUNT_KEY, 0)

    @property
    def notifications(self) -> List[Dict]:
        return self.cache.get(NOTIFICATIONS_KEY, [])

    def poll_count(self) -> int:
        return self.cache.fetch(UNREAD_COUNT_KEY, self.api.unread_count, force=True)

    def start(self) -> None:
        try:
            self.poll_count()
        except (ApiError, httpx.HTTPError) as exc:
            self._report(exc)
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop()

    def _invalidate(self, *extra) -> None:
        for prefix in (NOTIFICATIONS_KEY, UNREAD_COUNT_KEY) + extra:
            self.cache.invalidate(prefix)

    def _report(self, exc: Exception):
        return handle_error(exc, self.toast, redirect=self.navigate)

    def _fail(self, exc: ApiError, fallback: str):
        if not exc.message:
            exc.message = fallback
        return self._report(exc)

    def refresh(self, force: bool = False) -> List[Dict]:
        if not self.is_open:
            return self.notifications
        return self.cache.fetch(NOTIFICATIONS_KEY, self.api.list_notifications, force=force)

    def open(self) -> List[Dict]:
        """Open the inbox; returns the list after auto-marking booking acceptances read."""
        self.is_open = True
        listing = self.refresh(force=True)
        marked = 0
        for notification in listing:
            if notification.get("type") == "booking_accepted" and notification.get("status") == "unread":
                if self.mark_read(notification["id"]):
                    marked += 1
        if marked:
            logger.debug("auto-marked %d booking_accepted notification(s) read", marked)
            listing = self.refresh()
        return listing

    def close(self) -> None:
        self.is_open = False

    def set_status(self, notification_id: str, status: str) -> Optional[Dict]:
        try:
            updated = self.api.update_notification_status(notification_id, status)
        except ApiError as exc:
            self._fail(exc, "Failed to update notification")
            return None
        self._invalidate()
        return updated

    def mark_read(self, notification_id: str) -> Optional[Dict]:
        return self.set_status(notification_id, "read")

    def decline(self, notification_id: str) -> Optional[Dict]:
        return self.set_status(notification_id, "declined")

    def accept(self, notification_id: str) -> Optional[str]:
        """Accept a request. Returns the create-match target for match requests, else None."""
        try:
            result = self.api.accept_notification(notification_id)
        except ApiError as exc:
            self._fail(exc, "Failed to accept request")
            return None
        for prefix in ACCEPT_INVALIDATES:
            self.cache.invalidate(prefix)
        self.toast("Request accepted ✅", "The sender has been notified.")

        request_data = result.get("matchRequestData")
        if not request_data:
            return None
        params = {"sport": request_data.get("sport") or "cricket"}
        if request_data.get("team1Id"):
            params["team1"] = request_data["team1Id"]
        if request_data.get("team2Id"):
            params["team2"] = request_data["team2Id"]
        target = f"/create-match?{urlencode(params)}"
        if self.navigate:
            self.navigate(target)
        self.close()
        return target

    def accept_booking(self, notification_id: str) -> Optional[Dict]:
        try:
            result = self.api.accept_booking(notification_id)
        except ApiError as exc:
            self._fail(exc, "Failed to accept booking")
            return None
        self._invalidate(("/api/bookings",))
        self.toast("Booking accepted ✅", "The user has been notified.")
        return result

    def delete(self, notification_id: str) -> bool:
        try:
            self.api.delete_notification(notification_id)
        except ApiError as exc:
            self._fail(exc, "Failed to delete notification")
            return False
        self._invalidate()
        self.toast("Notification removed", "")
        return True

    def mark_all_read(self) -> Optional[int]:
        try:
            result = self.api.mark_all_read()
        except ApiError as exc:
            self._fail(exc, "Failed to mark all as read")
            return None
        self._invalidate()
        self.toast("All marked as read", "")
        return result.get("updated")
