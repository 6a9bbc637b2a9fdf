import logging
from typing import Callable, Optional

import httpx

from .api import ApiError, handle_error
from .cache import Poller, QueryCache

logger = logging.getLogger(__name__)

SPECTATOR_INTERVAL_SECONDS = 5.0


def match_key(match_id):
    return ("/api/matches", match_id)


def participants_key(match_id):
    return ("/api/matches", match_id, "participants")


def roster_key(match_id):
    return ("/api/matches", match_id, "roster")


class SpectatorFeed:
    """
    Read-only view of one live match, refetched every few seconds.

    The match and its participants are always polled; the flattened roster
    only for cricket. With auto-refresh off nothing is polled, ``refresh``
    still refetches on demand.
    """

    def __init__(
        self,
        api,
        match_id: str,
        cache: Optional[QueryCache] = None,
        interval: float = SPECTATOR_INTERVAL_SECONDS,
        toast: Optional[Callable[[str, str], None]] = None,
    ):
        self.api = api
        self.match_id = match_id
        self.cache = cache or QueryCache()
        self.toast = toast
        self.auto_refresh = True
        self._poller = Poller(interval, self.tick, name=f"spectator:{match_id}", on_error=self._report)
        self._started = False

    @property
    def match(self):
        return self.cache.get(match_key(self.match_id))

    @property
    def participants(self):
        return self.cache.get(participants_key(self.match_id), [])

    @property
    def roster(self):
        return self.cache.get(roster_key(self.match_id), [])

    def refresh(self):
        match = self.cache.fetch(match_key(self.match_id), lambda: self.api.get_match(self.match_id), force=True)
        self.cache.fetch(participants_key(self.match_id),
                         lambda: self.api.get_participants(self.match_id), force=True)
        if match and match.get("sport") == "cricket":
            self.cache.fetch(roster_key(self.match_id), lambda: self.api.get_roster(self.match_id), force=True)
        return match

    def tick(self) -> bool:
        """One polling round. Returns False when auto-refresh is off and nothing was fetched."""
        if not self.auto_refresh:
            return False
        self.refresh()
        return True

    def set_auto_refresh(self, enabled: bool) -> None:
        self.auto_refresh = bool(enabled)
        if self._started:
            if self.auto_refresh:
                self._poller.start()
            else:
                self._poller.stop()
        logger.info("spectator %s auto-refresh %s", self.match_id, "on" if self.auto_refresh else "off")
        if self.toast is not None:
            if self.auto_refresh:
                self.toast("Auto-refresh enabled", f"Match updates every {self._poller.interval:g} seconds.")
            else:
                self.toast("Auto-refresh disabled", "Refresh manually to see the latest score.")

    def toggle_auto_refresh(self) -> bool:
        self.set_auto_refresh(not self.auto_refresh)
        return self.auto_refresh

    def _report(self, exc: Exception) -> None:
        if self.toast is not None:
            handle_error(exc, self.toast)

    def start(self) -> None:
        self._started = True
        try:
            self.refresh()
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("spectator %s initial load failed: %s", self.match_id, exc)
            self._report(exc)
        if self.auto_refresh:
            self._poller.start()

    def stop(self) -> None:
        self._started = False
        self._poller.stop()
