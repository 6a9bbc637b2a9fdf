"""Python client for the Playkers API.

Mirrors the web app's data layer: an HTTP client that raises on non-2xx,
a query cache with prefix invalidation, and the pollers behind the live
spectator view and the notification bell.
"""
from .api import ApiError, UnauthorizedError, PlaykersClient, handle_error
from .cache import Poller, QueryCache
from .notifications import NotificationInbox, NotificationWatcher
from .spectator import SpectatorFeed

__all__ = [
    'ApiError',
    'UnauthorizedError',
    'PlaykersClient',
    'handle_error',
    'Poller',
    'QueryCache',
    'NotificationInbox',
    'NotificationWatcher',
    'SpectatorFeed',
]
