"""Toolkit-free panel state, event routing and request context."""

from .client import ChatClient
from .errors import ChatPanelError, UnhandledTabBarButtonError
from .messenger import Messenger
from .router import EventRouter
from .tab_store import StoreEvent, TabStore

__all__ = [
    "ChatClient",
    "ChatPanelError",
    "EventRouter",
    "Messenger",
    "StoreEvent",
    "TabStore",
    "UnhandledTabBarButtonError",
]
