"""Core helpers — session identity, observability events, and logging.

This package is framework-agnostic. It must NEVER import the client, models,
or config modules of ``chatwidget``.
"""

from chatwidget.core.events import ClientEvent, EventEmitter
from chatwidget.core.identity import generate_session_id
from chatwidget.core.logger import ChatWidgetLogger

__all__ = [
    "generate_session_id",
    "ChatWidgetLogger",
    "ClientEvent",
    "EventEmitter",
]
