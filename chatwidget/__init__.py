"""Chat widget SDK — Pydantic models, async client facade, and exceptions.

The :class:`ChatWidgetClient` sends chat messages (with optional inline
base64 attachments) and manages uploaded attachments.  Every operation is a
coroutine returning a :class:`ChatResponse` envelope and never raises.

Usage::

    from chatwidget import ChatWidgetClient, Attachment

    client = ChatWidgetClient("https://chat.example.com/v1/api/n8n", "bot_123")
    reply = await client.send_message("hello", [Attachment.from_path("report.pdf")])
    if reply.success:
        print(reply.result)
"""

from chatwidget.client import ChatWidgetClient, make_request
from chatwidget.core.events import ClientEvent
from chatwidget.exceptions import APIException, ChatWidgetError, ResponseParseError
from chatwidget.models import (
    Attachment,
    ChatRequest,
    ChatResponse,
    ClientConfig,
    StoredAttachment,
)

__all__ = [
    "ChatWidgetClient",
    "make_request",
    "APIException",
    "ChatWidgetError",
    "ResponseParseError",
    "Attachment",
    "ChatRequest",
    "ChatResponse",
    "ClientConfig",
    "ClientEvent",
    "StoredAttachment",
]
