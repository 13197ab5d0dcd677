"""Observability hook plumbing.

Client operations describe what they are doing as :class:`ClientEvent`
objects and hand them to an :class:`EventEmitter`.  The emitter forwards
each event to a caller-supplied hook; without one it does nothing, so tests
and host applications can observe structured events instead of parsing
log text.
"""

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field

from chatwidget.core.logger import ChatWidgetLogger

logger = ChatWidgetLogger.get_logger()


class ClientEvent(BaseModel):
    """A single structured event raised by a client operation."""

    name: str
    operation: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


EventHook = Callable[[ClientEvent], None]


def _noop(event: ClientEvent) -> None:
    return None


class EventEmitter:
    """Deliver :class:`ClientEvent` objects to an optional hook."""

    def __init__(self, hook: Optional[EventHook] = None) -> None:
        self._hook: EventHook = hook or _noop

    def emit(self, name: str, operation: Optional[str] = None, **fields: Any) -> ClientEvent:
        """Build an event and pass it to the hook.

        A hook that raises is logged and otherwise ignored; observers must
        not be able to change the outcome of the operation they watch.
        """
        event = ClientEvent(name=name, operation=operation, fields=fields)
        try:
            self._hook(event)
        except Exception as exc:
            logger.warning(
                "Event hook raised",
                extra={"event": name, "operation": operation, "error": str(exc)},
            )
        return event
