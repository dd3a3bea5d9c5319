"""EventDispatcher use case: route events by resource kind."""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping

from pgnode.adapters.ports import LoggingPort
from pgnode.domain.events import OrchestrationEvent, ResourceKind

EventHandler = Callable[[OrchestrationEvent], Any]


class EventDispatcher:
    """Routes each event to the handler registered for its resource kind.

    Events are processed one at a time: a lock serializes concurrent
    callers. Kinds without a handler are logged and skipped. Handler errors
    are returned to the caller unmodified; there is no event-level retry.
    """

    def __init__(
        self, handlers: Mapping[ResourceKind, EventHandler], logger: LoggingPort
    ) -> None:
        """Initialize the dispatcher.

        Args:
            handlers: Handler per resource kind. OTHER is never dispatched.
            logger: Logging port.
        """
        self._handlers = {
            kind: handler
            for kind, handler in handlers.items()
            if kind is not ResourceKind.OTHER
        }
        self.logger = logger
        self._lock = threading.Lock()

    @property
    def kinds(self) -> frozenset[ResourceKind]:
        """Resource kinds with a registered handler."""
        return frozenset(self._handlers)

    def dispatch(self, event: OrchestrationEvent) -> None:
        """Handle one event.

        Raises:
            Exception: Whatever the matching handler raised.
        """
        with self._lock:
            handler = self._handlers.get(event.kind)
            if handler is None:
                self.logger.info(
                    f"Ignoring {event.change_type.value} event for "
                    f"unhandled kind {event.kind.value} ({event.name})"
                )
                return
            handler(event)
