"""InstanceSupervisor use case: the top-level event loop."""

from __future__ import annotations

import sys
from typing import Callable, Iterable

from pgnode.adapters.ports import LoggingPort
from pgnode.domain.events import OrchestrationEvent
from pgnode.domain.exceptions import FatalReconciliationError
from pgnode.domain.retry import CancellationToken
from pgnode.usecases.event_dispatcher import EventDispatcher


class InstanceSupervisor:
    """Feeds events to the dispatcher and owns the decision to terminate.

    Handler errors are logged and the next event is processed; the watch
    stream redelivers if needed. FatalReconciliationError terminates the
    process with exit status 1. stop() cancels in-progress waits and ends
    the loop before the next event.
    """

    def __init__(
        self,
        dispatcher: EventDispatcher,
        logger: LoggingPort,
        cancellation: CancellationToken | None = None,
        exit_process: Callable[[int], object] = sys.exit,
    ) -> None:
        """Initialize the supervisor.

        Args:
            dispatcher: Event dispatcher.
            logger: Logging port.
            cancellation: Token shared with the reconciler context.
            exit_process: Called with the exit status on a fatal error.
        """
        self.dispatcher = dispatcher
        self.logger = logger
        self.cancellation = cancellation or CancellationToken()
        self._exit_process = exit_process

    def run(self, events: Iterable[OrchestrationEvent]) -> int:
        """Process events until the iterable ends or stop() is called.

        Returns:
            Number of events handled without error.
        """
        handled = 0
        for event in events:
            if self.cancellation.cancelled:
                break
            try:
                self.dispatcher.dispatch(event)
            except FatalReconciliationError as e:
                self.logger.error(f"Unrecoverable error, terminating: {e}")
                self._exit_process(1)
                break
            except Exception as e:
                self.logger.error(
                    f"Error handling {event.kind.value} {event.name} "
                    f"({event.change_type.value}): {e}"
                )
            else:
                handled += 1
        return handled

    def stop(self) -> None:
        """Abort in-progress waits and stop after the current event."""
        self.cancellation.cancel()
