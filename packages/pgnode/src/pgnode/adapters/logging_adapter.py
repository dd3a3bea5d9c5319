"""Standard library implementation of the LoggingPort."""

from __future__ import annotations

import logging

from pgnode.adapters.ports import LoggingPort


class StdlibLoggingAdapter:
    """LoggingPort backed by a ``logging.Logger``.

    Messages carry the node identity as a prefix so that logs from several
    instances can be merged.
    """

    def __init__(
        self, logger: logging.Logger | None = None, pod_name: str | None = None
    ) -> None:
        """Initialize the adapter.

        Args:
            logger: Logger to write to. Defaults to the "pgnode" logger.
            pod_name: Optional node identity prefixed to every message.
        """
        self._logger = logger if logger is not None else logging.getLogger("pgnode")
        self._prefix = f"[{pod_name}] " if pod_name else ""

    def info(self, message: str) -> None:
        self._logger.info("%s%s", self._prefix, message)

    def warning(self, message: str) -> None:
        self._logger.warning("%s%s", self._prefix, message)

    def error(self, message: str) -> None:
        self._logger.error("%s%s", self._prefix, message)


# Runtime protocol check
assert isinstance(StdlibLoggingAdapter(), LoggingPort)
