"""Fake logging adapter for testing."""

from __future__ import annotations


class FakeLoggingAdapter:
    """Fake logging adapter that captures log messages for assertion.

    Implements LoggingPort protocol by storing messages per level.

    Example:
        logger = FakeLoggingAdapter()
        some_use_case.execute(logger=logger)
        assert "expected warning" in logger.warnings
    """

    def __init__(self) -> None:
        """Initialize with empty message lists."""
        self._infos: list[str] = []
        self._warnings: list[str] = []
        self._errors: list[str] = []

    def info(self, message: str) -> None:
        self._infos.append(message)

    def warning(self, message: str) -> None:
        self._warnings.append(message)

    def error(self, message: str) -> None:
        self._errors.append(message)

    @property
    def infos(self) -> list[str]:
        """Get a copy of captured info messages."""
        return list(self._infos)

    @property
    def warnings(self) -> list[str]:
        """Get a copy of captured warning messages."""
        return list(self._warnings)

    @property
    def errors(self) -> list[str]:
        """Get a copy of captured error messages."""
        return list(self._errors)

    def contains(self, fragment: str) -> bool:
        """True if any captured message at any level contains ``fragment``."""
        return any(fragment in m for m in self._infos + self._warnings + self._errors)

    def clear(self) -> None:
        """Clear all captured messages."""
        self._infos.clear()
        self._warnings.clear()
        self._errors.clear()
