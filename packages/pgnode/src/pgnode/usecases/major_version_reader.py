"""Major version reader use case."""

from __future__ import annotations

from pathlib import Path

from pgnode.domain.exceptions import EngineOperationError


class MajorVersionReader:
    """Reads the engine major version from the data directory.

    The data directory holds a PG_VERSION file written by initdb. Versions
    before 10 use two components ("9.6"), later ones a single one ("13").
    """

    def __init__(self, pgdata: Path) -> None:
        self.version_file = Path(pgdata) / "PG_VERSION"

    def read(self) -> int:
        """Return the major version as an integer.

        Raises:
            EngineOperationError: If the file is missing or unparseable.
        """
        try:
            content = self.version_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise EngineOperationError(
                f"cannot read {self.version_file}: {e}", "read_version"
            ) from e

        major = content.split(".", 1)[0]
        if not major.isdigit():
            raise EngineOperationError(
                f"unexpected content in {self.version_file}: {content!r}",
                "read_version",
            )
        return int(major)
