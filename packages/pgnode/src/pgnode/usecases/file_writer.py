"""Atomic file writer use case for certificate and configuration files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Sequence


class AtomicFileWriter:
    """Writes groups of files so readers never see partial content.

    Every file is staged as an owner-only (0600) temporary file in its
    destination directory. Only after all of them are staged are they
    moved into place with os.replace. A failure while staging removes the
    temporaries and leaves every destination untouched. A failure while
    moving removes the temporaries not yet moved; files already moved keep
    their new content.
    """

    def write_all(self, files: Sequence[tuple[Path, bytes]]) -> None:
        """Atomically write each (path, content) pair.

        Raises:
            OSError: If a file cannot be staged or moved.
        """
        staged: list[tuple[Path, Path]] = []
        try:
            for path, content in files:
                staged.append((self._stage(Path(path), content), Path(path)))
        except OSError:
            for temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            raise

        replaced = 0
        try:
            for temp_path, path in staged:
                os.replace(temp_path, path)
                replaced += 1
        except OSError:
            for temp_path, _ in staged[replaced:]:
                temp_path.unlink(missing_ok=True)
            raise

    def write(self, path: Path, content: bytes) -> None:
        """Atomically write a single file."""
        self.write_all([(path, content)])

    @staticmethod
    def _stage(path: Path, content: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file with mode 0600
        temp_fd, temp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        temp_path = Path(temp_name)
        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path
