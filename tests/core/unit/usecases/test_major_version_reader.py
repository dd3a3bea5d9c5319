"""Unit tests for MajorVersionReader use case."""

from pathlib import Path

import pytest

from pgnode.domain.exceptions import EngineOperationError
from pgnode.usecases.major_version_reader import MajorVersionReader


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.MajorVersionReader")
class TestMajorVersionReader:
    """Test MajorVersionReader.read()."""

    @pytest.mark.parametrize(
        "content,expected",
        [("9.6\n", 9), ("10\n", 10), ("13\n", 13), ("16", 16)],
    )
    def test_reads_major_version(self, tmp_path: Path, content: str, expected: int) -> None:
        (tmp_path / "PG_VERSION").write_text(content)
        assert MajorVersionReader(tmp_path).read() == expected

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(EngineOperationError) as exc_info:
            MajorVersionReader(tmp_path).read()
        assert exc_info.value.operation == "read_version"

    @pytest.mark.parametrize("content", ["", "abc", "v13"])
    def test_garbled_file_raises(self, tmp_path: Path, content: str) -> None:
        (tmp_path / "PG_VERSION").write_text(content)
        with pytest.raises(EngineOperationError, match="unexpected content"):
            MajorVersionReader(tmp_path).read()
