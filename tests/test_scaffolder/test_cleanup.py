"""Tests for default asset cleanup (src.scaffolder.cleanup)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from src.scaffolder.cleanup import clean_directory

pytestmark = pytest.mark.unit


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    public = tmp_path / "public"
    public.mkdir()
    for name in ("next.svg", "vercel.svg", "file.svg", ".gitkeep"):
        (public / name).write_text(name)
    (public / "icons").mkdir()
    (public / "icons" / "a.png").write_bytes(b"\x89PNG")
    return public


class TestCleanDirectory:
    def test_removes_everything_but_placeholder(self, public_dir: Path):
        result = clean_directory(public_dir)
        assert [p.name for p in public_dir.iterdir()] == [".gitkeep"]
        assert sorted(result.removed) == ["file.svg", "icons", "next.svg", "vercel.svg"]
        assert result.warning is None
        assert result.missing is False

    def test_custom_keep_list(self, public_dir: Path):
        clean_directory(public_dir, keep=("next.svg",))
        assert [p.name for p in public_dir.iterdir()] == ["next.svg"]

    def test_missing_directory_is_noop(self, tmp_path: Path):
        result = clean_directory(tmp_path / "public")
        assert result.missing is True
        assert result.removed == []
        assert result.warning is None

    def test_empty_directory(self, tmp_path: Path):
        (tmp_path / "public").mkdir()
        result = clean_directory(tmp_path / "public")
        assert result.removed == []
        assert result.warning is None

    def test_path_is_a_file_warns(self, tmp_path: Path):
        (tmp_path / "public").write_text("oops")
        result = clean_directory(tmp_path / "public")
        assert result.warning is not None
        assert "Could not clean public directory" in result.warning

    def test_unlink_failure_warns(self, public_dir: Path):
        with patch.object(Path, "unlink", side_effect=PermissionError("read-only")):
            result = clean_directory(public_dir)
        assert result.warning is not None
        assert "read-only" in result.warning
