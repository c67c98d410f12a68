"""临时文件与替换流程的单元测试。"""

from __future__ import annotations

import errno
import os
import stat
from pathlib import Path

import pytest

from image_resize.core.exceptions import ReplaceError
from image_resize.core.models import STATUS_RESIZED, STATUS_SKIPPED_NEGATIVE_SAVINGS
from image_resize.processing import safe_replace
from image_resize.processing.safe_replace import commit_replacement, scratch_file


def _prepare(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "image.png"
    source.write_bytes(b"original-bytes")
    scratch = tmp_path / ".image.tmp.png"
    scratch.write_bytes(b"replacement bytes that are longer")
    return source, scratch


def test_negative_savings_keeps_source_untouched(tmp_path: Path) -> None:
    source, scratch = _prepare(tmp_path)

    outcome = commit_replacement(source, scratch, savings=-19, force=False)

    assert outcome.status == STATUS_SKIPPED_NEGATIVE_SAVINGS
    assert outcome.is_skipped
    assert source.read_bytes() == b"original-bytes"
    assert not scratch.exists()


@pytest.mark.parametrize(("savings", "force"), [(-19, True), (0, False), (120, False), (120, True)])
def test_commit_replaces_source(tmp_path: Path, savings: int, force: bool) -> None:
    source, scratch = _prepare(tmp_path)

    outcome = commit_replacement(source, scratch, savings=savings, force=force)

    assert outcome.status == STATUS_RESIZED
    assert outcome.bytes_saved == savings
    assert source.read_bytes() == b"replacement bytes that are longer"
    assert not scratch.exists()


@pytest.mark.skipif(os.name == "nt", reason="POSIX 权限位")
@pytest.mark.parametrize("mode", [0o644, 0o664])
def test_commit_keeps_source_permissions(tmp_path: Path, mode: int) -> None:
    source = tmp_path / "shared.png"
    source.write_bytes(b"old")
    source.chmod(mode)

    with scratch_file(source) as scratch:
        scratch.write_bytes(b"new")
        commit_replacement(source, scratch, savings=0, force=False)

    assert stat.S_IMODE(source.stat().st_mode) == mode
    assert source.read_bytes() == b"new"


@pytest.mark.skipif(os.name == "nt", reason="POSIX 权限位")
def test_cross_device_replace_keeps_source_permissions(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source, scratch = _prepare(tmp_path)
    source.chmod(0o644)
    scratch.chmod(0o600)

    def fake_replace(src, dst):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(safe_replace.os, "replace", fake_replace)

    commit_replacement(source, scratch, savings=5, force=False)

    assert stat.S_IMODE(source.stat().st_mode) == 0o644


def test_scratch_file_lives_beside_source_and_is_removed(tmp_path: Path) -> None:
    source = tmp_path / "photo.JPG"
    source.write_bytes(b"data")

    with pytest.raises(RuntimeError):
        with scratch_file(source) as scratch:
            assert scratch.parent == tmp_path
            assert scratch.suffix == ".JPG"
            scratch.write_bytes(b"partial")
            raise RuntimeError("boom")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["photo.JPG"]


def test_scratch_file_moved_into_place_leaves_no_leftovers(tmp_path: Path) -> None:
    source = tmp_path / "photo.png"
    source.write_bytes(b"old")

    with scratch_file(source) as scratch:
        scratch.write_bytes(b"new")
        commit_replacement(source, scratch, savings=0, force=False)

    assert [p.name for p in tmp_path.iterdir()] == ["photo.png"]
    assert source.read_bytes() == b"new"


def test_cross_device_replace_falls_back_to_delete_then_move(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source, scratch = _prepare(tmp_path)

    def fake_replace(src, dst):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(safe_replace.os, "replace", fake_replace)

    commit_replacement(source, scratch, savings=5, force=False)

    assert source.read_bytes() == b"replacement bytes that are longer"
    assert not scratch.exists()


def test_replace_failure_raises_and_keeps_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source, scratch = _prepare(tmp_path)

    def fake_replace(src, dst):
        raise PermissionError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(safe_replace.os, "replace", fake_replace)

    with pytest.raises(ReplaceError):
        commit_replacement(source, scratch, savings=5, force=False)

    assert source.read_bytes() == b"original-bytes"
