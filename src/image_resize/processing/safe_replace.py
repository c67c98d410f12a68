"""临时文件写入与替换原文件的流程。"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from image_resize.core.config import SCRATCH_MARKER
from image_resize.core.exceptions import ReplaceError
from image_resize.core.models import (
    STATUS_RESIZED,
    STATUS_SKIPPED_NEGATIVE_SAVINGS,
    FileOutcome,
)
from image_resize.utils.format import format_size

LOGGER = logging.getLogger(__name__)


@contextmanager
def scratch_file(source: Path) -> Iterator[Path]:
    """在源文件所在目录创建同后缀的临时文件，退出时若仍存在则删除。

    与源文件位于同一文件系统，提交时可以使用原子重命名。
    """

    fd, name = tempfile.mkstemp(prefix=f".{source.stem}{SCRATCH_MARKER}", suffix=source.suffix, dir=source.parent)
    os.close(fd)
    scratch = Path(name)
    try:
        yield scratch
    finally:
        try:
            scratch.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("删除临时文件失败: %s -> %s", scratch, exc)


def commit_replacement(source: Path, scratch: Path, savings: int, force: bool) -> FileOutcome:
    """节省量非负或强制时用 scratch 替换 source，否则丢弃 scratch 并保留原文件。"""

    if savings < 0 and not force:
        scratch.unlink(missing_ok=True)
        LOGGER.info("文件变大 (%s)，跳过替换: %s", format_size(savings), source)
        return FileOutcome(
            source_path=source,
            status=STATUS_SKIPPED_NEGATIVE_SAVINGS,
            bytes_saved=savings,
            message="缩放后文件变大",
        )

    replace_file(scratch, source)
    return FileOutcome(
        source_path=source,
        status=STATUS_RESIZED,
        bytes_saved=savings,
        message=f"节省 {format_size(savings)}",
    )


def replace_file(scratch: Path, target: Path) -> None:
    """用 scratch 覆盖 target。

    优先使用 os.replace 原子替换；跨设备时退回“先删除原文件再移动”，
    两步之间失败会导致原文件丢失。替换前将 target 的权限位复制到 scratch。
    """

    try:
        if target.exists():
            shutil.copymode(target, scratch)
    except OSError as exc:
        raise ReplaceError(f"无法复制文件权限: {target}") from exc

    try:
        os.replace(scratch, target)
        return
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise ReplaceError(f"替换文件失败: {target}") from exc

    LOGGER.debug("跨设备替换，改为删除后移动: %s", target)
    try:
        target.unlink(missing_ok=True)
        shutil.move(str(scratch), str(target))
    except OSError as exc:
        raise ReplaceError(f"替换文件失败: {target}") from exc
