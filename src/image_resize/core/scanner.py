"""文件扫描与筛选逻辑。"""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, Sequence

from image_resize.core.config import SCRATCH_MARKER

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def _iter_candidate_files(path: Path, recursive: bool) -> Iterator[Path]:
    """遍历路径下的所有文件。"""

    if path.is_file():
        yield path
        return

    if not path.is_dir():
        return

    iterator = path.rglob("*") if recursive else path.glob("*")
    for candidate in iterator:
        if candidate.is_file():
            yield candidate


def _is_scratch_file(name: str) -> bool:
    return name.startswith(".") and SCRATCH_MARKER in name


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(fnmatch(lowered, pattern.lower()) for pattern in patterns)


def collect_image_files(
    root: Path,
    *,
    recursive: bool = False,
    exclude_patterns: Sequence[str] = (),
) -> list[Path]:
    """扫描目录，返回按路径排序的 jpg/jpeg/png 文件列表。"""

    resolved_root = root.resolve()
    collected: list[Path] = []
    for candidate in _iter_candidate_files(resolved_root, recursive):
        if _is_scratch_file(candidate.name):
            continue
        if candidate.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        if exclude_patterns and _matches_any(candidate.name, exclude_patterns):
            continue
        collected.append(candidate)

    collected.sort(key=lambda x: str(x).lower())
    return collected
