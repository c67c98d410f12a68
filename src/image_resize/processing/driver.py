"""批处理驱动：按顺序执行判定、缩放与替换，支持取消与进度汇报。"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from image_resize.core.config import ResizeRequest
from image_resize.core.exceptions import (
    DecodeError,
    EncoderUnavailableError,
    ImageWriteError,
    ReplaceError,
    UnsupportedFormatError,
)
from image_resize.core.models import (
    STATUS_SKIPPED_BELOW_THRESHOLD,
    BatchReport,
    BatchTally,
    FileOutcome,
    ImageDimensions,
)
from image_resize.core.progress import ProgressMonitor
from image_resize.processing.codec import format_for_path, load_image
from image_resize.processing.policy import qualifies, scale_factor
from image_resize.processing.rescaler import resize_image
from image_resize.processing.safe_replace import commit_replacement, scratch_file
from image_resize.utils.format import format_size

LOGGER = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]
CompletionCallback = Callable[[BatchReport], None]
ErrorCallback = Optional[Callable[[BaseException], None]]


def run_batch(request: ResizeRequest, monitor: ProgressMonitor) -> BatchReport:
    """在当前线程中同步执行整批缩放，返回冻结的汇总报告。

    每个文件开始前检查取消信号；已提交的文件不会回滚。单个文件的失败只记录在
    报告中，不会中断整批任务。
    """

    request.validate()

    total = len(request.files)
    tally = BatchTally()
    canceled = False
    LOGGER.info("开始批量缩放，共 %d 个文件", total)

    try:
        for index, path in enumerate(request.files, start=1):
            if monitor.is_canceled():
                canceled = True
                LOGGER.info("任务已取消，剩余 %d 个文件未处理", total - index + 1)
                break

            monitor.set_note(f"正在缩放 {path.name}")
            outcome = process_file(path, request)
            tally.record(outcome)
            monitor.set_progress(index)
    finally:
        monitor.close()

    report = tally.freeze(canceled)
    LOGGER.info(
        "统计: 检查=%s, 缩放=%s, 跳过=%s, 失败=%s, 节省=%s, 取消=%s",
        report.processed,
        report.resized,
        report.skipped,
        report.failed,
        format_size(report.bytes_saved),
        report.canceled,
    )
    return report


def process_file(path: Path, request: ResizeRequest) -> FileOutcome:
    """处理单个文件，所有异常都转换为 FileOutcome。"""

    try:
        format_for_path(path)
    except UnsupportedFormatError as exc:
        LOGGER.error("处理失败: %s -> %s", path, exc)
        return FileOutcome(source_path=path, status="error-format", message=str(exc))

    try:
        image = load_image(path)
    except DecodeError as exc:
        LOGGER.error("处理失败: %s -> %s", path, exc, exc_info=exc)
        return FileOutcome(source_path=path, status="error-load", message=str(exc))

    started = time.perf_counter()
    try:
        dims = ImageDimensions.of(image)
        if not qualifies(dims, request.trigger_kind, request.trigger_value):
            LOGGER.info("尺寸未超过阈值，跳过: %s (%s)", path, dims)
            return FileOutcome(
                source_path=path,
                status=STATUS_SKIPPED_BELOW_THRESHOLD,
                message=f"{dims} 未超过阈值",
            )

        factor = scale_factor(dims, request.target_kind, request.target_value)
        with scratch_file(path) as scratch:
            savings = resize_image(image, path, scratch, factor, jpeg_quality=request.jpeg_quality)
            outcome = commit_replacement(path, scratch, savings, request.force)
    except (EncoderUnavailableError, ImageWriteError) as exc:
        LOGGER.error("处理失败: %s -> %s", path, exc, exc_info=exc)
        return FileOutcome(source_path=path, status="error-write", message=str(exc))
    except ReplaceError as exc:
        LOGGER.error("处理失败: %s -> %s", path, exc, exc_info=exc)
        return FileOutcome(source_path=path, status="error-replace", message=str(exc))
    except OSError as exc:
        LOGGER.error("处理失败: %s -> %s", path, exc, exc_info=exc)
        return FileOutcome(source_path=path, status="error-io", message=str(exc))
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("处理时发生未预期异常: %s", path)
        return FileOutcome(source_path=path, status="error-unexpected", message=str(exc))
    finally:
        image.close()

    if outcome.is_resized:
        LOGGER.info(
            "完成缩放: %s，节省 %s，耗时 %.2fs",
            path,
            format_size(savings),
            time.perf_counter() - started,
        )
    return outcome


def start_batch(
    request: ResizeRequest,
    monitor: ProgressMonitor,
    on_complete: CompletionCallback,
    *,
    dispatch: Optional[Dispatcher] = None,
    on_error: ErrorCallback = None,
) -> threading.Thread:
    """在单独的工作线程中执行批处理，调用方线程不阻塞。

    参数校验在当前线程同步完成，不合法时直接抛出 ValidationError。
    ``on_complete`` 恰好调用一次，并通过 ``dispatch`` 投递到调用方指定的执行
    上下文（例如 Tk 的 ``after``）；未提供时在工作线程中直接调用。
    """

    request.validate()
    deliver = dispatch or _call_directly

    def _worker() -> None:
        try:
            report = run_batch(request, monitor)
        except Exception as exc:
            LOGGER.error("批处理异常终止: %s", exc, exc_info=exc)
            if on_error is None:
                raise
            deliver(lambda: on_error(exc))
            return
        deliver(lambda: on_complete(report))

    thread = threading.Thread(target=_worker, name="image-resize-worker", daemon=True)
    thread.start()
    return thread


def _call_directly(callback: Callable[[], None]) -> None:
    callback()
