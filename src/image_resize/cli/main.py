"""命令行入口。"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from image_resize.core.config import (
    DEFAULT_JPEG_QUALITY,
    MAX_DIMENSION,
    DimensionSpec,
    ResizeRequest,
    validate_dimension,
)
from image_resize.core.exceptions import ImageResizeError, ValidationError
from image_resize.core.models import BatchReport, ImageDimensions
from image_resize.core.progress import CallbackProgressMonitor, ProgressUpdate
from image_resize.core.report import write_csv_report
from image_resize.core.scanner import collect_image_files
from image_resize.processing.codec import format_for_path, load_image
from image_resize.processing.driver import start_batch
from image_resize.processing.policy import scale_factor
from image_resize.processing.rescaler import resize_file
from image_resize.utils.format import format_size
from image_resize.utils.logging import setup_logging

app = typer.Typer(help="批量按需缩放 jpg/png 图片，仅在文件变小时替换原图。")

_DIMENSION_HELP = "width / height / either"


def _check_dimension(value: int) -> int:
    try:
        return validate_dimension(value)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("缩放图片", total=update.total)
        progress.update(task_id, completed=update.completed)
        if update.message:
            progress.update(task_id, description=update.message)

    return callback


@app.command("batch")
def batch_cli(  # noqa: PLR0913
    source: Path = typer.Argument(..., help="图片目录或单个图片文件"),
    recursive: bool = typer.Option(False, "--recursive/--no-recursive", help="是否递归扫描子目录"),
    trigger: DimensionSpec = typer.Option(DimensionSpec.EITHER, "--trigger", help=f"触发维度 {_DIMENSION_HELP}"),
    trigger_value: int = typer.Option(
        1920, "--trigger-value", callback=_check_dimension, help=f"触发阈值 (1-{MAX_DIMENSION})"
    ),
    target: DimensionSpec = typer.Option(DimensionSpec.EITHER, "--target", help=f"目标维度 {_DIMENSION_HELP}"),
    target_value: int = typer.Option(
        1920, "--target-value", callback=_check_dimension, help=f"目标尺寸 (1-{MAX_DIMENSION})"
    ),
    force: bool = typer.Option(False, "--force", help="即使文件变大也替换原图"),
    jpeg_quality: int = typer.Option(DEFAULT_JPEG_QUALITY, "--jpeg-quality", min=1, max=100, help="JPEG 编码质量"),
    exclude: List[str] = typer.Option([], "--exclude", help="排除的文件名模式，可指定多个"),
    report: Optional[Path] = typer.Option(None, "--report", help="逐文件结果 CSV 输出路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """扫描目录并批量缩放，按 Ctrl-C 在当前文件完成后取消。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    files = collect_image_files(source.expanduser(), recursive=recursive, exclude_patterns=exclude)
    if not files:
        typer.echo("没有需要处理的图片。")
        raise typer.Exit()

    request = ResizeRequest.build(
        files,
        trigger_kind=trigger,
        trigger_value=trigger_value,
        target_kind=target,
        target_value=target_value,
        force=force,
        jpeg_quality=jpeg_quality,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    results: list[BatchReport] = []
    finished = threading.Event()

    def on_complete(batch_report: BatchReport) -> None:
        results.append(batch_report)
        finished.set()

    with progress:
        monitor = CallbackProgressMonitor(len(files), _build_progress_callback(progress))
        worker = start_batch(request, monitor, on_complete)
        while not finished.is_set():
            try:
                finished.wait(0.2)
            except KeyboardInterrupt:
                progress.log("收到中断信号，当前文件完成后停止……")
                monitor.cancel()
            if not worker.is_alive() and not finished.is_set():
                raise typer.Exit(code=1)

    result = results[0]
    typer.echo(result.summary())
    if report is not None:
        written = write_csv_report(result.outcomes, report.expanduser())
        typer.echo(f"报告文件：{written}")
    if result.failed:
        raise typer.Exit(code=1)


@app.command("one")
def one_cli(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="需要缩放的图片"),
    target: DimensionSpec = typer.Option(DimensionSpec.EITHER, "--target", help=f"目标维度 {_DIMENSION_HELP}"),
    value: int = typer.Option(..., "--value", callback=_check_dimension, help=f"目标尺寸 (1-{MAX_DIMENSION})"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="输出文件，默认覆盖原图"),
    jpeg_quality: int = typer.Option(DEFAULT_JPEG_QUALITY, "--jpeg-quality", min=1, max=100, help="JPEG 编码质量"),
) -> None:
    """缩放单张图片；不比较文件大小，直接写入。"""

    setup_logging()
    destination = output.expanduser() if output else source

    try:
        format_for_path(source)
        with load_image(source) as image:
            dims = ImageDimensions.of(image)
        factor = scale_factor(dims, target, value)
        saved = resize_file(source, destination, factor, jpeg_quality=jpeg_quality)
    except (ImageResizeError, OSError) as exc:
        typer.echo(f"缩放失败：{exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"已写入 {destination}（原尺寸 {dims}，系数 {factor:.2f}，节省 {format_size(saved)}）")


if __name__ == "__main__":
    app()
