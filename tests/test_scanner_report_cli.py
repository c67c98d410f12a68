"""文件扫描、报告输出与命令行入口测试。"""

from __future__ import annotations

import csv
from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from image_resize.cli.main import app
from image_resize.core.models import BatchReport, BatchTally, FileOutcome
from image_resize.core.report import write_csv_report
from image_resize.core.scanner import collect_image_files
from image_resize.processing.safe_replace import scratch_file
from image_resize.utils.format import format_size

runner = CliRunner()


def test_collect_image_files_filters_and_sorts(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    for name in ["b.png", "A.JPG", "c.txt", "d.gif", "sub/e.jpeg"]:
        (tmp_path / name).write_bytes(b"x")

    flat = collect_image_files(tmp_path)
    recursive = collect_image_files(tmp_path, recursive=True)
    excluded = collect_image_files(tmp_path, recursive=True, exclude_patterns=["b*"])

    assert [p.name for p in flat] == ["A.JPG", "b.png"]
    assert [p.name for p in recursive] == ["A.JPG", "b.png", "e.jpeg"]
    assert [p.name for p in excluded] == ["A.JPG", "e.jpeg"]
    assert collect_image_files(tmp_path / "b.png") == [(tmp_path / "b.png").resolve()]
    assert collect_image_files(tmp_path / "missing") == []


def test_collect_image_files_ignores_leftover_scratch_files(tmp_path: Path) -> None:
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"x")

    with scratch_file(source) as scratch:
        scratch.write_bytes(b"partial")
        leftover = scratch.with_name(scratch.name.replace(".photo", ".other", 1))
        scratch.rename(leftover)

    assert leftover.exists()
    assert collect_image_files(tmp_path) == [source.resolve()]


def test_format_size() -> None:
    assert format_size(512) == "512 bytes"
    assert format_size(2048) == "2KB"
    assert format_size(3 * 1024 * 1024 + 5) == "3MB"
    assert format_size(-2048) == "-2KB"
    assert format_size(0) == "0 bytes"


def test_tally_freezes_into_consistent_report(tmp_path: Path) -> None:
    tally = BatchTally()
    tally.record(FileOutcome(tmp_path / "a.jpg", "resized", bytes_saved=4096))
    tally.record(FileOutcome(tmp_path / "b.jpg", "skipped-below-threshold"))
    tally.record(FileOutcome(tmp_path / "c.jpg", "error-load", message="bad"))

    report = tally.freeze(canceled=False)

    assert (report.processed, report.resized, report.skipped, report.failed) == (3, 1, 1, 1)
    assert report.bytes_saved == 4096
    assert "4KB" in report.summary()
    assert "1 张图片处理失败" in report.summary()

    canceled = BatchReport(processed=2, resized=2, canceled=True)
    assert "取消" in canceled.summary()


def test_write_csv_report(tmp_path: Path) -> None:
    outcomes = [
        FileOutcome(tmp_path / "a.jpg", "resized", bytes_saved=10, message="节省 10 bytes"),
        FileOutcome(tmp_path / "b.png", "error-load", message="无法加载图像"),
    ]

    report_path = write_csv_report(outcomes, tmp_path / "reports" / "report.csv")

    with report_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["status"] for row in rows] == ["resized", "error-load"]
    assert rows[0]["bytes_saved"] == "10"
    assert rows[1]["bytes_saved"] == ""


def test_cli_batch_resizes_directory(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.effect_noise((400, 200), 64).convert("RGB").save(source / "wide.jpg", quality=95)
    Image.new("RGB", (50, 50), "blue").save(source / "small.png")
    report_path = tmp_path / "report.csv"

    result = runner.invoke(
        app,
        [
            "batch",
            str(source),
            "--trigger-value",
            "300",
            "--target-value",
            "200",
            "--report",
            str(report_path),
        ],
    )

    assert result.exit_code == 0, result.output
    with Image.open(source / "wide.jpg") as img:
        assert img.size == (200, 100)
    assert report_path.exists()


def test_cli_rejects_out_of_range_values(tmp_path: Path) -> None:
    result = runner.invoke(app, ["batch", str(tmp_path), "--target-value", "10000"])

    assert result.exit_code != 0


def test_cli_one_resizes_single_file(tmp_path: Path) -> None:
    source = tmp_path / "portrait.png"
    Image.new("RGB", (100, 400), "green").save(source)
    output = tmp_path / "out.png"

    result = runner.invoke(app, ["one", str(source), "--target", "either", "--value", "200", "-o", str(output)])

    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (50, 200)
    with Image.open(source) as img:
        assert img.size == (100, 400)
