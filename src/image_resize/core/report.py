"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from image_resize.core.models import FileOutcome

HEADER = ["source_path", "status", "bytes_saved", "message"]


def write_csv_report(outcomes: Iterable[FileOutcome], report_path: Path) -> Path:
    """将逐文件处理结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    str(record.source_path),
                    record.status,
                    "" if record.bytes_saved is None else str(record.bytes_saved),
                    record.message or "",
                ]
            )
    return report_path
