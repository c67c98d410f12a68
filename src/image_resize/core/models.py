"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from image_resize.utils.format import format_size

STATUS_RESIZED = "resized"
STATUS_SKIPPED_BELOW_THRESHOLD = "skipped-below-threshold"
STATUS_SKIPPED_NEGATIVE_SAVINGS = "skipped-negative-savings"


@dataclass(frozen=True, slots=True)
class ImageDimensions:
    """图片宽高，横向（含正方形）由 width >= height 判定。"""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"图片尺寸必须为正数: {self.width}x{self.height}")

    @property
    def is_landscape(self) -> bool:
        return self.width >= self.height

    @classmethod
    def of(cls, image: "Image.Image") -> "ImageDimensions":
        width, height = image.size
        return cls(width=width, height=height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于报告/日志）。"""

    source_path: Path
    status: str
    bytes_saved: Optional[int] = None
    message: Optional[str] = None

    @property
    def is_resized(self) -> bool:
        return self.status == STATUS_RESIZED

    @property
    def is_skipped(self) -> bool:
        return self.status.startswith("skipped")

    @property
    def is_failed(self) -> bool:
        return self.status.startswith("error")


@dataclass(slots=True)
class BatchTally:
    """批处理运行期间由工作线程独占的计数器。"""

    resized: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_saved: int = 0
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.resized + self.skipped + self.failed

    def record(self, outcome: FileOutcome) -> None:
        if outcome.is_resized:
            self.resized += 1
            self.bytes_saved += outcome.bytes_saved or 0
        elif outcome.is_skipped:
            self.skipped += 1
        else:
            self.failed += 1
        self.outcomes.append(outcome)

    def freeze(self, canceled: bool) -> "BatchReport":
        return BatchReport(
            processed=self.processed,
            resized=self.resized,
            skipped=self.skipped,
            failed=self.failed,
            canceled=canceled,
            bytes_saved=self.bytes_saved,
            outcomes=tuple(self.outcomes),
        )


@dataclass(frozen=True, slots=True)
class BatchReport:
    """批处理结束后发布的只读汇总。"""

    processed: int = 0
    resized: int = 0
    skipped: int = 0
    failed: int = 0
    canceled: bool = False
    bytes_saved: int = 0
    outcomes: tuple[FileOutcome, ...] = ()

    def summary(self) -> str:
        """生成面向用户的完成提示文本。"""

        if self.canceled:
            return f"缩放任务已被取消。取消前共缩放 {self.resized} 张图片。"

        text = (
            f"共检查 {self.processed} 张图片：缩放 {self.resized} 张，跳过 {self.skipped} 张，"
            f"合计节省 {format_size(self.bytes_saved)}。"
        )
        if self.failed:
            text += f"\n{self.failed} 张图片处理失败（详见日志）。"
        return text
