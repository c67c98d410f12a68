"""缩放任务的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence, Tuple

from image_resize.core.exceptions import ValidationError

MAX_DIMENSION = 9999
DEFAULT_JPEG_QUALITY = 95

# 批处理临时文件名中的标记，扫描时据此排除残留的临时文件。
SCRATCH_MARKER = ".resize-"


class DimensionSpec(str, Enum):
    """规则作用的维度：宽、高，或由横竖方向决定。"""

    WIDTH = "width"
    HEIGHT = "height"
    EITHER = "either"


@dataclass(frozen=True, slots=True)
class ResizeRequest:
    """单次批量缩放任务的参数集合，运行期间不可变。"""

    files: Tuple[Path, ...]
    trigger_kind: DimensionSpec = DimensionSpec.EITHER
    trigger_value: int = 1920
    target_kind: DimensionSpec = DimensionSpec.EITHER
    target_value: int = 1920
    force: bool = False
    jpeg_quality: int = DEFAULT_JPEG_QUALITY

    @classmethod
    def build(cls, files: Sequence[Path], **options) -> "ResizeRequest":
        """从任意文件序列构造请求，并立即校验。"""

        request = cls(files=tuple(Path(f) for f in files), **options)
        request.validate()
        return request

    def validate(self) -> None:
        """校验数值范围，不合法时抛出 ValidationError。"""

        validate_dimension(self.trigger_value, "trigger_value")
        validate_dimension(self.target_value, "target_value")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValidationError(f"jpeg_quality 必须在 1 到 100 之间: {self.jpeg_quality}")


def validate_dimension(value: int, name: str = "value") -> int:
    """确保尺寸值位于 [1, MAX_DIMENSION] 区间。"""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} 必须为整数: {value!r}")
    if value < 1 or value > MAX_DIMENSION:
        raise ValidationError(f"图片尺寸必须在 1 到 {MAX_DIMENSION} 之间: {name}={value}")
    return value
