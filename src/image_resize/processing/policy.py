"""缩放判定与缩放系数计算（纯函数）。"""

from __future__ import annotations

from image_resize.core.config import DimensionSpec
from image_resize.core.exceptions import ValidationError
from image_resize.core.models import ImageDimensions


def qualifies(dims: ImageDimensions, trigger_kind: DimensionSpec, trigger_value: int) -> bool:
    """图片在触发维度上严格大于阈值时才需要缩放。"""

    if trigger_kind == DimensionSpec.WIDTH:
        return dims.width > trigger_value
    if trigger_kind == DimensionSpec.HEIGHT:
        return dims.height > trigger_value
    return dims.width > trigger_value or dims.height > trigger_value


def scale_factor(dims: ImageDimensions, target_kind: DimensionSpec, target_value: int) -> float:
    """按目标规则计算统一缩放系数；小于 1 缩小，大于 1 放大。

    EITHER 表示“最长边为 target_value”：横向或正方形按宽计算，竖向按高计算。
    """

    if target_value <= 0:
        raise ValidationError(f"目标尺寸必须大于 0: {target_value}")

    if target_kind == DimensionSpec.WIDTH:
        return target_value / dims.width
    if target_kind == DimensionSpec.HEIGHT:
        return target_value / dims.height
    if dims.is_landscape:
        return target_value / dims.width
    return target_value / dims.height
