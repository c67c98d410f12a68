"""按统一系数重采样图片，并统计编码后的字节差。"""

from __future__ import annotations

import logging
import math
from pathlib import Path

from PIL import Image

from image_resize.core.config import DEFAULT_JPEG_QUALITY
from image_resize.core.models import ImageDimensions
from image_resize.processing.codec import load_image, save_image

_RESAMPLING = getattr(Image, "Resampling", Image)

LOGGER = logging.getLogger(__name__)


def scaled_size(dims: ImageDimensions, factor: float) -> tuple[int, int]:
    """两个轴使用同一系数，各自四舍五入（0.5 向上进位），最小为 1 像素。"""

    if factor <= 0:
        raise ValueError(f"缩放系数必须大于 0: {factor}")
    new_width = max(1, math.floor(dims.width * factor + 0.5))
    new_height = max(1, math.floor(dims.height * factor + 0.5))
    return new_width, new_height


def rescale(image: Image.Image, factor: float) -> Image.Image:
    """使用双三次插值生成新图像；RGBA 图像由 Pillow 以预乘 alpha 方式重采样。"""

    size = scaled_size(ImageDimensions.of(image), factor)
    return image.resize(size, _RESAMPLING.BICUBIC)


def resize_image(
    image: Image.Image,
    source: Path,
    destination: Path,
    factor: float,
    *,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> int:
    """缩放已加载的图片并写入 destination，返回 source 与 destination 的字节差。

    source 的大小在写入之前测量，因此 destination 可以与 source 相同（原地覆盖）。
    返回正数表示新文件更小。
    """

    LOGGER.info("缩放 %s，系数 %.2f", source, factor)
    original_bytes = source.stat().st_size
    resized = rescale(image, factor)
    try:
        save_image(resized, destination, jpeg_quality=jpeg_quality)
    finally:
        resized.close()
    return original_bytes - destination.stat().st_size


def resize_file(
    source: Path,
    destination: Path,
    factor: float,
    *,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
) -> int:
    """单文件同步入口：加载 source，缩放后写入 destination，返回节省的字节数。"""

    image = load_image(source)
    try:
        return resize_image(image, source, destination, factor, jpeg_quality=jpeg_quality)
    finally:
        image.close()
