"""图片编解码：按文件后缀选择 PNG 或 JPEG 编码器。"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError, features

from image_resize.core.config import DEFAULT_JPEG_QUALITY
from image_resize.core.exceptions import (
    DecodeError,
    EncoderUnavailableError,
    ImageWriteError,
    UnsupportedFormatError,
)

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}

# Pillow 内部编码器对应的 codec 名称。
_FORMAT_CODECS = {
    "JPEG": "jpg",
    "PNG": "zlib",
}


def format_for_path(path: Path) -> str:
    """根据后缀（不区分大小写）返回 Pillow 格式名。"""

    suffix = path.suffix.lower()
    image_format = SUPPORTED_FORMATS.get(suffix)
    if not image_format:
        raise UnsupportedFormatError(f"不支持的图片格式: {path.name}，仅支持 png 或 jpeg")
    return image_format


def ensure_encoder_available(image_format: str) -> None:
    if not features.check_codec(_FORMAT_CODECS[image_format]):
        raise EncoderUnavailableError(f"当前环境缺少 {image_format} 编码器")


def load_image(path: Path) -> Image.Image:
    """加载单张图片并执行 EXIF 旋转与模式归一化。

    返回值为新的 Image 对象，调用者负责关闭。带透明通道的图片保持 RGBA，
    其余统一为 RGB。
    """

    try:
        with Image.open(path) as img:
            img.load()

            # EXIF Orientation 校正
            img = ImageOps.exif_transpose(img)

            if img.mode not in {"RGB", "RGBA"}:
                img = _normalize_mode(img)

            return img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        LOGGER.debug("无法识别图像文件 %s: %s", path, exc)
        raise DecodeError(f"无法加载图像: {path}") from exc


def save_image(image: Image.Image, destination: Path, *, jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> None:
    """将 PIL Image 保存到磁盘，目标已存在时直接覆盖。"""

    image_format = format_for_path(destination)
    ensure_encoder_available(image_format)

    save_params: dict = {"optimize": True}
    image_to_save = image
    if image_format == "JPEG":
        save_params.update(quality=jpeg_quality)
        if image.mode != "RGB":
            image_to_save = _flatten_to_rgb(image)
    elif image.mode not in {"RGB", "RGBA"}:
        image_to_save = image.convert("RGB")

    try:
        image_to_save.save(destination, format=image_format, **save_params)
    except OSError as exc:
        raise ImageWriteError(f"写入文件失败: {destination}") from exc
    finally:
        if image_to_save is not image:
            image_to_save.close()


def _normalize_mode(img: Image.Image) -> Image.Image:
    """将调色板、灰度、CMYK 等模式转换为 RGB 或 RGBA。"""

    if img.mode in {"LA", "La", "RGBa", "PA"}:
        return img.convert("RGBA")

    if img.mode == "P" and "transparency" in img.info:
        return img.convert("RGBA")

    return img.convert("RGB")


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    """JPEG 不支持透明通道，通过白色背景混合生成 RGB。"""

    if img.mode in {"RGBA", "LA"}:
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img.convert("RGBA"), mask=img.split()[-1])
        return background

    return img.convert("RGB")
