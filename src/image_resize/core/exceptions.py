"""项目内使用的自定义异常定义。"""


class ImageResizeError(Exception):
    """基础异常类型。"""


class ValidationError(ImageResizeError):
    """缩放参数不合法时抛出，整批任务拒绝执行。"""


class DecodeError(ImageResizeError):
    """图片解码失败。"""


class UnsupportedFormatError(ImageResizeError):
    """文件后缀不属于支持的编码格式。"""


class EncoderUnavailableError(ImageResizeError):
    """当前环境缺少所需的编码器。"""


class ImageWriteError(ImageResizeError):
    """输出写入失败。"""


class ReplaceError(ImageResizeError):
    """临时文件替换原文件失败。"""
