"""人类可读的格式化工具。"""

from __future__ import annotations


def format_size(number: int) -> str:
    """将字节差值格式化为 bytes/KB/MB，保留符号，按整数截断。"""

    magnitude = abs(number)
    if magnitude < 1024:
        text = f"{magnitude} bytes"
    elif magnitude < 1024 * 1024:
        text = f"{magnitude // 1024}KB"
    else:
        text = f"{magnitude // 1024 // 1024}MB"
    if number < 0:
        text = "-" + text
    return text
