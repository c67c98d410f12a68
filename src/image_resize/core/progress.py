"""进度与取消信号的协作接口。"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息。"""

    total: int
    completed: int
    message: Optional[str] = None
    status: str = "running"


class ProgressMonitor(Protocol):
    """批处理驱动在固定节点调用的进度/取消接口，不假设存在可视界面。"""

    def set_note(self, text: str) -> None: ...

    def set_progress(self, value: int) -> None: ...

    def is_canceled(self) -> bool: ...

    def close(self) -> None: ...


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


class CallbackProgressMonitor:
    """基于 threading.Event 的监视器，将进度转发为 ProgressUpdate 回调。

    回调在工作线程中执行；需要切回界面线程的调用方应在回调内自行调度。
    """

    def __init__(self, total: int, callback: ProgressCallback = None) -> None:
        self.total = total
        self._callback = callback
        self._cancel_event = threading.Event()
        self._completed = 0
        self._note: Optional[str] = None
        self.closed = False

    @property
    def note(self) -> Optional[str]:
        return self._note

    @property
    def completed(self) -> int:
        return self._completed

    def cancel(self) -> None:
        """请求取消；在当前文件处理完成后生效。"""

        self._cancel_event.set()

    def set_note(self, text: str) -> None:
        self._note = text
        self._emit(text)

    def set_progress(self, value: int) -> None:
        self._completed = value
        self._emit(None)

    def is_canceled(self) -> bool:
        return self._cancel_event.is_set()

    def close(self) -> None:
        self.closed = True
        status = "canceled" if self.is_canceled() else "finished"
        self._emit(None, status=status)

    def _emit(self, message: Optional[str], status: str = "running") -> None:
        if not self._callback:
            return
        self._callback(
            ProgressUpdate(total=self.total, completed=self._completed, message=message, status=status)
        )
