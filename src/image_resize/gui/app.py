"""Tkinter 图形界面实现。"""

from __future__ import annotations

import logging
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Optional

from image_resize.core.config import MAX_DIMENSION, DimensionSpec, ResizeRequest
from image_resize.core.exceptions import ValidationError
from image_resize.core.models import BatchReport
from image_resize.core.progress import CallbackProgressMonitor, ProgressUpdate
from image_resize.core.scanner import collect_image_files
from image_resize.processing.driver import start_batch
from image_resize.utils.logging import setup_logging

TRIGGER_LABELS = {
    "宽度超过…": DimensionSpec.WIDTH,
    "高度超过…": DimensionSpec.HEIGHT,
    "宽或高任一超过…": DimensionSpec.EITHER,
}

TARGET_LABELS = {
    "目标宽度为…": DimensionSpec.WIDTH,
    "目标高度为…": DimensionSpec.HEIGHT,
    "最长边为…": DimensionSpec.EITHER,
}


class TextWidgetHandler(logging.Handler):
    """Logging handler that writes records into a Tk Text widget."""

    def __init__(self, widget: tk.Text) -> None:
        super().__init__()
        self._widget = widget

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401 - standard logging handler signature
        message = self.format(record)
        # Schedule UI update on main thread
        self._widget.after(0, self._write, message)

    def _write(self, message: str) -> None:
        if not self._widget.winfo_exists():
            return
        self._widget.configure(state=tk.NORMAL)
        self._widget.insert(tk.END, message + "\n")
        self._widget.configure(state=tk.DISABLED)
        self._widget.see(tk.END)


class ImageResizeApp(tk.Tk):
    """Tkinter 主窗口。"""

    def __init__(self) -> None:
        super().__init__()
        self.title("Image Resize Tool")
        self.geometry("720x520")
        setup_logging()

        self._worker_thread: Optional[threading.Thread] = None
        self._monitor: Optional[CallbackProgressMonitor] = None

        self._build_ui()

        self._log_handler = TextWidgetHandler(self.log_text)
        self._log_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        self._logger = logging.getLogger("image_resize")
        self._logger.addHandler(self._log_handler)
        self.protocol("WM_DELETE_WINDOW", self._handle_close)

    # ---------------------- UI 构建 ---------------------- #

    def _build_ui(self) -> None:
        container = ttk.Frame(self, padding=12)
        container.pack(fill=tk.BOTH, expand=True)

        self._build_source_section(container)
        self._build_options_section(container)
        self._build_progress_section(container)

    def _build_source_section(self, parent: tk.Widget) -> None:
        frame = ttk.LabelFrame(parent, text="图片目录", padding=8)
        frame.pack(fill=tk.X)

        self.directory_var = tk.StringVar(value=str(Path.home()))
        ttk.Entry(frame, textvariable=self.directory_var, width=60).grid(row=0, column=0, sticky=tk.EW, padx=4)
        self.select_button = ttk.Button(frame, text="选择", command=self._select_directory)
        self.select_button.grid(row=0, column=1, padx=4)

        self.recursive_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(frame, text="递归扫描子目录", variable=self.recursive_var).grid(
            row=1, column=0, sticky=tk.W, pady=4
        )
        ttk.Label(frame, text="仅处理 jpg / jpeg / png 图片，原图将被覆盖。").grid(row=2, column=0, sticky=tk.W)
        frame.columnconfigure(0, weight=1)

    def _build_options_section(self, parent: tk.Widget) -> None:
        frame = ttk.LabelFrame(parent, text="等比缩放", padding=8)
        frame.pack(fill=tk.X, pady=8)

        ttk.Label(frame, text="缩放条件:").grid(row=0, column=0, sticky=tk.W)
        self.trigger_var = tk.StringVar(value="宽或高任一超过…")
        ttk.Combobox(
            frame, textvariable=self.trigger_var, values=tuple(TRIGGER_LABELS), state="readonly", width=18
        ).grid(row=0, column=1, sticky=tk.W)
        self.trigger_value_var = tk.IntVar(value=1920)
        ttk.Spinbox(frame, from_=1, to=MAX_DIMENSION, textvariable=self.trigger_value_var, width=8).grid(
            row=0, column=2, sticky=tk.W, padx=4
        )

        ttk.Label(frame, text="缩放目标:").grid(row=1, column=0, sticky=tk.W, pady=4)
        self.target_var = tk.StringVar(value="最长边为…")
        ttk.Combobox(
            frame, textvariable=self.target_var, values=tuple(TARGET_LABELS), state="readonly", width=18
        ).grid(row=1, column=1, sticky=tk.W)
        self.target_value_var = tk.IntVar(value=1920)
        ttk.Spinbox(frame, from_=1, to=MAX_DIMENSION, textvariable=self.target_value_var, width=8).grid(
            row=1, column=2, sticky=tk.W, padx=4
        )

        self.force_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(frame, text="即使文件变大也替换", variable=self.force_var).grid(
            row=2, column=0, columnspan=3, sticky=tk.W
        )

    def _build_progress_section(self, parent: tk.Widget) -> None:
        frame = ttk.LabelFrame(parent, text="执行", padding=8)
        frame.pack(fill=tk.BOTH, expand=True)

        button_frame = ttk.Frame(frame)
        button_frame.pack(fill=tk.X)
        self.run_button = ttk.Button(button_frame, text="开始缩放", command=self._start_processing)
        self.run_button.pack(side=tk.LEFT)
        self.cancel_button = ttk.Button(button_frame, text="取消", command=self._cancel_processing, state=tk.DISABLED)
        self.cancel_button.pack(side=tk.LEFT, padx=(8, 0))

        self.status_var = tk.StringVar(value="待命")
        ttk.Label(button_frame, textvariable=self.status_var).pack(side=tk.LEFT, padx=(12, 0))

        self.progress_var = tk.DoubleVar(value=0.0)
        self.progress_bar = ttk.Progressbar(frame, variable=self.progress_var, maximum=100)
        self.progress_bar.pack(fill=tk.X, padx=4, pady=4)

        self.log_text = tk.Text(frame, height=12, state=tk.DISABLED)
        self.log_text.pack(fill=tk.BOTH, expand=True, padx=4)

    # ---------------------- 事件处理 ---------------------- #

    def _select_directory(self) -> None:
        path = filedialog.askdirectory(title="选择图片目录", initialdir=self.directory_var.get())
        if path:
            self.directory_var.set(str(Path(path).expanduser().resolve()))

    def _start_processing(self) -> None:
        if self._worker_thread and self._worker_thread.is_alive():
            messagebox.showinfo("提示", "任务正在执行中，请稍候。")
            return

        directory = Path(self.directory_var.get().strip()).expanduser()
        if not directory.is_dir():
            messagebox.showerror("路径错误", "所选路径不存在或不是文件夹。")
            return

        files = collect_image_files(directory, recursive=self.recursive_var.get())
        if not files:
            messagebox.showinfo("提示", "目录中没有 jpg / png 图片。")
            return

        try:
            request = ResizeRequest.build(
                files,
                trigger_kind=TRIGGER_LABELS[self.trigger_var.get()],
                trigger_value=self.trigger_value_var.get(),
                target_kind=TARGET_LABELS[self.target_var.get()],
                target_value=self.target_value_var.get(),
                force=self.force_var.get(),
            )
        except (ValidationError, tk.TclError) as exc:
            messagebox.showerror("参数错误", f"图片尺寸必须在 1 到 {MAX_DIMENSION} 之间。\n{exc}")
            return

        scope = "（含子目录）" if self.recursive_var.get() else ""
        if not messagebox.askyesno("确认", f"将对目录{scope}中的 {len(files)} 张图片执行缩放，原图会被覆盖。继续吗？"):
            return

        self._monitor = CallbackProgressMonitor(
            len(files), lambda update: self.after(0, self._handle_progress, update)
        )
        self._set_running(True)
        self._worker_thread = start_batch(
            request,
            self._monitor,
            self._handle_done,
            dispatch=lambda callback: self.after(0, callback),
            on_error=self._handle_error,
        )

    def _cancel_processing(self) -> None:
        if self._monitor is not None:
            self._monitor.cancel()
            self.status_var.set("正在取消……")

    def _handle_progress(self, update: ProgressUpdate) -> None:
        if update.total:
            self.progress_var.set((update.completed / update.total) * 100)
        if update.message:
            self.status_var.set(update.message)

    def _handle_done(self, report: BatchReport) -> None:
        self._set_running(False)
        self.status_var.set("已取消" if report.canceled else "完成")
        title = "缩放已取消" if report.canceled else "缩放完成"
        messagebox.showinfo(title, report.summary(), parent=self)

    def _handle_error(self, exc: BaseException) -> None:
        self._set_running(False)
        self.status_var.set("失败")
        messagebox.showerror("错误", f"任务执行失败: {exc}", parent=self)

    def _set_running(self, running: bool) -> None:
        self.run_button.configure(state=tk.DISABLED if running else tk.NORMAL)
        self.select_button.configure(state=tk.DISABLED if running else tk.NORMAL)
        self.cancel_button.configure(state=tk.NORMAL if running else tk.DISABLED)
        if running:
            self.progress_var.set(0)
            self.status_var.set("处理中...")
        else:
            self._worker_thread = None
            self._monitor = None

    def _handle_close(self) -> None:
        if self._worker_thread and self._worker_thread.is_alive():
            messagebox.showwarning("提示", "任务执行中，请先取消或等待完成后再关闭。", parent=self)
            return
        self._logger.removeHandler(self._log_handler)
        self._log_handler.close()
        self.destroy()


def run_gui() -> None:
    """启动 GUI 应用。"""

    app = ImageResizeApp()
    app.mainloop()


if __name__ == "__main__":
    run_gui()
