# core/screen_capture.py

import ctypes
import logging
from typing import Optional, Tuple

import numpy as np
import win32gui
import win32ui
from PIL import Image

logger = logging.getLogger(__name__)

PW_RENDERFULLCONTENT = 3


class GameWindow:
    """
    Finds the game client by title and grabs its content with PrintWindow,
    which also works while the client is covered by other windows.
    """

    def __init__(self, window_title: str):
        self.window_title = window_title
        self.hwnd: Optional[int] = None
        self._set_dpi_aware()

    @staticmethod
    def _set_dpi_aware() -> None:
        # Without this, window rects are reported in scaled coordinates
        try:
            ctypes.windll.shcore.SetProcessDpiAwareness(2)
        except (AttributeError, OSError):
            try:
                ctypes.windll.user32.SetProcessDPIAware()
            except (AttributeError, OSError):
                logger.warning("Could not enable DPI awareness")

    def _resolve(self) -> Optional[int]:
        if self.hwnd is not None and win32gui.IsWindow(self.hwnd):
            return self.hwnd

        hwnd = win32gui.FindWindow(None, self.window_title)
        self.hwnd = hwnd or None
        if self.hwnd is not None:
            logger.info(f"Found '{self.window_title}' window (hwnd={self.hwnd})")
        return self.hwnd

    def client_size(self) -> Optional[Tuple[int, int]]:
        hwnd = self._resolve()
        if hwnd is None or win32gui.IsIconic(hwnd):
            return None

        x1, y1, x2, y2 = win32gui.GetWindowRect(hwnd)
        w, h = x2 - x1, y2 - y1
        if w <= 0 or h <= 0:
            return None
        return w, h

    def grab(self) -> Optional[Image.Image]:
        """Current window content, or None if the window is missing/minimised."""
        size = self.client_size()
        if size is None:
            return None

        w, h = size
        hwnd_dc = win32gui.GetWindowDC(self.hwnd)
        mfc_dc = win32ui.CreateDCFromHandle(hwnd_dc)
        save_dc = mfc_dc.CreateCompatibleDC()
        bitmap = win32ui.CreateBitmap()

        try:
            bitmap.CreateCompatibleBitmap(mfc_dc, w, h)
            save_dc.SelectObject(bitmap)

            if ctypes.windll.user32.PrintWindow(self.hwnd, save_dc.GetSafeHdc(), PW_RENDERFULLCONTENT) != 1:
                raise RuntimeError("PrintWindow failed")

            info = bitmap.GetInfo()
            raw = np.frombuffer(bitmap.GetBitmapBits(True), dtype=np.uint8)
            raw = raw.reshape((info["bmHeight"], info["bmWidth"], 4))
        finally:
            win32gui.DeleteObject(bitmap.GetHandle())
            save_dc.DeleteDC()
            mfc_dc.DeleteDC()
            win32gui.ReleaseDC(self.hwnd, hwnd_dc)

        # BGRA -> RGB
        return Image.fromarray(np.ascontiguousarray(raw[:, :, 2::-1]))
