"""Screenshot capture used as the trigger side effect."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

import mss
from PIL import Image

from errors import CaptureError

logger = logging.getLogger(__name__)

Region = Dict[str, int]
WindowLocator = Callable[[], Optional[Region]]


def active_window_region() -> Optional[Region]:
    """
    Screen rectangle of the focused window, or None when it cannot be
    determined (no window manager support, minimised window, etc.).
    """
    try:
        import pygetwindow as gw
    except (ImportError, NotImplementedError):
        # pygetwindow is only installed, and only works, on Windows.
        return None

    try:
        window = gw.getActiveWindow()
        if not window:
            return None
        region = {
            "left": int(window.left),
            "top": int(window.top),
            "width": int(window.width),
            "height": int(window.height),
        }
    except Exception as e:
        logger.warning("Could not get active window geometry: %s", e)
        return None

    if region["width"] <= 0 or region["height"] <= 0:
        return None
    return region


class ScreenCapturer:
    """
    Grabs the focused window with mss and writes it with Pillow; the image
    format follows the output file extension. When no focused window is
    known the whole ``monitor`` is captured instead.
    """

    def __init__(self, monitor: int = 1, window_locator: Optional[WindowLocator] = None):
        # mss lists the virtual all-monitors screen at index 0.
        self.monitor = monitor
        self._locate_window = window_locator or active_window_region

    def capture_and_save(self, output_path: Union[str, Path]) -> Path:
        output_path = Path(output_path)
        try:
            region = self._locate_window()
            with mss.mss() as sct:
                if region is None:
                    region = self._monitor_region(sct.monitors)
                shot = sct.grab(region)
            image = Image.frombytes("RGB", shot.size, shot.bgra, "raw", "BGRX")
            output_path.parent.mkdir(parents=True, exist_ok=True)
            image.save(output_path)
        except CaptureError:
            raise
        except Exception as exc:
            raise CaptureError(f"Unable to capture screenshot to {output_path}", underlying=exc) from exc

        logger.info("Saving image to %s", output_path)
        return output_path

    def _monitor_region(self, monitors) -> Region:
        if self.monitor >= len(monitors):
            raise CaptureError(
                f"Monitor {self.monitor} not found ({len(monitors) - 1} available)"
            )
        return monitors[self.monitor]
