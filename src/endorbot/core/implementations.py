"""Concrete implementations of core interfaces."""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import struct
import subprocess

import cv2
import numpy as np

from endorbot.core.errors import CaptureError, DeviceNotFoundError, InputError
from endorbot.core.interfaces import ImageSource, InputDevice
from endorbot.vision.screen_points import SCREEN_SIZE

# Raw `screencap` output: width, height, format, colorspace, then RGBA rows.
SCREENCAP_HEADER = struct.Struct("<IIII")

FRAMEBUFFER_PATH = "/dev/graphics/fb0"
FRAMEBUFFER_STRIDE = 1088

CAPTURE_TIMEOUT = 10
INPUT_TIMEOUT = 5

_DEVICE_MISSING_MARKERS = ("not found", "offline", "no devices", "unauthorized")


def _run(cmd: Sequence[str], timeout: float) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(list(cmd), capture_output=True, timeout=timeout)
    except FileNotFoundError as e:
        raise DeviceNotFoundError(f"{cmd[0]} is not installed") from e
    except subprocess.TimeoutExpired as e:
        raise CaptureError(f"{' '.join(cmd)} timed out after {timeout}s") from e


def _check_device(proc: subprocess.CompletedProcess) -> None:
    stderr = proc.stderr.decode('utf-8', errors='ignore').lower()
    if any(marker in stderr for marker in _DEVICE_MISSING_MARKERS):
        raise DeviceNotFoundError(stderr.strip())


def decode_screencap(data: bytes) -> np.ndarray:
    """
    Decode screencap output into an RGB frame.

    PNG output (``screencap -p``) goes through OpenCV; anything else is read
    as the raw layout.
    """
    if not data:
        raise CaptureError("Empty screencap output")

    buf = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if image is not None:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    if len(data) < SCREENCAP_HEADER.size:
        raise CaptureError(f"Screencap output too short ({len(data)} bytes)")
    width, height, _fmt, _colorspace = SCREENCAP_HEADER.unpack_from(data)
    expected = width * height * 4
    pixels = buf[SCREENCAP_HEADER.size:SCREENCAP_HEADER.size + expected]
    if width == 0 or height == 0 or pixels.size != expected:
        raise CaptureError(
            f"Bad raw screencap: {width}x{height}, {pixels.size} of {expected} pixel bytes"
        )
    return pixels.reshape(height, width, 4)[:, :, :3].copy()


def decode_framebuffer(data: bytes,
                       size: Tuple[int, int] = SCREEN_SIZE,
                       stride: int = FRAMEBUFFER_STRIDE) -> np.ndarray:
    """Decode an RGBA framebuffer dump whose rows are ``stride`` pixels wide."""
    width, height = size
    expected = stride * height * 4
    if len(data) < expected:
        raise CaptureError(f"Framebuffer dump too short: {len(data)} < {expected} bytes")
    rows = np.frombuffer(data, dtype=np.uint8, count=expected).reshape(height, stride, 4)
    return rows[:, :width, :3].copy()


class ScreenshotFileSource(ImageSource):
    """Load screen frames from a file on disk (for developer mode)."""

    def __init__(self, image_path):
        """
        Initialize with path to an image file.

        Args:
            image_path: Path to a .png or .jpg screenshot
        """
        self.image_path = Path(image_path)
        if not self.image_path.exists():
            raise FileNotFoundError(f"Image not found: {self.image_path}")

        self._frame = None
        self._load_frame()

    def _load_frame(self):
        """Load the frame from disk."""
        image = cv2.imread(str(self.image_path))
        if image is None:
            raise ValueError(f"Failed to load image: {self.image_path}")
        self._frame = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    def get_frame(self) -> np.ndarray:
        """Return the loaded frame."""
        return self._frame.copy()


class AdbScreenCapture(ImageSource):
    """Capture the device screen with `screencap`, over adb or on the device."""

    def __init__(self, device: Optional[str] = None, local: bool = False, debug: bool = False):
        """
        Args:
            device: adb serial, None for the only connected device
            local: run `screencap` directly (the bot runs on the device)
            debug: Enable debug logging
        """
        self.device = device
        self.local = local
        self.debug = debug

    def command(self) -> List[str]:
        if self.local:
            return ["screencap"]
        cmd = ["adb"]
        if self.device:
            cmd += ["-s", self.device]
        return cmd + ["exec-out", "screencap"]

    def get_frame(self) -> np.ndarray:
        proc = _run(self.command(), CAPTURE_TIMEOUT)
        if proc.returncode != 0:
            _check_device(proc)
            raise CaptureError(
                f"screencap failed: {proc.stderr.decode('utf-8', errors='ignore').strip()}"
            )
        frame = decode_screencap(proc.stdout)
        if self.debug:
            print(f"[CAPTURE] {frame.shape[1]}x{frame.shape[0]} frame")
        return frame


class FramebufferCapture(ImageSource):
    """Read the raw framebuffer device (needs root on the device)."""

    def __init__(self, device: Optional[str] = None, local: bool = False,
                 path: str = FRAMEBUFFER_PATH):
        self.device = device
        self.local = local
        self.path = path

    def get_frame(self) -> np.ndarray:
        if self.local:
            try:
                data = Path(self.path).read_bytes()
            except OSError as e:
                raise CaptureError(f"Cannot read {self.path}: {e}") from e
            return decode_framebuffer(data)

        cmd = ["adb"]
        if self.device:
            cmd += ["-s", self.device]
        cmd += ["exec-out", "su", "-c", f"cat {self.path}"]
        proc = _run(cmd, CAPTURE_TIMEOUT)
        if proc.returncode != 0:
            _check_device(proc)
            raise CaptureError(
                f"framebuffer read failed: {proc.stderr.decode('utf-8', errors='ignore').strip()}"
            )
        return decode_framebuffer(proc.stdout)


class AdbInputDevice(InputDevice):
    """Sends `input tap` / `input swipe` over adb (or directly on the device)."""

    def __init__(self, device: Optional[str] = None, local: bool = False, debug: bool = False):
        self.device = device
        self.local = local
        self.debug = debug

    def _input(self, *args) -> None:
        cmd = ["input"] if self.local else ["adb"] + (["-s", self.device] if self.device else []) + ["shell", "input"]
        cmd += [str(a) for a in args]
        try:
            proc = _run(cmd, INPUT_TIMEOUT)
        except DeviceNotFoundError:
            raise
        except CaptureError as e:
            raise InputError(str(e)) from e
        if proc.returncode != 0:
            _check_device(proc)
            raise InputError(
                f"input {args[0]} failed: {proc.stderr.decode('utf-8', errors='ignore').strip()}"
            )
        if self.debug:
            print(f"[ACTION] input {' '.join(str(a) for a in args)}")

    def tap(self, x: int, y: int) -> None:
        self._input("tap", x, y)

    def swipe(self, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 300) -> None:
        self._input("swipe", x1, y1, x2, y2, duration_ms)


class DummyInputDevice(InputDevice):
    """Placeholder input device (doesn't touch anything), records every call."""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.taps: List[Tuple[int, int]] = []
        self.swipes: List[Tuple[int, int, int, int, int]] = []

    def tap(self, x: int, y: int) -> None:
        self.taps.append((x, y))
        if self.debug:
            print(f"[ACTION] (dry run) tap {x},{y}")

    def swipe(self, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 300) -> None:
        self.swipes.append((x1, y1, x2, y2, duration_ms))
        if self.debug:
            print(f"[ACTION] (dry run) swipe {x1},{y1} -> {x2},{y2}")
