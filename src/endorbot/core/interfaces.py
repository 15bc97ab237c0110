"""Core abstract interfaces for the device-facing side of the bot."""

from abc import ABC, abstractmethod

import numpy as np


class ImageSource(ABC):
    """Abstract interface for acquiring screen frames."""

    @abstractmethod
    def get_frame(self) -> np.ndarray:
        """
        Return a screen frame as numpy array (H, W, 3) in RGB format.

        Raises:
            CaptureError: the frame could not be acquired this tick
            DeviceNotFoundError: the device is gone
        """
        pass


class InputDevice(ABC):
    """Abstract interface for synthetic touch input. Fire-and-forget."""

    @abstractmethod
    def tap(self, x: int, y: int) -> None:
        """
        Tap the screen at device coordinates.

        Raises:
            InputError: the tap could not be dispatched
        """
        pass

    @abstractmethod
    def swipe(self, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 300) -> None:
        pass
