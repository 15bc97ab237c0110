"""Exception types raised across the bot pipeline."""


class EndorbotError(Exception):
    """Base class for every error raised by endorbot."""


class ClassificationError(EndorbotError):
    """The current screen could not be turned into a game state."""


class UnknownStateError(ClassificationError):
    """No screen probe matched the sample."""

    def __init__(self, message: str = "No screen probe matched the sample"):
        super().__init__(message)


class UnknownPositionError(EndorbotError):
    """A dungeon decision needs the player position but none is known."""


class CaptureError(EndorbotError):
    """Screen capture failed for this tick."""


class DeviceNotFoundError(CaptureError):
    """The target device is not connected. Not recoverable."""


class InputError(EndorbotError):
    """A tap or swipe could not be dispatched."""


class StateLockTimeout(EndorbotError):
    """The shared snapshot stayed locked longer than the allowed wait."""


class MissingPixelError(EndorbotError, KeyError):
    """A strict pixel sample was queried at a point that was never sampled."""

    def __init__(self, x: int, y: int):
        super().__init__(f"{x}x{y} not found in pixel sample")
        self.x = x
        self.y = y
