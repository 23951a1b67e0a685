"""Exceptions raised while counting colors."""


class ColorCountError(Exception):
    """Base exception for all color counting errors.

    Attributes:
        path (str): Execution path that failed, ``"device"`` or ``"host"``.
        phase (str): Phase of the run that failed.
    """

    path = "host"
    phase = "compute"


class DecodeError(ColorCountError):
    """Raised when an image file could not be loaded or parsed."""

    phase = "decode"

    def __init__(self, image_path: str, reason: str) -> None:
        self.image_path = image_path
        super().__init__(f"Could not decode image '{image_path}': {reason}")


class DeviceError(ColorCountError):
    """Base exception for accelerator failures."""

    path = "device"


class DeviceUnavailableError(DeviceError):
    """Raised when no accelerator is present or selectable."""

    phase = "setup"


class DeviceAllocationError(DeviceError):
    """Raised when a buffer could not be allocated or filled on the device."""

    phase = "setup"

    def __init__(self, byte_count: int, message: str) -> None:
        self.byte_count = byte_count
        super().__init__(f"Allocation of {byte_count} bytes failed: {message}")


class DeviceLaunchError(DeviceError):
    """Raised when a kernel could not be dispatched or failed while running."""

    phase = "compute"


class DeviceReadbackError(DeviceError):
    """Raised when the counter buffer could not be copied back to the host."""

    phase = "readback"


class HostCountError(ColorCountError):
    """Raised when a host worker fails while counting a block of rows."""

    def __init__(self, start_row: int, end_row: int, reason: str) -> None:
        self.start_row = start_row
        self.end_row = end_row
        super().__init__(f"Counting rows {start_row}-{end_row} failed: {reason}")
