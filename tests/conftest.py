import os

# Must be set before numba is imported anywhere.
os.environ.setdefault("NUMBA_ENABLE_CUDASIM", "1")

import numpy as np
import pytest

from counting.accelerator import DeviceBuffer
from counting.errors import DeviceAllocationError, DeviceLaunchError, DeviceReadbackError

BLACK_PIXEL = (0, 0, 0)
WHITE_PIXEL = (255, 255, 255)


def solid_image(height, width, color):
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


def checkerboard(height, width):
    """Alternating black and white pixels, starting with black."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[0::2, 1::2] = WHITE_PIXEL
    image[1::2, 0::2] = WHITE_PIXEL
    return image


class FakeAccelerator:
    """Accelerator double that records buffers and fails on request."""

    def __init__(self, fail_on=None, counts=(0, 0)):
        self.fail_on = fail_on
        self.counts = counts
        self.allocated = []
        self.released = []
        self.launches = []
        self.compiled = []

    def _allocate(self, byte_count):
        buffer = DeviceBuffer(np.zeros(byte_count, dtype=np.uint8), byte_count)
        self.allocated.append(buffer)
        return buffer

    def allocate_buffer(self, byte_count):
        if self.fail_on == "allocate_buffer":
            raise DeviceAllocationError(byte_count, "out of memory")
        return self._allocate(byte_count)

    def upload(self, buffer, host_array):
        if self.fail_on == "upload":
            raise DeviceAllocationError(buffer.byte_count, "copy failed")

    def allocate_counter(self, slots=2):
        if self.fail_on == "allocate_counter":
            raise DeviceAllocationError(slots * 8, "out of memory")
        return self._allocate(slots * 8)

    def compile(self, pyfunc, signature):
        if self.fail_on == "compile":
            raise DeviceLaunchError("compile failed")
        kernel = (pyfunc, signature)
        self.compiled.append(kernel)
        return kernel

    def launch(self, work_item_count, kernel, *args):
        if self.fail_on == "launch":
            raise DeviceLaunchError("launch failed")
        self.launches.append((work_item_count, kernel))

    def synchronize(self):
        if self.fail_on == "synchronize":
            raise DeviceLaunchError("kernel failed")

    def read_back(self, buffer):
        if self.fail_on == "read_back":
            raise DeviceReadbackError("copy failed")
        return np.array(self.counts, dtype=np.int64)

    def release(self, buffer):
        self.released.append(buffer)
        buffer.array = None


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    image = rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)
    # Salt the image with the two extremes so both counters move.
    image[rng.random((24, 32)) < 0.2] = BLACK_PIXEL
    image[rng.random((24, 32)) < 0.2] = WHITE_PIXEL
    return image


@pytest.fixture
def empty_image():
    return np.zeros((0, 0, 3), dtype=np.uint8)
