"""Module for color counting on a CUDA device."""

import logging

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from numba import cuda
from counting.abstract import Counter, CounterPair
from counting.accelerator import THREADS_PER_BLOCK, CudaAccelerator, DeviceBuffer
from counting.classifier import BLACK, OTHER, WHITE, classify, luminance
from counting.threaded import DEFAULT_THREADS
from transfer.flatten import CHANNELS, flatten_pixels

logger = logging.getLogger(__name__)

COUNTER_SLOTS = 2
COUNT_KERNEL_SIGNATURE = "void(uint8[::1], int64, int64[::1])"

luminance_device = cuda.jit(device=True)(luminance)
classify_device = cuda.jit(device=True)(classify)


def count_colors(pixel_data, pixel_count, counts):
    """Count black and white pixels of a flat buffer.

    Work item ``k`` classifies the bytes ``3k .. 3k + 2`` and atomically adds
    one to ``counts[BLACK]`` or ``counts[WHITE]``.
    """
    pixel = cuda.grid(1)
    if pixel < pixel_count:
        subpixel = pixel * 3
        gray = luminance_device(
            pixel_data[subpixel],
            pixel_data[subpixel + 1],
            pixel_data[subpixel + 2],
        )
        category = classify_device(gray)
        if category != OTHER:
            cuda.atomic.add(counts, category, 1)


@dataclass
class DeviceSession:
    """Buffers of one device run, valid until the session scope exits."""

    pixel_buffer: DeviceBuffer
    counter_buffer: DeviceBuffer
    pixel_count: int
    counted: bool = False


class Device(Counter):
    """Counts colors on an accelerator, one work item per pixel."""

    name = "device"

    def __init__(
        self,
        accelerator=None,
        num_threads: int = DEFAULT_THREADS,
        threads_per_block: int = THREADS_PER_BLOCK,
    ) -> None:
        """Initialize Device class.

        The kernel is compiled here, before any run is timed.

        Args:
            accelerator: Device collaborator, a ``CudaAccelerator`` is created
                when omitted.
            num_threads (int): Host threads used to flatten images.
            threads_per_block (int): Block size for a created accelerator.

        Raises:
            DeviceUnavailableError: If no accelerator was given and none is
                available.
            DeviceLaunchError: If the kernel does not compile.
        """
        if accelerator is None:
            accelerator = CudaAccelerator(threads_per_block)
        self.accelerator = accelerator
        self.num_threads = num_threads
        self.kernel = self.accelerator.compile(count_colors, COUNT_KERNEL_SIGNATURE)

    @contextmanager
    def session(self, image):
        """Flatten ``image`` and place it and a zeroed counter on the device.

        Every buffer acquired here is released when the scope exits, also
        when a later allocation or the caller fails.

        Args:
            image (Image): Image to upload.

        Yields:
            DeviceSession: Buffers ready for ``count``.
        """
        pixel_data = flatten_pixels(image, self.num_threads)
        pixel_count = pixel_data.size // CHANNELS

        with ExitStack() as stack:
            pixel_buffer = self.accelerator.allocate_buffer(pixel_data.nbytes)
            stack.callback(self.accelerator.release, pixel_buffer)
            self.accelerator.upload(pixel_buffer, pixel_data)

            counter_buffer = self.accelerator.allocate_counter(COUNTER_SLOTS)
            stack.callback(self.accelerator.release, counter_buffer)

            yield DeviceSession(pixel_buffer, counter_buffer, pixel_count)

    def count(self, session: DeviceSession) -> CounterPair:
        """Run the kernel over a session and read the counters back.

        Args:
            session (DeviceSession): Session from ``session``, counted at most
                once since its counters are not reset.

        Returns:
            CounterPair: Black and white pixel counts.
        """
        if session.counted:
            raise RuntimeError("Device session was already counted")
        session.counted = True

        self.accelerator.launch(
            session.pixel_count,
            self.kernel,
            session.pixel_buffer,
            session.pixel_count,
            session.counter_buffer,
        )
        self.accelerator.synchronize()
        counts = self.accelerator.read_back(session.counter_buffer)
        return CounterPair(black=int(counts[BLACK]), white=int(counts[WHITE]))

    def run(self, image) -> CounterPair:
        """Count the black and white pixels of the given image.

        Args:
            image (Image): Image to count.

        Returns:
            CounterPair: Black and white pixel counts.
        """
        with self.session(image) as session:
            return self.count(session)
