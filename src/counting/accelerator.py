"""Module for allocating buffers on and dispatching kernels to a CUDA device."""

import logging
import numpy as np

from numba import config, cuda
from counting.errors import (
    DeviceAllocationError,
    DeviceLaunchError,
    DeviceReadbackError,
    DeviceUnavailableError,
)

logger = logging.getLogger(__name__)

THREADS_PER_BLOCK = 256


class DeviceBuffer:
    """Handle to one array resident on the device."""

    def __init__(self, array, byte_count: int) -> None:
        """Initialize DeviceBuffer class.

        Args:
            array: numba device array backing the buffer.
            byte_count (int): Size requested by the caller.
        """
        self.array = array
        self.byte_count = byte_count

    @property
    def released(self) -> bool:
        return self.array is None


class CudaAccelerator:
    """CUDA device reached through numba.

    Under ``NUMBA_ENABLE_CUDASIM=1`` kernels run on numba's CUDA simulator.
    """

    def __init__(self, threads_per_block: int = THREADS_PER_BLOCK) -> None:
        """Initialize CudaAccelerator class.

        Args:
            threads_per_block (int): Work items per thread block.

        Raises:
            DeviceUnavailableError: If no CUDA device can be used.
            ValueError: If ``threads_per_block`` is smaller than one.
        """
        if threads_per_block < 1:
            raise ValueError(
                f"threads_per_block must be at least 1, got {threads_per_block}"
            )
        if not cuda.is_available():
            raise DeviceUnavailableError("No CUDA device is available")
        self.threads_per_block = threads_per_block

    def allocate_buffer(self, byte_count: int) -> DeviceBuffer:
        """Allocate an uninitialized byte buffer on the device."""
        try:
            array = cuda.device_array(byte_count, dtype=np.uint8)
        except Exception as exc:
            raise DeviceAllocationError(byte_count, str(exc)) from exc
        logger.debug("Allocated %d byte device buffer", byte_count)
        return DeviceBuffer(array, byte_count)

    def upload(self, buffer: DeviceBuffer, host_array: np.ndarray) -> None:
        """Copy ``host_array`` into ``buffer``."""
        if host_array.size == 0:
            return
        try:
            buffer.array.copy_to_device(host_array)
        except Exception as exc:
            raise DeviceAllocationError(buffer.byte_count, str(exc)) from exc

    def allocate_counter(self, slots: int = 2) -> DeviceBuffer:
        """Allocate a zero-initialized int64 counter buffer on the device."""
        host_counts = np.zeros(slots, dtype=np.int64)
        try:
            array = cuda.to_device(host_counts)
        except Exception as exc:
            raise DeviceAllocationError(host_counts.nbytes, str(exc)) from exc
        return DeviceBuffer(array, host_counts.nbytes)

    def compile(self, pyfunc, signature: str):
        """Compile ``pyfunc`` into a kernel for ``signature`` right away.

        Returns:
            The compiled kernel, reused for every launch.
        """
        try:
            kernel = cuda.jit(signature)(pyfunc)
        except Exception as exc:
            raise DeviceLaunchError(f"Kernel compilation failed: {exc}") from exc
        logger.debug("Compiled %s for %s", pyfunc.__name__, signature)
        return kernel

    def launch(self, work_item_count: int, kernel, *args) -> None:
        """Dispatch ``work_item_count`` work items of ``kernel``.

        ``DeviceBuffer`` arguments are passed to the kernel as their device
        arrays, anything else is passed through.
        """
        if work_item_count == 0:
            return

        blocks_per_grid = (work_item_count + self.threads_per_block - 1) // self.threads_per_block
        kernel_args = [arg.array if isinstance(arg, DeviceBuffer) else arg for arg in args]
        logger.debug(
            "Launching %d work items as %d blocks of %d",
            work_item_count, blocks_per_grid, self.threads_per_block,
        )
        try:
            kernel[blocks_per_grid, self.threads_per_block](*kernel_args)
        except Exception as exc:
            raise DeviceLaunchError(f"Kernel launch failed: {exc}") from exc

    def synchronize(self) -> None:
        """Block until every launched work item has completed."""
        try:
            cuda.synchronize()
        except Exception as exc:
            raise DeviceLaunchError(f"Kernel execution failed: {exc}") from exc

    def read_back(self, buffer: DeviceBuffer) -> np.ndarray:
        """Copy ``buffer`` back to host memory."""
        try:
            return buffer.array.copy_to_host()
        except Exception as exc:
            raise DeviceReadbackError(f"Copy to host failed: {exc}") from exc

    def release(self, buffer: DeviceBuffer) -> None:
        """Free ``buffer``. Releasing a buffer twice does nothing."""
        if buffer.released:
            return
        buffer.array = None
        if not config.ENABLE_CUDASIM:
            # numba frees device memory lazily; flush the pending frees now.
            cuda.current_context().deallocations.clear()
        logger.debug("Released %d byte device buffer", buffer.byte_count)
