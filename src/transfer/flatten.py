"""Module for laying an image out as a flat byte buffer for the device."""

import logging
import numpy as np

from concurrent.futures import ThreadPoolExecutor, as_completed
from counting.abstract import to_pixel_array
from counting.threaded import DEFAULT_THREADS, partition_rows

logger = logging.getLogger(__name__)

CHANNELS = 3


def flatten_pixels(image, num_threads: int = DEFAULT_THREADS) -> np.ndarray:
    """Copy an image into a flat R, G, B byte buffer.

    Byte ``3k + c`` holds channel ``c`` of pixel ``k = row * width + col``.
    Rows are copied in parallel blocks; each block owns a disjoint range of
    the output.

    Args:
        image (Image): Image to flatten.
        num_threads (int): Number of threads to use.

    Returns:
        np.ndarray: uint8 buffer of length ``3 * width * height``.
    """
    pixels = to_pixel_array(image)
    img_h, img_w = pixels.shape[:2]
    row_bytes = img_w * CHANNELS
    blocks = partition_rows(img_h, num_threads)

    pixel_data = np.empty(img_h * row_bytes, dtype=np.uint8)

    def copy_block(start_row: int, end_row: int) -> int:
        pixel_data[start_row * row_bytes:end_row * row_bytes] = (
            pixels[start_row:end_row].reshape(-1)
        )
        return end_row - start_row

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        futures = [executor.submit(copy_block, start, end) for start, end in blocks]
        copied = sum(future.result() for future in as_completed(futures))

    logger.debug("Flattened %d of %d rows into %d bytes", copied, img_h, pixel_data.size)
    return pixel_data
