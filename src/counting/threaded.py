"""Module for multi-threaded color counting on the host."""

import logging
import os

from concurrent.futures import ThreadPoolExecutor, as_completed
from counting.abstract import Counter, CounterPair, to_pixel_array
from counting.classifier import count_extremes
from counting.errors import HostCountError

logger = logging.getLogger(__name__)

DEFAULT_THREADS = os.cpu_count() or 1


def partition_rows(img_h: int, num_threads: int) -> list:
    """Split ``img_h`` rows into contiguous, non-overlapping blocks.

    Args:
        img_h (int): Number of rows.
        num_threads (int): Number of workers.

    Returns:
        list: ``(start_row, end_row)`` tuples covering every row once.

    Raises:
        ValueError: If ``num_threads`` is smaller than one.
    """
    if num_threads < 1:
        raise ValueError(f"num_threads must be at least 1, got {num_threads}")

    rows_per_thread = max(1, img_h // num_threads)
    blocks = []

    for t in range(num_threads):
        start = t * rows_per_thread
        end = min((t + 1) * rows_per_thread, img_h) if t != num_threads - 1 else img_h
        if start < end:
            blocks.append((start, end))

    return blocks


class Threaded(Counter):
    """Counts colors on a pool of host threads, one block of rows each."""

    name = "threaded"

    def __init__(self, num_threads: int = DEFAULT_THREADS) -> None:
        """Initialize Threaded class.

        Args:
            num_threads (int): Default number of threads to use.
        """
        self.num_threads = num_threads

    def run(self, image, num_threads: int = None) -> CounterPair:
        """Count the black and white pixels of the given image.

        Args:
            image (Image): Image to count.
            num_threads (int): Number of threads to use, defaults to the
                value given at construction.

        Returns:
            CounterPair: Black and white pixel counts.
        """
        if num_threads is None:
            num_threads = self.num_threads
        pixels = to_pixel_array(image)
        blocks = partition_rows(pixels.shape[0], num_threads)

        def process_block(start_row: int, end_row: int) -> CounterPair:
            """Count the block of rows ``[start_row, end_row)``.

            Rows are counted into a block-local pair; the global pair is only
            written by the collecting thread.
            """
            block_counts = CounterPair()
            for i in range(start_row, end_row):
                block_counts += CounterPair(*count_extremes(pixels[i]))
            return block_counts

        logger.debug("Counting %d row blocks on %d threads", len(blocks), num_threads)

        counts = CounterPair()
        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = {executor.submit(process_block, start, end): (start, end) for start, end in blocks}

            for future in as_completed(futures):
                try:
                    counts += future.result()
                except Exception as exc:
                    raise HostCountError(*futures[future], str(exc)) from exc

        return counts
