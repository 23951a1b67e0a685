"""Module for sequential color counting."""

import logging

from counting.abstract import Counter, CounterPair, to_pixel_array
from counting.classifier import count_extremes
from counting.errors import HostCountError

logger = logging.getLogger(__name__)


class Standard(Counter):
    """Single-threaded reference counter, one row at a time."""

    name = "standard"

    def run(self, image) -> CounterPair:
        """Count the black and white pixels of the given image.

        Args:
            image (Image): Image to count.

        Returns:
            CounterPair: Black and white pixel counts.
        """
        pixels = to_pixel_array(image)
        img_h = pixels.shape[0]

        counts = CounterPair()
        for i in range(img_h):
            try:
                counts += CounterPair(*count_extremes(pixels[i]))
            except Exception as exc:
                raise HostCountError(i, i + 1, str(exc)) from exc

        logger.debug("Standard count over %d rows: %s", img_h, counts)
        return counts
