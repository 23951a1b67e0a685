"""Abstract base classes for color counting operations."""

import numpy as np

from abc import ABC, abstractmethod
from dataclasses import dataclass
from PIL import Image


@dataclass(frozen=True)
class CounterPair:
    """Exact number of black and white pixels found in one pass."""

    black: int = 0
    white: int = 0

    def __add__(self, other: "CounterPair") -> "CounterPair":
        return CounterPair(self.black + other.black, self.white + other.white)


def to_pixel_array(image) -> np.ndarray:
    """Expose an image as a dense (height, width, 3) uint8 array.

    Args:
        image (Image.Image | np.ndarray): Decoded image. PIL images are
            converted to RGB, dropping any alpha channel.

    Returns:
        np.ndarray: Read-only view or copy of the pixels in row-major order.

    Raises:
        ValueError: If an array does not hold 3 channels per pixel.
    """
    if isinstance(image, Image.Image):
        width, height = image.size
        pixels = np.asarray(image.convert("RGB"), dtype=np.uint8)
        return pixels.reshape(height, width, 3)

    pixels = np.asarray(image, dtype=np.uint8)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(
            f"Expected an array of shape (height, width, 3), got {pixels.shape}"
        )
    return pixels


class Counter(ABC):
    """Abstract base class for black and white pixel counters."""

    name: str

    @abstractmethod
    def run(self, image) -> CounterPair:
        """Count the black and white pixels of the given image.

        Args:
            image (Image): Image to count.

        Returns:
            CounterPair: Black and white pixel counts.
        """
        pass


def get_counter(name: str, **options) -> Counter:
    """Build the counter backend registered under ``name``.

    Args:
        name (str): One of ``"standard"``, ``"threaded"`` or ``"device"``.
        **options: Keyword arguments forwarded to the backend constructor.

    Raises:
        ValueError: If no backend has that name.
    """
    from counting.device import Device
    from counting.standard import Standard
    from counting.threaded import Threaded

    backends = {cls.name: cls for cls in (Standard, Threaded, Device)}
    try:
        backend = backends[name]
    except KeyError:
        raise ValueError(
            f"Unknown counter '{name}', expected one of {sorted(backends)}"
        ) from None
    return backend(**options)
