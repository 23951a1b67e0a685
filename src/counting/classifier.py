"""Module for classifying pixels by their perceptual brightness."""

import numpy as np

RED_WEIGHT = np.float32(0.3)
GREEN_WEIGHT = np.float32(0.59)
BLUE_WEIGHT = np.float32(0.11)

BLACK_LEVEL = 0
WHITE_LEVEL = 255

# BLACK and WHITE double as the device counter slots.
BLACK = 0
WHITE = 1
OTHER = 2


def luminance(r, g, b) -> int:
    """Compute the perceptual grayscale value of one pixel.

    The weighted sum is evaluated in single precision and truncated toward
    zero, so (1, 1, 1) sums to exactly 1.0 and is not black.

    Args:
        r: Red channel, 0-255.
        g: Green channel, 0-255.
        b: Blue channel, 0-255.

    Returns:
        int: Grayscale value, 0-255.
    """
    return int(
        np.float32(r) * RED_WEIGHT
        + np.float32(g) * GREEN_WEIGHT
        + np.float32(b) * BLUE_WEIGHT
    )


def classify(gray) -> int:
    """Classify a grayscale value as BLACK, WHITE or OTHER."""
    if gray == BLACK_LEVEL:
        return BLACK
    if gray == WHITE_LEVEL:
        return WHITE
    return OTHER


def luminance_array(pixels: np.ndarray) -> np.ndarray:
    """Vectorised ``luminance`` over an array whose last axis is (R, G, B).

    Args:
        pixels (np.ndarray): Array of shape (..., 3).

    Returns:
        np.ndarray: int32 grayscale values of shape ``pixels.shape[:-1]``.
    """
    red = pixels[..., 0].astype(np.float32) * RED_WEIGHT
    green = pixels[..., 1].astype(np.float32) * GREEN_WEIGHT
    blue = pixels[..., 2].astype(np.float32) * BLUE_WEIGHT
    return ((red + green) + blue).astype(np.int32)


def count_extremes(pixels: np.ndarray) -> tuple:
    """Count black and white pixels in an array of shape (..., 3).

    Returns:
        tuple: ``(black, white)`` as Python ints.
    """
    gray = luminance_array(pixels)
    black = int(np.count_nonzero(gray == BLACK_LEVEL))
    white = int(np.count_nonzero(gray == WHITE_LEVEL))
    return black, white
