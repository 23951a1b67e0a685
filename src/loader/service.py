"""Module for load images."""

import logging

from PIL import Image, UnidentifiedImageError
from counting.errors import DecodeError

logger = logging.getLogger(__name__)


class Loader:
    """Class for loading images."""
    mode = "RGB"

    @classmethod
    def load_rgb_image(cls, image_path: str) -> Image.Image:
        """Load an 8-bit RGB image from the given path.

        Args:
            image_path (str): Path to the image file.

        Raises:
            DecodeError: If the file is missing or cannot be decoded.
        """
        try:
            with Image.open(image_path) as image:
                image.load()
                return cls.convert_to_rgb(image)
        except (OSError, UnidentifiedImageError) as exc:
            raise DecodeError(image_path, str(exc)) from exc

    @classmethod
    def convert_to_rgb(cls, image: Image.Image) -> Image.Image:
        """Convert the image to three 8-bit channels if necessary.

        Args:
            image (Image.Image): The image to be converted.
        """
        if image.mode == cls.mode:
            return image.copy()
        logger.debug("Converting %s image to %s", image.mode, cls.mode)
        return image.convert(cls.mode)
