"""
Resizing of images to power-of-two dimensions, as required by BLP textures.

The resampling itself is delegated to Pillow.
"""

from enum import Enum

from PIL import Image

from .errors import NonPowerOfTwoError
from .image import RgbaImage
from .typing import RgbaColor


class ResizeMode(Enum):
    """Strategy of reaching the target dimensions."""
    STRETCH = "stretch"
    """Stretch or squash the image to the exact dimensions."""
    PAD = "pad"
    """Keep the image at the origin and fill the remaining area."""
    PAD_CENTER = "pad-center"
    """Center the image and fill the remaining area."""


def is_power_of_two(value: int) -> bool:
    """
    :param value: Integer to check
    :type value: int
    :return: Value is a positive power of two
    :rtype: bool
    """
    return value > 0 and value & (value - 1) == 0


def next_power_of_two(value: int) -> int:
    """
    :param value: Integer to round
    :type value: int
    :return: Smallest power of two not less than the value (at least 1)
    :rtype: int
    """
    if value <= 1:
        return 1

    return 1 << (value - 1).bit_length()


def closest_power_of_two(value: int) -> int:
    """
    Rounds to the nearest power of two, preferring the smaller one on ties.

    :param value: Integer to round
    :type value: int
    :return: Closest power of two (at least 1)
    :rtype: int
    """
    upper = next_power_of_two(value)
    lower = max(1, upper >> 1)
    if upper - value < value - lower:
        return upper

    return lower


def resize_image(
    image: RgbaImage,
    width: int,
    height: int,
    mode: ResizeMode = ResizeMode.PAD_CENTER,
    fill_color: RgbaColor = (0, 0, 0, 0)
) -> RgbaImage:
    """
    Resizes an image to power-of-two dimensions.

    Stretching uses nearest-neighbor resampling. Padding never scales the
    source, the area not covered by it is filled with the fill color.

    :param image: Source image
    :type image: RgbaImage
    :param width: Target width
    :type width: int
    :param height: Target height
    :type height: int
    :param mode: Resizing strategy, defaults to ResizeMode.PAD_CENTER
    :type mode: ResizeMode, optional
    :param fill_color: RGBA padding color, defaults to (0, 0, 0, 0)
    :type fill_color: RgbaColor, optional
    :raises NonPowerOfTwoError: Target dimensions are not powers of two
    :return: Resized image
    :rtype: RgbaImage
    """
    if not (is_power_of_two(width) and is_power_of_two(height)):
        raise NonPowerOfTwoError(
            f"Target dimensions must be powers of two: {width} x {height}"
        )

    source = Image.frombytes("RGBA", (image.width, image.height), image.pixels)
    match mode:
        case ResizeMode.STRETCH:
            result = source.resize(
                (width, height),
                Image.Resampling.NEAREST
            )
        case ResizeMode.PAD | ResizeMode.PAD_CENTER:
            result = Image.new("RGBA", (width, height), tuple(fill_color))
            offset = (0, 0)
            if mode is ResizeMode.PAD_CENTER:
                offset = (
                    (width - image.width) // 2,
                    (height - image.height) // 2
                )

            result.paste(source, offset)

    return RgbaImage(width, height, result.tobytes())


def resize_to_power_of_two(
    image: RgbaImage,
    mode: ResizeMode = ResizeMode.PAD_CENTER,
    prefer_larger: bool = True,
    fill_color: RgbaColor = (0, 0, 0, 0)
) -> RgbaImage:
    """
    Resizes an image to power-of-two dimensions chosen automatically.

    Padding always grows to the next power of two. Stretching rounds up when
    ``prefer_larger`` is set, and to the closest power of two otherwise.

    :param image: Source image
    :type image: RgbaImage
    :param mode: Resizing strategy, defaults to ResizeMode.PAD_CENTER
    :type mode: ResizeMode, optional
    :param prefer_larger: Round dimensions up, defaults to True
    :type prefer_larger: bool, optional
    :param fill_color: RGBA padding color, defaults to (0, 0, 0, 0)
    :type fill_color: RgbaColor, optional
    :return: Resized image, or the source if already power-of-two sized
    :rtype: RgbaImage
    """
    if image.is_power_of_two():
        return image

    if prefer_larger or mode is not ResizeMode.STRETCH:
        width = next_power_of_two(image.width)
        height = next_power_of_two(image.height)
    else:
        width = closest_power_of_two(image.width)
        height = closest_power_of_two(image.height)

    return resize_image(image, width, height, mode, fill_color)
