import numpy as np

from ..errors import DataError
from ..image import RgbaImage


# B, G, R, A <-> R, G, B, A
_SWIZZLE = [2, 1, 0, 3]


def decode_argb8888(
    data: bytes,
    width: int,
    height: int
) -> RgbaImage:
    """
    Decodes uncompressed texture data (``RAW3``).

    The source data is expected to be stored as 4 bytes per pixel.

    Channel layout: ``BBBBBBBB GGGGGGGG RRRRRRRR AAAAAAAA``

    :param data: Encoded binary data
    :type data: bytes
    :param width: Decoded texture width
    :type width: int
    :param height: Decoded texture height
    :type height: int
    :raises DataError: Data is shorter than the texture requires
    :return: Decoded image
    :rtype: RgbaImage
    """
    size = width * height * 4
    if len(data) < size:
        raise DataError(
            f"Data too short for {width} x {height} texture "
            f"(expected: {size:d} bytes, got: {len(data):d})"
        )

    pixels = np.frombuffer(bytes(data[:size]), dtype=np.uint8).reshape((-1, 4))

    return RgbaImage(width, height, pixels[:, _SWIZZLE].tobytes())


def encode_argb8888(image: RgbaImage) -> bytes:
    """
    Encodes an image as uncompressed texture data (``RAW3``).

    Channel layout: ``BBBBBBBB GGGGGGGG RRRRRRRR AAAAAAAA``

    :param image: Source image
    :type image: RgbaImage
    :return: Encoded binary data
    :rtype: bytes
    """
    return image.to_array().reshape((-1, 4))[:, _SWIZZLE].tobytes()
