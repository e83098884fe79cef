"""
Neutral in-memory image value exchanged by all codecs of the package.
"""

from dataclasses import dataclass
from typing import Self

import numpy as np
from numpy import typing as npt

from .errors import DataError


@dataclass(frozen=True)
class RgbaImage:
    """
    Uncompressed image with 8-bit R, G, B, A channels in row-major order.

    The pixel buffer is always stored as immutable :py:class:`bytes`, passing
    a :py:class:`bytearray` creates a copy.
    """
    width: int
    """Image width in pixels."""
    height: int
    """Image height in pixels."""
    pixels: bytes
    """Flattened RGBA pixel data (``width * height * 4`` bytes)."""

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise DataError(
                f"Invalid image dimensions: {self.width} x {self.height}"
            )

        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise DataError(
                f"Pixel buffer length mismatch (expected: {expected:d}, "
                f"got: {len(self.pixels):d})"
            )

        if not isinstance(self.pixels, bytes):
            object.__setattr__(self, "pixels", bytes(self.pixels))

    @classmethod
    def from_array(cls, array: npt.NDArray[np.uint8]) -> Self:
        """
        Creates an image from an array shaped ``(height, width, 4)``.

        :param array: RGBA pixel array
        :type array: npt.NDArray[np.uint8]
        :raises DataError: The array is not shaped as an RGBA image
        :return: Image
        :rtype: Self
        """
        if array.ndim != 3 or array.shape[2] != 4:
            raise DataError(f"Expected RGBA array, got shape {array.shape}")

        height, width = array.shape[:2]
        return cls(
            width,
            height,
            np.ascontiguousarray(array, dtype=np.uint8).tobytes()
        )

    def to_array(self) -> npt.NDArray[np.uint8]:
        """
        :return: Read-only pixel array shaped ``(height, width, 4)``
        :rtype: npt.NDArray[np.uint8]
        """
        return np.frombuffer(
            self.pixels,
            dtype=np.uint8
        ).reshape((self.height, self.width, 4))

    def alpha_values(self) -> tuple[int, ...]:
        """
        :return: Sorted distinct alpha values present in the image
        :rtype: tuple[int, ...]
        """
        return tuple(
            int(value)
            for value in np.unique(self.to_array()[..., 3])
        )

    def is_power_of_two(self) -> bool:
        """
        :return: Both dimensions are powers of two
        :rtype: bool
        """
        return (
            self.width > 0 and self.width & (self.width - 1) == 0
            and self.height > 0 and self.height & (self.height - 1) == 0
        )
