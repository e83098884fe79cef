"""
Palette based (``RAW1``) pixel encoding of BLP textures.

The encoded data is an 8-bit palette index plane, optionally followed by a
packed alpha plane of 8, 4 or 1 bits per pixel. The palette itself is stored
in the container as 256 entries of 4 bytes in B, G, R, X order.
"""


from collections.abc import Sequence
from typing import TypeAlias

import numpy as np
from numpy import typing as npt

from .errors import DataError, ValidationError, PaletteTooLargeError
from .image import RgbaImage


Palette: TypeAlias = tuple[tuple[int, int, int], ...]
"""Ordered RGB palette entries."""

ALPHA_DEPTHS: tuple[int, ...] = (0, 1, 4, 8)
"""Supported alpha plane bit depths."""
MAX_COLORS = 256
"""Number of palette entries addressable by 8-bit indices."""
PALETTE_BLOCK_SIZE = MAX_COLORS * 4
"""Size of the palette block in the container."""

# Rows of the nearest color search processed at once
_SEARCH_CHUNK = 4096


def _check_alpha_depth(alpha_depth: int) -> None:
    if alpha_depth not in ALPHA_DEPTHS:
        raise ValidationError(
            f"Unsupported alpha depth: {alpha_depth} "
            f"(expected one of {ALPHA_DEPTHS})"
        )


def alpha_plane_size(pixel_count: int, alpha_depth: int) -> int:
    """
    Calculates the byte size of a packed alpha plane.

    :param pixel_count: Number of pixels
    :type pixel_count: int
    :param alpha_depth: Alpha bit depth
    :type alpha_depth: int
    :raises ValidationError: Unsupported alpha depth
    :return: Size in bytes
    :rtype: int
    """
    _check_alpha_depth(alpha_depth)
    match alpha_depth:
        case 8:
            return pixel_count
        case 4:
            return (pixel_count + 1) // 2
        case 1:
            return (pixel_count + 7) // 8

    return 0


def _nearest_entries(
    colors: npt.NDArray[np.int32],
    palette: npt.NDArray[np.int32]
) -> npt.NDArray[np.uint8]:
    # Squared Euclidean distance, argmin keeps the lowest index on ties
    nearest = np.empty(len(colors), dtype=np.uint8)
    for start in range(0, len(colors), _SEARCH_CHUNK):
        chunk = colors[start:start + _SEARCH_CHUNK]
        diff = chunk[:, np.newaxis, :] - palette[np.newaxis, :, :]
        distance = (diff * diff).sum(axis=2)
        nearest[start:start + len(chunk)] = distance.argmin(axis=1)

    return nearest


def build_palette(
    pixels: bytes,
    max_colors: int = MAX_COLORS
) -> tuple[Palette, bytes]:
    """
    Derives a palette and per-pixel palette indices from RGBA pixel data.

    Distinct RGB colors (alpha is ignored) get palette slots in order of first
    appearance. If there are more distinct colors than allowed, every
    ``distinct // max_colors``-th color is kept and all pixels are remapped to
    the nearest kept color.

    :param pixels: Flattened RGBA pixel data
    :type pixels: bytes
    :param max_colors: Maximum palette size, defaults to 256
    :type max_colors: int, optional
    :raises PaletteTooLargeError: The requested size does not fit 8-bit indices
    :return: Palette and index plane
    :rtype: tuple[Palette, bytes]
    """
    if not 0 < max_colors <= MAX_COLORS:
        raise PaletteTooLargeError(
            f"Palette size must be between 1 and {MAX_COLORS} "
            f"(got: {max_colors})"
        )

    lookup: dict[tuple[int, int, int], int] = {}
    first_pass: list[int] = []
    for i in range(0, len(pixels) - len(pixels) % 4, 4):
        color = (pixels[i], pixels[i + 1], pixels[i + 2])
        idx = lookup.get(color)
        if idx is None:
            idx = lookup[color] = len(lookup)

        first_pass.append(idx)

    colors = tuple(lookup)
    if len(colors) <= max_colors:
        return colors, bytes(first_pass)

    stride = len(colors) // max_colors
    reduced = colors[::stride][:max_colors]

    remap = _nearest_entries(
        np.array(colors, dtype=np.int32),
        np.array(reduced, dtype=np.int32)
    )
    indices = remap[np.array(first_pass, dtype=np.intp)]

    return reduced, indices.tobytes()


def _pack_alpha(
    alpha: npt.NDArray[np.uint8],
    alpha_depth: int
) -> bytes:
    match alpha_depth:
        case 8:
            return alpha.tobytes()
        case 4:
            nibbles = (alpha.astype(np.uint16) * 2 + 17) // 34
            if len(nibbles) % 2:
                nibbles = np.append(nibbles, 0)

            return (
                nibbles[0::2] | (nibbles[1::2] << 4)
            ).astype(np.uint8).tobytes()
        case 1:
            return np.packbits(alpha > 127, bitorder="little").tobytes()

    return b""


def encode_palette(
    image: RgbaImage,
    alpha_depth: int,
    palette: Sequence[tuple[int, int, int]] | None = None
) -> bytes:
    """
    Encodes an image as palette indices with a packed alpha plane.

    If no palette is given, one is derived with
    :py:func:`build_palette`. With an explicit palette, every pixel is
    mapped to its nearest entry.

    Alpha plane layouts:

    - 8 bits: one byte per pixel
    - 4 bits: two pixels per byte, even pixel in the low nibble
    - 1 bit: eight pixels per byte, least significant bit first, alpha
      above 127 is set
    - 0 bits: no alpha plane

    :param image: Source image
    :type image: RgbaImage
    :param alpha_depth: Alpha bit depth
    :type alpha_depth: int
    :param palette: Palette to map to, defaults to None
    :type palette: Sequence[tuple[int, int, int]] | None, optional
    :raises ValidationError: Unsupported alpha depth
    :raises PaletteTooLargeError: The palette has more than 256 entries
    :return: Encoded index and alpha planes
    :rtype: bytes
    """
    _check_alpha_depth(alpha_depth)

    rgba = image.to_array().reshape((-1, 4))
    if palette is None:
        _, indices = build_palette(image.pixels)
    else:
        if not 0 < len(palette) <= MAX_COLORS:
            raise PaletteTooLargeError(
                f"Palette must have 1 to {MAX_COLORS} entries "
                f"(got: {len(palette)})"
            )

        indices = _nearest_entries(
            rgba[:, :3].astype(np.int32),
            np.array(palette, dtype=np.int32).reshape((-1, 3))
        ).tobytes()

    return indices + _pack_alpha(rgba[:, 3], alpha_depth)


def decode_palette(
    data: bytes,
    width: int,
    height: int,
    palette: bytes,
    alpha_depth: int
) -> RgbaImage:
    """
    Decodes palette indices with a packed alpha plane.

    The palette is expected in the container layout: 4 bytes per entry in
    B, G, R, X order, the fourth byte is ignored.

    :param data: Index plane followed by the alpha plane
    :type data: bytes
    :param width: Image width in pixels
    :type width: int
    :param height: Image height in pixels
    :type height: int
    :param palette: Raw palette entries
    :type palette: bytes
    :param alpha_depth: Alpha bit depth
    :type alpha_depth: int
    :raises ValidationError: Unsupported alpha depth
    :raises DataError: Data is too short, or an index is outside the palette
    :return: Decoded image
    :rtype: RgbaImage
    """
    count = width * height
    expected = count + alpha_plane_size(count, alpha_depth)
    if len(data) < expected:
        raise DataError(
            f"Palette data too short for {width} x {height} image "
            f"(expected: {expected:d} bytes, got: {len(data):d})"
        )

    entries = np.frombuffer(
        bytes(palette[:len(palette) // 4 * 4]),
        dtype=np.uint8
    ).reshape((-1, 4))
    indices = np.frombuffer(bytes(data[:count]), dtype=np.uint8)
    if count and int(indices.max()) >= len(entries):
        raise DataError(
            f"Palette index {int(indices.max())} out of range "
            f"(palette size: {len(entries)})"
        )

    output = np.empty((count, 4), dtype=np.uint8)
    # B, G, R -> R, G, B
    output[:, :3] = entries[indices][:, 2::-1]

    plane = np.frombuffer(bytes(data[count:expected]), dtype=np.uint8)
    match alpha_depth:
        case 8:
            output[:, 3] = plane
        case 4:
            nibbles = np.empty(len(plane) * 2, dtype=np.uint8)
            nibbles[0::2] = plane & 0x0f
            nibbles[1::2] = plane >> 4
            output[:, 3] = nibbles[:count] * 17
        case 1:
            bits = np.unpackbits(plane, bitorder="little")
            output[:, 3] = bits[:count] * 255
        case _:
            output[:, 3] = 255

    return RgbaImage(width, height, output.tobytes())


def pack_palette(palette: Sequence[tuple[int, int, int]]) -> bytes:
    """
    Serializes a palette to the 1024-byte container block.

    Entries are written in B, G, R, A order with alpha forced to 255. Unused
    entries are zero-filled.

    :param palette: RGB palette entries
    :type palette: Sequence[tuple[int, int, int]]
    :raises PaletteTooLargeError: The palette has more than 256 entries
    :return: Palette block
    :rtype: bytes
    """
    if len(palette) > MAX_COLORS:
        raise PaletteTooLargeError(
            f"Palette cannot have more than {MAX_COLORS} entries "
            f"(got: {len(palette)})"
        )

    block = bytearray(PALETTE_BLOCK_SIZE)
    for i, (r, g, b) in enumerate(palette):
        block[i * 4:i * 4 + 4] = (b, g, r, 255)

    return bytes(block)
