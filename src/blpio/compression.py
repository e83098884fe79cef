"""
Algorithms for handling S3TC block compressed texture data (DXT1, DXT3 and
DXT5) in BLP textures.

Texture data is processed in 4x4 texel tiles, left->right, top->bottom. Tiles
overhanging the image edge are still stored in full: texels outside the image
are zero-filled on compression and skipped on decompression.
"""


import struct
from collections.abc import Callable, Sequence
from typing import TypeAlias

from .errors import DataError
from .image import RgbaImage


_Rgb: TypeAlias = tuple[int, int, int]
_Texel: TypeAlias = tuple[int, int, int, int]


class DxtError(DataError):
    """Exception raised upon DXT compression and decompression errors."""

    def __str__(self) -> str:
        return f"DXT - {Exception.__str__(self)}"


def _div_round(value: int, divisor: int) -> int:
    # integer division rounding half up
    return (2 * value + divisor) // (2 * divisor)


# Channel expansion lookups for 5 and 6-bit endpoint components
_EXPAND5: tuple[int, ...] = tuple(_div_round(v * 255, 31) for v in range(32))
_EXPAND6: tuple[int, ...] = tuple(_div_round(v * 255, 63) for v in range(64))

# Interpolation weights (a0, a1) of alpha ramp slots 2-7 and 2-5
_ALPHA_WEIGHTS7: tuple[tuple[int, int], ...] = tuple(
    (7 - i, i) for i in range(1, 7)
)
_ALPHA_WEIGHTS5: tuple[tuple[int, int], ...] = tuple(
    (5 - i, i) for i in range(1, 5)
)

_struct_color = struct.Struct("<HHI")

_DXT1_BLOCK = 8
_DXT3_BLOCK = 16
_DXT5_BLOCK = 16


def rgb565_to_rgb888(value: int) -> _Rgb:
    """
    Expands a packed 16-bit RGB565 color to 8-bit channels.

    :param value: Packed color
    :type value: int
    :return: Red, green and blue components
    :rtype: tuple[int, int, int]
    """
    return (
        _EXPAND5[value >> 11 & 0x1f],
        _EXPAND6[value >> 5 & 0x3f],
        _EXPAND5[value & 0x1f]
    )


def rgb888_to_rgb565(red: int, green: int, blue: int) -> int:
    """
    Quantizes an 8-bit color to packed 16-bit RGB565.

    :param red: Red component
    :type red: int
    :param green: Green component
    :type green: int
    :param blue: Blue component
    :type blue: int
    :return: Packed color
    :rtype: int
    """
    return (
        _div_round(red * 31, 255) << 11
        | _div_round(green * 63, 255) << 5
        | _div_round(blue * 31, 255)
    )


def _color_table(c0: int, c1: int) -> tuple[_Rgb, _Rgb, _Rgb, _Rgb]:
    r0, g0, b0 = rgb565_to_rgb888(c0)
    r1, g1, b1 = rgb565_to_rgb888(c1)

    # Raw packed values decide between the 4-color ramp and the 3-color
    # mode with a reserved black entry
    if c0 > c1:
        return (
            (r0, g0, b0),
            (r1, g1, b1),
            (
                _div_round(2 * r0 + r1, 3),
                _div_round(2 * g0 + g1, 3),
                _div_round(2 * b0 + b1, 3)
            ),
            (
                _div_round(r0 + 2 * r1, 3),
                _div_round(g0 + 2 * g1, 3),
                _div_round(b0 + 2 * b1, 3)
            )
        )

    return (
        (r0, g0, b0),
        (r1, g1, b1),
        (
            _div_round(r0 + r1, 2),
            _div_round(g0 + g1, 2),
            _div_round(b0 + b1, 2)
        ),
        (0, 0, 0)
    )


def _alpha_ramp(a0: int, a1: int) -> tuple[int, ...]:
    if a0 > a1:
        return (a0, a1) + tuple(
            _div_round(w0 * a0 + w1 * a1, 7)
            for w0, w1 in _ALPHA_WEIGHTS7
        )

    return (a0, a1) + tuple(
        _div_round(w0 * a0 + w1 * a1, 5)
        for w0, w1 in _ALPHA_WEIGHTS5
    ) + (0, 255)


def _decompress_dxt1_block(block: bytes) -> list[_Texel]:
    c0, c1, table = _struct_color.unpack_from(block)
    lut = _color_table(c0, c1)
    # punch-through
    alpha3 = 255 if c0 > c1 else 0

    texels: list[_Texel] = []
    for i in range(16):
        code = table >> (2 * i) & 0x3
        r, g, b = lut[code]
        texels.append((r, g, b, alpha3 if code == 3 else 255))

    return texels


def _decompress_dxt3_block(block: bytes) -> list[_Texel]:
    atable = int.from_bytes(block[:8], "little")
    c0, c1, table = _struct_color.unpack_from(block, 8)
    lut = _color_table(c0, c1)

    texels: list[_Texel] = []
    for i in range(16):
        r, g, b = lut[table >> (2 * i) & 0x3]
        texels.append((r, g, b, (atable >> (4 * i) & 0xf) * 17))

    return texels


def _decompress_dxt5_block(block: bytes) -> list[_Texel]:
    alut = _alpha_ramp(block[0], block[1])
    atable = int.from_bytes(block[2:8], "little")
    c0, c1, table = _struct_color.unpack_from(block, 8)
    lut = _color_table(c0, c1)

    texels: list[_Texel] = []
    for i in range(16):
        r, g, b = lut[table >> (2 * i) & 0x3]
        texels.append((r, g, b, alut[atable >> (3 * i) & 0x7]))

    return texels


def _decompress(
    data: bytes,
    width: int,
    height: int,
    block_size: int,
    decompress_block: Callable[[bytes], list[_Texel]]
) -> RgbaImage:
    block_count_w = (width + 3) // 4
    block_count_h = (height + 3) // 4
    expected = block_count_w * block_count_h * block_size
    if len(data) < expected:
        raise DxtError(
            f"Data too short for {width} x {height} texture "
            f"(expected: {expected:d} bytes, got: {len(data):d})"
        )

    output = bytearray(width * height * 4)
    offset = 0
    for brow in range(block_count_h):
        for bcol in range(block_count_w):
            texels = decompress_block(bytes(data[offset:offset + block_size]))
            offset += block_size

            for row in range(4):
                y = brow * 4 + row
                if y >= height:
                    break

                for col in range(4):
                    x = bcol * 4 + col
                    if x >= width:
                        break

                    idx = (y * width + x) * 4
                    output[idx:idx + 4] = texels[row * 4 + col]

    return RgbaImage(width, height, bytes(output))


def dxt1_decompress(data: bytes, width: int, height: int) -> RgbaImage:
    """
    Decompresses texture data compressed with the S3TC DXT1/BC1 algorithm.

    When the first endpoint is not greater than the second, color index 3 is
    decoded as transparent black.

    :param data: DXT1 compressed binary data
    :type data: bytes
    :param width: Texture width in pixels
    :type width: int
    :param height: Texture height in pixels
    :type height: int
    :raises DxtError: Data is shorter than the texture requires
    :return: Decompressed image
    :rtype: RgbaImage
    """
    return _decompress(
        data,
        width,
        height,
        _DXT1_BLOCK,
        _decompress_dxt1_block
    )


def dxt3_decompress(data: bytes, width: int, height: int) -> RgbaImage:
    """
    Decompresses texture data compressed with the S3TC DXT3/BC2 algorithm.

    :param data: DXT3 compressed binary data
    :type data: bytes
    :param width: Texture width in pixels
    :type width: int
    :param height: Texture height in pixels
    :type height: int
    :raises DxtError: Data is shorter than the texture requires
    :return: Decompressed image
    :rtype: RgbaImage
    """
    return _decompress(
        data,
        width,
        height,
        _DXT3_BLOCK,
        _decompress_dxt3_block
    )


def dxt5_decompress(data: bytes, width: int, height: int) -> RgbaImage:
    """
    Decompresses texture data compressed with the S3TC DXT5/BC3 algorithm.

    :param data: DXT5 compressed binary data
    :type data: bytes
    :param width: Texture width in pixels
    :type width: int
    :param height: Texture height in pixels
    :type height: int
    :raises DxtError: Data is shorter than the texture requires
    :return: Decompressed image
    :rtype: RgbaImage
    """
    return _decompress(
        data,
        width,
        height,
        _DXT5_BLOCK,
        _decompress_dxt5_block
    )


def _bounding_endpoints(texels: Sequence[_Texel]) -> tuple[int, int]:
    # Quantized corners of the RGB bounding box: (maximum, minimum)
    return (
        rgb888_to_rgb565(
            max(t[0] for t in texels),
            max(t[1] for t in texels),
            max(t[2] for t in texels)
        ),
        rgb888_to_rgb565(
            min(t[0] for t in texels),
            min(t[1] for t in texels),
            min(t[2] for t in texels)
        )
    )


def _nearest_color(texel: _Texel, candidates: Sequence[_Rgb]) -> int:
    best = 0
    best_distance = -1
    for idx, (r, g, b) in enumerate(candidates):
        distance = (
            (texel[0] - r) ** 2
            + (texel[1] - g) ** 2
            + (texel[2] - b) ** 2
        )
        if best_distance < 0 or distance < best_distance:
            best = idx
            best_distance = distance

    return best


def _nearest_alpha(value: int, ramp: Sequence[int]) -> int:
    best = 0
    for idx, entry in enumerate(ramp):
        if abs(entry - value) < abs(ramp[best] - value):
            best = idx

    return best


def _compress_color_block(texels: Sequence[_Texel]) -> bytes:
    c0, c1 = _bounding_endpoints(texels)
    lut = _color_table(c0, c1)

    table = 0
    for i, texel in enumerate(texels):
        table |= _nearest_color(texel, lut) << (2 * i)

    return _struct_color.pack(c0, c1, table)


def _compress_dxt1_block(
    texels: Sequence[_Texel],
    inside: Sequence[bool]
) -> bytes:
    clear = [
        inner and texel[3] <= 127
        for texel, inner in zip(texels, inside)
    ]
    if not any(clear):
        c0, c1 = _bounding_endpoints(texels)
        lut = _color_table(c0, c1)
        # Slot 3 is transparent when c0 <= c1, opaque texels must avoid it
        candidates = lut if c0 > c1 else lut[:3]

        table = 0
        for i, texel in enumerate(texels):
            table |= _nearest_color(texel, candidates) << (2 * i)

        return _struct_color.pack(c0, c1, table)

    solid = [texel for texel, cut in zip(texels, clear) if not cut]
    if not solid:
        return _struct_color.pack(0, 0, 0xffffffff)

    # Storing the endpoints with c0 <= c1 selects the punch-through table
    c1, c0 = _bounding_endpoints(solid)
    lut = _color_table(c0, c1)

    table = 0
    for i, (texel, cut) in enumerate(zip(texels, clear)):
        code = 3 if cut else _nearest_color(texel, lut[:3])
        table |= code << (2 * i)

    return _struct_color.pack(c0, c1, table)


def _compress_dxt3_block(
    texels: Sequence[_Texel],
    inside: Sequence[bool]
) -> bytes:
    atable = 0
    for i, texel in enumerate(texels):
        atable |= _div_round(texel[3], 17) << (4 * i)

    return atable.to_bytes(8, "little") + _compress_color_block(texels)


def _compress_dxt5_block(
    texels: Sequence[_Texel],
    inside: Sequence[bool]
) -> bytes:
    alphas = [texel[3] for texel in texels]
    a0 = max(alphas)
    a1 = min(alphas)
    ramp = _alpha_ramp(a0, a1)

    atable = 0
    for i, value in enumerate(alphas):
        atable |= _nearest_alpha(value, ramp) << (3 * i)

    return (
        bytes((a0, a1))
        + atable.to_bytes(6, "little")
        + _compress_color_block(texels)
    )


def _compress(
    image: RgbaImage,
    compress_block: Callable[[Sequence[_Texel], Sequence[bool]], bytes]
) -> bytes:
    width = image.width
    height = image.height
    pixels = image.pixels

    output = bytearray()
    for brow in range((height + 3) // 4):
        for bcol in range((width + 3) // 4):
            texels: list[_Texel] = []
            inside: list[bool] = []
            for row in range(4):
                y = brow * 4 + row
                for col in range(4):
                    x = bcol * 4 + col
                    if x >= width or y >= height:
                        texels.append((0, 0, 0, 0))
                        inside.append(False)
                        continue

                    idx = (y * width + x) * 4
                    texels.append((
                        pixels[idx],
                        pixels[idx + 1],
                        pixels[idx + 2],
                        pixels[idx + 3]
                    ))
                    inside.append(True)

            output += compress_block(texels, inside)

    return bytes(output)


def dxt1_compress(image: RgbaImage) -> bytes:
    """
    Compresses an image with the S3TC DXT1/BC1 algorithm.

    Endpoints are taken from the corners of the RGB bounding box of each tile.
    Tiles containing texels with alpha of 127 or less are stored in
    punch-through mode, with those texels mapped to transparent black.

    :param image: Source image
    :type image: RgbaImage
    :return: Compressed data (8 bytes per tile)
    :rtype: bytes
    """
    return _compress(image, _compress_dxt1_block)


def dxt3_compress(image: RgbaImage) -> bytes:
    """
    Compresses an image with the S3TC DXT3/BC2 algorithm.

    Alpha is quantized to 4 bits per texel.

    :param image: Source image
    :type image: RgbaImage
    :return: Compressed data (16 bytes per tile)
    :rtype: bytes
    """
    return _compress(image, _compress_dxt3_block)


def dxt5_compress(image: RgbaImage) -> bytes:
    """
    Compresses an image with the S3TC DXT5/BC3 algorithm.

    The alpha endpoints of each tile are its largest and smallest alpha
    values.

    :param image: Source image
    :type image: RgbaImage
    :return: Compressed data (16 bytes per tile)
    :rtype: bytes
    """
    return _compress(image, _compress_dxt5_block)
