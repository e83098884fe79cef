import struct

from pytest import raises

from blpio.compression import (
    DxtError,
    dxt1_compress,
    dxt1_decompress,
    dxt3_compress,
    dxt3_decompress,
    dxt5_compress,
    dxt5_decompress,
    rgb565_to_rgb888,
    rgb888_to_rgb565
)
from blpio.image import RgbaImage

from conftest import solid_image


def _block(c0: int, c1: int, codes: list[int]) -> bytes:
    table = sum(code << (2 * i) for i, code in enumerate(codes))
    return struct.pack("<HHI", c0, c1, table)


def test_rgb565() -> None:
    assert rgb565_to_rgb888(0xffff) == (255, 255, 255)
    assert rgb565_to_rgb888(0x0000) == (0, 0, 0)
    assert rgb565_to_rgb888(0x0841) == (8, 8, 8)
    assert rgb888_to_rgb565(255, 255, 255) == 0xffff
    assert rgb888_to_rgb565(255, 0, 0) == 0xf800
    assert rgb888_to_rgb565(0, 255, 0) == 0x07e0


def test_dxt1_decompress() -> None:
    data = _block(0xffff, 0x0000, [i % 4 for i in range(16)])
    image = dxt1_decompress(data, 4, 4)
    assert image.pixels[:16] == bytes((
        255, 255, 255, 255,
        0, 0, 0, 255,
        170, 170, 170, 255,
        85, 85, 85, 255
    ))

    # c0 <= c1 reserves slot 3 for transparent black
    data = _block(0x0000, 0xffff, [i % 4 for i in range(16)])
    image = dxt1_decompress(data, 4, 4)
    assert image.pixels[:16] == bytes((
        0, 0, 0, 255,
        255, 255, 255, 255,
        128, 128, 128, 255,
        0, 0, 0, 0
    ))


def test_dxt3_decompress() -> None:
    nibbles = sum(i << (4 * i) for i in range(16))
    data = nibbles.to_bytes(8, "little") + _block(0xffff, 0xffff, [3] * 16)
    image = dxt3_decompress(data, 4, 4)

    array = image.to_array()
    assert array[..., 3].flatten().tolist() == [i * 17 for i in range(16)]
    # Slot 3 of the color table is black, but never transparent
    assert array[..., :3].max() == 0


def test_dxt5_decompress() -> None:
    codes = [2] + [1] * 15
    atable = sum(code << (3 * i) for i, code in enumerate(codes))
    data = (
        bytes((255, 0))
        + atable.to_bytes(6, "little")
        + _block(0xffff, 0xffff, [0] * 16)
    )
    alpha = dxt5_decompress(data, 4, 4).to_array()[..., 3].flatten()
    assert alpha[0] == 219
    assert alpha[1] == 0

    codes = [6, 7, 2] + [0] * 13
    atable = sum(code << (3 * i) for i, code in enumerate(codes))
    data = (
        bytes((0, 255))
        + atable.to_bytes(6, "little")
        + _block(0xffff, 0xffff, [0] * 16)
    )
    alpha = dxt5_decompress(data, 4, 4).to_array()[..., 3].flatten()
    assert alpha[:4].tolist() == [0, 255, 51, 0]


def test_partial_tiles() -> None:
    data = _block(0xf800, 0xf800, [0] * 16) * 4
    image = dxt1_decompress(data, 5, 6)
    assert (image.width, image.height) == (5, 6)
    assert image.pixels == bytes((255, 0, 0, 255)) * 30


def test_short_data() -> None:
    with raises(DxtError) as error:
        dxt1_decompress(bytes(7), 4, 4)

    assert str(error.value).startswith("DXT - ")

    with raises(DxtError):
        dxt3_decompress(bytes(31), 8, 4)

    with raises(DxtError):
        dxt5_decompress(bytes(16), 5, 5)


def test_output_length() -> None:
    image = solid_image(5, 7, (1, 2, 3, 255))
    assert len(dxt1_compress(image)) == 2 * 2 * 8
    assert len(dxt3_compress(image)) == 2 * 2 * 16
    assert len(dxt5_compress(image)) == 2 * 2 * 16

    image = solid_image(1, 1, (1, 2, 3, 255))
    assert len(dxt1_compress(image)) == 8
    assert len(dxt5_compress(image)) == 16


def test_solid_color() -> None:
    color = (200, 100, 50, 255)
    image = solid_image(64, 64, color)

    for compress, decompress in (
        (dxt1_compress, dxt1_decompress),
        (dxt3_compress, dxt3_decompress),
        (dxt5_compress, dxt5_decompress)
    ):
        decoded = decompress(compress(image), 64, 64)
        array = decoded.to_array().astype(int)
        assert abs(array[..., 0] - 200).max() <= 4
        assert abs(array[..., 1] - 100).max() <= 4
        assert abs(array[..., 2] - 50).max() <= 4
        assert (array[..., 3] == 255).all()


def test_dxt1_punch_through() -> None:
    pixels = bytearray(bytes((255, 0, 0, 255)) * 16)
    pixels[0:4] = (90, 90, 90, 0)
    pixels[20:24] = (10, 10, 10, 100)
    image = RgbaImage(4, 4, pixels)

    decoded = dxt1_decompress(dxt1_compress(image), 4, 4).to_array()
    assert tuple(decoded[0, 0]) == (0, 0, 0, 0)
    assert tuple(decoded[1, 1]) == (0, 0, 0, 0)
    assert tuple(decoded[0, 1]) == (255, 0, 0, 255)
    assert (decoded[..., 3] == 255).sum() == 14

    decoded = dxt1_decompress(
        dxt1_compress(solid_image(4, 4, (0, 0, 0, 0))),
        4,
        4
    )
    assert decoded.pixels == bytes(64)


def test_dxt1_opaque_never_transparent() -> None:
    # Both colors quantize to the same endpoint
    pixels = bytes((255, 0, 0, 255)) * 8 + bytes((254, 0, 0, 255)) * 8
    image = RgbaImage(4, 4, pixels)

    decoded = dxt1_decompress(dxt1_compress(image), 4, 4)
    assert decoded.pixels == bytes((255, 0, 0, 255)) * 16


def test_dxt1_gradient() -> None:
    pixels = b"".join(
        bytes((v, v, v, 255)) for v in range(0, 256, 17)
    )
    image = RgbaImage(4, 4, pixels)

    decoded = dxt1_decompress(dxt1_compress(image), 4, 4).to_array()
    expected = image.to_array().astype(int)
    assert abs(decoded.astype(int) - expected).max() <= 45
    assert (decoded[..., 3] == 255).all()


def test_dxt3_alpha() -> None:
    pixels = b"".join(
        bytes((0, 0, 255, v)) for v in range(0, 256, 17)
    )
    image = RgbaImage(4, 4, pixels)

    decoded = dxt3_decompress(dxt3_compress(image), 4, 4)
    assert decoded.pixels == pixels


def test_dxt5_alpha() -> None:
    pixels = b"".join(
        bytes((0, 0, 255, v)) for v in range(0, 256, 17)
    )
    image = RgbaImage(4, 4, pixels)

    decoded = dxt5_decompress(dxt5_compress(image), 4, 4).to_array()
    alpha = decoded[..., 3].flatten().astype(int)
    assert alpha[0] == 0
    assert alpha[-1] == 255
    assert abs(alpha - [v for v in range(0, 256, 17)]).max() <= 19
