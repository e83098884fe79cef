from pytest import raises

from blpio.errors import DataError, PaletteTooLargeError, ValidationError
from blpio.image import RgbaImage
from blpio.palette import (
    PALETTE_BLOCK_SIZE,
    alpha_plane_size,
    build_palette,
    decode_palette,
    encode_palette,
    pack_palette
)


def _image(*pixels: tuple[int, int, int, int]) -> RgbaImage:
    return RgbaImage(len(pixels), 1, b"".join(bytes(p) for p in pixels))


def test_build_palette() -> None:
    image = _image(
        (1, 2, 3, 255),
        (4, 5, 6, 255),
        (1, 2, 3, 0),
        (7, 8, 9, 128)
    )
    palette, indices = build_palette(image.pixels)
    assert palette == ((1, 2, 3), (4, 5, 6), (7, 8, 9))
    assert indices == bytes((0, 1, 0, 2))


def test_build_palette_reduction() -> None:
    image = _image(*((v, 0, 0, 255) for v in range(0, 50, 10)))
    palette, indices = build_palette(image.pixels, 2)
    assert palette == ((0, 0, 0), (20, 0, 0))
    # 10 is equally close to both entries, the lower index wins
    assert indices == bytes((0, 0, 1, 1, 1))

    colors = [(i % 256, i // 256, 0, 255) for i in range(300)]
    palette, indices = build_palette(_image(*colors).pixels)
    assert len(palette) == 256
    assert palette[-1] == (255, 0, 0)
    assert indices[256:] == bytes(range(44))


def test_build_palette_size() -> None:
    with raises(PaletteTooLargeError):
        build_palette(bytes(4), 0)

    with raises(PaletteTooLargeError):
        build_palette(bytes(4), 257)


def test_alpha_plane_size() -> None:
    assert alpha_plane_size(9, 8) == 9
    assert alpha_plane_size(9, 4) == 5
    assert alpha_plane_size(9, 1) == 2
    assert alpha_plane_size(9, 0) == 0

    with raises(ValidationError):
        alpha_plane_size(9, 2)


def test_encode_alpha_planes() -> None:
    image = _image(
        (0, 0, 0, 255),
        (0, 0, 0, 0),
        (0, 0, 0, 17),
    )
    assert encode_palette(image, 8) == bytes(3) + bytes((255, 0, 17))
    # even pixel in the low nibble
    assert encode_palette(image, 4) == bytes(3) + bytes((0x0f, 0x01))
    assert encode_palette(image, 0) == bytes(3)

    alphas = (255, 0, 200, 127, 128, 0, 0, 0, 255)
    image = _image(*((0, 0, 0, a) for a in alphas))
    # bit i of byte i // 8, least significant first
    assert encode_palette(image, 1) == bytes(9) + bytes((0x15, 0x01))

    with raises(ValidationError):
        encode_palette(image, 3)


def test_encode_explicit_palette() -> None:
    image = _image((250, 0, 0, 255), (0, 0, 10, 255), (0, 240, 0, 255))
    palette = ((0, 0, 0), (255, 0, 0), (0, 255, 0))
    assert encode_palette(image, 0, palette) == bytes((1, 0, 2))

    with raises(PaletteTooLargeError):
        encode_palette(image, 0, ((0, 0, 0),) * 257)


def test_decode() -> None:
    palette = bytes((10, 20, 30, 99, 40, 50, 60, 99))
    image = decode_palette(bytes((1, 0, 0x1f)), 2, 1, palette, 4)
    assert image.pixels == bytes((60, 50, 40, 255, 30, 20, 10, 17))

    image = decode_palette(bytes((0, 1, 0b10)), 2, 1, palette, 1)
    assert image.pixels == bytes((30, 20, 10, 0, 60, 50, 40, 255))

    image = decode_palette(bytes((1,)), 1, 1, palette, 0)
    assert image.pixels == bytes((60, 50, 40, 255))


def test_decode_errors() -> None:
    palette = bytes((10, 20, 30, 0))

    with raises(DataError):
        decode_palette(bytes((0, 0, 0)), 2, 2, palette, 0)

    with raises(DataError):
        decode_palette(bytes((0, 0, 0, 0, 255)), 2, 2, palette, 8)

    with raises(DataError):
        decode_palette(bytes((0, 1)), 2, 1, palette, 0)

    with raises(ValidationError):
        decode_palette(bytes(4), 2, 2, palette, 5)


def test_round_trip() -> None:
    pixels = b"".join(
        bytes((i * 3 % 256, i * 7 % 256, i * 11 % 256, i * 17 % 256))
        for i in range(64)
    )
    image = RgbaImage(8, 8, pixels)

    palette, _ = build_palette(image.pixels)
    encoded = encode_palette(image, 8)
    decoded = decode_palette(encoded, 8, 8, pack_palette(palette), 8)
    assert decoded.pixels == image.pixels


def test_pack_palette() -> None:
    block = pack_palette(((1, 2, 3), (4, 5, 6)))
    assert len(block) == PALETTE_BLOCK_SIZE
    assert block[:8] == bytes((3, 2, 1, 255, 6, 5, 4, 255))
    assert block[8:] == bytes(PALETTE_BLOCK_SIZE - 8)

    with raises(PaletteTooLargeError):
        pack_palette(((0, 0, 0),) * 257)
