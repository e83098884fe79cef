from io import BytesIO

from PIL import Image

from blpio.blp import (
    BlpCompression,
    BlpEncodeOptions,
    BlpPixelFormat,
    build_blp,
    decode_blp,
    parse_header
)
from blpio.blp.pillow import (
    image_from_pillow,
    image_to_pillow,
    register_blp_codec
)
from blpio.image import RgbaImage

from conftest import solid_image


def test_conversion() -> None:
    im = Image.new("RGB", (2, 3), (10, 20, 30))
    image = image_from_pillow(im)
    assert (image.width, image.height) == (2, 3)
    assert image.pixels == bytes((10, 20, 30, 255)) * 6

    image = RgbaImage(2, 1, bytes((1, 2, 3, 4, 5, 6, 7, 8)))
    im = image_to_pillow(image)
    assert im.mode == "RGBA"
    assert im.size == (2, 1)
    assert im.getpixel((1, 0)) == (5, 6, 7, 8)


def test_decoding() -> None:
    register_blp_codec()

    data = build_blp(
        solid_image(8, 4, (0, 0, 255, 255)),
        BlpEncodeOptions(generate_mipmaps=True)
    )
    with Image.open(BytesIO(data), formats=["BLP2"]) as im:
        assert im.format == "BLP2"
        assert im.mode == "RGBA"
        assert im.size == (8, 4)

        rgba = im.getpixel((0, 0))
        assert isinstance(rgba, tuple)
        assert rgba == (0, 0, 255, 255)


def test_encoding() -> None:
    register_blp_codec()

    im = Image.new("RGBA", (4, 4), (10, 20, 30, 40))
    stream = BytesIO()
    im.save(
        stream,
        format="BLP2",
        blp_options=BlpEncodeOptions(compression=BlpCompression.ARGB8888)
    )

    data = stream.getvalue()
    assert parse_header(data).compression == BlpCompression.ARGB8888
    assert decode_blp(data).pixels == bytes((10, 20, 30, 40)) * 16

    stream = BytesIO()
    im.save(stream, format="BLP2")
    header = parse_header(stream.getvalue())
    assert header.compression == BlpCompression.DXT
    assert header.format_hint == BlpPixelFormat.DXT5
