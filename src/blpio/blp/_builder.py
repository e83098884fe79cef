import logging
from collections.abc import Callable
from dataclasses import dataclass
from io import BytesIO

import numpy as np

from ..compression import dxt1_compress, dxt3_compress, dxt5_compress
from ..errors import (
    NonPowerOfTwoError,
    UnsupportedCompressionError,
    ValidationError
)
from ..image import RgbaImage
from ..palette import (
    ALPHA_DEPTHS,
    PALETTE_BLOCK_SIZE,
    Palette,
    build_palette,
    encode_palette,
    pack_palette
)
from ..resize import ResizeMode, resize_to_power_of_two
from ..typing import RgbaColor, StrPath
from ._encoding import encode_argb8888
from ._format import (
    HEADER_SIZE,
    MIP_SLOTS,
    BlpCompression,
    BlpHeader,
    BlpPixelFormat
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlpEncodeOptions:
    """
    Encoding settings of :py:func:`build_blp`.

    Derive modified settings with :py:func:`dataclasses.replace`.
    """
    compression: BlpCompression = BlpCompression.DXT
    """Target color encoding."""
    alpha_depth: int = 8
    """Alpha bit depth of palette and uncompressed output (0, 1, 4 or 8).
    DXT output derives its depth from the image."""
    format_hint: BlpPixelFormat = BlpPixelFormat.DXT1
    """Header format hint. For DXT output with partial transparency, DXT3
    selects DXT3 instead of DXT5."""
    generate_mipmaps: bool = False
    """Build and store the full mipmap chain."""
    dxt_format: BlpPixelFormat = BlpPixelFormat.DXT1
    """DXT3 or DXT5 force that block variant, DXT1 selects it from the alpha
    content of the image."""
    resize_mode: ResizeMode = ResizeMode.PAD_CENTER
    """Strategy of resizing to power-of-two dimensions."""
    prefer_larger: bool = True
    """Round up to the next power of two when stretching."""
    auto_resize: bool = True
    """Resize non power-of-two images instead of rejecting them."""
    fill_color: RgbaColor = (0, 0, 0, 0)
    """RGBA color of the padding area."""


def select_dxt_format(
    image: RgbaImage,
    options: BlpEncodeOptions
) -> tuple[int, BlpPixelFormat]:
    """
    Selects the alpha depth and block variant of DXT output.

    Unless a variant is forced, partial transparency selects DXT5 (or DXT3
    when hinted), alpha limited to exactly 0 and 255 selects DXT1 with 1-bit
    alpha, anything else is stored as opaque DXT1.

    :param image: Image to encode
    :type image: RgbaImage
    :param options: Encoding settings
    :type options: BlpEncodeOptions
    :return: Alpha depth and block variant
    :rtype: tuple[int, BlpPixelFormat]
    """
    match options.dxt_format:
        case BlpPixelFormat.DXT3:
            return 8, BlpPixelFormat.DXT3
        case BlpPixelFormat.DXT5:
            return 8, BlpPixelFormat.DXT5

    alphas = image.alpha_values()
    if any(0 < value < 255 for value in alphas):
        if options.format_hint == BlpPixelFormat.DXT3:
            return 8, BlpPixelFormat.DXT3

        return 8, BlpPixelFormat.DXT5

    if alphas == (0, 255):
        return 1, BlpPixelFormat.DXT1

    return 0, BlpPixelFormat.DXT1


def _downsample(image: RgbaImage) -> RgbaImage:
    source = image.to_array().astype(np.uint32)
    width = max(1, image.width >> 1)
    height = max(1, image.height >> 1)

    total = np.zeros((height, width, 4), dtype=np.uint32)
    count = np.zeros((height, width, 1), dtype=np.uint32)
    for dy in (0, 1):
        for dx in (0, 1):
            part = source[dy::2, dx::2][:height, :width]
            rows, cols = part.shape[:2]
            total[:rows, :cols] += part
            count[:rows, :cols] += 1

    # average rounded half up
    return RgbaImage.from_array(
        ((2 * total + count) // (2 * count)).astype(np.uint8)
    )


def generate_mipmaps(image: RgbaImage) -> list[RgbaImage]:
    """
    Generates a mipmap chain with 2x2 box filtering.

    Each level halves the dimensions of the previous one (rounding down, with
    a minimum of 1) until both dimensions reach 1. Texels on odd edges are
    averaged from the available source texels only.

    :param image: Main image
    :type image: RgbaImage
    :return: Mipmap levels, starting with the main image
    :rtype: list[RgbaImage]
    """
    levels = [image]
    current = image
    while current.width > 1 or current.height > 1:
        current = _downsample(current)
        levels.append(current)

    return levels


_DXT_COMPRESSORS: dict[int, Callable[[RgbaImage], bytes]] = {
    BlpPixelFormat.DXT1: dxt1_compress,
    BlpPixelFormat.DXT3: dxt3_compress,
    BlpPixelFormat.DXT5: dxt5_compress
}


def build_blp(
    image: RgbaImage,
    options: BlpEncodeOptions | None = None
) -> bytes:
    """
    Encodes an image as BLP2 texture data.

    Images with non power-of-two dimensions are resized first, if enabled in
    the options.

    :param image: Image to encode
    :type image: RgbaImage
    :param options: Encoding settings, defaults to None
    :type options: BlpEncodeOptions | None, optional
    :raises ValidationError: Invalid alpha depth
    :raises UnsupportedCompressionError: Unknown target color encoding
    :raises NonPowerOfTwoError: Dimensions are not powers of two, and
        resizing is disabled
    :return: Container data
    :rtype: bytes
    """
    opts = options or BlpEncodeOptions()
    try:
        compression = BlpCompression(opts.compression)
    except ValueError:
        raise UnsupportedCompressionError(opts.compression) from None

    if opts.alpha_depth not in ALPHA_DEPTHS:
        raise ValidationError(
            f"Unsupported alpha depth: {opts.alpha_depth} "
            f"(expected one of {ALPHA_DEPTHS})"
        )

    if not image.is_power_of_two():
        if not opts.auto_resize:
            raise NonPowerOfTwoError(
                "Image dimensions must be powers of two: "
                f"{image.width} x {image.height}"
            )

        resized = resize_to_power_of_two(
            image,
            opts.resize_mode,
            opts.prefer_larger,
            opts.fill_color
        )
        logger.warning(
            "Auto-resized image from %d x %d to %d x %d (%s)",
            image.width,
            image.height,
            resized.width,
            resized.height,
            opts.resize_mode.value
        )
        image = resized

    if compression is BlpCompression.DXT:
        alpha_depth, format_hint = select_dxt_format(image, opts)
    else:
        alpha_depth, format_hint = opts.alpha_depth, opts.format_hint

    levels = [image]
    if opts.generate_mipmaps:
        levels = generate_mipmaps(image)[:MIP_SLOTS]

    palette: Palette = ()
    match compression:
        case BlpCompression.PALETTE:
            # Every level is mapped to the palette of the main image
            palette, _ = build_palette(image.pixels)
            payloads = [
                encode_palette(level, alpha_depth, palette)
                for level in levels
            ]
        case BlpCompression.DXT:
            compressor = _DXT_COMPRESSORS[format_hint]
            payloads = [compressor(level) for level in levels]
        case BlpCompression.ARGB8888:
            payloads = [encode_argb8888(level) for level in levels]

    offset = HEADER_SIZE
    if compression is BlpCompression.PALETTE:
        offset += PALETTE_BLOCK_SIZE

    offsets = [0] * MIP_SLOTS
    sizes = [0] * MIP_SLOTS
    for i, (level, payload) in enumerate(zip(levels, payloads)):
        offsets[i] = offset
        sizes[i] = len(payload)
        offset += len(payload)
        logger.debug(
            "Encoded mipmap #%d (%d x %d): %d bytes",
            i,
            level.width,
            level.height,
            len(payload)
        )

    header = BlpHeader(
        compression,
        alpha_depth,
        format_hint,
        int(opts.generate_mipmaps),
        image.width,
        image.height,
        tuple(offsets),
        tuple(sizes)
    )

    with BytesIO() as stream:
        header.write(stream)
        if compression is BlpCompression.PALETTE:
            stream.write(pack_palette(palette))

        for payload in payloads:
            stream.write(payload)

        return stream.getvalue()


def build_dxt1_blp(image: RgbaImage, generate_mipmaps: bool = False) -> bytes:
    """
    Encodes an image as DXT compressed BLP2 data with default settings.

    The block variant is still selected from the alpha content, partially
    transparent images are stored as DXT5.

    :param image: Image to encode
    :type image: RgbaImage
    :param generate_mipmaps: Store the mipmap chain, defaults to False
    :type generate_mipmaps: bool, optional
    :return: Container data
    :rtype: bytes
    """
    return build_blp(
        image,
        BlpEncodeOptions(generate_mipmaps=generate_mipmaps)
    )


def build_dxt3_blp(image: RgbaImage, generate_mipmaps: bool = False) -> bytes:
    """
    Encodes an image as DXT3 compressed BLP2 data.

    :param image: Image to encode
    :type image: RgbaImage
    :param generate_mipmaps: Store the mipmap chain, defaults to False
    :type generate_mipmaps: bool, optional
    :return: Container data
    :rtype: bytes
    """
    return build_blp(
        image,
        BlpEncodeOptions(
            format_hint=BlpPixelFormat.DXT3,
            generate_mipmaps=generate_mipmaps,
            dxt_format=BlpPixelFormat.DXT3
        )
    )


def build_dxt5_blp(image: RgbaImage, generate_mipmaps: bool = False) -> bytes:
    """
    Encodes an image as DXT5 compressed BLP2 data.

    :param image: Image to encode
    :type image: RgbaImage
    :param generate_mipmaps: Store the mipmap chain, defaults to False
    :type generate_mipmaps: bool, optional
    :return: Container data
    :rtype: bytes
    """
    return build_blp(
        image,
        BlpEncodeOptions(
            format_hint=BlpPixelFormat.DXT5,
            generate_mipmaps=generate_mipmaps,
            dxt_format=BlpPixelFormat.DXT5
        )
    )


def build_palette_blp(
    image: RgbaImage,
    alpha_depth: int = 8,
    generate_mipmaps: bool = False
) -> bytes:
    """
    Encodes an image as palette based BLP2 data.

    :param image: Image to encode
    :type image: RgbaImage
    :param alpha_depth: Alpha bit depth (0, 1, 4 or 8), defaults to 8
    :type alpha_depth: int, optional
    :param generate_mipmaps: Store the mipmap chain, defaults to False
    :type generate_mipmaps: bool, optional
    :raises ValidationError: Invalid alpha depth
    :return: Container data
    :rtype: bytes
    """
    return build_blp(
        image,
        BlpEncodeOptions(
            compression=BlpCompression.PALETTE,
            alpha_depth=alpha_depth,
            generate_mipmaps=generate_mipmaps
        )
    )


def build_argb8888_blp(
    image: RgbaImage,
    generate_mipmaps: bool = False
) -> bytes:
    """
    Encodes an image as uncompressed BLP2 data.

    :param image: Image to encode
    :type image: RgbaImage
    :param generate_mipmaps: Store the mipmap chain, defaults to False
    :type generate_mipmaps: bool, optional
    :return: Container data
    :rtype: bytes
    """
    return build_blp(
        image,
        BlpEncodeOptions(
            compression=BlpCompression.ARGB8888,
            generate_mipmaps=generate_mipmaps
        )
    )


def write_blp_file(
    filepath: StrPath,
    image: RgbaImage,
    options: BlpEncodeOptions | None = None
) -> None:
    """
    Encodes an image and writes it to a BLP2 file at the specified path.

    :param filepath: Path to BLP file
    :type filepath: StrPath
    :param image: Image to encode
    :type image: RgbaImage
    :param options: Encoding settings, defaults to None
    :type options: BlpEncodeOptions | None, optional
    """
    data = build_blp(image, options)
    with open(filepath, "wb") as file:
        file.write(data)
