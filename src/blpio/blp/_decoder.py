from io import BytesIO

from ..image import RgbaImage
from ._format import (
    BLP_MAGIC,
    BLP_VERSION,
    BlpCompression,
    BlpFile,
    BlpHeader,
    BlpPixelFormat,
    dxt_variant
)


def decode_blp(data: bytes) -> RgbaImage:
    """
    Decodes the main image of BLP2 texture data.

    The first populated mipmap slot is used as the main image.

    :param data: Container data
    :type data: bytes
    :raises FormatError: Invalid container structure
    :raises DataError: Truncated header, palette or payload
    :return: Decoded image
    :rtype: RgbaImage
    """
    return BlpFile.from_bytes(data).decode()


_COMPRESSION_NAMES: dict[int, str] = {
    BlpCompression.PALETTE: "Palettized (RAW1)",
    BlpCompression.DXT: "DXT-compressed (DXT1/3/5)",
    BlpCompression.ARGB8888: "Uncompressed (RAW3, A8R8G8B8)"
}

_ALPHA_NAMES: dict[int, str] = {
    0: "No alpha channel",
    1: "1-bit alpha (binary mask)",
    4: "4-bit alpha (rare)",
    8: "8-bit alpha (full)"
}

_FORMAT_NAMES: dict[int, str] = {
    BlpPixelFormat.DXT1: "Default/unspecified",
    BlpPixelFormat.DXT3: "DXT3 (if DXT)",
    BlpPixelFormat.DXT5: "DXT5 (if DXT)"
}


def describe_blp(data: bytes) -> str:
    """
    Creates a human-readable description of the header of BLP2 texture data.

    For DXT compressed textures the block variant that decoding would use is
    included, together with the reason of the choice. Unknown versions are
    described as well.

    :param data: Container data
    :type data: bytes
    :raises BadMagicError: Invalid signature
    :raises DataError: The header is truncated
    :return: Multi-line description
    :rtype: str
    """
    header = BlpHeader.read(BytesIO(data), strict=False)

    compression = _COMPRESSION_NAMES.get(
        header.compression,
        f"Unknown ({header.compression})"
    )
    alpha = _ALPHA_NAMES.get(
        header.alpha_depth,
        f"Unknown ({header.alpha_depth})"
    )
    preferred = _FORMAT_NAMES.get(
        header.format_hint,
        f"{header.format_hint}"
    )
    match header.mip_flag:
        case 0:
            mips = "Only main image (no mipmaps)"
        case 1 | 2:
            mips = "Multiple mipmaps present"
        case _:
            mips = f"Unknown ({header.mip_flag})"

    lines = [
        f"Magic: {header.magic.decode('ascii')} "
        f"(should be {BLP_MAGIC.decode('ascii')!r})",
        f"Version: {header.version} (should be {BLP_VERSION:d})",
        f"Compression: {header.compression} ({compression})",
        f"Alpha size: {header.alpha_depth} ({alpha})",
        f"Preferred format: {header.format_hint} ({preferred})",
        f"Mipmaps: {mips}",
        f"Width: {header.width} px",
        f"Height: {header.height} px",
        f"Mipmap offsets: [{', '.join(map(str, header.mip_offsets))}]",
        f"Mipmap sizes: [{', '.join(map(str, header.mip_sizes))}]"
    ]

    if header.compression == BlpCompression.DXT:
        variant = dxt_variant(header.format_hint)
        match variant:
            case BlpPixelFormat.DXT3 | BlpPixelFormat.DXT5:
                reason = f"preferred format {header.format_hint:d}"
            case _:
                reason = (
                    f"preferred format {header.format_hint:d} is neither "
                    f"{BlpPixelFormat.DXT3:d} (DXT3) "
                    f"nor {BlpPixelFormat.DXT5:d} (DXT5)"
                )

        lines.append(f"DXT type: {variant.name} ({reason})")

    return "\n".join(lines)
