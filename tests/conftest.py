import struct

from blpio.image import RgbaImage


def make_header(
    compression: int = 2,
    alpha_depth: int = 0,
    format_hint: int = 0,
    mip_flag: int = 0,
    width: int = 4,
    height: int = 4,
    offsets: tuple[int, ...] = (),
    sizes: tuple[int, ...] = (),
    magic: bytes = b"BLP2",
    version: int = 1
) -> bytes:
    offsets = offsets + (0,) * (16 - len(offsets))
    sizes = sizes + (0,) * (16 - len(sizes))
    return magic + struct.pack(
        "<I4B2I16I16I",
        version,
        compression,
        alpha_depth,
        format_hint,
        mip_flag,
        width,
        height,
        *offsets,
        *sizes
    )


def solid_image(
    width: int,
    height: int,
    color: tuple[int, int, int, int]
) -> RgbaImage:
    return RgbaImage(width, height, bytes(color) * (width * height))
