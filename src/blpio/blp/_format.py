# Class structure and read-write methods for handling the BLP2 container
# structure: a fixed size header with a 16 slot mipmap offset/size table,
# an optional palette block and the mipmap payloads.


import logging
from dataclasses import dataclass
from enum import IntEnum
from io import BytesIO
from typing import IO, Self

from .. import binary
from ..compression import (
    dxt1_decompress,
    dxt3_decompress,
    dxt5_decompress
)
from ..errors import (
    BadMagicError,
    ChainOutOfBoundsError,
    DataError,
    EmptyChainError,
    UnsupportedCompressionError,
    UnsupportedVersionError,
    ValidationError
)
from ..image import RgbaImage
from ..palette import PALETTE_BLOCK_SIZE, decode_palette
from ..typing import StrPath
from ._encoding import decode_argb8888


logger = logging.getLogger(__name__)


BLP_MAGIC = b"BLP2"
"""Container signature."""
BLP_VERSION = 1
"""Supported container version."""
HEADER_SIZE = 0x94
"""Size of the fixed header in bytes."""
MIP_SLOTS = 16
"""Number of mipmap slots in the header."""


class BlpCompression(IntEnum):
    """Pixel color encoding."""
    PALETTE = 1
    """8-bit palette indices with optional alpha plane (RAW1)."""
    DXT = 2
    """S3TC block compression (DXT1/DXT3/DXT5)."""
    ARGB8888 = 3
    """Uncompressed 32-bit pixels (RAW3)."""


class BlpPixelFormat(IntEnum):
    """Preferred pixel format hint stored in the header."""
    DXT1 = 0
    """DXT1 with optional punch-through alpha."""
    DXT3 = 1
    """DXT3 with explicit 4-bit alpha."""
    ARGB8888 = 4
    """8-bit ARGB."""
    ARGB1555 = 5
    """5-bit RGB with 1-bit alpha."""
    ARGB4444 = 6
    """4-bit ARGB."""
    DXT5 = 7
    """DXT5 with interpolated alpha."""


def dxt_variant(format_hint: int) -> BlpPixelFormat:
    """
    Selects the DXT block variant of a DXT compressed texture.

    Only the DXT3 and DXT5 hints select their variants, every other value
    falls back to DXT1.

    :param format_hint: Raw format hint from the header
    :type format_hint: int
    :return: Block variant
    :rtype: BlpPixelFormat
    """
    match format_hint:
        case BlpPixelFormat.DXT3:
            return BlpPixelFormat.DXT3
        case BlpPixelFormat.DXT5:
            return BlpPixelFormat.DXT5

    return BlpPixelFormat.DXT1


@dataclass(frozen=True)
class BlpHeader:
    """
    Fixed size BLP2 header.

    The compression and format hint are kept as raw integers, so that files
    with unknown values can still be inspected.
    """
    compression: int
    alpha_depth: int
    format_hint: int
    mip_flag: int
    width: int
    height: int
    mip_offsets: tuple[int, ...]
    mip_sizes: tuple[int, ...]
    magic: bytes = BLP_MAGIC
    version: int = BLP_VERSION

    @classmethod
    def read(cls, stream: IO[bytes], strict: bool = True) -> Self:
        """
        Reads the header from a binary stream.

        :param stream: Source binary stream
        :type stream: IO[bytes]
        :param strict: Reject unknown container versions, defaults to True
        :type strict: bool, optional
        :raises BadMagicError: The stream does not start with the signature
        :raises UnsupportedVersionError: Unknown container version
        :raises DataError: The header is truncated
        :return: Header data
        :rtype: Self
        """
        magic = stream.read(4)
        if magic != BLP_MAGIC:
            raise BadMagicError(
                f"Invalid signature: {magic!r} (expected {BLP_MAGIC!r})"
            )

        version = binary.read_ulong(stream)
        if strict and version != BLP_VERSION:
            raise UnsupportedVersionError(
                f"Unsupported version: {version:d} "
                f"(expected {BLP_VERSION:d})"
            )

        compression, alpha_depth, format_hint, mip_flag = binary.read_bytes(
            stream,
            4
        )
        width, height = binary.read_ulongs(stream, 2)
        offsets = binary.read_ulongs(stream, MIP_SLOTS)
        sizes = binary.read_ulongs(stream, MIP_SLOTS)

        return cls(
            compression,
            alpha_depth,
            format_hint,
            mip_flag,
            width,
            height,
            offsets,
            sizes,
            magic,
            version
        )

    def write(self, stream: IO[bytes]) -> None:
        """
        Writes the header to a binary stream.

        :param stream: Target binary stream
        :type stream: IO[bytes]
        """
        stream.write(self.magic)
        binary.write_ulong(stream, self.version)
        binary.write_byte(
            stream,
            self.compression,
            self.alpha_depth,
            self.format_hint,
            self.mip_flag
        )
        binary.write_ulong(stream, self.width, self.height)
        binary.write_ulong(stream, *self.mip_offsets)
        binary.write_ulong(stream, *self.mip_sizes)


@dataclass(frozen=True)
class BlpMipmap:
    """
    Raw payload of a populated mipmap slot.

    The dimensions are derived from the header dimensions and the slot index.
    """
    width: int
    height: int
    offset: int
    size: int
    data: bytes


def parse_header(data: bytes) -> BlpHeader:
    """
    Parses the header at the start of BLP data.

    :param data: Container data
    :type data: bytes
    :raises BadMagicError: The data does not start with the signature
    :raises UnsupportedVersionError: Unknown container version
    :raises DataError: The header is truncated
    :return: Header data
    :rtype: BlpHeader
    """
    return BlpHeader.read(BytesIO(data))


def walk_chain(data: bytes, header: BlpHeader) -> tuple[BlpMipmap, ...]:
    """
    Collects the populated mipmap slots of the header.

    A slot is populated when both its offset and size are non-zero. The
    dimensions of slot ``i`` are the header dimensions halved ``i`` times,
    with a minimum of 1.

    :param data: Container data
    :type data: bytes
    :param header: Parsed header of the data
    :type header: BlpHeader
    :raises ChainOutOfBoundsError: A slot points past the end of the data
    :return: Mipmaps in slot order
    :rtype: tuple[BlpMipmap, ...]
    """
    mipmaps: list[BlpMipmap] = []
    for i, (offset, size) in enumerate(
        zip(header.mip_offsets, header.mip_sizes)
    ):
        if not (offset and size):
            continue

        if offset + size > len(data):
            raise ChainOutOfBoundsError(i, offset, size, len(data))

        mipmaps.append(
            BlpMipmap(
                max(1, header.width >> i),
                max(1, header.height >> i),
                offset,
                size,
                bytes(data[offset:offset + size])
            )
        )

    return tuple(mipmaps)


class BlpFile():
    """
    Container for BLP2 texture data.
    """

    def __init__(
        self,
        header: BlpHeader,
        mipmaps: tuple[BlpMipmap, ...],
        palette: bytes = b""
    ) -> None:
        """
        :param header: Container header
        :type header: BlpHeader
        :param mipmaps: Populated mipmap slots
        :type mipmaps: tuple[BlpMipmap, ...]
        :param palette: Raw palette block, defaults to b""
        :type palette: bytes, optional
        """
        self._source: str | None = None
        self._header = header
        self._mips = mipmaps
        self._palette = palette

    @property
    def source(self) -> str | None:
        """
        :return: Source file path
        :rtype: str | None
        """
        return self._source

    @property
    def header(self) -> BlpHeader:
        """
        :return: Container header
        :rtype: BlpHeader
        """
        return self._header

    @property
    def mipmaps(self) -> tuple[BlpMipmap, ...]:
        """
        :return: Populated mipmap slots
        :rtype: tuple[BlpMipmap, ...]
        """
        return self._mips

    @property
    def palette(self) -> bytes:
        """
        Raw palette block (empty unless the texture is palette encoded).

        :return: Palette entries in B, G, R, X order
        :rtype: bytes
        """
        return self._palette

    def decode(self, level: int = 0) -> RgbaImage:
        """
        Decodes a populated mipmap of the texture.

        :param level: Index among the populated mipmaps, defaults to 0
        :type level: int, optional
        :raises EmptyChainError: The texture has no populated mipmaps
        :raises ValidationError: The level is not a populated mipmap index
        :raises UnsupportedCompressionError: Unknown color encoding
        :raises DataError: Payload or palette is truncated
        :return: Decoded image
        :rtype: RgbaImage
        """
        if not self._mips:
            raise EmptyChainError("No mipmaps found in texture")

        if not 0 <= level < len(self._mips):
            raise ValidationError(
                f"Mipmap level out of range: {level:d} "
                f"(populated levels: {len(self._mips):d})"
            )

        header = self._header
        mip = self._mips[level]

        match header.compression:
            case BlpCompression.PALETTE:
                if len(self._palette) < PALETTE_BLOCK_SIZE:
                    raise DataError(
                        f"Palette block truncated (expected: "
                        f"{PALETTE_BLOCK_SIZE:d} bytes, "
                        f"got: {len(self._palette):d})"
                    )

                logger.debug(
                    "Decoding %d x %d palette mipmap (alpha depth: %d)",
                    mip.width,
                    mip.height,
                    header.alpha_depth
                )
                return decode_palette(
                    mip.data,
                    mip.width,
                    mip.height,
                    self._palette,
                    header.alpha_depth
                )
            case BlpCompression.DXT:
                variant = dxt_variant(header.format_hint)
                logger.debug(
                    "Decoding %d x %d %s mipmap",
                    mip.width,
                    mip.height,
                    variant.name
                )
                match variant:
                    case BlpPixelFormat.DXT3:
                        decompress = dxt3_decompress
                    case BlpPixelFormat.DXT5:
                        decompress = dxt5_decompress
                    case _:
                        decompress = dxt1_decompress

                return decompress(mip.data, mip.width, mip.height)
            case BlpCompression.ARGB8888:
                logger.debug(
                    "Decoding %d x %d ARGB8888 mipmap",
                    mip.width,
                    mip.height
                )
                return decode_argb8888(mip.data, mip.width, mip.height)

        raise UnsupportedCompressionError(header.compression)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """
        Parses the structure of a BLP2 texture.

        The palette block is sliced as-is, a truncated block is only
        reported when decoding.

        :param data: Container data
        :type data: bytes
        :raises FormatError: Invalid container structure
        :raises DataError: The header is truncated
        :return: Texture data
        :rtype: Self
        """
        header = parse_header(data)
        mipmaps = walk_chain(data, header)
        palette = b""
        if header.compression == BlpCompression.PALETTE:
            palette = bytes(data[HEADER_SIZE:HEADER_SIZE + PALETTE_BLOCK_SIZE])

        return cls(header, mipmaps, palette)

    @classmethod
    def read(cls, stream: IO[bytes]) -> Self:
        """
        Reads a BLP2 texture from a binary stream.

        The stream is read to its end, as mipmap offsets are absolute.

        :param stream: Source binary stream
        :type stream: IO[bytes]
        :return: Texture data
        :rtype: Self
        """
        return cls.from_bytes(stream.read())

    @classmethod
    def read_file(cls, filepath: StrPath) -> Self:
        """
        Reads a BLP2 file at the specified path.

        :param filepath: Path to BLP file
        :type filepath: StrPath
        :return: Texture data
        :rtype: Self
        """
        with open(filepath, "rb") as file:
            output = cls.read(file)

        output._source = str(filepath)

        return output
