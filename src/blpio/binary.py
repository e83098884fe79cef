"""
Wrapper functions to simplify the reading/writing of the little-endian
integer fields used in the BLP container header.

Unlike a plain :py:meth:`io.RawIOBase.read`, the readers never return short
data: running out of input raises :py:class:`~blpio.errors.DataError`.
"""


import struct
from typing import IO

from .errors import DataError


_ulong = struct.Struct("<I")


def read_exact(stream: IO[bytes], count: int) -> bytes:
    """
    Reads an exact number of bytes.

    :param stream: Source binary stream
    :type stream: IO[bytes]
    :param count: Number of bytes to read
    :type count: int
    :raises DataError: The stream ended before the requested length
    :return: Raw bytes
    :rtype: bytes
    """
    data = stream.read(count)
    if len(data) != count:
        raise DataError(
            f"Unexpected end of data (expected: {count:d} bytes, "
            f"got: {len(data):d})"
        )

    return data


def read_bytes(stream: IO[bytes], count: int = 1) -> tuple[int, ...]:
    """
    Reads multiple bytes as unsigned integers.

    :param stream: Source binary stream
    :type stream: IO[bytes]
    :param count: Number of bytes to read, defaults to 1
    :type count: int, optional
    :return: 8-bit unsigned integers
    :rtype: tuple[int, ...]
    """
    return struct.unpack(f"<{count:d}B", read_exact(stream, count))


def read_ulong(stream: IO[bytes]) -> int:
    """
    Reads a single little-endian unsigned long integer.

    :param stream: Source binary stream
    :type stream: IO[bytes]
    :return: 32-bit unsigned integer
    :rtype: int
    """
    return _ulong.unpack(read_exact(stream, 4))[0]  # type: ignore[no-any-return]


def read_ulongs(stream: IO[bytes], count: int = 1) -> tuple[int, ...]:
    """
    Reads multiple little-endian unsigned long integers.

    :param stream: Source binary stream
    :type stream: IO[bytes]
    :param count: Number of integers to read, defaults to 1
    :type count: int, optional
    :return: 32-bit unsigned integers
    :rtype: tuple[int, ...]
    """
    return struct.unpack(f"<{count:d}I", read_exact(stream, 4 * count))


def write_byte(stream: IO[bytes], *args: int) -> None:
    """
    Writes integers as bytes.

    :param stream: Target binary stream
    :type stream: IO[bytes]
    :param args: 8-bit unsigned integers
    :type args: int
    """
    stream.write(struct.pack(f"{len(args):d}B", *args))


def write_ulong(stream: IO[bytes], *args: int) -> None:
    """
    Writes little-endian unsigned long integers.

    :param stream: Target binary stream
    :type stream: IO[bytes]
    :param args: 32-bit unsigned integers
    :type args: int
    """
    stream.write(struct.pack(f"<{len(args):d}I", *args))
