"""
Exception hierarchy of the package.

Every failure is raised synchronously to the caller, none of the operations
retry or partially apply their results.
"""


class BlpError(Exception):
    """Base exception raised upon BLP reading, decoding and encoding errors."""

    def __str__(self) -> str:
        return f"BLP - {super().__str__()}"


class FormatError(BlpError):
    """Exception raised when the container structure is invalid."""


class BadMagicError(FormatError):
    """The data does not start with the BLP2 signature."""


class UnsupportedVersionError(FormatError):
    """The container version is not supported."""


class ChainOutOfBoundsError(FormatError):
    """A mipmap slot points past the end of the data."""

    def __init__(self, slot: int, offset: int, size: int, length: int) -> None:
        """
        :param slot: Index of the offending mipmap slot
        :type slot: int
        :param offset: Byte offset stored in the slot
        :type offset: int
        :param size: Byte size stored in the slot
        :type size: int
        :param length: Length of the source data
        :type length: int
        """
        super().__init__(
            f"Mipmap #{slot:d} exceeds data bounds "
            f"(offset: {offset:d}, size: {size:d}, length: {length:d})"
        )
        self.slot = slot


class EmptyChainError(FormatError):
    """No mipmap slot of the container is populated."""


class UnsupportedCompressionError(FormatError):
    """The color encoding of the container is unknown."""

    def __init__(self, compression: int) -> None:
        """
        :param compression: Raw compression value
        :type compression: int
        """
        super().__init__(f"Unsupported compression type: {compression:d}")
        self.compression = compression


class ValidationError(BlpError):
    """Exception raised when caller input or encoding options are invalid."""


class NonPowerOfTwoError(ValidationError):
    """Image dimensions are required to be powers of two."""


class PaletteTooLargeError(ValidationError):
    """The palette does not fit into 8-bit indices."""


class DataError(BlpError):
    """Exception raised when a buffer is shorter than a field requires."""
