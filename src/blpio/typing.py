from os import PathLike
from typing import TypeAlias


StrPath: TypeAlias = str | PathLike[str]
"""Path in string representation."""
RgbaColor: TypeAlias = tuple[int, int, int, int]
"""8-bit RGBA color components."""
