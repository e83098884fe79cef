"""
Reading and writing BLP2 tiled texture files.

The :py:mod:`blpio.blp` subpackage handles the container, the codecs of the
pixel encodings live in :py:mod:`blpio.compression` (DXT blocks) and
:py:mod:`blpio.palette` (8-bit palette indices).
"""

__version__ = "0.1.0"
