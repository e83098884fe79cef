"""
Definitions for reading and writing BLP2 texture files.

The provided classes and functions can read the structure of palette, DXT1,
DXT3, DXT5 and uncompressed BLP2 texture files, decode any of their mipmaps,
and build new textures from RGBA images.
"""

from ._format import (  # noqa: F401
    BLP_MAGIC as BLP_MAGIC,
    BLP_VERSION as BLP_VERSION,
    HEADER_SIZE as HEADER_SIZE,
    MIP_SLOTS as MIP_SLOTS,
    BlpCompression as BlpCompression,
    BlpPixelFormat as BlpPixelFormat,
    BlpHeader as BlpHeader,
    BlpMipmap as BlpMipmap,
    BlpFile as BlpFile,
    dxt_variant as dxt_variant,
    parse_header as parse_header,
    walk_chain as walk_chain
)

from ._encoding import (  # noqa: F401
    decode_argb8888 as decode_argb8888,
    encode_argb8888 as encode_argb8888
)

from ._decoder import (  # noqa: F401
    decode_blp as decode_blp,
    describe_blp as describe_blp
)

from ._builder import (  # noqa: F401
    BlpEncodeOptions as BlpEncodeOptions,
    select_dxt_format as select_dxt_format,
    generate_mipmaps as generate_mipmaps,
    build_blp as build_blp,
    build_dxt1_blp as build_dxt1_blp,
    build_dxt3_blp as build_dxt3_blp,
    build_dxt5_blp as build_dxt5_blp,
    build_palette_blp as build_palette_blp,
    build_argb8888_blp as build_argb8888_blp,
    write_blp_file as write_blp_file
)
