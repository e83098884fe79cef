"""
BLP2 codec plugin definitions for the Pillow library.

Pillow ships its own ``BLP`` plugin, the codec of this package is registered
under the ``BLP2`` format name instead.
"""

from typing import IO

from PIL import Image, ImageFile

from ..errors import EmptyChainError
from ..image import RgbaImage
from ._builder import BlpEncodeOptions, build_blp
from ._format import BLP_MAGIC, BlpFile


def _accept(prefix: bytes) -> bool:
    return prefix[:4] == BLP_MAGIC


def image_from_pillow(im: Image.Image) -> RgbaImage:
    """
    Converts a Pillow image to a neutral RGBA image.

    :param im: Source image of any mode
    :type im: Image.Image
    :return: Converted image
    :rtype: RgbaImage
    """
    if im.mode != "RGBA":
        im = im.convert("RGBA")

    return RgbaImage(im.width, im.height, im.tobytes())


def image_to_pillow(image: RgbaImage) -> Image.Image:
    """
    Converts a neutral RGBA image to a Pillow image.

    :param image: Source image
    :type image: RgbaImage
    :return: Image in ``RGBA`` mode
    :rtype: Image.Image
    """
    return Image.frombytes("RGBA", (image.width, image.height), image.pixels)


class BlpImageFile(ImageFile.ImageFile):
    """
    BLP2 texture format handler.
    """
    format = "BLP2"
    format_description = "BLP2 tiled texture"

    def _open(self) -> None:
        assert self.fp is not None

        blp = BlpFile.read(self.fp)
        if not blp.mipmaps:
            raise EmptyChainError("No mipmaps found in texture")

        mip = blp.mipmaps[0]
        self._size = (mip.width, mip.height)
        self._mode = "RGBA"

        self.tile = [
            ImageFile._Tile(
                "BLP2",
                (0, 0) + self.size,
                0,
                (blp,)
            )
        ]


class _BlpDecoder(ImageFile.PyDecoder):
    """
    Decoder for BLP2 texture files.
    """
    _pulls_fd = True

    def decode(
        self,
        buffer: bytes | Image.SupportsArrayInterface
    ) -> tuple[int, int]:
        """
        Decodes the main image of the previously read BLP2 texture.

        The method expects that the read :py:class:`~blpio.blp.BlpFile` was
        passed as argument to the instance.

        :param buffer: Binary file to be read (UNUSED)
        :type buffer: bytes | Image.SupportsArrayInterface
        :return: Bytes consumed/reading finished and error code
        :rtype: tuple[int, int]
        """
        blp: BlpFile = self.args[0]
        image = blp.decode()

        self.set_as_raw(image.pixels)
        return -1, 0


def _save(im: Image.Image, fp: IO[bytes], filename: str | bytes) -> None:
    options: BlpEncodeOptions | None = im.encoderinfo.get("blp_options")
    fp.write(build_blp(image_from_pillow(im), options))


def register_blp_codec() -> None:
    """
    Registers BLP2 codec for the Pillow package.

    Extensions:

    - ``.blp``

    Decoders:

    - ``BLP2``

    Saving accepts a :py:class:`~blpio.blp.BlpEncodeOptions` instance in the
    ``blp_options`` keyword argument.
    """
    Image.register_decoder("BLP2", _BlpDecoder)

    Image.register_open(
        BlpImageFile.format,
        BlpImageFile,
        _accept
    )
    Image.register_save(BlpImageFile.format, _save)

    Image.register_extensions(
        BlpImageFile.format,
        [".blp"]
    )
