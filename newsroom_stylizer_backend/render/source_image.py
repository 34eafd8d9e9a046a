import logging
import struct
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError


class DecodeFailure(ValueError):
    """Os bytes recebidos não puderam ser decodificados como imagem.

    `code` é um identificador ASCII curto, seguro para headers HTTP.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class SourceState(str, Enum):
    EMPTY = "empty"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceImage:
    pixels: Image.Image

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def decode_source_image(data: bytes) -> SourceImage:
    """Decodifica bytes de upload (qualquer formato raster do Pillow).

    Aplica a orientação EXIF e normaliza para RGB, ou RGBA quando a imagem
    tem transparência.
    """
    if not data:
        raise DecodeFailure("empty-file", "arquivo vazio")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            has_alpha = img.mode in ("RGBA", "LA", "PA") or (
                img.mode == "P" and "transparency" in img.info
            )
            pixels = img.convert("RGBA" if has_alpha else "RGB")
    except (
        UnidentifiedImageError,
        OSError,
        EOFError,
        ValueError,
        SyntaxError,
        struct.error,
        Image.DecompressionBombError,
    ) as e:
        raise DecodeFailure(
            "undecodable-image", f"imagem inválida ({type(e).__name__})") from e

    if pixels.width == 0 or pixels.height == 0:
        raise DecodeFailure("empty-image", "imagem sem dimensões")

    logging.info(
        f"🖼️ Imagem decodificada: {pixels.width}x{pixels.height} ({pixels.mode})")
    return SourceImage(pixels)
