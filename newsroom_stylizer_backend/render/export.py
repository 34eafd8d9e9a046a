import logging
from dataclasses import dataclass
from io import BytesIO

from newsroom_stylizer_backend.render.stack_2d import MissingSurface, Surface

FILENAME_STEM = "newsroom-stylized"
JPEG_QUALITY = 95

# formato pedido -> (formato do Pillow, extensão, media type)
FORMATS = {
    "png": ("PNG", "png", "image/png"),
    "jpeg": ("JPEG", "jpg", "image/jpeg"),
    "jpg": ("JPEG", "jpg", "image/jpeg"),
}


@dataclass(frozen=True)
class ExportedImage:
    content: bytes
    filename: str
    media_type: str


def export_surface(surface: Surface, fmt: str = "png") -> ExportedImage:
    """Codifica a surface final em PNG (sem perdas) ou JPEG (qualidade 95)."""
    key = (fmt or "").lower()
    if key not in FORMATS:
        raise ValueError(f"Formato de exportação não suportado: {fmt}")

    if surface is None or surface.image is None:
        raise MissingSurface("nada renderizado para exportar")

    pil_format, ext, media_type = FORMATS[key]
    buf = BytesIO()
    if pil_format == "JPEG":
        surface.image.convert("RGB").save(buf, "JPEG", quality=JPEG_QUALITY)
    else:
        surface.image.save(buf, "PNG")

    filename = f"{FILENAME_STEM}.{ext}"
    logging.info(f"📦 Exportado {filename} ({buf.tell()} bytes)")
    return ExportedImage(content=buf.getvalue(), filename=filename, media_type=media_type)
