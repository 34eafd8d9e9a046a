from typing import Optional, Sequence, Tuple

from PIL import Image

from newsroom_stylizer_backend.models.composition import (
    RANGES,
    CompositionConfig,
    Layer,
    clamp,
)
from newsroom_stylizer_backend.render.dynamic_stack import build_layers, resolve_layout
from newsroom_stylizer_backend.render.source_image import SourceImage


class MissingSurface(RuntimeError):
    """Nenhuma surface anexada para receber o render."""


class Surface:
    """Superfície raster com dono explícito; só o compositor a altera."""

    def __init__(self):
        self._image: Optional[Image.Image] = None

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return self._image.size if self._image is not None else None

    def replace(self, image: Image.Image) -> None:
        self._image = image


def clamp_density(density: float) -> float:
    low, high = RANGES["pixel_density"]
    return clamp(density, low, high)


def device_rect(layer: Layer, density: float) -> Tuple[int, int, int, int]:
    """Converte o retângulo lógico da camada em pixels físicos (left, top, w, h).

    As bordas são escaladas e arredondadas separadamente, então camadas
    vizinhas nunca abrem frestas de 1px.
    """
    left = round(layer.x * density)
    top = round(layer.y * density)
    right = round((layer.x + layer.width) * density)
    bottom = round((layer.y + layer.height) * density)
    return left, top, max(1, right - left), max(1, bottom - top)


def visible_rect(
    rect: Tuple[int, int, int, int], size: Tuple[int, int]
) -> Optional[Tuple[int, int, int, int]]:
    """Interseção (left, top, right, bottom) do retângulo com a surface, ou None."""
    left, top, w, h = rect
    vl, vt = max(left, 0), max(top, 0)
    vr, vb = min(left + w, size[0]), min(top + h, size[1])
    if vr <= vl or vb <= vt:
        return None
    return vl, vt, vr, vb


def composite(
    layers: Sequence[Layer],
    image: Optional[SourceImage],
    background: Tuple[int, int, int],
    canvas_size: Tuple[int, int],
    density: float,
    surface: Surface,
) -> Surface:
    """Rasteriza as camadas sobre o fundo sólido e grava na surface.

    Desenha do maior índice para o 0, então a camada 0 fica sempre por cima.
    """
    density = clamp_density(density)
    width, height = canvas_size
    physical = (int(width * density), int(height * density))

    frame = Image.new("RGB", physical, background)

    if image is not None:
        src = image.pixels
        for layer in sorted(layers, key=lambda l: l.index, reverse=True):
            left, top, w, h = device_rect(layer, density)
            visible = visible_rect((left, top, w, h), physical)
            if visible is None:
                continue

            # reamostra só o trecho que cabe na surface
            vl, vt, vr, vb = visible
            box = (
                (vl - left) * src.width / w,
                (vt - top) * src.height / h,
                min(src.width, (vr - left) * src.width / w),
                min(src.height, (vb - top) * src.height / h),
            )
            tile = src.resize((vr - vl, vb - vt), Image.BICUBIC, box=box)

            # fonte com alfa: source-over sobre o fundo opaco
            if tile.mode == "RGBA":
                frame.paste(tile, (vl, vt), tile)
            else:
                frame.paste(tile, (vl, vt))

    surface.replace(frame)
    return surface


def render_into(
    config: CompositionConfig, image: Optional[SourceImage], surface: Optional[Surface]
) -> Surface:
    """Pipeline completo: layout -> camadas -> compositor."""
    if surface is None:
        raise MissingSurface("surface de render não inicializada")

    layers = []
    if image is not None:
        layout = resolve_layout(image.aspect_ratio, config)
        layers = build_layers(layout, config)

    return composite(
        layers,
        image,
        config.background_rgb,
        (config.canvas_width, config.canvas_height),
        config.pixel_density,
        surface,
    )


def render(config: CompositionConfig, image: Optional[SourceImage] = None) -> Image.Image:
    return render_into(config, image, Surface()).image
