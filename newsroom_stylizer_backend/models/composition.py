from enum import Enum
from typing import Any, Dict, List, Tuple

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Presets oferecidos pela interface (cores de fundo e tamanhos de canvas)
PALETTE = [
    {"name": "News Green", "value": "#6BFF7A"},
    {"name": "Lavender", "value": "#C9B8FF"},
    {"name": "Fuchsia", "value": "#FF27B1"},
    {"name": "Olive", "value": "#6A5B17"},
    {"name": "Black", "value": "#000000"},
    {"name": "White", "value": "#FFFFFF"},
]

SIZES = [
    {"label": "1200 × 675 (16:9)", "w": 1200, "h": 675},
    {"label": "1920 × 1080 (HD)", "w": 1920, "h": 1080},
    {"label": "1200 × 1200 (Square)", "w": 1200, "h": 1200},
    {"label": "1600 × 900 (16:9)", "w": 1600, "h": 900},
]

# Limites (min, max) de cada parâmetro numérico
RANGES: Dict[str, Tuple[float, float]] = {
    "canvas_width": (1, 4096),
    "canvas_height": (1, 4096),
    "repeat_count": (1, 6),
    "gap_percent": (-60, 60),
    "scale_step_percent": (60, 110),
    "y_offset_percent": (-60, 60),
    "padding_px": (0, 200),
    "base_scale_percent": (20, 120),
    "pixel_density": (1, 2),
}


def clamp(value, low, high):
    return max(low, min(high, value))


def clamp_repeat_count(requested: int) -> int:
    low, high = RANGES["repeat_count"]
    return int(clamp(requested, low, high))


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class Anchor(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


ANCHOR_LABELS = {
    Anchor.TOP_LEFT: "Top Left",
    Anchor.TOP_RIGHT: "Top Right",
    Anchor.BOTTOM_LEFT: "Bottom Left",
    Anchor.BOTTOM_RIGHT: "Bottom Right",
    Anchor.CENTER: "Center",
}

# chaves curtas usadas pelo frontend antigo
_ANCHOR_SHORT_KEYS = {
    "tl": Anchor.TOP_LEFT,
    "tr": Anchor.TOP_RIGHT,
    "bl": Anchor.BOTTOM_LEFT,
    "br": Anchor.BOTTOM_RIGHT,
    "c": Anchor.CENTER,
}

# Fração da sobra (horizontal, vertical) que desloca o ponto de referência.
# 0 = lado esquerdo/topo, 1 = lado direito/base, 0.5 = centro.
ANCHOR_PIVOTS: Dict[Anchor, Tuple[float, float]] = {
    Anchor.TOP_LEFT: (0.0, 0.0),
    Anchor.TOP_RIGHT: (1.0, 0.0),
    Anchor.BOTTOM_LEFT: (0.0, 1.0),
    Anchor.BOTTOM_RIGHT: (1.0, 1.0),
    Anchor.CENTER: (0.5, 0.5),
}


class CompositionConfig(BaseModel):
    """Snapshot imutável de todos os parâmetros de um render.

    Valores numéricos fora da faixa são ajustados para o limite mais próximo,
    nunca rejeitados.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    background_color: str = "#6BFF7A"
    canvas_width: int = 1200
    canvas_height: int = 675
    direction: Direction = Direction.RIGHT
    repeat_count: int = 3
    gap_percent: float = -18
    scale_step_percent: float = 90
    y_offset_percent: float = 0
    anchor: Anchor = Anchor.BOTTOM_RIGHT
    padding_px: float = 24
    base_scale_percent: float = 70
    pixel_density: float = 1

    @field_validator("background_color")
    @classmethod
    def _normalize_color(cls, value: str) -> str:
        try:
            r, g, b = ImageColor.getrgb(value)[:3]
        except ValueError:
            raise ValueError(f"cor de fundo inválida: {value!r}") from None
        return f"#{r:02X}{g:02X}{b:02X}"

    @field_validator("anchor", mode="before")
    @classmethod
    def _accept_short_anchor(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _ANCHOR_SHORT_KEYS.get(value.lower(), value)
        return value

    @field_validator(*RANGES.keys())
    @classmethod
    def _clamp_to_range(cls, value, info):
        low, high = RANGES[info.field_name]
        return clamp(value, low, high)

    @property
    def background_rgb(self) -> Tuple[int, int, int]:
        return ImageColor.getrgb(self.background_color)[:3]

    @property
    def effective_repeat_count(self) -> int:
        return clamp_repeat_count(self.repeat_count)


class LayoutBox(BaseModel):
    """Retângulo base (sem escala) e a posição inicial relativa à âncora."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    draw_width: float
    draw_height: float
    start_x: float
    start_y: float


class Layer(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    scale: float
    x: float
    y: float
    width: float
    height: float


class LayersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    config: Dict[str, Any] = Field(default_factory=dict)
    image_width: int = Field(gt=0)
    image_height: int = Field(gt=0)


class LayersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    config: CompositionConfig
    layout: LayoutBox
    layers: List[Layer]
