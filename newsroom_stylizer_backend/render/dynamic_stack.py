import os
import json
import logging
from pathlib import Path
from typing import List

from newsroom_stylizer_backend.models.composition import (
    ANCHOR_PIVOTS,
    CompositionConfig,
    Direction,
    Layer,
    LayoutBox,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

# Diretório base do pacote
BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "config.json"


def load_config(config_path=None):
    """Lê o config.json do serviço e retorna (project, defaults)."""
    if config_path is None:
        config_path = os.getenv("STYLIZER_CONFIG") or DEFAULT_CONFIG_PATH

    # Normaliza para string
    if isinstance(config_path, Path):
        config_path = str(config_path)

    # OFFLINE MODE: bloqueia HTTP
    if config_path.startswith("http"):
        raise RuntimeError("Config remoto não permitido em modo offline")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config não encontrado: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return data.get("project", {}), data.get("defaults", {})


def resolve_layout(aspect_ratio: float, config: CompositionConfig) -> LayoutBox:
    """Calcula o retângulo base e a posição inicial a partir da âncora.

    O menor lado renderizado da imagem sempre vale base_scale_percent do
    menor lado do canvas, seja a foto paisagem ou retrato.
    """
    width, height = config.canvas_width, config.canvas_height
    base_target = config.base_scale_percent / 100 * min(width, height)

    if aspect_ratio >= 1:
        # paisagem (ou quadrada): altura fixa
        draw_h = base_target
        draw_w = base_target * aspect_ratio
    else:
        # retrato: largura fixa
        draw_w = base_target
        draw_h = base_target / aspect_ratio

    # center ignora o padding: p + 0.5 * (W - 2p - dw) == (W - dw) / 2
    hx, vy = ANCHOR_PIVOTS[config.anchor]
    pad = config.padding_px
    start_x = pad + hx * (width - 2 * pad - draw_w)
    start_y = pad + vy * (height - 2 * pad - draw_h)

    return LayoutBox(
        draw_width=draw_w, draw_height=draw_h, start_x=start_x, start_y=start_y
    )


def build_layers(layout: LayoutBox, config: CompositionConfig) -> List[Layer]:
    """Expande o layout em uma camada por repetição (índice 0 = frente).

    Função pura: as mesmas entradas sempre geram a mesma sequência.
    """
    count = config.effective_repeat_count
    step = 1 if config.direction == Direction.RIGHT else -1
    gap_px = config.gap_percent / 100 * layout.draw_width
    y_step_px = config.y_offset_percent / 100 * layout.draw_height
    ratio = config.scale_step_percent / 100
    hx, vy = ANCHOR_PIVOTS[config.anchor]

    layers = []
    for i in range(count):
        scale = ratio ** i
        w = layout.draw_width * scale
        h = layout.draw_height * scale

        # pivô: a escala parte do canto da âncora, não do topo-esquerdo
        x = layout.start_x + step * gap_px * i + hx * (layout.draw_width - w)
        y = layout.start_y + y_step_px * i + vy * (layout.draw_height - h)

        layers.append(Layer(index=i, scale=scale, x=x, y=y, width=w, height=h))

    return layers
