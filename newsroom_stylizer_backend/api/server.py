# api/server.py
import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from newsroom_stylizer_backend.models.composition import (
    ANCHOR_LABELS,
    PALETTE,
    RANGES,
    SIZES,
    CompositionConfig,
    Direction,
    LayersRequest,
    LayersResponse,
)
from newsroom_stylizer_backend.render.dynamic_stack import (
    build_layers,
    load_config,
    resolve_layout,
)
from newsroom_stylizer_backend.render.export import FORMATS, export_surface
from newsroom_stylizer_backend.render.session import StylizerSession
from newsroom_stylizer_backend.render.stack_2d import Surface

# CONFIGURAÇÕES GLOBAIS
SERVICE_NAME = "newsroom-stylizer-backend"
SERVICE_VERSION = "0.1.0"
project, defaults = {}, {}

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    global project, defaults

    try:
        logging.info("Carregando configuração do serviço...")
        project, defaults = load_config()
        logging.info(f"✅ Configuração carregada: {len(defaults)} valores padrão.")
    except Exception:
        logging.exception("❌ Falha ao carregar configuração; usando padrões internos:")
        project, defaults = {}, {}

    yield

    logging.info("🧹 Encerrando aplicação.")

app = FastAPI(lifespan=lifespan)


def build_config(payload: dict) -> CompositionConfig:
    """Mescla o payload sobre os padrões carregados e valida."""
    if not isinstance(payload, dict):
        raise HTTPException(status_code=422, detail="config precisa ser um objeto")
    try:
        return CompositionConfig.model_validate({**defaults, **payload})
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        )


@app.get("/api/presets")
def presets():
    return {
        "palette": PALETTE,
        "sizes": SIZES,
        "anchors": [{"key": a.value, "label": label} for a, label in ANCHOR_LABELS.items()],
        "directions": [d.value for d in Direction],
        "ranges": {k: {"min": lo, "max": hi} for k, (lo, hi) in RANGES.items()},
        "defaults": build_config({}).model_dump(by_alias=True, mode="json"),
    }


@app.post("/api/layers", response_model=LayersResponse)
def layers_preview(payload: LayersRequest = Body(...)):
    config = build_config(payload.config)
    layout = resolve_layout(payload.image_width / payload.image_height, config)
    return LayersResponse(
        config=config, layout=layout, layers=build_layers(layout, config)
    )


@app.post("/api/render")
def render_image(
    file: Optional[UploadFile] = File(None),
    config: str = Form("{}"),
    fmt: str = Form("png", alias="format"),
):
    if fmt.lower() not in FORMATS:
        raise HTTPException(
            status_code=400, detail=f"Formato não suportado: {fmt}")

    try:
        raw = json.loads(config or "{}")
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=422, detail=f"config inválido: {e}")

    composition = build_config(raw)
    start = time.monotonic()

    try:
        session = StylizerSession(config=composition)
        if file is not None:
            logging.info(f"📥 Upload recebido: {file.filename}")
            session.load_image(file.file.read())

        session.attach_surface(Surface())
        exported = export_surface(session.surface, fmt)

    except HTTPException:
        raise
    except Exception as e:
        logging.exception("❌ Erro inesperado durante o render:")
        raise HTTPException(
            status_code=500, detail=f"Erro interno ao processar render: {str(e)}")

    elapsed = time.monotonic() - start
    logging.info(
        f"✅ Render completo em {elapsed:.2f}s — {exported.filename} "
        f"({session.state.value})")

    headers = {
        "Content-Disposition": f'attachment; filename="{exported.filename}"',
        "X-Render-Time": f"{elapsed:.4f}",
    }
    if session.diagnostic:
        # código ASCII curto; o detalhe fica no log
        headers["X-Stylizer-Diagnostic"] = session.diagnostic

    return Response(
        content=exported.content, media_type=exported.media_type, headers=headers)


@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "service": project.get("service", SERVICE_NAME),
        "version": project.get("version", SERVICE_VERSION),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
