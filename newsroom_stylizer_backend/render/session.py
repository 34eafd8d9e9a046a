import logging
from typing import Optional

from newsroom_stylizer_backend.models.composition import CompositionConfig
from newsroom_stylizer_backend.render.source_image import (
    DecodeFailure,
    SourceImage,
    SourceState,
    decode_source_image,
)
from newsroom_stylizer_backend.render.stack_2d import MissingSurface, Surface, render_into


class StylizerSession:
    """Estado de uma sessão de edição: config, imagem e surface.

    Toda mudança dispara um recompute completo e síncrono. Não existe
    atualização parcial: cada render substitui o conteúdo inteiro da surface.
    """

    def __init__(
        self,
        config: Optional[CompositionConfig] = None,
        surface: Optional[Surface] = None,
    ):
        self._config = config or CompositionConfig()
        self._surface = surface
        self._image: Optional[SourceImage] = None
        self._state = SourceState.EMPTY
        self._diagnostic: Optional[str] = None

    @property
    def config(self) -> CompositionConfig:
        return self._config

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    @property
    def state(self) -> SourceState:
        return self._state

    @property
    def image(self) -> Optional[SourceImage]:
        # só imagens prontas chegam ao compositor
        return self._image if self._state == SourceState.READY else None

    @property
    def diagnostic(self) -> Optional[str]:
        return self._diagnostic

    def attach_surface(self, surface: Surface) -> Optional[Surface]:
        self._surface = surface
        return self.recompute()

    def set_config(self, config: CompositionConfig) -> Optional[Surface]:
        self._config = config
        return self.recompute()

    def load_image(self, data: bytes) -> Optional[Surface]:
        """Decodifica um novo upload, substituindo a imagem anterior.

        Falha de decodificação nunca é fatal: volta ao estado "sem imagem",
        guarda o diagnóstico e renderiza só o fundo.
        """
        self._image = None
        self._state = SourceState.PENDING
        self._diagnostic = None

        try:
            self._image = decode_source_image(data)
            self._state = SourceState.READY
        except DecodeFailure as e:
            self._state = SourceState.FAILED
            self._diagnostic = e.code
            logging.warning(f"⚠️ Falha ao carregar imagem: {e} — {e.__cause__}")
        except Exception:
            # nunca deixa a sessão presa em PENDING
            self._state = SourceState.FAILED
            self._diagnostic = "decode-error"
            logging.exception("❌ Erro inesperado ao decodificar imagem:")

        return self.recompute()

    def clear_image(self) -> Optional[Surface]:
        self._image = None
        self._state = SourceState.EMPTY
        self._diagnostic = None
        return self.recompute()

    def recompute(self) -> Optional[Surface]:
        # imagem ainda decodificando: espera o próximo gatilho
        if self._state == SourceState.PENDING:
            return None

        try:
            return render_into(self._config, self.image, self._surface)
        except MissingSurface:
            logging.info("Surface ainda não disponível; render adiado.")
            return None
