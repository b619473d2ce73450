import asyncio
import logging

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.exceptions import DimensionMismatchError, EmbeddingError

logger = logging.getLogger(__name__)


class EmbedderBase:
    """Base embedder.

    Subclasses implement `_embed`; `embed` adds input validation, the
    configured timeout, error classification and the dimensionality check.
    """

    _model: str
    _vector_dim: int

    def __init__(self, model: str, vector_dim: int, config: AppConfig = Config):
        self._model = model
        self._vector_dim = vector_dim
        self._config = config

    @property
    def vector_dim(self) -> int:
        return self._vector_dim

    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: On empty input, provider failure or timeout.
            DimensionMismatchError: If the provider returns a vector of the
                wrong length.
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        timeout = self._config.embeddings.timeout
        try:
            vector = await asyncio.wait_for(self._embed(text), timeout=timeout)
        except TimeoutError as e:
            raise EmbeddingError(
                f"Embedding with {self._model} timed out after {timeout}s"
            ) from e
        except (EmbeddingError, DimensionMismatchError):
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding with {self._model} failed: {e}") from e

        if not vector:
            raise EmbeddingError(f"Provider returned no embedding for {self._model}")
        if len(vector) != self._vector_dim:
            raise DimensionMismatchError(
                self._vector_dim, len(vector), context=f"{self._model} embedding"
            )
        return [float(v) for v in vector]

    async def _embed(self, text: str) -> list[float]:
        raise NotImplementedError
