import asyncio
import json

import httpx
import pytest

from snipnet.resonance.config import (
    AppConfig,
    EmbeddingModelConfig,
    EmbeddingsConfig,
)
from snipnet.resonance.embeddings import get_embedder, node_text
from snipnet.resonance.embeddings.base import EmbedderBase
from snipnet.resonance.embeddings.ollama import Embedder as OllamaEmbedder
from snipnet.resonance.exceptions import DimensionMismatchError, EmbeddingError


def make_config(provider: str = "ollama", vector_dim: int = 3, timeout: float = 5.0):
    return AppConfig(
        embeddings=EmbeddingsConfig(
            model=EmbeddingModelConfig(
                provider=provider, name="test-embed", vector_dim=vector_dim
            ),
            timeout=timeout,
        )
    )


class FixedEmbedder(EmbedderBase):
    def __init__(self, result, config, delay: float = 0.0):
        super().__init__("fixed", config.embeddings.model.vector_dim, config)
        self.result = result
        self.delay = delay

    async def _embed(self, text: str) -> list[float]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_node_text():
    assert node_text("Title", "Body text") == "Title Body text"
    assert node_text("Title", "") == "Title"


def test_get_embedder_providers():
    assert isinstance(get_embedder(make_config("ollama")), OllamaEmbedder)

    from snipnet.resonance.embeddings.openai import Embedder as OpenAIEmbedder

    assert isinstance(get_embedder(make_config("openai")), OpenAIEmbedder)


def test_get_embedder_unknown_provider():
    with pytest.raises(ValueError, match="Unsupported embedding provider"):
        get_embedder(make_config("nope"))


class TestEmbedderBase:
    async def test_returns_floats(self):
        embedder = FixedEmbedder([1, 0, 0], make_config())
        assert await embedder.embed("hello") == [1.0, 0.0, 0.0]

    async def test_empty_text(self):
        embedder = FixedEmbedder([1.0, 0.0, 0.0], make_config())
        with pytest.raises(EmbeddingError):
            await embedder.embed("   ")

    async def test_wrong_dimension(self):
        embedder = FixedEmbedder([1.0, 0.0], make_config())
        with pytest.raises(DimensionMismatchError) as exc_info:
            await embedder.embed("hello")
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2

    async def test_empty_vector(self):
        embedder = FixedEmbedder([], make_config())
        with pytest.raises(EmbeddingError):
            await embedder.embed("hello")

    async def test_provider_error_is_wrapped(self):
        embedder = FixedEmbedder(RuntimeError("connection refused"), make_config())
        with pytest.raises(EmbeddingError, match="connection refused") as exc_info:
            await embedder.embed("hello")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_timeout(self):
        embedder = FixedEmbedder([1.0, 0.0, 0.0], make_config(timeout=0.01), delay=1)
        with pytest.raises(EmbeddingError, match="timed out"):
            await embedder.embed("hello")


class TestOllamaEmbedder:
    def _patch_transport(self, monkeypatch, handler):
        real_client = httpx.AsyncClient

        def client_factory(*args, **kwargs):
            return real_client(*args, transport=httpx.MockTransport(handler), **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", client_factory)

    async def test_embed(self, monkeypatch):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3]]})

        self._patch_transport(monkeypatch, handler)
        embedder = get_embedder(make_config())
        assert await embedder.embed("hello world") == pytest.approx([0.1, 0.2, 0.3])

        assert len(requests) == 1
        assert requests[0].url.path == "/api/embed"
        assert json.loads(requests[0].content) == {
            "model": "test-embed",
            "input": "hello world",
        }

    async def test_http_error(self, monkeypatch):
        self._patch_transport(monkeypatch, lambda request: httpx.Response(500))
        embedder = get_embedder(make_config())
        with pytest.raises(EmbeddingError):
            await embedder.embed("hello")

    async def test_no_embeddings(self, monkeypatch):
        self._patch_transport(
            monkeypatch, lambda request: httpx.Response(200, json={"embeddings": []})
        )
        embedder = get_embedder(make_config())
        with pytest.raises(EmbeddingError):
            await embedder.embed("hello")
