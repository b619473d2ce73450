import httpx

from snipnet.resonance.embeddings.base import EmbedderBase


class Embedder(EmbedderBase):
    """Ollama embedder via `POST /api/embed`."""

    async def _embed(self, text: str) -> list[float]:
        base_url = self._config.providers.ollama.base_url.rstrip("/")
        payload = {"model": self._model, "input": text}

        async with httpx.AsyncClient(timeout=self._config.embeddings.timeout) as client:
            resp = await client.post(f"{base_url}/api/embed", json=payload)
            resp.raise_for_status()
            data = resp.json()

        embeddings = data.get("embeddings") or []
        if not embeddings:
            return []
        return list(embeddings[0])
