from openai import AsyncOpenAI

from snipnet.resonance.embeddings.base import EmbedderBase


class Embedder(EmbedderBase):
    """OpenAI embedder, also usable with OpenAI-compatible servers via base_url."""

    async def _embed(self, text: str) -> list[float]:
        client = AsyncOpenAI(
            base_url=self._config.embeddings.model.base_url,
            timeout=self._config.embeddings.timeout,
            max_retries=0,
        )
        async with client:
            res = await client.embeddings.create(model=self._model, input=text)
        if not res.data:
            return []
        return list(res.data[0].embedding)
