from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.embeddings.base import EmbedderBase
from snipnet.resonance.embeddings.ollama import Embedder as OllamaEmbedder

__all__ = ["EmbedderBase", "get_embedder", "node_text"]


def node_text(title: str, body: str) -> str:
    """Text embedded and explained for a node."""
    return f"{title} {body}".strip()


def get_embedder(config: AppConfig = Config) -> EmbedderBase:
    """
    Factory function to get the appropriate embedder based on the configuration.

    Args:
        config: Configuration to use. Defaults to global Config.

    Returns:
        An embedder instance configured according to the config.
    """
    embedding_model = config.embeddings.model

    if embedding_model.provider == "ollama":
        return OllamaEmbedder(embedding_model.name, embedding_model.vector_dim, config)

    if embedding_model.provider == "openai":
        from snipnet.resonance.embeddings.openai import Embedder as OpenAIEmbedder

        return OpenAIEmbedder(embedding_model.name, embedding_model.vector_dim, config)

    raise ValueError(f"Unsupported embedding provider: {embedding_model.provider}")
