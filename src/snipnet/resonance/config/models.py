from pathlib import Path

from pydantic import BaseModel, Field

from snipnet.resonance.utils import get_default_data_dir


class ModelConfig(BaseModel):
    """Configuration for a language model.

    Attributes:
        provider: Model provider (ollama, openai, anthropic, etc.)
        name: Model name/identifier
        base_url: Optional base URL for OpenAI-compatible servers (vLLM, LM Studio, etc.)
        enable_thinking: Control reasoning behavior (true/false/None for default)
        temperature: Sampling temperature (0.0 to 1.0+)
        max_tokens: Maximum tokens to generate
    """

    provider: str = "ollama"
    name: str = "gpt-oss"
    base_url: str | None = None

    enable_thinking: bool | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class EmbeddingModelConfig(BaseModel):
    """Configuration for an embedding model.

    Attributes:
        provider: Model provider (ollama, openai)
        name: Model name/identifier
        vector_dim: Vector dimensions produced by the model
        base_url: Optional base URL for OpenAI-compatible servers (vLLM, LM Studio, etc.)
    """

    provider: str = "ollama"
    name: str = "nomic-embed-text"
    vector_dim: int = 768
    base_url: str | None = None


class StorageConfig(BaseModel):
    data_dir: Path = Field(default_factory=get_default_data_dir)


class EmbeddingsConfig(BaseModel):
    model: EmbeddingModelConfig = Field(default_factory=EmbeddingModelConfig)
    timeout: float = 30.0


class ExplainerConfig(BaseModel):
    model: ModelConfig = Field(
        default_factory=lambda: ModelConfig(
            provider="ollama",
            name="gpt-oss",
            enable_thinking=False,
            temperature=0.7,
            max_tokens=200,
        )
    )
    timeout: float = 30.0


class ResonanceConfig(BaseModel):
    # Minimum cosine similarity for an edge to be created.
    threshold: float = 0.70
    max_per_node: int = 10


class ScoringConfig(BaseModel):
    average_weight: float = 0.5
    peak_weight: float = 0.3
    breadth_weight: float = 0.2
    # Edge count at which the breadth term reaches full credit.
    breadth_cap: int = 10


class ClustersConfig(BaseModel):
    strong_threshold: float = 0.70
    singleton_threshold: float = 0.60
    keyword_count: int = 5
    min_theme_token_length: int = 4
    min_keyword_length: int = 5
    stopwords: list[str] = [
        "that",
        "this",
        "with",
        "from",
        "they",
        "have",
        "been",
        "will",
        "about",
        "their",
        "there",
        "these",
        "those",
        "which",
        "would",
        "could",
        "should",
        "where",
        "while",
    ]


class PathwaysConfig(BaseModel):
    direct_limit: int = 5
    branch_limit: int = 3
    default_depth: int = 2


class OllamaConfig(BaseModel):
    base_url: str = Field(
        default_factory=lambda: __import__("os").environ.get(
            "OLLAMA_BASE_URL", "http://localhost:11434"
        )
    )


class ProvidersConfig(BaseModel):
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)


class AppConfig(BaseModel):
    environment: str = "production"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    explainer: ExplainerConfig = Field(default_factory=ExplainerConfig)
    resonance: ResonanceConfig = Field(default_factory=ResonanceConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    clusters: ClustersConfig = Field(default_factory=ClustersConfig)
    pathways: PathwaysConfig = Field(default_factory=PathwaysConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
