import os
import tempfile
from pathlib import Path

# Prevent tests from loading a local resonance.yaml by pointing the loader at
# an empty config file BEFORE any snipnet.resonance imports.
_test_config_dir = tempfile.mkdtemp()
_test_config_path = Path(_test_config_dir) / "test-defaults.yaml"
_test_config_path.write_text("{}")  # Empty YAML = use all defaults
os.environ["RESONANCE_CONFIG_PATH"] = str(_test_config_path)

import asyncio  # noqa: E402
import math  # noqa: E402

import pytest  # noqa: E402
import yaml  # noqa: E402

from snipnet.resonance.client import ResonanceEngine  # noqa: E402
from snipnet.resonance.config import (  # noqa: E402
    AppConfig,
    EmbeddingModelConfig,
    EmbeddingsConfig,
)
from snipnet.resonance.embeddings.base import EmbedderBase  # noqa: E402
from snipnet.resonance.explainer import Explanation  # noqa: E402


class StaticEmbedder(EmbedderBase):
    """Embedder returning fixed vectors looked up by text."""

    def __init__(self, vectors: dict[str, list[float]], config: AppConfig):
        super().__init__("static", config.embeddings.model.vector_dim, config)
        self.vectors = vectors
        self.calls: list[str] = []

    async def _embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return self.vectors[text]


class RecordingExplainer:
    """Explainer stand-in that records calls and answers deterministically."""

    def __init__(self):
        self.calls: list[tuple[str, str, float]] = []

    async def explain(self, text_a: str, text_b: str, score: float) -> Explanation:
        self.calls.append((text_a, text_b, score))
        # Yield so concurrent pipelines interleave like a real provider call.
        await asyncio.sleep(0)
        return Explanation(
            thinking=f"{text_a} echoes {text_b}",
            explanation=f"Similarity {score:.3f}",
        )


def unit_vectors() -> dict[str, list[float]]:
    """Three unit vectors with cos(A,B)=0.88, cos(A,C)=0.1, cos(B,C)=0.05."""
    b_y = math.sqrt(1 - 0.88**2)
    c_y = (0.05 - 0.88 * 0.1) / b_y
    c_z = math.sqrt(1 - 0.1**2 - c_y**2)
    return {
        "A": [1.0, 0.0, 0.0],
        "B": [0.88, b_y, 0.0],
        "C": [0.1, c_y, c_z],
    }


@pytest.fixture
def temp_db_path():
    """Create a temporary database path for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "test.lancedb"


@pytest.fixture
def small_config() -> AppConfig:
    """Defaults with three-dimensional embeddings."""
    return AppConfig(
        embeddings=EmbeddingsConfig(
            model=EmbeddingModelConfig(provider="ollama", name="static", vector_dim=3)
        )
    )


@pytest.fixture
def embedder(small_config) -> StaticEmbedder:
    return StaticEmbedder(unit_vectors(), small_config)


@pytest.fixture
def explainer() -> RecordingExplainer:
    return RecordingExplainer()


@pytest.fixture
async def engine(temp_db_path, small_config, embedder, explainer):
    async with ResonanceEngine(
        temp_db_path,
        config=small_config,
        embedder=embedder,
        explainer=explainer,  # type: ignore[arg-type]
        create=True,
    ) as engine:
        yield engine


@pytest.fixture
def temp_yaml_config(tmp_path, monkeypatch):
    """Write a YAML config and point the loader at it."""
    config_file = tmp_path / "test-config.yaml"
    config_data = {
        "environment": "production",
        "embeddings": {
            "model": {
                "provider": "openai",
                "name": "text-embedding-3-small",
                "vector_dim": 1536,
            }
        },
        "resonance": {"threshold": 0.8, "max_per_node": 4},
    }

    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    monkeypatch.setenv("RESONANCE_CONFIG_PATH", str(config_file))

    yield config_file
