import sys
from pathlib import Path

from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIChatModel

from snipnet.resonance.config import AppConfig, ExplainerConfig, ModelConfig
from snipnet.resonance.utils import get_default_data_dir, get_model


def test_ollama_model_uses_explainer_settings():
    config = AppConfig()
    model = get_model(ExplainerConfig().model, config)

    assert isinstance(model, OpenAIChatModel)
    assert model.model_name == "gpt-oss"
    assert model.settings == {
        "openai_reasoning_effort": "low",
        "temperature": 0.7,
        "max_tokens": 200,
    }


def test_ollama_model_without_settings():
    model = get_model(ModelConfig(provider="ollama", name="llama3"), AppConfig())
    assert isinstance(model, OpenAIChatModel)
    assert model.settings is None


def test_openai_compatible_base_url(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    model = get_model(
        ModelConfig(
            provider="openai",
            name="local-model",
            base_url="http://localhost:8000/v1",
            enable_thinking=True,
        ),
        AppConfig(),
    )
    assert isinstance(model, OpenAIChatModel)
    assert model.settings == {"openai_reasoning_effort": "high"}


def test_anthropic_thinking_disabled(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    model = get_model(
        ModelConfig(
            provider="anthropic",
            name="claude-3-5-haiku-latest",
            enable_thinking=False,
            max_tokens=150,
        ),
        AppConfig(),
    )
    assert isinstance(model, AnthropicModel)
    assert model.settings == {
        "anthropic_thinking": {"type": "disabled"},
        "max_tokens": 150,
    }


def test_other_providers_pass_through():
    assert get_model(ModelConfig(provider="groq", name="llama-3.1-8b")) == (
        "groq:llama-3.1-8b"
    )


def test_default_data_dir():
    data_dir = get_default_data_dir()
    assert isinstance(data_dir, Path)
    if sys.platform == "linux":
        assert data_dir == Path.home() / ".local/share/snipnet"
