import sys
from pathlib import Path
from typing import Any


def _model_settings(settings_class: type[Any], model_config: Any, **extra: Any) -> Any:
    """Build provider settings from the sampling fields that are set."""
    values = dict(extra)
    if model_config.temperature is not None:
        values["temperature"] = model_config.temperature
    if model_config.max_tokens is not None:
        values["max_tokens"] = model_config.max_tokens
    return settings_class(**values) if values else None


def get_model(
    model_config: Any,
    app_config: Any | None = None,
) -> Any:
    """Resolve a `ModelConfig` into something `pydantic_ai.Agent` accepts.

    Ollama and OpenAI become `OpenAIChatModel` instances, Anthropic an
    `AnthropicModel`. Any other provider is passed through as a
    `provider:name` string for pydantic-ai to resolve.
    """
    from pydantic_ai.models.openai import OpenAIChatModel, OpenAIChatModelSettings
    from pydantic_ai.providers.ollama import OllamaProvider
    from pydantic_ai.providers.openai import OpenAIProvider

    if app_config is None:
        from snipnet.resonance.config import Config

        app_config = Config

    provider = model_config.provider
    name = model_config.name
    thinking = model_config.enable_thinking

    if provider in ("ollama", "openai"):
        extra = {}
        if thinking is not None:
            extra["openai_reasoning_effort"] = "high" if thinking else "low"
        settings = _model_settings(OpenAIChatModelSettings, model_config, **extra)

        if provider == "ollama":
            base_url = model_config.base_url or app_config.providers.ollama.base_url
            return OpenAIChatModel(
                model_name=name,
                provider=OllamaProvider(base_url=f"{base_url}/v1"),
                settings=settings,
            )
        if model_config.base_url:
            return OpenAIChatModel(
                model_name=name,
                provider=OpenAIProvider(base_url=model_config.base_url),
                settings=settings,
            )
        return OpenAIChatModel(model_name=name, settings=settings)

    if provider == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel, AnthropicModelSettings

        extra = {}
        if thinking is not None:
            extra["anthropic_thinking"] = (
                {"type": "enabled", "budget_tokens": 1024}
                if thinking
                else {"type": "disabled"}
            )
        settings = _model_settings(AnthropicModelSettings, model_config, **extra)
        return AnthropicModel(model_name=name, settings=settings)

    return f"{provider}:{name}"


def get_default_data_dir() -> Path:
    """Get the user data directory for the current system platform.

    Linux: ~/.local/share/snipnet
    macOS: ~/Library/Application Support/snipnet
    Windows: C:/Users/<USER>/AppData/Roaming/snipnet

    Returns:
        User Data Path.
    """
    home = Path.home()

    system_paths = {
        "win32": home / "AppData/Roaming/snipnet",
        "linux": home / ".local/share/snipnet",
        "darwin": home / "Library/Application Support/snipnet",
    }

    return system_paths.get(sys.platform, home / ".snipnet")
