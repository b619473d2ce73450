from snipnet.resonance.config.loader import (
    find_config_file,
    generate_default_config,
    load_yaml_config,
)
from snipnet.resonance.config.models import (
    AppConfig,
    ClustersConfig,
    EmbeddingModelConfig,
    EmbeddingsConfig,
    ExplainerConfig,
    ModelConfig,
    OllamaConfig,
    PathwaysConfig,
    ProvidersConfig,
    ResonanceConfig,
    ScoringConfig,
    StorageConfig,
)

__all__ = [
    "Config",
    "AppConfig",
    "ClustersConfig",
    "EmbeddingModelConfig",
    "EmbeddingsConfig",
    "ExplainerConfig",
    "ModelConfig",
    "OllamaConfig",
    "PathwaysConfig",
    "ProvidersConfig",
    "ResonanceConfig",
    "ScoringConfig",
    "StorageConfig",
    "find_config_file",
    "load_yaml_config",
    "generate_default_config",
    "set_config",
]


class ConfigProxy:
    """Proxy for the global configuration that allows runtime updates."""

    def __init__(self):
        # Load config from YAML file or use defaults
        config_path = find_config_file(None)
        if config_path:
            yaml_data = load_yaml_config(config_path)
            self._config = AppConfig.model_validate(yaml_data)
        else:
            self._config = AppConfig()

    def __getattr__(self, name):
        """Proxy attribute access to the underlying config."""
        return getattr(self._config, name)

    def set(self, config: AppConfig) -> None:
        """Replace the current configuration."""
        self._config = config

    def get(self) -> AppConfig:
        """Return the underlying AppConfig instance."""
        return self._config


# Create the global Config instance
Config = ConfigProxy()


def set_config(config: AppConfig) -> None:
    """Set the global configuration programmatically.

    This allows library users to configure the engine without needing
    a YAML file.

    Example:
        >>> from snipnet.resonance.config import set_config, AppConfig
        >>> set_config(AppConfig(resonance={"threshold": 0.75}))
    """
    Config.set(config)
