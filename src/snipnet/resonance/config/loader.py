import os
from pathlib import Path

import yaml

CONFIG_ENV_VAR = "RESONANCE_CONFIG_PATH"
CONFIG_FILENAME = "resonance.yaml"


def find_config_file(cli_path: Path | None = None) -> Path | None:
    """Find the YAML config file using the search path.

    Search order:
    1. CLI-provided path (if given)
    2. RESONANCE_CONFIG_PATH environment variable
    3. ./resonance.yaml (current directory)
    4. ~/.config/snipnet/resonance.yaml (user config)

    Returns None if no config file is found.
    """
    if cli_path:
        if cli_path.exists():
            return cli_path
        raise FileNotFoundError(f"Config file not found: {cli_path}")

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {path}")

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    user_config = Path.home() / ".config" / "snipnet" / CONFIG_FILENAME
    if user_config.exists():
        return user_config

    return None


def load_yaml_config(path: Path) -> dict:
    """Load and parse a YAML config file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def generate_default_config() -> dict:
    """Generate a default YAML config structure."""
    from snipnet.resonance.config.models import AppConfig

    data = AppConfig().model_dump(mode="json")
    # Omitted so the platform default applies when loaded back.
    data["storage"].pop("data_dir", None)
    return data
