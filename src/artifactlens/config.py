"""Configuration management for artifactlens.

Handles loading .artifactlens.yaml files with directory traversal,
environment variable overrides, and default values.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .artifact import DEFAULT_SIZE_LIMIT
from .errors import ConfigError

CONFIG_FILENAME = ".artifactlens.yaml"
ENV_SIZE_LIMIT = "ARTIFACTLENS_SIZE_LIMIT"
ENV_LENSES_DIR = "ARTIFACTLENS_LENSES_DIR"


@dataclass
class TailConfig:
    """Tail reading settings."""

    lines: int = 100
    chunk_size: int | None = None  # None = 300 bytes per requested line


@dataclass
class ArtifactLensConfig:
    """Complete artifactlens configuration."""

    size_limit: int = DEFAULT_SIZE_LIMIT  # Ceiling for whole-artifact reads
    tail: TailConfig = field(default_factory=TailConfig)
    lenses_dir: Path | None = None  # Directory of user lens files
    lenses: dict[str, bool] | None = None  # {lens name: enabled}
    config_path: Path | None = None  # Path where config was loaded from

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if self.size_limit <= 0:
            raise ConfigError("size_limit must be positive")

        if self.tail.lines < 0:
            raise ConfigError("tail.lines must be non-negative")

        if self.tail.chunk_size is not None and self.tail.chunk_size <= 0:
            raise ConfigError("tail.chunk_size must be positive")

        if self.lenses is not None:
            for name, enabled in self.lenses.items():
                if not isinstance(enabled, bool):
                    raise ConfigError(
                        f"lenses.{name} must be true or false, got {enabled!r}"
                    )


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Return the nearest .artifactlens.yaml at or above ``start_path``.

    A file path starts the search in its directory; None means cwd.
    """
    start = Path.cwd() if start_path is None else Path(start_path).resolve()
    if start.is_file():
        start = start.parent

    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
    size_limit_override: int | None = None,
) -> ArtifactLensConfig:
    """Load configuration from file, environment, and overrides.

    Priority (highest to lowest):
    1. Function arguments (size_limit_override)
    2. Environment variables (ARTIFACTLENS_SIZE_LIMIT, ARTIFACTLENS_LENSES_DIR)
    3. Config file (.artifactlens.yaml)
    4. Defaults

    Args:
        config_path: Explicit path to config file. If None, searches.
        start_path: Directory to start config file search from.
        size_limit_override: Override size limit from CLI argument.

    Returns:
        Loaded and validated configuration.
    """
    config = ArtifactLensConfig()

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = find_config_file(start_path)

    if config_path is not None:
        config = _load_config_file(config_path)

    env_limit = os.environ.get(ENV_SIZE_LIMIT)
    if env_limit:
        try:
            config.size_limit = int(env_limit)
        except ValueError as e:
            raise ConfigError(f"{ENV_SIZE_LIMIT} must be an integer: {e}") from e

    env_lenses_dir = os.environ.get(ENV_LENSES_DIR)
    if env_lenses_dir:
        config.lenses_dir = Path(env_lenses_dir)

    if size_limit_override is not None:
        config.size_limit = size_limit_override

    config.validate()
    return config


def _load_config_file(config_path: Path) -> ArtifactLensConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to .artifactlens.yaml file.

    Returns:
        Configuration loaded from file.

    Raises:
        ConfigError: If file cannot be read or parsed.
    """
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    config = ArtifactLensConfig(config_path=config_path)

    try:
        if "size_limit" in data:
            config.size_limit = int(data["size_limit"])

        if "tail" in data and isinstance(data["tail"], dict):
            tail_data = data["tail"]
            chunk_size = tail_data.get("chunk_size")
            config.tail = TailConfig(
                lines=int(tail_data.get("lines", config.tail.lines)),
                chunk_size=int(chunk_size) if chunk_size is not None else None,
            )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid number in {config_path}: {e}") from e

    # Resolve relative lens directory against config file directory
    if data.get("lenses_dir"):
        if not isinstance(data["lenses_dir"], str):
            raise ConfigError(
                f"lenses_dir in {config_path} must be a path string, "
                f"got {data['lenses_dir']!r}"
            )
        lenses_dir = Path(data["lenses_dir"])
        if not lenses_dir.is_absolute():
            lenses_dir = config_path.parent / lenses_dir
        config.lenses_dir = lenses_dir

    if "lenses" in data and isinstance(data["lenses"], dict):
        config.lenses = {str(k): v for k, v in data["lenses"].items()}

    return config


def create_default_config(path: Path | None = None) -> Path:
    """Create a default .artifactlens.yaml config file.

    Args:
        path: Directory to create config in. Defaults to cwd.

    Returns:
        Path to created config file.

    Raises:
        ConfigError: If file already exists or cannot be written.
    """
    if path is None:
        path = Path.cwd()
    else:
        path = Path(path)

    config_path = path / CONFIG_FILENAME

    if config_path.exists():
        raise ConfigError(f"Config file already exists: {config_path}")

    config_content = f"""# artifactlens configuration

# Largest artifact (bytes) read whole (or use {ENV_SIZE_LIMIT} env var)
size_limit: {DEFAULT_SIZE_LIMIT}

# Tail reading
tail:
  lines: 100             # Lines shown by default
  # chunk_size: 30001    # Bytes per backward read (default: 300 * lines + 1)

# Directory with custom lens files (or use {ENV_LENSES_DIR} env var)
# lenses_dir: "lenses"

# Enable or disable individual lenses
# lenses:
#   links: false
"""

    try:
        config_path.write_text(config_content)
    except OSError as e:
        raise ConfigError(f"Cannot write config file: {e}") from e

    return config_path


def config_to_dict(config: ArtifactLensConfig) -> dict[str, Any]:
    """Convert config to dictionary for display."""
    return {
        "size_limit": config.size_limit,
        "tail": {
            "lines": config.tail.lines,
            "chunk_size": config.tail.chunk_size,
        },
        "lenses_dir": str(config.lenses_dir) if config.lenses_dir else None,
        "lenses": dict(config.lenses) if config.lenses is not None else None,
        "config_path": str(config.config_path) if config.config_path else None,
    }
