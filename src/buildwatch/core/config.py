"""buildwatch configuration — locate, load and save.

Layering is done by pydantic-settings (see ``Config.settings_customise_sources``):
defaults < YAML file < BUILDWATCH_ env vars (``__`` nested delimiter) < overrides.
This module only decides which YAML file takes part and maps failures to ConfigError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from buildwatch.core.exceptions import ConfigError
from buildwatch.core.models import CONFIG_FILE, Config

DEFAULT_CONFIG_FILENAME = "buildwatch.config.yaml"

logger = logging.getLogger(__name__)


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Load Config from YAML + env vars + overrides.

    Args:
        config_path: Explicit YAML path. If None, searches cwd, its parents
            and their ``.buildwatch/`` directories. A missing file is skipped.
        overrides: Values that beat every other source (nested dicts merge).

    Raises:
        ConfigError: If the YAML file is unreadable or the merged values are invalid.
    """
    if config_path is None:
        config_path = find_config_file()
    if config_path is not None:
        logger.debug("Loading config from %s", config_path)

    token = CONFIG_FILE.set(config_path)
    try:
        return Config(**(overrides or {}))
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML: {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Failed to read config: {config_path}: {e}"
        raise ConfigError(msg) from e
    except Exception as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e
    finally:
        CONFIG_FILE.reset(token)


def save_config(config: Config, path: Path) -> None:
    """Write Config as YAML that load_config reads back unchanged."""
    data = config.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:  # noqa: PTH123
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def find_config_file(start: Path | None = None) -> Path | None:
    """Nearest ``buildwatch.config.yaml`` walking up from ``start`` (default: cwd)."""
    current = start or Path.cwd()
    for directory in [current, *current.parents]:
        for candidate in (
            directory / DEFAULT_CONFIG_FILENAME,
            directory / ".buildwatch" / DEFAULT_CONFIG_FILENAME,
        ):
            if candidate.is_file():
                return candidate
    return None
