# src/config_loader.py

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from errors import ConfigurationError
from schemas import TailerConfig

logger = logging.getLogger(__name__)


def load_config(
    config_file: Union[str, Path],
    overrides: Optional[Dict[str, Any]] = None,
) -> TailerConfig:
    """
    Read a tailer configuration from a YAML file.

    The file holds a mapping with the TailerConfig fields, either at the top
    level or nested under a ``tailer:`` key. Non-None entries of ``overrides``
    win over values from the file.
    """
    config_file = Path(config_file)
    try:
        raw = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Config file not found: {config_file}", underlying=exc) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {config_file}", underlying=exc) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_file}", underlying=exc) from exc

    if raw is None:
        raw = {}
    if isinstance(raw, dict) and "tailer" in raw:
        raw = raw["tailer"]
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Expected a mapping in {config_file}, got {type(raw).__name__}")

    data = dict(raw)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    logger.debug("Loaded tailer settings from %s: %s", config_file, data)

    try:
        return TailerConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid tailer settings in {config_file}", underlying=exc) from exc
