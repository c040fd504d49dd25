from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_ASSIGNED_PERSON_KEYWORDS,
    DEFAULT_HEADER_TOKENS,
    DatabaseConfig,
    ImportConfig,
    LimitationConfig,
    ParsingConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config/import.yml (optional: a missing default file means defaults)
- Validate against the bundled JSON schema (import_schema.json)
- Build the frozen ImportConfig tree, applying defaults for absent keys
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "build_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "import_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        where = ".".join(str(p) for p in e.absolute_path)
        prefix = f"{where}: " if where else ""
        raise ConfigError(f"config validation failed: {prefix}{e.message}") from e


def build_config(data: dict[str, Any]) -> ImportConfig:
    """Validate a raw mapping and turn it into an ImportConfig."""
    _validate_config_schema(data)

    db_raw = data.get("database", {})
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    lim_raw = data.get("limitation", {})
    defaults = LimitationConfig()
    limitation = LimitationConfig(
        standard_years=lim_raw.get("standard_years", defaults.standard_years),
        minority_age=lim_raw.get("minority_age", defaults.minority_age),
        minority_deadline_age=lim_raw.get("minority_deadline_age", defaults.minority_deadline_age),
    )
    parsing = ParsingConfig(
        header_tokens=tuple(data.get("header_tokens", DEFAULT_HEADER_TOKENS)),
        column_aliases={k: list(v) for k, v in data.get("column_aliases", {}).items()},
        assigned_person_keywords=tuple(
            k.lower() for k in data.get("assigned_person_keywords", DEFAULT_ASSIGNED_PERSON_KEYWORDS)
        ),
        keep_unmapped_columns=data.get("keep_unmapped_columns", True),
    )
    return ImportConfig(
        firm_id=data.get("firm_id"),
        firm_name=data.get("firm_name"),
        parsing=parsing,
        limitation=limitation,
        progress_every=data.get("progress_every", 5),
        database=db,
    )


def load_config(path: Path, *, required: bool = True) -> ImportConfig:
    """Load and validate a YAML config file.

    Args:
        path: YAML file
        required: When False a missing file yields the default configuration
    """
    if not path.exists():
        if not required:
            return ImportConfig()
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data)
