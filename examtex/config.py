"""
Configuration for the examtex pipeline.

Settings are immutable dataclasses. Defaults match the behaviour the web
preview has always had; a YAML file can override them:

  sanitize:
    blank_cm_per_underscore: 0.3
    blank_max_cm: 4
  extract:
    min_content_length: 5
    extra_boilerplate: ["read the following passage"]
    layouts: [subsection_q, plain_q]

The file is validated against schemas/config.schema.json before use.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
CONFIG_SCHEMA_PATH = SCHEMA_DIR / "config.schema.json"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SanitizeConfig:
    """
    Attributes:
        blank_cm_per_underscore: Width of a fill-in blank per underscore.
        blank_max_cm: Upper bound on a single blank's width.
        warn_on_brace_imbalance: Log a warning when braces do not balance.
    """
    blank_cm_per_underscore: float = 0.3
    blank_max_cm: float = 4.0
    warn_on_brace_imbalance: bool = True


@dataclass(frozen=True)
class ExtractConfig:
    """
    Attributes:
        min_content_length: Shortest trimmed header content accepted.
        min_prompt_length: Prompt text must be longer than this after the
            solution split.
        extra_boilerplate: Phrases rejected in addition to the built-in list.
        layouts: Restrict the cascade to these layout names (priority order
            is kept). Empty means all layouts.
    """
    min_content_length: int = 5
    min_prompt_length: int = 5
    extra_boilerplate: Tuple[str, ...] = ()
    layouts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExamTexConfig:
    sanitize: SanitizeConfig = field(default_factory=SanitizeConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)


DEFAULT_CONFIG = ExamTexConfig()


def load_schema(path: Path = CONFIG_SCHEMA_PATH) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def config_from_dict(data: Optional[Dict[str, Any]]) -> ExamTexConfig:
    """Validate a mapping against the config schema and build the config."""
    data = data or {}
    validator = Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        msg = "; ".join(
            f"{'.'.join(str(p) for p in e.path) or '(root)'}: {e.message}" for e in errors
        )
        raise ConfigError(f"invalid configuration: {msg}")

    san = data.get("sanitize") or {}
    ext = data.get("extract") or {}
    return ExamTexConfig(
        sanitize=SanitizeConfig(
            blank_cm_per_underscore=float(san.get("blank_cm_per_underscore", 0.3)),
            blank_max_cm=float(san.get("blank_max_cm", 4.0)),
            warn_on_brace_imbalance=bool(san.get("warn_on_brace_imbalance", True)),
        ),
        extract=ExtractConfig(
            min_content_length=int(ext.get("min_content_length", 5)),
            min_prompt_length=int(ext.get("min_prompt_length", 5)),
            extra_boilerplate=tuple(s.lower() for s in ext.get("extra_boilerplate", [])),
            layouts=tuple(ext.get("layouts", [])),
        ),
    )


def load_config(path: Optional[Path]) -> ExamTexConfig:
    """Load a YAML config file; None gives the defaults."""
    if path is None:
        return DEFAULT_CONFIG
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"config not found: {path}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError("Top-level config must be a mapping.")
    return config_from_dict(data)
