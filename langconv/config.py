#!/usr/bin/env python3
"""
Optional YAML configuration for the langconv command.

Example `.langconv.yml`:
```yaml
base_language: en
mo_big_endian: false
shorten:
  title: "Translations for my plugin"
  copyright_holder: "Jane Doe"
  package_name: "josm-plugin_example"
```
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .format_handlers.lang import DEFAULT_BASE_LANGUAGE

DEFAULT_CONFIG_FILE = ".langconv.yml"


@dataclass(frozen=True)
class ShortenConfig:
    """Replacements for the placeholders in the header comment of *.po files."""
    title: str = "Translations"
    copyright_holder: str = ""
    package_name: str = ""


@dataclass(frozen=True)
class LangconvConfig:
    base_language: str = DEFAULT_BASE_LANGUAGE
    mo_big_endian: bool = False
    shorten: ShortenConfig = field(default_factory=ShortenConfig)

    def with_overrides(self, **overrides: Any) -> "LangconvConfig":
        """Copy with the given values replaced, None values are ignored."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def _check_keys(data: dict, allowed: set[str], where: str, path: Path) -> None:
    unknown = sorted(str(key) for key in data if key not in allowed)
    if unknown:
        raise ValueError(f"Unknown key(s) {', '.join(unknown)} in {where} of config file {path}")


def load_config(path: Optional[str] = None) -> LangconvConfig:
    """
    Load configuration.

    Args:
        path: Path of the YAML file. If None, `.langconv.yml` in the current directory is used
            if it exists, otherwise the defaults.

    Raises:
        ValueError: if the file is not valid YAML or contains unknown keys
        FileNotFoundError: if an explicitly given file does not exist
    """
    if path is None:
        config_path = Path(DEFAULT_CONFIG_FILE)
        if not config_path.is_file():
            return LangconvConfig()
    else:
        config_path = Path(path)
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding='utf-8'))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {config_path}: {e}") from e

    if data is None:
        return LangconvConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

    _check_keys(data, {f.name for f in fields(LangconvConfig)}, "the root", config_path)

    shorten_data = data.get('shorten') or {}
    if not isinstance(shorten_data, dict):
        raise ValueError(f"'shorten' in config file {config_path} must be a mapping")
    _check_keys(shorten_data, {f.name for f in fields(ShortenConfig)}, "'shorten'", config_path)

    return LangconvConfig(
        base_language=str(data.get('base_language', DEFAULT_BASE_LANGUAGE)),
        mo_big_endian=bool(data.get('mo_big_endian', False)),
        shorten=ShortenConfig(**{key: str(value) for key, value in shorten_data.items()}),
    )
