"""
config.py

Typed configuration loading and validation for the autoplay generator.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included)
- Support environment variable overrides
- A missing config file is not an error: every field has a working default

Config file location
- An explicit path passed to load_config() wins.
- Otherwise, if AUTOCLICK_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./autoclick_config.json (current working directory)
  2) <user config dir>/autoclick/autoclick.json
- If none exists, defaults are used.

Example config file (autoclick_config.json)
{
  "generator": {
    "alternating_threshold_seconds": 0.5,
    "reaction_time_ms": 100,
    "delayed_movements": false,
    "key_up_delay_ms": 50
  },
  "logging": {
    "level": "INFO"
  }
}
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator


_LOG_LEVEL_NAMES = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


class GeneratorConfig(BaseModel):
    alternating_threshold_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Time between two keystrokes before switching from alternating to single tapping.",
    )
    reaction_time_ms: float = Field(
        default=100.0,
        ge=0.0,
        description="Mod-adjusted reaction time. Passed through for the movement layer.",
    )
    delayed_movements: bool = Field(
        default=False,
        description="Keep the cursor on each object as long as possible (selects the easing preference).",
    )
    key_up_delay_ms: float = Field(default=50.0, ge=0.0, description="Delay between a click and its key-up frame.")

    @property
    def alternating_threshold_ms(self) -> float:
        return float(self.alternating_threshold_seconds) * 1000.0

    @property
    def preferred_easing(self) -> str:
        return "in_out_cubic" if self.delayed_movements else "out"


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="CRITICAL, ERROR, WARNING, INFO, DEBUG or NOTSET")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in _LOG_LEVEL_NAMES:
            raise ValueError("level must be one of: " + ", ".join(sorted(_LOG_LEVEL_NAMES)))
        return normalized

    def level_number(self) -> int:
        return int(logging.getLevelName(self.level))


class AppConfig(BaseModel):
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("autoclick", appauthor=False))
    return [
        Path.cwd() / "autoclick_config.json",
        config_directory / "autoclick.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("AUTOCLICK_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional and win over the config file.

    Override variables:
    - AUTOCLICK_ALTERNATING_THRESHOLD (seconds)
    - AUTOCLICK_REACTION_TIME_MS
    - AUTOCLICK_DELAYED_MOVEMENTS
    - AUTOCLICK_KEY_UP_DELAY_MS
    - AUTOCLICK_LOG_LEVEL
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    generator_section = ensure_nested(updated_config, "generator")
    logging_section = ensure_nested(updated_config, "logging")

    def override_string(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "")
        if value_text.strip():
            target_dict[key_name] = value_text.strip()

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    def override_bool(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip().lower()
        if not value_text:
            return
        truthy = {"1", "true", "yes", "on"}
        falsy = {"0", "false", "no", "off"}
        if value_text in truthy:
            target_dict[key_name] = True
        elif value_text in falsy:
            target_dict[key_name] = False

    override_float("AUTOCLICK_ALTERNATING_THRESHOLD", generator_section, "alternating_threshold_seconds")
    override_float("AUTOCLICK_REACTION_TIME_MS", generator_section, "reaction_time_ms")
    override_bool("AUTOCLICK_DELAYED_MOVEMENTS", generator_section, "delayed_movements")
    override_float("AUTOCLICK_KEY_UP_DELAY_MS", generator_section, "key_up_delay_ms")

    override_string("AUTOCLICK_LOG_LEVEL", logging_section, "level")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = AppConfig.model_validate(json_dict)
    except ValidationError as exception:
        source = str(resolved_path) if resolved_path is not None else "defaults and environment"
        raise ValueError(f"Config validation failed for {source}:\n{exception}") from exception

    return config, resolved_path


def to_json(config: AppConfig) -> str:
    return json.dumps(config.model_dump(), ensure_ascii=False, indent=2)


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": json.loads(to_json(config)),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
