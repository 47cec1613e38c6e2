from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Pattern

import yaml
from platformdirs import user_config_dir

from schema_lint.policy.types import ConfigError

OPTION_FILE = ".schema-lint.yaml"
ENVIRONMENTS_KEY = "environments"
DEFAULT_ENVIRONMENT = "production"

DEFAULT_OPTIONS: Dict[str, str] = {
    "lint-warning": "bad-charset,bad-engine",
    "lint-error": "no-pk",
    "lint-allowed-charset": "latin1,utf8mb4",
    "lint-allowed-engine": "innodb",
    "ignore-table": "",
    "ignore-schema": "",
    "schema": "",
    "workspace": "temp-schema",
    "temp-schema": "_schemalint_tmp",
    "flavor": "",
    "default-character-set": "",
    "default-collation": "",
    "host": "",
    "port": "3306",
    "evaluator": "",
    "max-depth": "5",
}


@dataclass
class ConfigResult:
    config: Dict[str, str]
    warnings: List[str]
    path: Path


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _option_value(value: Any) -> Optional[str]:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, list) and all(isinstance(item, (str, int, float)) for item in value):
        return ",".join(str(item) for item in value)
    return None


def _select_environment(raw: Dict[str, Any], environment: str) -> Dict[str, Any]:
    sections = raw.get(ENVIRONMENTS_KEY) or {}
    if not isinstance(sections, dict):
        raise ConfigError(f"Option {ENVIRONMENTS_KEY} must be a mapping of environment names")
    base = {key: value for key, value in raw.items() if key != ENVIRONMENTS_KEY}
    section = sections.get(environment) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Environment {environment} must be a mapping of options")
    return _deep_merge(base, section)


def read_option_file(path: Path, environment: str = DEFAULT_ENVIRONMENT) -> Dict[str, str]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping of option names to values")
    options: Dict[str, str] = {}
    for key, value in _select_environment(raw, environment).items():
        name = str(key).lower()
        if name not in DEFAULT_OPTIONS:
            raise ConfigError(f"Unknown option {key} in {path}")
        converted = _option_value(value)
        if converted is None:
            raise ConfigError(f"Invalid value for option {key} in {path}")
        options[name] = converted
    return options


def user_config_path() -> Path:
    return Path(user_config_dir("schema_lint")) / "config.yaml"


def load_user_config(environment: str = DEFAULT_ENVIRONMENT) -> ConfigResult:
    path = user_config_path()
    warnings: List[str] = []
    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, UnicodeDecodeError) as exc:
            warnings.append(f"Unable to read {path}: {exc}; ignoring it.")
            raw = {}
        except yaml.YAMLError:
            warnings.append(f"Unable to parse {path}; ignoring it.")
            raw = {}
    if not isinstance(raw, dict):
        warnings.append(f"{path} is not a mapping; ignoring it.")
        raw = {}
    try:
        raw = _select_environment(raw, environment)
    except ConfigError as exc:
        warnings.append(f"{exc}; ignoring environment sections.")
        raw = {key: value for key, value in raw.items() if key != ENVIRONMENTS_KEY}

    config: Dict[str, str] = {}
    for key, value in raw.items():
        name = str(key).lower()
        if name not in DEFAULT_OPTIONS:
            warnings.append(f"Unknown option {key}; ignoring it.")
            continue
        converted = _option_value(value)
        if converted is None:
            warnings.append(f"Invalid type for {name}; using default.")
            continue
        config[name] = converted
    return ConfigResult(config=config, warnings=warnings, path=path)


class DirConfig:
    def __init__(
        self, values: Optional[Dict[str, str]] = None, explicit: Optional[Iterable[str]] = None
    ) -> None:
        self.values: Dict[str, str] = dict(DEFAULT_OPTIONS)
        self.values.update(values or {})
        self.explicit = set(values or {}) if explicit is None else set(explicit)

    def derive(self, overrides: Dict[str, str]) -> DirConfig:
        values = dict(self.values)
        values.update(overrides)
        return DirConfig(values, self.explicit | set(overrides))

    def get(self, name: str) -> str:
        return self.values[name]

    def changed(self, name: str) -> bool:
        return name in self.explicit and self.values[name] != DEFAULT_OPTIONS[name]

    def get_slice(self, name: str, delimiter: str = ",") -> List[str]:
        items = [item.strip() for item in self.get(name).split(delimiter)]
        return [item for item in items if item]

    def get_regexp(self, name: str) -> Optional[Pattern[str]]:
        value = self.get(name)
        if not value:
            return None
        try:
            return re.compile(value)
        except re.error as exc:
            raise ConfigError(f"Invalid regexp for option {name}: {value} ({exc})") from exc

    def get_enum(self, name: str, *allowed: str) -> str:
        value = self.get(name).lower()
        if value not in allowed:
            raise ConfigError(
                f"Option {name} must be one of: {', '.join(allowed)} (found {self.get(name)!r})"
            )
        return value

    def get_int(self, name: str) -> int:
        try:
            return int(self.get(name))
        except ValueError as exc:
            raise ConfigError(f"Option {name} must be an integer (found {self.get(name)!r})") from exc
