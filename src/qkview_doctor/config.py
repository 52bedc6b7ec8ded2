"""Settings management for qkview-doctor.

Values are merged from defaults, an optional YAML file and
QKVIEW_DOCTOR_* environment variables (highest precedence).
"""

import os
from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

import yaml

from qkview_doctor.errors import ConfigurationError
from qkview_doctor.parser.log_classifier import DateParseOptions

ENV_PREFIX = "QKVIEW_DOCTOR_"
CONFIG_ENV_VAR = "QKVIEW_DOCTOR_CONFIG"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime settings for one invocation."""

    output_path: str | None = None
    stdout: bool = False
    default_year: int | None = None
    reference_time: datetime | None = None
    work_dir: str | None = None  # where downloads land; defaults to the temp dir
    ledger_path: str | None = None  # SQLite upload ledger; disabled when unset
    upload_kind: str = "logs"

    def date_options(self) -> DateParseOptions:
        return DateParseOptions(reference_time=self.reference_time, default_year=self.default_year)


def parse_reference_time(value: Any) -> datetime | None:
    """Accept a datetime or ISO-8601 string; timezone info is dropped."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise ConfigurationError(f"invalid reference time {value!r}: {e}") from e
    return parsed.replace(tzinfo=None)


def _parse_year(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        year = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid default year {value!r}") from e
    if not 1 <= year <= 9999:
        raise ConfigurationError(f"default year out of range: {year}")
    return year


def _coerce(name: str, value: Any) -> Any:
    if name == "default_year":
        return _parse_year(value)
    if name == "reference_time":
        return parse_reference_time(value)
    if name == "stdout":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES
    return None if value is None else str(value)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    return data


def load_settings(
    config_file: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """Build Settings from YAML, environment and explicit overrides.

    Args:
        config_file: YAML file; falls back to $QKVIEW_DOCTOR_CONFIG.
        env: Environment mapping (defaults to os.environ).
        **overrides: Values that win over everything else; None is ignored.

    Raises:
        ConfigurationError: On unreadable files or invalid values.
    """
    if env is None:
        env = os.environ

    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}

    if config_file is None and env.get(CONFIG_ENV_VAR):
        config_file = Path(env[CONFIG_ENV_VAR]).expanduser()
    if config_file is not None:
        for key, value in _load_yaml(Path(config_file)).items():
            if key in known:
                values[key] = value

    for name in known:
        env_value = env.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            values[name] = env_value

    for name, value in overrides.items():
        if name not in known:
            raise ConfigurationError(f"unknown setting: {name}")
        if value is not None:
            values[name] = value

    return Settings(**{name: _coerce(name, value) for name, value in values.items()})
