"""
Configuration — settings for the patch tools, read from ``.smartpatch.yaml``,
``SMARTPATCH_*`` environment variables and built-in defaults.
"""

import os

import yaml


_DEFAULTS = {
    "hint_window": 30,
    "edit_context_lines": 5,
    "diff_context_before": 3,
    "diff_context_after": 15,
    "create_preview_lines": 20,
    "single_block_notice": True,
    "record_metrics": False,
    "metrics_dir": ".smartpatch",
    "log_dir": ".smartpatch/logs",
}

_CONFIG_FILENAMES = (".smartpatch.yaml", ".smartpatch.yml")

_ENV_PREFIX = "SMARTPATCH_"


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Explicit path if it exists; otherwise the first match in CWD, then home."""
    if explicit_path:
        return explicit_path if os.path.isfile(explicit_path) else None

    for directory in (os.getcwd(), os.path.expanduser("~")):
        for name in _CONFIG_FILENAMES:
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate):
                return candidate
    return None


def _load_yaml(path: str) -> dict:
    """Parse *path*; unreadable, malformed or non-mapping files give ``{}``."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class Config:
    """Patch tool settings.

    Each setting ``foo_bar`` is exposed as attribute ``FOO_BAR`` and resolved
    as: environment variable ``SMARTPATCH_FOO_BAR`` > YAML key ``foo_bar`` >
    default.  Values that fail to convert fall back to the default.
    """

    HINT_WINDOW: int
    EDIT_CONTEXT_LINES: int
    DIFF_CONTEXT_BEFORE: int
    DIFF_CONTEXT_AFTER: int
    CREATE_PREVIEW_LINES: int
    SINGLE_BLOCK_NOTICE: bool
    RECORD_METRICS: bool
    METRICS_DIR: str
    LOG_DIR: str

    def __init__(self, yaml_data: dict | None = None):
        source = yaml_data or {}
        for key, default in _DEFAULTS.items():
            setattr(self, key.upper(), self._resolve(key, default, source))

    @staticmethod
    def _resolve(key: str, default, source: dict):
        if isinstance(default, bool):
            cast = _as_bool
        else:
            cast = type(default)

        env_val = os.getenv(_ENV_PREFIX + key.upper())
        value = env_val if env_val is not None else source.get(key)
        if value is None:
            return default
        try:
            return cast(value)
        except (TypeError, ValueError):
            return default

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Build a Config from the discovered YAML file plus the environment."""
        path = _find_config_file(config_path)
        return cls(_load_yaml(path) if path else {})
