"""Configuration module — frozen dataclass loaded from YAML and environment variables."""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://log-api.newrelic.com/log/v1"

# Environment variable for each config field
ENV_VARS = {
    "license_key": "NR_LICENSE_KEY",
    "insert_key": "NR_INSERT_KEY",
    "endpoint": "NR_ENDPOINT",
    "tags": "NR_TAGS",
    "max_retries": "NR_MAX_RETRIES",
    "retry_interval_ms": "NR_RETRY_INTERVAL",
    "request_timeout": "NR_REQUEST_TIMEOUT",
}


def parse_tags(raw: Optional[str]) -> dict[str, str]:
    """Parse a semicolon-separated ``key:value`` string into a dict.

    Entries without a colon are dropped.
    """
    tags: dict[str, str] = {}
    if not raw:
        return tags
    for tag in raw.split(";"):
        parts = tag.split(":")
        if len(parts) > 1:
            tags[parts[0]] = parts[1]
    return tags


@dataclass(frozen=True)
class ForwarderConfig:
    license_key: Optional[str] = None
    insert_key: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    tags: str = ""
    max_retries: int = 3
    retry_interval_ms: int = 2000
    request_timeout: float = 30.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.license_key or self.insert_key)

    @property
    def tag_map(self) -> dict[str, str]:
        return parse_tags(self.tags)

    def auth_headers(self) -> dict[str, str]:
        """Return the single auth header to send; the license key wins."""
        if self.license_key:
            return {"X-License-Key": self.license_key}
        if self.insert_key:
            return {"X-Insert-Key": self.insert_key}
        return {}

    @classmethod
    def from_env(cls) -> "ForwarderConfig":
        """Create a ForwarderConfig from environment variables with defaults."""
        return _apply_env(cls())


def _coerce(name: str, value):
    """Convert a raw YAML/env value to the type of field *name*."""
    if name in ("max_retries", "retry_interval_ms"):
        return int(value)
    if name == "request_timeout":
        return float(value)
    if name in ("license_key", "insert_key"):
        return str(value) if value else None
    return str(value)


def _apply_env(config: ForwarderConfig) -> ForwarderConfig:
    overrides = {}
    for name, env_var in ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is None or value == "":
            continue
        overrides[name] = _coerce(name, value)
    return replace(config, **overrides)


def _load_yaml(path: str) -> dict:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        logger.warning("Invalid YAML in %s, using defaults: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        return {}
    return data


def load_config(path: Optional[str] = None) -> ForwarderConfig:
    """Build ForwarderConfig from defaults, an optional YAML file, then env vars.

    The YAML path may also be given via the ``CONFIG_PATH`` environment
    variable. Environment variables override values read from the file.
    """
    path = path or os.environ.get("CONFIG_PATH")
    config = ForwarderConfig()

    if path:
        known = {f.name for f in fields(ForwarderConfig)}
        overrides = {}
        for key, value in _load_yaml(path).items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r in %s", key, path)
                continue
            if value is None:
                continue
            overrides[key] = _coerce(key, value)
        config = replace(config, **overrides)

    return _apply_env(config)
