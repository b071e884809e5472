"""Runtime configuration for netsense."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from netsense._constants import DEFAULT_BRIDGE_URL, REFRESH_INTERVAL
from netsense.exceptions import NetsenseConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise NetsenseConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class NetsenseConfig:
    """Monitor configuration.

    Parameters
    ----------
    bridge_url : str
        Base URL of the on-device telephony bridge serving raw cell
        measurements.
    request_timeout : float
        Per-request timeout in seconds for bridge calls.
    refresh_interval : float
        Seconds between the completion of one acquisition cycle and the
        start of the next.  Defaults to 3 seconds.
    fallback_enabled : bool
        Query the native fallback provider when the primary provider
        returns nothing.
    database_path : str
        SQLite file used by the durable store on export.
    export_path : str
        Default CSV destination for exports.
    """

    bridge_url: str = DEFAULT_BRIDGE_URL
    request_timeout: float = 5.0
    refresh_interval: float = REFRESH_INTERVAL
    fallback_enabled: bool = True
    database_path: str = "netsense.sqlite3"
    export_path: str = "cell_data_export.csv"

    def __post_init__(self) -> None:
        if self.refresh_interval <= 0:
            raise NetsenseConfigError(f"refresh_interval must be positive, got {self.refresh_interval}")
        if self.request_timeout <= 0:
            raise NetsenseConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if not self.bridge_url.strip():
            raise NetsenseConfigError("bridge_url must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> NetsenseConfig:
        """Create configuration from ``NETSENSE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_STR_MAP = {
            "NETSENSE_BRIDGE_URL": "bridge_url",
            "NETSENSE_DATABASE_PATH": "database_path",
            "NETSENSE_EXPORT_PATH": "export_path",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "NETSENSE_REQUEST_TIMEOUT": "request_timeout",
            "NETSENSE_REFRESH_INTERVAL": "refresh_interval",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "fallback_enabled" not in overrides:
            config_kwargs["fallback_enabled"] = _env_bool(env.get("NETSENSE_FALLBACK_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
