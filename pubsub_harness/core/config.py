from __future__ import annotations

import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..datastructures.type_aliases import DurationSeconds, QueryKey

SETTINGS_TABLE = "pubsub_harness"

CSV_ENV_FIELDS = ("default_ignore_query_keys", "log_debug_scopes")


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _as_str_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    return (str(value),)


@dataclass(slots=True)
class HarnessSettings:
    """pubsub-harness configuration settings."""

    aggregation_timeout: DurationSeconds = 20.0
    race_timeout: DurationSeconds = 30.0
    timeout_message: str = "Test timed out."
    empty_sentinel: str = "[]"
    origin: str = "ps.pndsn.com"
    default_ignore_query_keys: frozenset[QueryKey] = field(
        default_factory=frozenset
    )
    log_level: str = "INFO"
    log_debug_scopes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.aggregation_timeout <= 0:
            raise ValueError("aggregation_timeout must be positive")
        if self.race_timeout <= 0:
            raise ValueError("race_timeout must be positive")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> HarnessSettings:
        """Build settings from a loosely typed mapping (TOML, JSON, env)."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in payload.items():
            if key not in known:
                raise ValueError(f"Unknown setting: {key}")
            values[key] = value

        if "default_ignore_query_keys" in values:
            values["default_ignore_query_keys"] = frozenset(
                _as_str_tuple(values["default_ignore_query_keys"])
            )
        if "log_debug_scopes" in values:
            values["log_debug_scopes"] = _as_str_tuple(values["log_debug_scopes"])
        for key in ("aggregation_timeout", "race_timeout"):
            if key in values:
                values[key] = float(values[key])
        return cls(**values)

    @classmethod
    def from_toml(cls, path: str | Path) -> HarnessSettings:
        """Load settings from the ``[pubsub_harness]`` table of a TOML file."""
        with open(path, "rb") as fh:
            document = tomllib.load(fh)
        return cls.from_dict(document.get(SETTINGS_TABLE, {}))

    @classmethod
    def from_env(cls) -> HarnessSettings:
        """Load settings from ``PUBSUB_HARNESS_*`` variables (and ``.env``)."""
        values = HarnessEnvSettings().model_dump(exclude_none=True)
        for key in CSV_ENV_FIELDS:
            if key in values:
                values[key] = _split_csv(values[key])
        return cls.from_dict(values)


class HarnessEnvSettings(BaseSettings):
    """Environment overrides for HarnessSettings; unset fields keep defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PUBSUB_HARNESS_", env_file=".env", extra="ignore"
    )

    aggregation_timeout: float | None = Field(
        None, description="Seconds an aggregation call waits for its events."
    )
    race_timeout: float | None = Field(
        None, description="Seconds a timeout race waits before giving up."
    )
    timeout_message: str | None = Field(
        None, description="Text relayed when a timeout race fires."
    )
    empty_sentinel: str | None = Field(
        None, description='Payload meaning "no event yet"; always skipped.'
    )
    origin: str | None = Field(
        None, description="Host that registered stubs are recorded against."
    )
    default_ignore_query_keys: str | None = Field(
        None, description="Comma-separated query keys every match ignores."
    )
    log_level: str | None = Field(None, description="loguru level for stderr.")
    log_debug_scopes: str | None = Field(
        None, description="Comma-separated module scopes logged at DEBUG."
    )
