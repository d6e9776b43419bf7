"""Plugin configuration — SNMP connection parameters, check options and the
optional YAML defaults file (with environment variable expansion)."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from icingaplugins.device.models import (
    AuthProtocol,
    MemoryMib,
    PrivProtocol,
    SecurityLevel,
)
from icingaplugins.errors import ConfigError


def _expand_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""
    pattern = re.compile(r"\$\{([^}]+)\}")
    def replacer(match: re.Match) -> str:
        var = match.group(1)
        return os.environ.get(var, match.group(0))
    return pattern.sub(replacer, value)


def _walk_and_expand(obj: object) -> object:
    """Recursively expand environment variables in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_expand(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_expand(item) for item in obj]
    return obj


class SnmpConfig(BaseModel):
    """Connection and USM parameters, built once per run."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(161, ge=1, le=65535)
    timeout: int = Field(10, ge=1)           # seconds
    retries: int = Field(1, ge=0)
    max_repetitions: int = Field(25, ge=1)
    username: str
    security_level: SecurityLevel = SecurityLevel.AUTH_PRIV
    auth_key: str | None = Field(None, min_length=8)    # USM minimum
    priv_key: str | None = Field(None, min_length=8)    # USM minimum
    auth_protocol: AuthProtocol = AuthProtocol.SHA
    priv_protocol: PrivProtocol = PrivProtocol.AES

    @model_validator(mode="after")
    def _check_keys(self) -> SnmpConfig:
        if self.security_level != SecurityLevel.NO_AUTH_NO_PRIV and not self.auth_key:
            raise ValueError(f"auth key is required for {self.security_level.value}")
        if self.security_level == SecurityLevel.AUTH_PRIV and not self.priv_key:
            raise ValueError("priv key is required for authpriv")
        return self


# ── Per-check options ───────────────────────────────────────────────

class CheckOptions(BaseModel):
    model_config = ConfigDict(frozen=True)


class ModelDetectionOptions(CheckOptions):
    # extra attempts after the first empty model string
    max_model_query_retries: int = Field(3, ge=0)


class EnvTempOptions(CheckOptions):
    scale: int = Field(100, ge=0)    # percent applied to vendor thresholds


class MemUsageOptions(ModelDetectionOptions):
    mib: MemoryMib | None = None     # None: pick from the detected model
    warn: int = Field(70, ge=0, le=100)
    crit: int = Field(80, ge=0, le=100)

    @model_validator(mode="after")
    def _check_thresholds(self) -> MemUsageOptions:
        if self.crit < self.warn:
            raise ValueError("critical threshold must not be below warning threshold")
        return self


class PowerSupplyOptions(ModelDetectionOptions):
    expected_psu_override: int = Field(0, ge=0, le=255)   # 0: automatic
    double_containers: bool = False
    psu_built_in: bool = False


# ── Optional YAML defaults ──────────────────────────────────────────

class SnmpDefaults(BaseModel):
    port: int | None = None
    timeout: int | None = None
    retries: int | None = None
    max_repetitions: int | None = None
    username: str | None = None
    security_level: SecurityLevel | None = None
    auth_key: str | None = None
    priv_key: str | None = None
    auth_protocol: AuthProtocol | None = None
    priv_protocol: PrivProtocol | None = None


class Settings(BaseModel):
    snmp: SnmpDefaults = Field(default_factory=SnmpDefaults)
    # check name -> option defaults, e.g. {"memusage": {"warn": 75}}
    checks: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def check_defaults(self, name: str) -> dict[str, Any]:
        return dict(self.checks.get(name, {}))


def load_config(path: str | Path | None = None) -> Settings:
    """Load defaults from a YAML file, falling back to empty defaults."""
    if path is None:
        candidates = [
            Path("/etc/icingaplugins/config.yaml"),
            Path.home() / ".icingaplugins" / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is None:
        return Settings()

    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    raw = _walk_and_expand(raw)

    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


def build_snmp_config(cli_values: dict[str, Any], settings: Settings) -> SnmpConfig:
    """Merge config file defaults with command-line values (CLI wins)."""
    merged: dict[str, Any] = {
        k: v for k, v in settings.snmp.model_dump().items() if v is not None
    }
    merged.update({k: v for k, v in cli_values.items() if v is not None})
    try:
        return SnmpConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(_summarize(exc)) from exc


def build_options(model: type[CheckOptions], cli_values: dict[str, Any],
                  defaults: dict[str, Any] | None = None) -> CheckOptions:
    merged = dict(defaults or {})
    merged.update({k: v for k, v in cli_values.items() if v is not None})
    try:
        return model.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(_summarize(exc)) from exc


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)
