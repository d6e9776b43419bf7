"""Exceptions raised by the plugins."""

from __future__ import annotations


class PluginError(Exception):
    """Base exception for all plugin failures."""


class ConfigError(PluginError):
    """Missing or invalid configuration (command line or config file)."""


class SnmpConnectionError(PluginError):
    """The SNMP transport could not be set up or the agent is unreachable."""


class QueryError(PluginError):
    """A GET or bulk walk failed, or returned an error status."""

    def __init__(self, oid: str, reason: str) -> None:
        super().__init__(f"Query of {oid} failed: {reason}")
        self.oid = oid
        self.reason = reason


class ModelDetectionError(PluginError):
    """The device model could not be turned into a known model family."""


class EmptyModelError(ModelDetectionError):
    """The device kept returning an empty model string."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Device returned an empty model string after {attempts} attempt(s)"
        )
        self.attempts = attempts


class UnsupportedModelError(ModelDetectionError):
    """The model string was read but its family is not known."""

    def __init__(self, raw_model: str) -> None:
        super().__init__(
            f"This plugin doesn't yet know how to handle model '{raw_model}'"
        )
        self.raw_model = raw_model
