"""Abstract SNMP session interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from icingaplugins.config.settings import SnmpConfig
from icingaplugins.device.models import SnmpValue


class SnmpSession(ABC):
    """Base class for SNMP transports.

    A session is opened once per plugin run and used for a fixed sequence
    of blocking round trips; use it as an async context manager so it is
    released when the check finishes.
    """

    def __init__(self, config: SnmpConfig):
        self.config = config
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Set up the transport to the agent."""

    @abstractmethod
    async def close(self) -> None:
        """Release the transport."""

    @abstractmethod
    async def get(self, oid: str) -> SnmpValue:
        """Fetch a single fully qualified OID."""

    @abstractmethod
    async def bulk_walk(self, oid: str) -> dict[str, SnmpValue]:
        """Walk the subtree below *oid*, keyed by the OID suffix."""

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def target(self) -> str:
        return f"{self.config.host}:{self.config.port}"

    async def __aenter__(self) -> SnmpSession:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
