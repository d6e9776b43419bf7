"""Shared test fixtures."""

from __future__ import annotations

from typing import Callable

import pytest

from icingaplugins.config.settings import SnmpConfig
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.models import SnmpValue, ValueKind
from icingaplugins.device.oids import SystemOIDs


class FakeSession(SnmpSession):
    """In-memory session serving canned walk and get tables.

    ``gets`` values may be a list, in which case successive GETs of that OID
    return successive items (the last one repeats).  Exceptions stored as
    values are raised.
    """

    def __init__(self, config: SnmpConfig, walks: dict | None = None,
                 gets: dict | None = None) -> None:
        super().__init__(config)
        self.walks = walks or {}
        self.gets = {SystemOIDs.SYS_NAME: SnmpValue.string("sw-test-01")}
        self.gets.update(gets or {})
        self.walked: list[str] = []
        self.fetched: list[str] = []
        self.closed = False

    async def connect(self) -> None:
        self._connected = True

    async def close(self) -> None:
        self._connected = False
        self.closed = True

    async def get(self, oid: str) -> SnmpValue:
        self.fetched.append(oid)
        value = self.gets.get(oid, SnmpValue(ValueKind.NO_SUCH_INSTANCE))
        if isinstance(value, list):
            value = value.pop(0) if len(value) > 1 else value[0]
        if isinstance(value, Exception):
            raise value
        return value

    async def bulk_walk(self, oid: str) -> dict[str, SnmpValue]:
        self.walked.append(oid)
        table = self.walks.get(oid, {})
        if isinstance(table, Exception):
            raise table
        return {str(k): v for k, v in table.items()}


@pytest.fixture
def snmp_config() -> SnmpConfig:
    return SnmpConfig(
        host="192.0.2.10", username="monitor",
        auth_key="authpassword", priv_key="privpassword",
    )


@pytest.fixture
def make_session(snmp_config: SnmpConfig) -> Callable[..., FakeSession]:
    def factory(walks: dict | None = None, gets: dict | None = None) -> FakeSession:
        return FakeSession(snmp_config, walks=walks, gets=gets)
    return factory
