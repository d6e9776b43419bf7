"""pysnmp (SNMPv3/USM) session."""

from __future__ import annotations

import logging
from typing import Any

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    UsmUserData,
    bulk_walk_cmd,
    get_cmd,
    usmAesBlumenthalCfb192Protocol,
    usmAesBlumenthalCfb256Protocol,
    usmAesCfb128Protocol,
    usmAesCfb192Protocol,
    usmAesCfb256Protocol,
    usmDESPrivProtocol,
    usmHMAC128SHA224AuthProtocol,
    usmHMAC192SHA256AuthProtocol,
    usmHMAC256SHA384AuthProtocol,
    usmHMAC384SHA512AuthProtocol,
    usmHMACMD5AuthProtocol,
    usmHMACSHAAuthProtocol,
    usmNoAuthProtocol,
    usmNoPrivProtocol,
)
from pysnmp.proto import rfc1902, rfc1905

from icingaplugins.config.settings import SnmpConfig
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.models import (
    AuthProtocol,
    PrivProtocol,
    SecurityLevel,
    SnmpValue,
    ValueKind,
)
from icingaplugins.errors import QueryError, SnmpConnectionError
from icingaplugins.logging_handler import TRACE

logger = logging.getLogger(__name__)

AUTH_PROTOCOLS: dict[AuthProtocol, Any] = {
    AuthProtocol.NOAUTH: usmNoAuthProtocol,
    AuthProtocol.MD5:    usmHMACMD5AuthProtocol,
    AuthProtocol.SHA:    usmHMACSHAAuthProtocol,
    AuthProtocol.SHA224: usmHMAC128SHA224AuthProtocol,
    AuthProtocol.SHA256: usmHMAC192SHA256AuthProtocol,
    AuthProtocol.SHA384: usmHMAC256SHA384AuthProtocol,
    AuthProtocol.SHA512: usmHMAC384SHA512AuthProtocol,
}

# aes192/aes256 use the Blumenthal key extension; the "c" variants use the
# one Cisco devices implement.
PRIV_PROTOCOLS: dict[PrivProtocol, Any] = {
    PrivProtocol.NOPRIV:  usmNoPrivProtocol,
    PrivProtocol.DES:     usmDESPrivProtocol,
    PrivProtocol.AES:     usmAesCfb128Protocol,
    PrivProtocol.AES192:  usmAesBlumenthalCfb192Protocol,
    PrivProtocol.AES256:  usmAesBlumenthalCfb256Protocol,
    PrivProtocol.AES192C: usmAesCfb192Protocol,
    PrivProtocol.AES256C: usmAesCfb256Protocol,
}


def build_user_data(config: SnmpConfig) -> UsmUserData:
    """Build USM credentials according to the configured security level."""
    if config.security_level == SecurityLevel.NO_AUTH_NO_PRIV:
        return UsmUserData(config.username)
    if config.security_level == SecurityLevel.AUTH_NO_PRIV:
        return UsmUserData(
            config.username,
            authKey=config.auth_key,
            authProtocol=AUTH_PROTOCOLS[config.auth_protocol],
            privProtocol=usmNoPrivProtocol,
        )
    return UsmUserData(
        config.username,
        authKey=config.auth_key,
        privKey=config.priv_key,
        authProtocol=AUTH_PROTOCOLS[config.auth_protocol],
        privProtocol=PRIV_PROTOCOLS[config.priv_protocol],
    )


def convert_value(value: Any) -> SnmpValue:
    """Convert a pysnmp value object into an :class:`SnmpValue`."""
    if isinstance(value, rfc1905.NoSuchInstance):
        return SnmpValue(ValueKind.NO_SUCH_INSTANCE)
    if isinstance(value, (rfc1905.NoSuchObject, rfc1905.EndOfMibView)):
        return SnmpValue(ValueKind.NO_SUCH_OBJECT)
    if isinstance(value, rfc1902.OctetString):
        return SnmpValue.string(value.asOctets().decode("utf-8", errors="replace"))
    if isinstance(value, rfc1902.Counter64):
        return SnmpValue(ValueKind.COUNTER64, int(value))
    if isinstance(value, (rfc1902.Counter32, rfc1902.Unsigned32, rfc1902.Gauge32,
                          rfc1902.TimeTicks)):
        return SnmpValue.unsigned(int(value))
    if isinstance(value, rfc1902.Integer32):
        return SnmpValue.integer(int(value))
    return SnmpValue(ValueKind.OTHER, value.prettyPrint())


def oid_suffix(name: str, base_oid: str) -> str:
    """Return the part of *name* below *base_oid* (``"1.2.3.7"`` -> ``"7"``)."""
    prefix = base_oid.strip(".") + "."
    name = name.lstrip(".")
    if len(name) <= len(prefix) or not name.startswith(prefix):
        raise QueryError(base_oid, f"unexpected OID format: {name}")
    return name[len(prefix):]


class PysnmpSession(SnmpSession):
    """SNMPv3 session backed by the pysnmp asyncio high-level API."""

    def __init__(self, config: SnmpConfig):
        super().__init__(config)
        self._engine: SnmpEngine | None = None
        self._auth: UsmUserData | None = None
        self._transport: UdpTransportTarget | None = None

    async def connect(self) -> None:
        self._engine = SnmpEngine()
        self._auth = build_user_data(self.config)
        try:
            self._transport = await UdpTransportTarget.create(
                (self.config.host, self.config.port),
                timeout=self.config.timeout,
                retries=self.config.retries,
            )
        except PySnmpError as exc:
            raise SnmpConnectionError(
                f"Error when connecting to {self.target}: {exc}"
            ) from exc
        self._connected = True
        logger.debug("SNMP transport ready for %s", self.target)

    async def close(self) -> None:
        if self._engine is not None:
            self._engine.close_dispatcher()
            self._engine = None
        self._transport = None
        self._connected = False

    async def get(self, oid: str) -> SnmpValue:
        self._require_connection()
        error_indication, error_status, error_index, var_binds = await get_cmd(
            self._engine, self._auth, self._transport, ContextData(),
            ObjectType(ObjectIdentity(oid)),
        )
        if error_indication:
            raise QueryError(oid, str(error_indication))
        if error_status:
            raise QueryError(oid, error_status.prettyPrint())
        name, value = var_binds[0]
        result = convert_value(value)
        logger.log(TRACE, "GET %s -> %s", name, result)
        return result

    async def bulk_walk(self, oid: str) -> dict[str, SnmpValue]:
        self._require_connection()
        results: dict[str, SnmpValue] = {}
        async for error_indication, error_status, error_index, var_binds in bulk_walk_cmd(
            self._engine, self._auth, self._transport, ContextData(),
            0, self.config.max_repetitions,
            ObjectType(ObjectIdentity(oid)),
            lexicographicMode=False,
        ):
            if error_indication:
                raise QueryError(oid, str(error_indication))
            if error_status:
                raise QueryError(oid, error_status.prettyPrint())
            for name, value in var_binds:
                result = convert_value(value)
                if result.is_missing:
                    continue
                if not str(name).lstrip(".").startswith(oid.strip(".") + "."):
                    logger.log(TRACE, "Ignoring %s outside %s", name, oid)
                    continue
                suffix = oid_suffix(str(name), oid)
                logger.log(TRACE, "WALK %s.%s -> %s", oid, suffix, result)
                results[suffix] = result
        logger.debug("Walked %s: %d entries", oid, len(results))
        return results

    def _require_connection(self) -> None:
        if not self._connected:
            raise SnmpConnectionError(f"Session to {self.target} is not connected")
