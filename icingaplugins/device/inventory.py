"""Inventory walker — ENTITY-MIB tables, model detection, stack members."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Collection
from dataclasses import dataclass, field

from icingaplugins.device.base import SnmpSession
from icingaplugins.device.classifier import (
    DeviceModel,
    ExpectedPsuRule,
    ModelFamily,
    classify,
    normalize_model,
)
from icingaplugins.device.models import PhysicalClass, SnmpValue, ValueKind
from icingaplugins.device.oids import EntityOIDs, SystemOIDs
from icingaplugins.errors import EmptyModelError, QueryError, UnsupportedModelError
from icingaplugins.logging_handler import TRACE

logger = logging.getLogger(__name__)

MODEL_QUERY_RETRY_DELAY = 0.5  # seconds


def _accept(oid: str, key: str, value: SnmpValue,
            kinds: Collection[ValueKind]) -> bool:
    if value.kind in kinds:
        return True
    logger.warning(
        "Skipping %s.%s: expected %s, got %s (%r)",
        oid, key, "/".join(k.value for k in kinds), value.kind.value, value.value,
    )
    return False


async def walk_index_map(session: SnmpSession, oid: str,
                         kinds: Collection[ValueKind]) -> dict[int, int | str]:
    """Bulk-walk a table column keyed by a single integer index.

    Entries whose wire type is not one of *kinds*, or whose suffix is not a
    plain integer, are logged and skipped.
    """
    results: dict[int, int | str] = {}
    for key, value in (await session.bulk_walk(oid)).items():
        try:
            index = int(key)
        except ValueError:
            logger.warning("Skipping %s.%s: index is not an integer", oid, key)
            continue
        if _accept(oid, key, value, kinds):
            results[index] = value.value
    return results


async def walk_suffix_map(session: SnmpSession, oid: str,
                          kinds: Collection[ValueKind]) -> dict[str, int | str]:
    """Bulk-walk a table column keyed by its (possibly multi-part) suffix."""
    return {
        key: value.value
        for key, value in (await session.bulk_walk(oid)).items()
        if _accept(oid, key, value, kinds)
    }


@dataclass
class Inventory:
    """Physical inventory of a device (entPhysicalClass / entPhysicalDescr)."""

    classes: dict[int, int] = field(default_factory=dict)
    descriptions: dict[int, str] = field(default_factory=dict)

    def indices_of(self, physical_class: PhysicalClass) -> list[int]:
        return sorted(i for i, c in self.classes.items() if c == physical_class)

    def chassis_index(self) -> int:
        """Index of the entity to read the model name from.

        Index 1 is the chassis on most devices; stacks (index 1 is the
        stack) and some platforms number it differently.  All stack members
        are assumed to belong to the same model family.
        """
        if self.classes.get(1) == PhysicalClass.CHASSIS:
            return 1
        chassis = self.indices_of(PhysicalClass.CHASSIS)
        return chassis[0] if chassis else 1

    def stack_members(self) -> list[int]:
        if self.classes.get(1) == PhysicalClass.STACK:
            return self.indices_of(PhysicalClass.CHASSIS)
        return [1]

    def power_supplies(self, pattern: re.Pattern[str] | None = None) -> list[int]:
        """Power-supply entities, optionally filtered by description."""
        found = []
        for index in self.indices_of(PhysicalClass.POWER_SUPPLY):
            if pattern is not None:
                descr = self.descriptions.get(index, "")
                if not pattern.match(descr):
                    logger.debug("PSU %d (%r) does not match %s", index, descr, pattern.pattern)
                    continue
            found.append(index)
        return found

    def containers(self, pattern: re.Pattern[str]) -> list[int]:
        found = []
        for index, descr in sorted(self.descriptions.items()):
            logger.log(TRACE, "Testing %r for PSU container (%s)", descr, pattern.pattern)
            if pattern.match(descr):
                found.append(index)
        return found


class InventoryWalker:
    """Fetches the entity tables a check needs from one session."""

    def __init__(self, session: SnmpSession) -> None:
        self._session = session

    async def fetch_classes(self) -> dict[int, int]:
        raw = await walk_index_map(
            self._session, EntityOIDs.ENT_PHYSICAL_CLASS, {ValueKind.INTEGER},
        )
        return {k: int(v) for k, v in raw.items()}

    async def fetch_descriptions(self) -> dict[int, str]:
        raw = await walk_index_map(
            self._session, EntityOIDs.ENT_PHYSICAL_DESCR, {ValueKind.OCTET_STRING},
        )
        return {k: str(v) for k, v in raw.items()}

    async def fetch(self) -> Inventory:
        descriptions = await self.fetch_descriptions()
        classes = await self.fetch_classes()
        return Inventory(classes=classes, descriptions=descriptions)

    async def stack_members(self) -> list[int]:
        return Inventory(classes=await self.fetch_classes()).stack_members()


async def check_connection(session: SnmpSession) -> None:
    """Round-trip a sysName GET so transport problems surface early."""
    value = await session.get(SystemOIDs.SYS_NAME)
    if value.is_missing:
        raise QueryError(SystemOIDs.SYS_NAME, "no such instance")
    logger.debug("Connected to %s (sysName %r)", session.target, value.value)


async def read_model_name(session: SnmpSession, index: int) -> str:
    oid = f"{EntityOIDs.ENT_PHYSICAL_MODEL_NAME}.{index}"
    value = await session.get(oid)
    if value.kind == ValueKind.NO_SUCH_INSTANCE:
        raise QueryError(oid, "no such instance")
    if value.kind != ValueKind.OCTET_STRING:
        raise QueryError(oid, f"unexpected value type {value.kind.value}")
    return str(value.value)


async def detect_model(session: SnmpSession, max_retries: int = 0) -> DeviceModel:
    """Identify the device's model family.

    Some devices answer the first cold query for the model name with an
    empty string, so an empty answer is retried up to *max_retries* times.
    Raises :class:`EmptyModelError` or :class:`UnsupportedModelError` when
    no usable family comes back.
    """
    walker = InventoryWalker(session)
    index = Inventory(classes=await walker.fetch_classes()).chassis_index()

    attempts = 0
    raw = ""
    while True:
        attempts += 1
        raw = (await read_model_name(session, index)).strip()
        if raw or attempts > max_retries:
            break
        logger.info("Empty model string from %s (attempt %d), retrying",
                    session.target, attempts)
        await asyncio.sleep(MODEL_QUERY_RETRY_DELAY)

    if not raw:
        raise EmptyModelError(attempts)

    normalized = normalize_model(raw)
    family = classify(normalized)
    if family is ModelFamily.UNKNOWN:
        raise UnsupportedModelError(raw)

    logger.info("Detected %s (%s) at entity %d", normalized, family.label, index)
    return DeviceModel(raw=raw, normalized=normalized, family=family)


def expected_psu_count(rule: ExpectedPsuRule, containers: int, stack_members: int,
                       override: int = 0, double_containers: bool = False,
                       psu_built_in: bool = False) -> int:
    """Number of PSUs a healthy device should report.

    Precedence: explicit override, doubled containers, one per stack
    member, then the plain container count.
    """
    if override > 0:
        return override
    if double_containers or rule == ExpectedPsuRule.DOUBLE_CONTAINERS:
        return 2 * containers
    if psu_built_in or rule == ExpectedPsuRule.ONE_PER_MEMBER:
        return stack_members
    if rule == ExpectedPsuRule.FIXED_SINGLE:
        return 1
    return containers


# Best-effort: SVL/VSL member links are only recognisable by how operators
# describe them.
_VIRTUAL_LINK_MARKERS = ("svl", "vsl")


def find_virtual_stack_links(aliases: dict[int, str]) -> set[int]:
    """Heuristic guess at StackWise Virtual / VSS link interfaces.

    Returns the ifIndex of every interface whose alias mentions ``svl`` or
    ``vsl``.  The result is a candidate set, not an authoritative list.
    """
    return {
        index for index, alias in aliases.items()
        if any(marker in alias.lower() for marker in _VIRTUAL_LINK_MARKERS)
    }
