"""Memory usage check (CISCO-PROCESS-MIB or CISCO-MEMORY-POOL-MIB)."""

from __future__ import annotations

import logging
import math

from icingaplugins.checks.base import CheckResult, PerfDatum, Status
from icingaplugins.config.settings import MemUsageOptions
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.classifier import profile_for
from icingaplugins.device.inventory import check_connection, detect_model, walk_index_map
from icingaplugins.device.models import UNSIGNED_KINDS, MemoryMib
from icingaplugins.device.oids import MemoryOIDs

logger = logging.getLogger(__name__)

# MIB -> (used OID, free OID, divisor to KB)
MEMORY_TABLES: dict[MemoryMib, tuple[str, str, int]] = {
    MemoryMib.CISCO_PROCESS_MIB: (
        MemoryOIDs.CPM_CPU_MEMORY_USED, MemoryOIDs.CPM_CPU_MEMORY_FREE, 1,
    ),
    MemoryMib.CISCO_MEMORY_POOL_MIB: (
        MemoryOIDs.MEMORY_POOL_USED, MemoryOIDs.MEMORY_POOL_FREE, 1024,
    ),
}


def evaluate_memory(used: dict[int, int], free: dict[int, int],
                    warn: int, crit: int) -> CheckResult:
    """Compare per-pool usage (in KB) against percentage thresholds.

    A pool index that appears in only one of the two tables is skipped:
    combining it with an implied zero would report a bogus total.
    """
    pools = sorted(used.keys() & free.keys())
    for index in sorted(used.keys() ^ free.keys()):
        logger.warning("Memory pool %d is missing its used/free counterpart, skipping", index)

    if not pools:
        return CheckResult(Status.UNKNOWN, "No memory pools reported")

    status = Status.OK
    parts: list[str] = []
    perfdata: list[PerfDatum] = []

    for index in pools:
        pool_used = used[index]
        total = pool_used + free[index]
        warn_at = total * warn / 100
        crit_at = total * crit / 100
        used_percent = math.floor(pool_used / total * 100 + 0.5) if total else 0

        perfdata.append(PerfDatum(
            f"mem_used_{index}", pool_used, unit="KB",
            warn=warn_at, crit=crit_at, minimum=0, maximum=total,
        ))
        parts.append(f"Memory ({index}): {used_percent}%")

        if pool_used >= crit_at:
            status = Status.worst(status, Status.CRITICAL)
        elif pool_used >= warn_at:
            status = Status.worst(status, Status.WARNING)

    return CheckResult(status, ", ".join(parts), perfdata)


async def select_mib(session: SnmpSession, options: MemUsageOptions) -> MemoryMib:
    if options.mib is not None:
        return options.mib
    model = await detect_model(session, options.max_model_query_retries)
    mib = profile_for(model.family).memory_mib
    logger.info("Using %s for %s", mib.value, model.family.label)
    return mib


async def check_memusage(session: SnmpSession, options: MemUsageOptions) -> CheckResult:
    await check_connection(session)
    mib = await select_mib(session, options)
    used_oid, free_oid, divisor = MEMORY_TABLES[mib]

    used = await walk_index_map(session, used_oid, UNSIGNED_KINDS)
    free = await walk_index_map(session, free_oid, UNSIGNED_KINDS)

    return evaluate_memory(
        {k: int(v) // divisor for k, v in used.items()},
        {k: int(v) // divisor for k, v in free.items()},
        options.warn, options.crit,
    )
