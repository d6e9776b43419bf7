"""Temperature sensors check (CISCO-ENVMON-MIB)."""

from __future__ import annotations

import logging
import math

from icingaplugins.checks.base import CheckResult, PerfDatum, Status
from icingaplugins.config.settings import EnvTempOptions
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.inventory import check_connection, walk_index_map
from icingaplugins.device.models import NUMERIC_KINDS, UNSIGNED_KINDS
from icingaplugins.device.oids import EnvMonOIDs

logger = logging.getLogger(__name__)


def scale_threshold(threshold: int, scale: int) -> int:
    """Scale a vendor threshold by *scale* percent, rounding half up."""
    if scale in (0, 100):
        return threshold
    return int(math.floor(threshold * scale / 100 + 0.5))


def evaluate_temperatures(values: dict[int, int], thresholds: dict[int, int],
                          scale: int = 100) -> CheckResult:
    """CRITICAL when any sensor reaches its (non-zero) threshold.

    A sensor without a threshold, or with a threshold of 0, never alarms.
    """
    if not values:
        return CheckResult(Status.UNKNOWN, "No temperature sensors reported")

    status = Status.OK
    readings: list[str] = []
    perfdata: list[PerfDatum] = []

    for index in sorted(values):
        reading = values[index]
        threshold = scale_threshold(thresholds.get(index, 0), scale)

        perfdata.append(PerfDatum(f"temp_{index}", reading, crit=threshold))
        readings.append(f"{reading}°C")

        if threshold != 0 and reading >= threshold:
            logger.info("Sensor %d at %d°C reached threshold %d°C", index, reading, threshold)
            status = Status.worst(status, Status.CRITICAL)

    return CheckResult(
        status, "Sensor readings are: " + ", ".join(readings), perfdata,
    )


async def check_envtemp(session: SnmpSession, options: EnvTempOptions) -> CheckResult:
    await check_connection(session)
    values = await walk_index_map(
        session, EnvMonOIDs.TEMPERATURE_STATUS_VALUE, UNSIGNED_KINDS,
    )
    thresholds = await walk_index_map(
        session, EnvMonOIDs.TEMPERATURE_THRESHOLD, NUMERIC_KINDS,
    )
    return evaluate_temperatures(
        {k: int(v) for k, v in values.items()},
        {k: int(v) for k, v in thresholds.items()},
        scale=options.scale,
    )
