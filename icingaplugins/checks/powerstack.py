"""Power stack check — member switch states and StackPower port links."""

from __future__ import annotations

from icingaplugins.checks.base import CheckResult, Status
from icingaplugins.checks.stackmodules import join_labels
from icingaplugins.config.settings import CheckOptions
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.inventory import check_connection, walk_index_map, walk_suffix_map
from icingaplugins.device.models import NUMERIC_KINDS, StackPowerPortLinkStatus, SwitchState
from icingaplugins.device.oids import StackwiseOIDs


def _suffix_key(suffix: str) -> tuple[int, ...]:
    return tuple(int(part) for part in suffix.split(".") if part.isdigit())


def evaluate_power_stack(switch_states: dict[int, int],
                         port_statuses: dict[str, int]) -> CheckResult:
    states = [switch_states[k] for k in sorted(switch_states)]
    ports = [port_statuses[k] for k in sorted(port_statuses, key=_suffix_key)]

    status = Status.OK
    if any(state != SwitchState.READY for state in states):
        status = Status.worst(status, Status.WARNING)
    if any(port != StackPowerPortLinkStatus.UP for port in ports):
        status = Status.worst(status, Status.WARNING)

    if status == Status.OK:
        return CheckResult(
            status,
            f'{len(states)} switches are "ready" and {len(ports)} power stack ports are up',
        )
    return CheckResult(
        status,
        f'Switch states: "{join_labels(SwitchState, states)}", '
        f'Power stack port statuses: "{join_labels(StackPowerPortLinkStatus, ports)}"',
    )


async def check_power_stack(session: SnmpSession, options: CheckOptions) -> CheckResult:
    await check_connection(session)
    switch_states = await walk_index_map(session, StackwiseOIDs.SWITCH_STATE, NUMERIC_KINDS)
    port_statuses = await walk_suffix_map(
        session, StackwiseOIDs.STACK_POWER_PORT_LINK_STATUS, NUMERIC_KINDS,
    )
    return evaluate_power_stack(
        {k: int(v) for k, v in switch_states.items()},
        {k: int(v) for k, v in port_statuses.items()},
    )
