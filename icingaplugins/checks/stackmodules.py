"""Data stack check — member switch states and stack links.

Classic StackWise stacks expose their stack ports in
cswStackPortOperStatus.  StackWise Virtual (and VSS) pairs do not; their
member links are ordinary interfaces, found by a best-effort match on the
interface alias.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from icingaplugins.checks.base import CheckResult, Status
from icingaplugins.config.settings import CheckOptions
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.inventory import (
    check_connection,
    find_virtual_stack_links,
    walk_index_map,
)
from icingaplugins.device.models import (
    NUMERIC_KINDS,
    IfAdminStatus,
    IfOperStatus,
    LabelledEnum,
    StackPortOperStatus,
    SwitchState,
    ValueKind,
)
from icingaplugins.device.oids import InterfaceOIDs, StackwiseOIDs

logger = logging.getLogger(__name__)


class StackType(str, Enum):
    TRADITIONAL = "traditional"
    VIRTUAL = "virtual"


@dataclass
class StackSurvey:
    switch_states: dict[int, int]
    stack_type: StackType
    port_statuses: dict[int, int] = field(default_factory=dict)
    # ifIndex -> (ifAdminStatus, ifOperStatus); None when not reported
    links: dict[int, tuple[int | None, int | None]] = field(default_factory=dict)


def join_labels(enum_cls: type[LabelledEnum], values: Iterable[int]) -> str:
    return ", ".join(enum_cls.describe(v) for v in values)


def _link_label(index: int, admin: int | None, oper: int | None) -> str:
    admin_label = IfAdminStatus.describe(admin) if admin is not None else "Missing"
    oper_label = IfOperStatus.describe(oper) if oper is not None else "Missing"
    return f"{index}: {admin_label}/{oper_label}"


def evaluate_stack_modules(survey: StackSurvey) -> CheckResult:
    """WARNING on any member not ready or any stack link not up; never CRITICAL."""
    states = [survey.switch_states[k] for k in sorted(survey.switch_states)]
    status = Status.OK
    if any(state != SwitchState.READY for state in states):
        status = Status.worst(status, Status.WARNING)

    if survey.stack_type == StackType.TRADITIONAL:
        ports = [survey.port_statuses[k] for k in sorted(survey.port_statuses)]
        if any(port != StackPortOperStatus.UP for port in ports):
            status = Status.worst(status, Status.WARNING)

        if status == Status.OK:
            return CheckResult(
                status,
                f'{len(states)} switches are "ready" and {len(ports)} stack ports are up',
            )
        return CheckResult(
            status,
            f'Switch states are "{join_labels(SwitchState, states)}"; '
            f'Stack port statuses are "{join_labels(StackPortOperStatus, ports)}"',
        )

    links = sorted(survey.links.items())
    for _, (admin, oper) in links:
        if admin != IfAdminStatus.UP or oper != IfOperStatus.UP:
            status = Status.worst(status, Status.WARNING)

    if status == Status.OK:
        return CheckResult(
            status,
            f'{len(states)} switches are "ready" and '
            f"{len(links)} virtual stack links are up",
        )
    link_labels = ", ".join(_link_label(i, a, o) for i, (a, o) in links)
    return CheckResult(
        status,
        f'Switch states are "{join_labels(SwitchState, states)}"; '
        f'Virtual stack link statuses are "{link_labels}"',
    )


async def survey_stack(session: SnmpSession) -> StackSurvey:
    switch_states = await walk_index_map(session, StackwiseOIDs.SWITCH_STATE, NUMERIC_KINDS)
    port_statuses = await walk_index_map(
        session, StackwiseOIDs.STACK_PORT_OPER_STATUS, NUMERIC_KINDS,
    )
    survey = StackSurvey(
        switch_states={k: int(v) for k, v in switch_states.items()},
        stack_type=StackType.TRADITIONAL,
        port_statuses={k: int(v) for k, v in port_statuses.items()},
    )
    if port_statuses:
        return survey

    logger.debug("No stack ports reported, looking for virtual stack links")
    survey.stack_type = StackType.VIRTUAL
    aliases = await walk_index_map(session, InterfaceOIDs.IF_ALIAS, {ValueKind.OCTET_STRING})
    candidates = find_virtual_stack_links({k: str(v) for k, v in aliases.items()})
    if not candidates:
        return survey

    logger.info("Treating interfaces %s as virtual stack links", sorted(candidates))
    admin = await walk_index_map(session, InterfaceOIDs.IF_ADMIN_STATUS, NUMERIC_KINDS)
    oper = await walk_index_map(session, InterfaceOIDs.IF_OPER_STATUS, NUMERIC_KINDS)
    survey.links = {
        index: (
            int(admin[index]) if index in admin else None,
            int(oper[index]) if index in oper else None,
        )
        for index in candidates
    }
    return survey


async def check_stack_modules(session: SnmpSession, options: CheckOptions) -> CheckResult:
    await check_connection(session)
    return evaluate_stack_modules(await survey_stack(session))
