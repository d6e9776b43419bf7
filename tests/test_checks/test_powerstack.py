"""Tests for the power stack check."""

import pytest

from icingaplugins.checks.base import Status
from icingaplugins.checks.powerstack import check_power_stack, evaluate_power_stack
from icingaplugins.config.settings import CheckOptions
from icingaplugins.device.models import SnmpValue, StackPowerPortLinkStatus, SwitchState
from icingaplugins.device.oids import StackwiseOIDs

READY = SwitchState.READY
UP = StackPowerPortLinkStatus.UP
DOWN = StackPowerPortLinkStatus.DOWN


def test_healthy_power_stack():
    result = evaluate_power_stack({1: READY, 2: READY}, {"1.1": UP, "1.2": UP, "2.1": UP, "2.2": UP})
    assert result.status == Status.OK
    assert result.message == '2 switches are "ready" and 4 power stack ports are up'


def test_power_port_down():
    result = evaluate_power_stack({1: READY, 2: READY}, {"2.1": UP, "1.2": DOWN, "1.1": UP})
    assert result.status == Status.WARNING
    assert result.message == (
        'Switch states: "Ready, Ready", Power stack port statuses: "Up, Down, Up"'
    )


def test_ports_sorted_numerically():
    result = evaluate_power_stack({1: READY}, {"10.1": DOWN, "2.1": UP, "1.1": UP})
    assert result.message.endswith('"Up, Up, Down"')


def test_member_not_ready():
    result = evaluate_power_stack({1: SwitchState.VER_MISMATCH}, {"1.1": UP})
    assert result.status == Status.WARNING
    assert result.message.startswith('Switch states: "VerMismatch"')


@pytest.mark.asyncio
async def test_check_power_stack(make_session):
    session = make_session(walks={
        StackwiseOIDs.SWITCH_STATE: {"1001": SnmpValue.integer(READY), "2001": SnmpValue.integer(READY)},
        StackwiseOIDs.STACK_POWER_PORT_LINK_STATUS: {
            "1001.1": SnmpValue.integer(UP),
            "1001.2": SnmpValue.integer(UP),
            "2001.1": SnmpValue.integer(UP),
            "2001.2": SnmpValue.integer(DOWN),
        },
    })
    result = await check_power_stack(session, CheckOptions())
    assert result.status == Status.WARNING
    assert result.message.endswith('Power stack port statuses: "Up, Up, Up, Down"')
