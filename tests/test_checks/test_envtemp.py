"""Tests for the temperature sensors check."""

import pytest
from pysnmp.proto import rfc1902

from icingaplugins.checks.base import Status
from icingaplugins.checks.envtemp import check_envtemp, evaluate_temperatures, scale_threshold
from icingaplugins.config.settings import EnvTempOptions
from icingaplugins.device.models import SnmpValue
from icingaplugins.device.oids import EnvMonOIDs
from icingaplugins.device.pysnmp_driver import convert_value


def test_scale_threshold():
    assert scale_threshold(56, 100) == 56
    assert scale_threshold(56, 0) == 56
    assert scale_threshold(56, 90) == 50      # 50.4
    assert scale_threshold(55, 90) == 50      # 49.5 rounds up
    assert scale_threshold(0, 90) == 0
    assert scale_threshold(56, 50) == 28
    assert scale_threshold(75, 50) == 38      # 37.5 rounds up


def test_all_sensors_below_threshold():
    result = evaluate_temperatures({1: 35, 2: 41}, {1: 56, 2: 0})
    assert result.status == Status.OK
    assert result.message == "Sensor readings are: 35°C, 41°C"
    assert [str(p) for p in result.perfdata] == [
        "'temp_1'=35;;56;;",
        "'temp_2'=41;;0;;",
    ]


def test_sensor_at_threshold_is_critical():
    result = evaluate_temperatures({1: 56, 2: 30}, {1: 56, 2: 60})
    assert result.status == Status.CRITICAL


def test_zero_threshold_never_alarms():
    result = evaluate_temperatures({1: 95}, {1: 0})
    assert result.status == Status.OK


def test_missing_threshold_never_alarms():
    result = evaluate_temperatures({1: 95}, {})
    assert result.status == Status.OK
    assert str(result.perfdata[0]) == "'temp_1'=95;;0;;"


def test_scaled_threshold_applies():
    assert evaluate_temperatures({1: 51}, {1: 56}).status == Status.OK
    assert evaluate_temperatures({1: 51}, {1: 56}, scale=90).status == Status.CRITICAL


def test_sensors_reported_in_index_order():
    result = evaluate_temperatures({3: 30, 1: 20, 2: 25}, {})
    assert result.message == "Sensor readings are: 20°C, 25°C, 30°C"


def test_no_sensors_is_unknown():
    result = evaluate_temperatures({}, {})
    assert result.status == Status.UNKNOWN


@pytest.mark.asyncio
async def test_check_envtemp(make_session):
    session = make_session(walks={
        EnvMonOIDs.TEMPERATURE_STATUS_VALUE: {
            "1006": SnmpValue.unsigned(38),
            "1007": SnmpValue.unsigned(61),
            "1008": SnmpValue.integer(20),
        },
        EnvMonOIDs.TEMPERATURE_THRESHOLD: {
            "1006": SnmpValue.integer(56),
            "1007": SnmpValue.integer(60),
        },
    })
    result = await check_envtemp(session, EnvTempOptions())
    assert result.status == Status.CRITICAL
    # 1008 has the wrong wire type and is skipped
    assert result.message == "Sensor readings are: 38°C, 61°C"
    assert session.walked == [
        EnvMonOIDs.TEMPERATURE_STATUS_VALUE,
        EnvMonOIDs.TEMPERATURE_THRESHOLD,
    ]


@pytest.mark.asyncio
async def test_check_envtemp_with_agent_wire_types(make_session):
    session = make_session(walks={
        EnvMonOIDs.TEMPERATURE_STATUS_VALUE: {
            "1006": convert_value(rfc1902.Gauge32(38)),
            "1007": convert_value(rfc1902.Gauge32(61)),
        },
        EnvMonOIDs.TEMPERATURE_THRESHOLD: {
            "1006": convert_value(rfc1902.Integer32(56)),
            "1007": convert_value(rfc1902.Integer32(60)),
        },
    })
    result = await check_envtemp(session, EnvTempOptions())
    assert result.status == Status.CRITICAL
    assert result.message == "Sensor readings are: 38°C, 61°C"
