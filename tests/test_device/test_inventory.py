"""Tests for the inventory walker and model detection."""

import re
from unittest.mock import AsyncMock, patch

import pytest

from icingaplugins.device.classifier import ExpectedPsuRule, ModelFamily, profile_for
from icingaplugins.device.inventory import (
    Inventory,
    InventoryWalker,
    check_connection,
    detect_model,
    expected_psu_count,
    find_virtual_stack_links,
    read_model_name,
    walk_index_map,
    walk_suffix_map,
)
from icingaplugins.device.models import (
    NUMERIC_KINDS,
    PhysicalClass,
    SnmpValue,
    ValueKind,
)
from icingaplugins.device.oids import EntityOIDs, StackwiseOIDs, SystemOIDs
from icingaplugins.errors import EmptyModelError, QueryError, UnsupportedModelError

MODEL_OID = EntityOIDs.ENT_PHYSICAL_MODEL_NAME

CHASSIS = SnmpValue.integer(PhysicalClass.CHASSIS)
STACK = SnmpValue.integer(PhysicalClass.STACK)
CONTAINER = SnmpValue.integer(PhysicalClass.CONTAINER)
PSU = SnmpValue.integer(PhysicalClass.POWER_SUPPLY)


# --- Table walks ---


@pytest.mark.asyncio
async def test_walk_index_map_skips_wrong_types_and_bad_indices(make_session, caplog):
    session = make_session(walks={"1.2.3": {
        "1": SnmpValue.integer(4),
        "2": SnmpValue.string("oops"),
        "3.1": SnmpValue.integer(4),
        "4": SnmpValue.unsigned(7),
    }})
    result = await walk_index_map(session, "1.2.3", NUMERIC_KINDS)
    assert result == {1: 4, 4: 7}
    assert "Skipping 1.2.3.2" in caplog.text


@pytest.mark.asyncio
async def test_walk_suffix_map_keeps_compound_suffixes(make_session):
    session = make_session(walks={StackwiseOIDs.STACK_POWER_PORT_LINK_STATUS: {
        "1001.1": SnmpValue.integer(1),
        "1001.2": SnmpValue.integer(2),
    }})
    result = await walk_suffix_map(
        session, StackwiseOIDs.STACK_POWER_PORT_LINK_STATUS, NUMERIC_KINDS,
    )
    assert result == {"1001.1": 1, "1001.2": 2}


@pytest.mark.asyncio
async def test_walker_fetches_inventory(make_session):
    session = make_session(walks={
        EntityOIDs.ENT_PHYSICAL_CLASS: {"1": CHASSIS, "2": CONTAINER, "3": PSU},
        EntityOIDs.ENT_PHYSICAL_DESCR: {
            "1": SnmpValue.string("Cisco Systems Catalyst 9300"),
            "2": SnmpValue.string("Power Supply A Container"),
            "3": SnmpValue.string("Switch 1 - Power Supply A"),
        },
    })
    inventory = await InventoryWalker(session).fetch()
    assert inventory.classes == {1: 3, 2: 5, 3: 6}
    assert inventory.descriptions[3] == "Switch 1 - Power Supply A"


# --- Inventory queries ---


def test_chassis_index_defaults_to_one():
    assert Inventory(classes={1: PhysicalClass.CHASSIS, 1000: PhysicalClass.CHASSIS}).chassis_index() == 1
    assert Inventory().chassis_index() == 1


def test_chassis_index_of_stack():
    inventory = Inventory(classes={
        1: PhysicalClass.STACK,
        2000: PhysicalClass.CHASSIS,
        1000: PhysicalClass.CHASSIS,
    })
    assert inventory.chassis_index() == 1000


def test_stack_members():
    stacked = Inventory(classes={
        1: PhysicalClass.STACK,
        1000: PhysicalClass.CHASSIS,
        2000: PhysicalClass.CHASSIS,
        3000: PhysicalClass.CHASSIS,
        1010: PhysicalClass.POWER_SUPPLY,
    })
    assert stacked.stack_members() == [1000, 2000, 3000]
    assert Inventory(classes={1: PhysicalClass.CHASSIS}).stack_members() == [1]


def test_power_supplies_and_containers():
    inventory = Inventory(
        classes={
            1: PhysicalClass.CHASSIS,
            10: PhysicalClass.CONTAINER,
            11: PhysicalClass.POWER_SUPPLY,
            12: PhysicalClass.CONTAINER,
            13: PhysicalClass.POWER_SUPPLY,
        },
        descriptions={
            1: "c93xx Stack",
            10: "Power Supply A Container",
            11: "Switch 1 - Power Supply A",
            12: "Power Supply B Container",
            13: "Some other supply",
        },
    )
    assert inventory.power_supplies() == [11, 13]
    assert inventory.power_supplies(re.compile(r"^Switch.*Power Supply [AB]$")) == [11]
    assert inventory.containers(profile_for(ModelFamily.C9300).container_regex) == [10, 12]


# --- Connection and model detection ---


@pytest.mark.asyncio
async def test_check_connection(make_session):
    session = make_session()
    await check_connection(session)
    assert session.fetched == [SystemOIDs.SYS_NAME]


@pytest.mark.asyncio
async def test_check_connection_without_sysname(make_session):
    session = make_session(gets={SystemOIDs.SYS_NAME: SnmpValue(ValueKind.NO_SUCH_OBJECT)})
    with pytest.raises(QueryError):
        await check_connection(session)


@pytest.mark.asyncio
async def test_read_model_name_errors(make_session):
    session = make_session(gets={f"{MODEL_OID}.2": SnmpValue.integer(3)})
    with pytest.raises(QueryError, match="no such instance"):
        await read_model_name(session, 1)
    with pytest.raises(QueryError, match="unexpected value type"):
        await read_model_name(session, 2)


@pytest.mark.asyncio
async def test_detect_model_uses_chassis_index(make_session):
    session = make_session(
        walks={EntityOIDs.ENT_PHYSICAL_CLASS: {"1": STACK, "1000": CHASSIS}},
        gets={f"{MODEL_OID}.1000": SnmpValue.string("WS-C3750X-48P-S")},
    )
    model = await detect_model(session)
    assert model.raw == "WS-C3750X-48P-S"
    assert model.normalized == "C3750X-48P-S"
    assert model.family is ModelFamily.C3750X


@pytest.mark.asyncio
async def test_detect_model_retries_empty_string(make_session):
    session = make_session(
        walks={EntityOIDs.ENT_PHYSICAL_CLASS: {"1": CHASSIS}},
        gets={f"{MODEL_OID}.1": [
            SnmpValue.string(""), SnmpValue.string(""), SnmpValue.string("C9300-48P"),
        ]},
    )
    with patch("icingaplugins.device.inventory.asyncio.sleep", new=AsyncMock()) as sleep:
        model = await detect_model(session, max_retries=3)
    assert model.family is ModelFamily.C9300
    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.5)
    assert session.fetched.count(f"{MODEL_OID}.1") == 3


@pytest.mark.asyncio
async def test_detect_model_gives_up_on_empty_string(make_session):
    session = make_session(
        walks={EntityOIDs.ENT_PHYSICAL_CLASS: {"1": CHASSIS}},
        gets={f"{MODEL_OID}.1": SnmpValue.string("")},
    )
    with patch("icingaplugins.device.inventory.asyncio.sleep", new=AsyncMock()):
        with pytest.raises(EmptyModelError) as excinfo:
            await detect_model(session, max_retries=2)
    assert excinfo.value.attempts == 3


@pytest.mark.asyncio
async def test_detect_model_without_retries(make_session):
    session = make_session(gets={f"{MODEL_OID}.1": SnmpValue.string("  ")})
    with pytest.raises(EmptyModelError) as excinfo:
        await detect_model(session)
    assert excinfo.value.attempts == 1


@pytest.mark.asyncio
async def test_detect_model_unsupported(make_session):
    session = make_session(gets={f"{MODEL_OID}.1": SnmpValue.string("N9K-C93180YC-EX")})
    with pytest.raises(UnsupportedModelError, match="N9K-C93180YC-EX"):
        await detect_model(session)


# --- Expected PSU count ---


def test_expected_psu_count_rules():
    assert expected_psu_count(ExpectedPsuRule.CONTAINERS, containers=4, stack_members=2) == 4
    assert expected_psu_count(ExpectedPsuRule.DOUBLE_CONTAINERS, containers=2, stack_members=2) == 4
    assert expected_psu_count(ExpectedPsuRule.ONE_PER_MEMBER, containers=0, stack_members=3) == 3
    assert expected_psu_count(ExpectedPsuRule.FIXED_SINGLE, containers=0, stack_members=1) == 1


def test_expected_psu_count_precedence():
    rule = ExpectedPsuRule.ONE_PER_MEMBER
    assert expected_psu_count(rule, containers=2, stack_members=3, override=5) == 5
    assert expected_psu_count(rule, containers=2, stack_members=3, double_containers=True) == 4
    assert expected_psu_count(
        ExpectedPsuRule.CONTAINERS, containers=2, stack_members=3, psu_built_in=True,
    ) == 3


# --- Virtual stack links ---


def test_find_virtual_stack_links():
    aliases = {
        1: "uplink to core",
        2: "SVL link 1",
        3: "to-peer-vsl",
        4: "",
        5: "Svl member",
    }
    assert find_virtual_stack_links(aliases) == {2, 3, 5}
    assert find_virtual_stack_links({}) == set()
