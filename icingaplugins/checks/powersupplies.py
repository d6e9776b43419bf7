"""Power supplies check.

Which entities count as PSUs, how many a healthy device should have and
where their state is read from all depend on the model family; see
:data:`icingaplugins.device.classifier.FAMILY_PROFILES`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from icingaplugins.checks.base import CheckResult, Status
from icingaplugins.config.settings import PowerSupplyOptions
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.classifier import (
    DeviceModel,
    ExpectedPsuRule,
    FamilyProfile,
    PsuStateSource,
    profile_for,
)
from icingaplugins.device.inventory import (
    InventoryWalker,
    detect_model,
    expected_psu_count,
    walk_index_map,
)
from icingaplugins.device.models import (
    NUMERIC_KINDS,
    EnvMonState,
    PowerOperStatus,
)
from icingaplugins.device.oids import EnvMonOIDs, FruControlOIDs

logger = logging.getLogger(__name__)


@dataclass
class PsuSurvey:
    """What the device reported about its power supplies."""
    psu_indices: list[int]
    expected: int
    state_source: PsuStateSource
    # FRU: entPhysicalIndex -> PowerOperStatus; ENVMON: envmon index -> EnvMonState
    states: dict[int, int] = field(default_factory=dict)


def _psus_on(survey: PsuSurvey) -> bool:
    if survey.state_source == PsuStateSource.FRU:
        for index in survey.psu_indices:
            state = survey.states.get(index)
            logger.debug("PSU %d power status %s", index,
                         PowerOperStatus.describe(state) if state is not None else "missing")
            if state != PowerOperStatus.ON:
                return False
        return True

    # The envmon supply table has its own numbering, so it is judged as a
    # whole; empty bays report notPresent and are covered by the count.
    for index, state in sorted(survey.states.items()):
        logger.debug("Supply %d envmon state %s", index, EnvMonState.describe(state))
        if state not in (EnvMonState.NORMAL, EnvMonState.NOT_PRESENT):
            return False
    return True


def evaluate_power_supplies(survey: PsuSurvey) -> CheckResult:
    observed = len(survey.psu_indices)
    expected = survey.expected

    if observed == 0:
        return CheckResult(Status.CRITICAL, "SNMP reports all PSUs are absent!")

    if observed == expected:
        # A single-PSU device can only answer if that PSU is powering it.
        if expected == 1 or _psus_on(survey):
            return CheckResult(
                Status.OK, f"All ({observed}) PSUs are present and 'ON'.",
            )
        return CheckResult(Status.WARNING, "At least one PSU is not 'ON'.")

    if observed == 1 and expected > 1:
        return CheckResult(Status.WARNING, "Only one PSU is present.")
    if observed < expected:
        return CheckResult(
            Status.WARNING,
            f"Only {observed} PSUs are present (should be {expected})",
        )
    return CheckResult(
        Status.WARNING, f"More PSUs ({observed}) than expecting ({expected}).",
    )


async def survey_power_supplies(session: SnmpSession, model: DeviceModel,
                                profile: FamilyProfile,
                                options: PowerSupplyOptions) -> PsuSurvey:
    if profile.expected_rule == ExpectedPsuRule.FIXED_SINGLE and not (
        options.expected_psu_override or options.double_containers or options.psu_built_in
    ):
        # No PSU or container entities are exposed; the device answering at
        # all means its one PSU is up.
        logger.debug("%s exposes no PSU entities, assuming one", model.family.label)
        return PsuSurvey([1], 1, profile.psu_state_source)

    inventory = await InventoryWalker(session).fetch()

    if profile.psu_state_source == PsuStateSource.ENVMON:
        raw_states = await walk_index_map(session, EnvMonOIDs.SUPPLY_STATE, NUMERIC_KINDS)
    else:
        raw_states = await walk_index_map(
            session, FruControlOIDs.FRU_POWER_OPER_STATUS, NUMERIC_KINDS,
        )

    psus = inventory.power_supplies(profile.psu_pattern_for(model.normalized))
    containers = inventory.containers(profile.container_regex)
    members = inventory.stack_members()

    expected = expected_psu_count(
        profile.expected_rule,
        containers=len(containers),
        stack_members=len(members),
        override=options.expected_psu_override,
        double_containers=options.double_containers,
        psu_built_in=options.psu_built_in,
    )
    logger.debug("PSUs %s, containers %s, stack members %s, expecting %d",
                 psus, containers, members, expected)

    return PsuSurvey(
        psu_indices=psus,
        expected=expected,
        state_source=profile.psu_state_source,
        states={k: int(v) for k, v in raw_states.items()},
    )


async def check_power_supplies(session: SnmpSession,
                               options: PowerSupplyOptions) -> CheckResult:
    model = await detect_model(session, options.max_model_query_retries)
    profile = profile_for(model.family)
    survey = await survey_power_supplies(session, model, profile, options)
    return evaluate_power_supplies(survey)
