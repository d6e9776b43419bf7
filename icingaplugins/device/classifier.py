"""Device model classification and per-family behaviour table.

The raw ``entPhysicalModelName`` of the chassis is normalised (vendor
prefixes and one known suffix removed), cut at the first hyphen and looked
up in a fixed table of short model codes.  The resulting family selects a
:class:`FamilyProfile`, which tells the checks which OIDs to read and how
many power supplies a healthy device has.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from icingaplugins.device.models import MemoryMib


class ModelFamily(str, Enum):
    ISR = "ISR"
    C9500 = "9500"
    C9300X = "9300X"
    C9300 = "9300"
    C9200 = "9200"
    C6800 = "6800"
    C4500X = "4500X"
    C4500 = "4500"
    C3850 = "3850"
    C3800 = "3800"
    C3750X = "3750X"
    C3750 = "3750"
    C3560 = "3560"
    C2960X = "2960X"
    C2960 = "2960"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        if self is ModelFamily.UNKNOWN:
            return "Model family not recognized"
        return f"Cisco {self.value} Family"


_MODEL_CODES: dict[str, ModelFamily] = {}


def _register(family: ModelFamily, *codes: str) -> None:
    for code in codes:
        _MODEL_CODES[code] = family


_register(ModelFamily.ISR, "IR1101")
_register(ModelFamily.C9500, "9500", "C9500")
_register(ModelFamily.C9300X, "9300X", "C9300X")
_register(ModelFamily.C9300, "9300", "C9300", "9300LM", "C9300LM")
_register(ModelFamily.C9200, "9200", "C9200", "9200CX", "C9200CX")
_register(ModelFamily.C6800, "6816", "C6816", "6880", "C6880")
_register(ModelFamily.C4500X, "4500X", "C4500X")
_register(ModelFamily.C4500, "4510", "C4510")
_register(ModelFamily.C3850, "3850", "C3850")
_register(ModelFamily.C3800, "3800", "C3800", "3800X")
_register(ModelFamily.C3750X, "3750X", "C3750X")
_register(ModelFamily.C3750, "3750", "C3750")
_register(ModelFamily.C3560, "3560", "C3560", "3560CG", "C3560CG", "3560CX", "C3560CX")
_register(ModelFamily.C2960X, "2960X", "C2960X")
_register(ModelFamily.C2960, "2960", "C2960", "2960S", "C2960S")

_VENDOR_PREFIXES = ("WS-", "ME-")
_CHASSIS_SUFFIX = "R+E"  # WS-C4510R+E


def normalize_model(raw: str) -> str:
    """Strip vendor prefixes and the 4510 ``R+E`` suffix from a model string."""
    model = raw.strip()
    for prefix in _VENDOR_PREFIXES:
        if model.startswith(prefix):
            model = model[len(prefix):]
    if model.endswith(_CHASSIS_SUFFIX):
        model = model[:-len(_CHASSIS_SUFFIX)]
    return model


def classify(model: str) -> ModelFamily:
    """Classify a normalised model string.

    Only the part before the first ``-`` is used.  Unrecognised codes map
    to :attr:`ModelFamily.UNKNOWN`; callers decide whether that is fatal.
    """
    code, _, _ = model.partition("-")
    return _MODEL_CODES.get(code, ModelFamily.UNKNOWN)


def known_model_codes() -> dict[str, ModelFamily]:
    return dict(_MODEL_CODES)


@dataclass(frozen=True)
class DeviceModel:
    raw: str
    normalized: str
    family: ModelFamily


# ── Per-family behaviour ────────────────────────────────────────────

class PsuStateSource(str, Enum):
    ENVMON = "envmon"   # CISCO-ENVMON-MIB ciscoEnvMonSupplyState
    FRU = "fru"         # CISCO-ENTITY-FRU-CONTROL-MIB cefcFRUPowerOperStatus


class ExpectedPsuRule(str, Enum):
    CONTAINERS = "containers"
    DOUBLE_CONTAINERS = "double-containers"
    ONE_PER_MEMBER = "one-per-member"
    FIXED_SINGLE = "fixed-single"     # no PSU entities are exposed at all


DEFAULT_CONTAINER_PATTERN = r".*Power Supply.*Container.*"


@dataclass(frozen=True)
class FamilyProfile:
    psu_state_source: PsuStateSource = PsuStateSource.FRU
    container_pattern: str = DEFAULT_CONTAINER_PATTERN
    expected_rule: ExpectedPsuRule = ExpectedPsuRule.CONTAINERS
    # (raw model regex, PSU entPhysicalDescr regex); first match wins
    psu_patterns: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    memory_mib: MemoryMib = MemoryMib.CISCO_PROCESS_MIB

    def psu_pattern_for(self, raw_model: str) -> re.Pattern[str] | None:
        """PSU description filter for *raw_model*, if this family needs one."""
        for model_regex, psu_regex in self.psu_patterns:
            if re.match(model_regex, raw_model):
                return re.compile(psu_regex)
        return None

    @property
    def container_regex(self) -> re.Pattern[str]:
        return re.compile(self.container_pattern)


DEFAULT_PROFILE = FamilyProfile()

FAMILY_PROFILES: dict[ModelFamily, FamilyProfile] = {
    ModelFamily.C3750: FamilyProfile(
        expected_rule=ExpectedPsuRule.DOUBLE_CONTAINERS,
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C3750X: FamilyProfile(
        psu_state_source=PsuStateSource.ENVMON,
        expected_rule=ExpectedPsuRule.DOUBLE_CONTAINERS,
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C2960X: FamilyProfile(
        psu_state_source=PsuStateSource.ENVMON,
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C2960: FamilyProfile(
        psu_state_source=PsuStateSource.ENVMON,
        expected_rule=ExpectedPsuRule.ONE_PER_MEMBER,
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C3560: FamilyProfile(
        psu_state_source=PsuStateSource.ENVMON,
        expected_rule=ExpectedPsuRule.ONE_PER_MEMBER,
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C3800: FamilyProfile(
        psu_state_source=PsuStateSource.ENVMON,
        container_pattern=r"^FRU Power Supply$",
    ),
    ModelFamily.C4500: FamilyProfile(
        container_pattern=r"^Container of Power Supply$",
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C6800: FamilyProfile(
        container_pattern=r"^Chassis \d Container of Power Supply \d$",
        memory_mib=MemoryMib.CISCO_MEMORY_POOL_MIB,
    ),
    ModelFamily.C9200: FamilyProfile(
        expected_rule=ExpectedPsuRule.FIXED_SINGLE,
    ),
    ModelFamily.C9500: FamilyProfile(
        psu_patterns=(
            (r"^C9500-16.*$", r"^Switch.*Power Supply [AB]$"),
            (r".*", r"^Cisco Catalyst 9500 Series\s+\S+\s+\S+\s+Power Supply$"),
        ),
    ),
}


def profile_for(family: ModelFamily) -> FamilyProfile:
    return FAMILY_PROFILES.get(family, DEFAULT_PROFILE)
