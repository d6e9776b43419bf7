"""Check registry — discovery and dispatch for the plugin checks."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Awaitable, Callable

from icingaplugins.checks.base import CheckResult
from icingaplugins.config.settings import CheckOptions
from icingaplugins.device.base import SnmpSession

# Type alias for check functions
CheckFunc = Callable[[SnmpSession, CheckOptions], Awaitable[CheckResult]]
ArgumentsFunc = Callable[[argparse.ArgumentParser], None]


def _no_arguments(parser: argparse.ArgumentParser) -> None:
    pass


@dataclass(frozen=True)
class CheckDefinition:
    name: str
    prog: str
    description: str
    run: CheckFunc
    options_model: type[CheckOptions] = CheckOptions
    add_arguments: ArgumentsFunc = _no_arguments


class CheckRegistry:
    """Registry of check definitions keyed by short name."""

    def __init__(self) -> None:
        self._checks: dict[str, CheckDefinition] = {}

    def register(self, definition: CheckDefinition) -> None:
        if definition.name in self._checks:
            raise ValueError(f"Check '{definition.name}' is already registered")
        self._checks[definition.name] = definition

    def get(self, name: str) -> CheckDefinition:
        try:
            return self._checks[name]
        except KeyError:
            raise KeyError(f"Unknown check: {name}") from None

    def by_prog(self, prog: str) -> CheckDefinition | None:
        for definition in self._checks.values():
            if definition.prog == prog:
                return definition
        return None

    def names(self) -> list[str]:
        return list(self._checks.keys())


# ── Check-specific command-line flags ───────────────────────────────

def _add_model_detection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-model-query-retries", type=int, default=None,
        help="Retries when the device returns an empty model string (default 3)",
    )


def _add_envtemp_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--scale", type=int, default=None,
        help="Scaling factor for vendor thresholds, in percent (default 100)",
    )


def _add_memusage_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--mib", type=str.lower, default=None,
        choices=["cisco-process-mib", "cisco-memory-pool-mib"],
        help="Use OIDs from this MIB (default: chosen from the device model)",
    )
    parser.add_argument("-w", "--warn", type=int, default=None,
                        help="Warning threshold in percent (default 70)")
    parser.add_argument("-c", "--crit", type=int, default=None,
                        help="Critical threshold in percent (default 80)")
    _add_model_detection_arguments(parser)


def _add_powersupplies_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--expected-psu-override", type=int, default=None,
        help="Override the expected number of PSUs (0 determines it automatically); "
             "the PSU states are still checked only when the count matches",
    )
    parser.add_argument(
        "--double-containers", action="store_true", default=None,
        help="Expect two PSUs per PSU container",
    )
    parser.add_argument(
        "--psu-built-in", action="store_true", default=None,
        help="Expect one built-in PSU per stack member",
    )
    _add_model_detection_arguments(parser)


def build_default_registry() -> CheckRegistry:
    """Build a registry with all checks."""
    from icingaplugins.checks.envtemp import check_envtemp
    from icingaplugins.checks.memusage import check_memusage
    from icingaplugins.checks.powerstack import check_power_stack
    from icingaplugins.checks.powersupplies import check_power_supplies
    from icingaplugins.checks.stackmodules import check_stack_modules
    from icingaplugins.config.settings import (
        EnvTempOptions,
        MemUsageOptions,
        PowerSupplyOptions,
    )

    registry = CheckRegistry()

    registry.register(CheckDefinition(
        name="envtemp", prog="check_cisco_envtemp",
        description="Cisco temperature sensors check plugin",
        run=check_envtemp, options_model=EnvTempOptions,
        add_arguments=_add_envtemp_arguments,
    ))
    registry.register(CheckDefinition(
        name="memusage", prog="check_cisco_memusage",
        description="Cisco memory usage check plugin",
        run=check_memusage, options_model=MemUsageOptions,
        add_arguments=_add_memusage_arguments,
    ))
    registry.register(CheckDefinition(
        name="powersupplies", prog="check_cisco_powersupplies",
        description="Cisco power supplies check plugin",
        run=check_power_supplies, options_model=PowerSupplyOptions,
        add_arguments=_add_powersupplies_arguments,
    ))
    registry.register(CheckDefinition(
        name="stackmodules", prog="check_cisco_stackmodules",
        description="Cisco data stack check plugin",
        run=check_stack_modules,
    ))
    registry.register(CheckDefinition(
        name="powerstack", prog="check_cisco_powerstack",
        description="Cisco power stack check plugin",
        run=check_power_stack,
    ))

    return registry
