"""Entry point — python -m icingaplugins <check>, or one console script per check."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Callable, NoReturn, Sequence

from icingaplugins.checks.base import CheckResult, Status, exit_plugin
from icingaplugins.checks.registry import CheckDefinition, CheckRegistry, build_default_registry
from icingaplugins.config.settings import (
    CheckOptions,
    SnmpConfig,
    build_options,
    build_snmp_config,
    load_config,
)
from icingaplugins.device.base import SnmpSession
from icingaplugins.device.models import AuthProtocol, PrivProtocol, SecurityLevel
from icingaplugins.errors import ConfigError, PluginError
from icingaplugins.logging_handler import setup_logging

logger = logging.getLogger(__name__)

SessionFactory = Callable[[SnmpConfig], SnmpSession]

# argparse dest -> SnmpConfig field
_SNMP_FIELDS = {
    "host": "host",
    "port": "port",
    "timeout": "timeout",
    "user": "username",
    "seclevel": "security_level",
    "authkey": "auth_key",
    "privkey": "priv_key",
    "authmode": "auth_protocol",
    "privmode": "priv_protocol",
}
_COMMON_DESTS = set(_SNMP_FIELDS) | {"verbose", "debug", "config"}


class PluginArgumentParser(argparse.ArgumentParser):
    """Usage errors are reported as UNKNOWN, not argparse's exit status 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        exit_plugin(CheckResult(Status.UNKNOWN, message))


def build_parser(definition: CheckDefinition) -> argparse.ArgumentParser:
    parser = PluginArgumentParser(prog=definition.prog, description=definition.description)
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity (-v, -vv, -vvv)")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="Print debug information (same as -vv)")
    parser.add_argument("--config", default=None,
                        help="YAML file with SNMP credential and check defaults")

    # connection flags
    parser.add_argument("-H", "--host", required=True,
                        help="Hostname or IP address to run the check against (required)")
    parser.add_argument("-p", "--port", type=int, default=None,
                        help="Port the remote SNMP agent is listening on (default 161)")
    parser.add_argument("-t", "--timeout", type=int, default=None,
                        help="Seconds to wait before timing out (default 10)")

    # snmpv3 flags
    parser.add_argument("-u", "--user", default=None, help="SNMPv3 user name (required)")
    parser.add_argument("-l", "--seclevel", type=str.lower, default=None,
                        choices=[s.value for s in SecurityLevel],
                        help="SNMPv3 security level (default authpriv)")
    parser.add_argument("-A", "--authkey", default=None, help="SNMPv3 auth key (required)")
    parser.add_argument("-X", "--privkey", default=None, help="SNMPv3 priv key (required)")
    parser.add_argument("-a", "--authmode", type=str.lower, default=None,
                        choices=[a.value for a in AuthProtocol],
                        help="SNMPv3 auth mode (default sha)")
    parser.add_argument("-x", "--privmode", type=str.lower, default=None,
                        choices=[p.value for p in PrivProtocol],
                        help="SNMPv3 privacy mode (default aes)")

    definition.add_arguments(parser)
    return parser


async def run_check(definition: CheckDefinition, snmp_config: SnmpConfig,
                    options: CheckOptions,
                    session_factory: SessionFactory | None = None) -> CheckResult:
    """Open one session, run the check and release the session."""
    if session_factory is None:
        from icingaplugins.device.pysnmp_driver import PysnmpSession
        session_factory = PysnmpSession

    async with session_factory(snmp_config) as session:
        return await definition.run(session, options)


def run_plugin(definition: CheckDefinition, argv: Sequence[str] | None = None,
               session_factory: SessionFactory | None = None) -> NoReturn:
    args = vars(build_parser(definition).parse_args(argv))
    setup_logging(max(args["verbose"], 2 if args["debug"] else 0))

    try:
        settings = load_config(args["config"])
        snmp_config = build_snmp_config(
            {field: args[dest] for dest, field in _SNMP_FIELDS.items()}, settings,
        )
        options = build_options(
            definition.options_model,
            {k: v for k, v in args.items() if k not in _COMMON_DESTS},
            settings.check_defaults(definition.name),
        )
    except ConfigError as exc:
        exit_plugin(CheckResult(Status.UNKNOWN, str(exc)))

    logger.debug("Running %s against %s", definition.name, snmp_config.host)
    try:
        result = asyncio.run(run_check(definition, snmp_config, options, session_factory))
    except PluginError as exc:
        logger.error("%s: %s", snmp_config.host, exc)
        sys.exit(1)

    exit_plugin(result)


def _registry() -> CheckRegistry:
    return build_default_registry()


def main(argv: Sequence[str] | None = None) -> NoReturn:
    argv = list(sys.argv[1:] if argv is None else argv)
    registry = _registry()
    if not argv or argv[0] not in registry.names():
        names = ", ".join(registry.names())
        exit_plugin(CheckResult(Status.UNKNOWN, f"Usage: icingaplugins <check> [options]; checks: {names}"))
    run_plugin(registry.get(argv[0]), argv[1:])


def check_cisco_envtemp() -> NoReturn:
    run_plugin(_registry().get("envtemp"))


def check_cisco_memusage() -> NoReturn:
    run_plugin(_registry().get("memusage"))


def check_cisco_powersupplies() -> NoReturn:
    run_plugin(_registry().get("powersupplies"))


def check_cisco_stackmodules() -> NoReturn:
    run_plugin(_registry().get("stackmodules"))


def check_cisco_powerstack() -> NoReturn:
    run_plugin(_registry().get("powerstack"))


if __name__ == "__main__":
    main()
