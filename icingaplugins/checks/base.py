"""Check results and the monitoring plugin output convention."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import NoReturn, TextIO


class Status(IntEnum):
    """Plugin status; the value is the process exit code."""
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @staticmethod
    def worst(current: Status, new: Status) -> Status:
        """Escalate *current* to *new* if it is more severe, never downgrade."""
        return new if new > current else current


def _fmt(value: float | int | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


@dataclass
class PerfDatum:
    """One performance metric: ``'label'=value[unit];warn;crit;min;max``."""
    label: str
    value: float | int
    unit: str = ""
    warn: float | int | None = None
    crit: float | int | None = None
    minimum: float | int | None = None
    maximum: float | int | None = None

    def __str__(self) -> str:
        thresholds = ";".join(
            _fmt(v) for v in (self.warn, self.crit, self.minimum, self.maximum)
        )
        return f"'{self.label}'={_fmt(self.value)}{self.unit};{thresholds}"


@dataclass
class CheckResult:
    status: Status
    message: str
    perfdata: list[PerfDatum] = field(default_factory=list)

    def format_line(self) -> str:
        line = f"{self.status.name}: {self.message}"
        if self.perfdata:
            line += " | " + " ".join(str(p) for p in self.perfdata)
        return line


def exit_plugin(result: CheckResult, stream: TextIO | None = None) -> NoReturn:
    """Print the status line and exit with the status code."""
    print(result.format_line(), file=stream or sys.stdout)
    sys.exit(int(result.status))
