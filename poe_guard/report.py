import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Optional

from .models import RunSummary
from .thresholds import ThresholdRange

logger = logging.getLogger(__name__)

CHECK_NAME = "POE_GUARD"


class Status(IntEnum):
    """Plugin status; the value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class PerfData:
    label: str
    value: float
    uom: str = ""
    warning: Optional[ThresholdRange] = None
    critical: Optional[ThresholdRange] = None

    def __str__(self) -> str:
        value = f"{self.value:.3f}" if isinstance(self.value, float) else str(self.value)
        warn = str(self.warning) if self.warning else ""
        crit = str(self.critical) if self.critical else ""
        out = f"{self.label}={value}{self.uom};{warn};{crit}"
        return out.rstrip(";")


@dataclass
class CheckResult:
    status: Status
    message: str
    perfdata: List[PerfData] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return int(self.status)

    def render(self) -> str:
        line = f"{CHECK_NAME} {self.status.name} - {self.message}"
        if self.perfdata:
            line += " | " + " ".join(str(p) for p in self.perfdata)
        return line


def unknown(message: str) -> CheckResult:
    return CheckResult(status=Status.UNKNOWN, message=message)


def summary_status(summary: RunSummary) -> Status:
    if summary.events > 0 or summary.failures > 0:
        return Status.CRITICAL
    if summary.blocked > 0:
        return Status.WARNING
    return Status.OK


def build_result(
    summary: RunSummary,
    elapsed: float,
    warning: Optional[ThresholdRange] = None,
    critical: Optional[ThresholdRange] = None,
) -> CheckResult:
    """Turn a run summary and its execution time into a plugin result. The worst status wins."""
    status = summary_status(summary)
    if critical is not None and critical.violates(elapsed):
        status = max(status, Status.CRITICAL)
    elif warning is not None and warning.violates(elapsed):
        status = max(status, Status.WARNING)

    message = (
        f"{summary.events} matching events, {summary.blocked} ports blocked "
        f"({summary.provisioned_block} provisioned, {summary.provisioned_unblock} restored, "
        f"{summary.failures} failed) in {elapsed:.2f}s"
    )
    perfdata = [
        PerfData("events", summary.events),
        PerfData("blocked", summary.blocked),
        PerfData("provisioned_block", summary.provisioned_block),
        PerfData("provisioned_unblock", summary.provisioned_unblock),
        PerfData("failures", summary.failures),
        PerfData("time", float(elapsed), "s", warning, critical),
    ]
    return CheckResult(status=Status(status), message=message, perfdata=perfdata)


def write_result(result: CheckResult, path: Optional[Path] = None) -> str:
    """Print the plugin line to stdout and optionally to ``path``."""
    line = result.render()
    print(line)
    if path is not None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(line + "\n", encoding="utf-8")
        except OSError as exc:
            logger.error("Could not write check result to %s: %s", path, exc)
    return line
