"""Assertion reporters -- the reporting channel for match outcomes."""
from __future__ import annotations

from typing import TYPE_CHECKING

from stateflow.flow_modules import io_ops

if TYPE_CHECKING:
    from stateflow.flow_modules.types import AssertionReport


class StderrReporter:
    """Writes failed match reports to stderr via io_ops.

    Passing reports are silent unless verbose is set.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def report(self, report: AssertionReport) -> None:
        if report.success and not self.verbose:
            return
        io_ops.write_stderr(report.format())


class RecordingReporter:
    """Collects every match report for later inspection."""

    def __init__(self) -> None:
        self.reports: list[AssertionReport] = []

    def report(self, report: AssertionReport) -> None:
        self.reports.append(report)

    @property
    def failures(self) -> list[AssertionReport]:
        return [r for r in self.reports if not r.success]

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        """One line per failure, or an empty string."""
        return "\n".join(r.format() for r in self.failures)
