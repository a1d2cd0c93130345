"""Shared type definitions for the stateflow engine."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

State: TypeAlias = Any
"""Caller-defined test state. Conventionally a dict; never copied."""

DEFAULT_TIMES_TO_TRY = 1
DEFAULT_SLEEP_TIME_MS = 200


class ProbeParams(BaseModel):
    """Retry configuration for probes and match assertions."""

    model_config = ConfigDict(frozen=True)

    times_to_try: int = Field(default=DEFAULT_TIMES_TO_TRY, ge=1)
    sleep_time_ms: int = Field(default=DEFAULT_SLEEP_TIME_MS, ge=0)

    @property
    def sleep_seconds(self) -> float:
        """Inter-attempt delay in seconds."""
        return self.sleep_time_ms / 1000


DEFAULT_PROBE_PARAMS = ProbeParams(times_to_try=5)


@dataclass(frozen=True)
class ProbeTry:
    """Observation recorded for one probe attempt."""

    attempt: int
    value: object
    check_result: bool


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing an expected value with an observed one."""

    success: bool
    mismatches: tuple[str, ...] = ()

    @property
    def detail(self) -> str:
        """All mismatches joined for display; empty on success."""
        return "; ".join(self.mismatches)


@dataclass(frozen=True)
class AssertionReport:
    """A single match outcome, ready for the reporting channel."""

    description: str
    expected: object
    actual: object
    result: MatchResult

    @property
    def success(self) -> bool:
        return self.result.success

    def format(self) -> str:
        """Human-readable summary used by reporters."""
        status = "PASS" if self.success else "FAIL"
        line = f"[{status}] {self.description}"
        if not self.success:
            line += f": {self.result.detail}"
        return line


class AssertionReporter(Protocol):
    """Receives every match outcome during a run."""

    def report(self, report: AssertionReport) -> None: ...


@dataclass(frozen=True)
class RunConfig:
    """Configuration for run_star.

    init builds a fresh state per run. runner, reporter and
    on_error default to run, StderrReporter and log_and_raise
    when left as None. A custom runner takes (node, state) and
    may declare reporter and fail_fast keywords to receive them.
    """

    init: Callable[[], State] = dict
    runner: Callable[..., tuple[object, State]] | None = None
    cleanup: Callable[[State], object] | None = None
    on_error: Callable[[tuple[object, State]], tuple[object, State]] | None = None
    reporter: AssertionReporter | None = None
    fail_fast: bool = False
