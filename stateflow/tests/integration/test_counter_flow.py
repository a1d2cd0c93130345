"""Integration tests for end-to-end counter flows.

Tests complete flows through run and run_star: state
threading, bindings across nested flows, match reporting and
probing against a store that changes between polls.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stateflow.flow_modules.assertions.match import match
from stateflow.flow_modules.assertions.reporters import RecordingReporter
from stateflow.flow_modules.engine import (
    bind,
    flow,
    get_state,
    invoke,
    let,
    return_value,
    run,
    run_star,
    swap_state,
)
from stateflow.flow_modules.pytest_adapter import defflow
from stateflow.flow_modules.types import ProbeParams, RunConfig

if TYPE_CHECKING:
    from unittest.mock import MagicMock


def _inc(state: dict[str, int]) -> dict[str, int]:
    return {**state, "count": state["count"] + 1}


def _count(state: dict[str, int]) -> int:
    return state["count"]


class _Store:
    """Mutable store whose writes land after a few reads."""

    def __init__(self, visible_after: int) -> None:
        self.reads = 0
        self.visible_after = visible_after
        self.items: list[str] = []
        self._pending: list[str] = []

    def write(self, item: str) -> None:
        self._pending.append(item)

    def read(self) -> list[str]:
        self.reads += 1
        if self.reads >= self.visible_after:
            self.items.extend(self._pending)
            self._pending.clear()
        return list(self.items)


class TestCounterScenarios:
    """End-to-end scenarios over a {count: n} state."""

    def test_increment_then_read(self) -> None:
        """inc then read gives (1, {count: 1})."""
        node = flow("inc", swap_state(_inc), get_state(_count))
        assert run(node, {"count": 0}) == (1, {"count": 1})

    def test_match_success(self, reporter: RecordingReporter) -> None:
        """match(1, count) passes and returns (1, {count: 1})."""
        result = run(match(1, get_state(_count)), {"count": 1}, reporter=reporter)
        assert result == (1, {"count": 1})
        assert reporter.passed

    def test_match_failure(self, reporter: RecordingReporter) -> None:
        """match(2, count) fails with 'expected 2, observed 1'."""
        node = match(2, get_state(_count), ProbeParams(times_to_try=1))
        result = run(node, {"count": 1}, reporter=reporter)
        assert result == (1, {"count": 1})
        [failure] = reporter.failures
        assert failure.result.detail == "expected 2, observed 1"

    def test_exception_short_circuit(self) -> None:
        """A raising invoke returns (E, S) and skips later steps."""
        err = RuntimeError("E")
        called: list[int] = []

        def boom() -> None:
            raise err

        state = {"count": 0}
        node = flow("x", invoke(boom), get_state(lambda s: called.append(1)))
        assert run(node, state) == (err, state)
        assert called == []


class TestBindingsAcrossFlows:
    """Bindings feed helper flows built from earlier values."""

    def test_helper_flow_from_binding(self, reporter: RecordingReporter) -> None:
        """A helper flow built from a bound value runs with it."""

        def add_user(name: str) -> object:
            return flow(
                f"add {name}",
                swap_state(lambda s: {**s, "users": [*s["users"], name]}),
                get_state(lambda s: len(s["users"])),
            )

        node = flow(
            "users",
            let("name", "ana"),
            bind("total", lambda name: add_user(name)),
            lambda total: match(1, total),
            get_state(lambda s: s["users"]),
        )
        value, final = run(node, {"users": []}, reporter=reporter)
        assert value == ["ana"]
        assert final == {"users": ["ana"]}
        assert reporter.reports[0].description == "users -> match"
        assert reporter.passed


class TestProbingStore:
    """Match with retries against an eventually consistent store."""

    def test_probe_waits_for_write(
        self,
        reporter: RecordingReporter,
        mock_sleep: MagicMock,
    ) -> None:
        """The match retries until the write becomes visible."""
        store = _Store(visible_after=3)
        node = flow(
            "store",
            invoke(lambda: store.write("a")),
            match(
                ["a"],
                get_state(lambda s: s["store"].read()),
                {"times_to_try": 5, "sleep_time_ms": 100},
            ),
        )
        value, final = run(node, {"store": store}, reporter=reporter)
        assert value == ["a"]
        assert final["store"] is store
        assert store.reads == 3
        assert mock_sleep.call_count == 2
        assert reporter.passed

    def test_probe_gives_up(
        self,
        reporter: RecordingReporter,
        mock_sleep: MagicMock,
    ) -> None:
        """After the last try the last observation is reported."""
        store = _Store(visible_after=10)
        store.write("a")
        node = match(["a"], get_state(lambda s: s["store"].read()), {"times_to_try": 4})
        value, _ = run(node, {"store": store}, reporter=reporter)
        assert value == []
        assert store.reads == 4
        [failure] = reporter.failures
        assert "expected 1 elements, observed 0" in failure.result.detail


class TestRunStarPolicy:
    """run_star raises where run captures."""

    def test_run_star_raises(self, mock_stderr: MagicMock) -> None:
        """The same flow raises through run_star."""

        def boom() -> None:
            msg = "E"
            raise RuntimeError(msg)

        node = flow("x", invoke(boom))
        assert isinstance(run(node)[0], RuntimeError)
        with pytest.raises(RuntimeError, match="E"):
            run_star(RunConfig(), node)


test_counter_defflow = defflow(
    "counter defflow",
    swap_state(_inc),
    bind("count", get_state(_count)),
    lambda count: match(1, return_value(count)),
    config=RunConfig(init=lambda: {"count": 0}),
)
