"""Tests for the defflow pytest adapter."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stateflow.flow_modules.assertions.match import match
from stateflow.flow_modules.engine.primitives import get_state, invoke, swap_state
from stateflow.flow_modules.errors import FlowDefinitionError
from stateflow.flow_modules.pytest_adapter import defflow
from stateflow.flow_modules.types import RunConfig

if TYPE_CHECKING:
    from unittest.mock import MagicMock


def _inc(state: dict[str, int]) -> dict[str, int]:
    return {**state, "count": state["count"] + 1}


def _count(state: dict[str, int]) -> int:
    return state["count"]


# Collected by pytest like any other test function.
test_defflow_collected = defflow(
    "collected counter",
    swap_state(_inc),
    match(1, get_state(_count)),
    config=RunConfig(init=lambda: {"count": 0}),
)


class TestDefflow:
    """Tests for defflow."""

    def test_names_test_function(self) -> None:
        """The returned function is named after the flow."""
        test_fn = defflow("user-login flow", get_state())
        assert test_fn.__name__ == "test_user_login_flow"
        assert test_fn.__doc__ == "Flow: user-login flow"

    def test_passing_flow(self) -> None:
        """A flow whose matches pass completes silently."""
        test_fn = defflow(
            "counter",
            swap_state(_inc),
            match(1, get_state(_count)),
            config=RunConfig(init=lambda: {"count": 0}),
        )
        test_fn()

    def test_failed_match_fails_test(self) -> None:
        """A failed match fails the test with its path and detail."""
        test_fn = defflow(
            "counter",
            match(2, get_state(_count)),
            config=RunConfig(init=lambda: {"count": 1}),
        )
        with pytest.raises(pytest.fail.Exception, match="counter -> match: expected 2, observed 1"):
            test_fn()

    def test_exception_propagates(
        self,
        mock_stderr: MagicMock,
    ) -> None:
        """Step exceptions surface as test errors."""

        def boom() -> None:
            msg = "fixture down"
            raise ConnectionError(msg)

        test_fn = defflow("broken", invoke(boom))
        with pytest.raises(ConnectionError, match="fixture down"):
            test_fn()

    def test_fresh_state_each_call(self) -> None:
        """init is called for every execution of the test."""
        inits: list[int] = []

        def init() -> dict[str, int]:
            inits.append(1)
            return {"count": 0}

        test_fn = defflow(
            "fresh",
            swap_state(_inc),
            match(1, get_state(_count)),
            config=RunConfig(init=init),
        )
        test_fn()
        test_fn()
        assert len(inits) == 2

    def test_empty_flow_fails_at_definition(self) -> None:
        """Structural errors surface when the test is defined."""
        with pytest.raises(FlowDefinitionError):
            defflow("empty")
