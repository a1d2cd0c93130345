"""pytest adapter -- turn a flow into a collectable test function.

Usage in a test module::

    test_counter = defflow(
        "counter",
        swap_state(lambda s: {**s, "count": s["count"] + 1}),
        match(1, get_state(lambda s: s["count"])),
        config=RunConfig(init=lambda: {"count": 0}),
    )

Exceptions raised by the flow propagate as test errors; failed
matches fail the test with every failure's description path.
"""
from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from stateflow.flow_modules.assertions.reporters import RecordingReporter
from stateflow.flow_modules.engine.combinators import flow
from stateflow.flow_modules.engine.runner import run_star
from stateflow.flow_modules.types import RunConfig

if TYPE_CHECKING:
    from collections.abc import Callable


def defflow(
    name: str,
    *elements: object,
    config: RunConfig | None = None,
) -> Callable[[], None]:
    """Build a pytest test function running flow(name, *elements).

    The flow is composed immediately, so structural mistakes
    fail at collection time.
    """
    composed = flow(name, *elements)
    base_config = config or RunConfig()

    def _test() -> None:
        reporter = RecordingReporter()
        run_star(replace(base_config, reporter=reporter), composed)
        if not reporter.passed:
            pytest.fail(reporter.summary(), pytrace=False)

    _test.__name__ = f"test_{name.replace(' ', '_').replace('-', '_')}"
    _test.__qualname__ = _test.__name__
    _test.__doc__ = f"Flow: {name}"
    return _test
