"""Match assertions -- compare expected against an observed value.

A match is a flow: it resolves its description, evaluates the
actual step (probing when asked to retry), reports the outcome
and returns the observed value with the actual step's state.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from stateflow.flow_modules.assertions.matcher import match_value
from stateflow.flow_modules.assertions.reporters import StderrReporter
from stateflow.flow_modules.engine.combinators import (
    as_probe_params,
    bind,
    flow,
    probe,
)
from stateflow.flow_modules.engine.primitives import (
    current_description,
    ensure_step,
    fmap,
    return_value,
)
from stateflow.flow_modules.engine.types import ContextStep, Flow
from stateflow.flow_modules.errors import MatchFailedError
from stateflow.flow_modules.types import (
    AssertionReport,
    MatchResult,
    ProbeParams,
)

if TYPE_CHECKING:
    from stateflow.flow_modules.engine.types import Node, RunContext

Matcher = Callable[[object, object], MatchResult]

MATCH_PARAMS = ProbeParams()


def _report_step(
    description: str,
    expected: object,
    actual: object,
    matcher: Matcher,
) -> ContextStep:
    def _report(ctx: RunContext) -> bool:
        result = matcher(expected, actual)
        reporter = ctx.reporter if ctx.reporter is not None else StderrReporter()
        reporter.report(
            AssertionReport(
                description=description,
                expected=expected,
                actual=actual,
                result=result,
            ),
        )
        if ctx.fail_fast and not result.success:
            raise MatchFailedError(description, result.detail)
        return result.success

    return ContextStep(function=_report, name="report_match")


def match(
    expected: object,
    actual: object,
    params: ProbeParams | Mapping[str, object] | None = None,
    *,
    description: str = "match",
    matcher: Matcher = match_value,
) -> Flow:
    """Build a step asserting that actual matches expected.

    actual can be a literal, a step or a flow. With
    params.times_to_try > 1 the actual step is probed until it
    matches, waiting params.sleep_time_ms between tries. The
    step's value is the observed actual value, pass or fail.
    """
    probe_params = as_probe_params(params, default=MATCH_PARAMS)
    actual_node: Node = ensure_step(actual)

    if probe_params.times_to_try > 1:
        observed: Node = fmap(
            lambda tries: tries[-1].value,
            probe(
                actual_node,
                lambda value: matcher(expected, value).success,
                probe_params,
            ),
        )
    else:
        observed = actual_node

    return flow(
        description,
        bind("flow_desc", current_description()),
        bind("actual", observed),
        lambda flow_desc, actual: _report_step(
            flow_desc, expected, actual, matcher,
        ),
        lambda actual: return_value(actual),
    )
