"""Engine executor -- interprets flow nodes with ROP error handling.

Tier 2: evaluates nodes using IOResult internally. Flow
definitions (Tier 1) never see ROP internals. A raising step
becomes an IOFailure carrying the exception and the state that
was current when it was raised; remaining elements are skipped.
"""
from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from stateflow.flow_modules import io_ops
from stateflow.flow_modules.engine.types import (
    Binding,
    ContextStep,
    Flow,
    Probe,
    Recover,
    RunContext,
    Step,
    builder_parameters,
    is_node,
)
from stateflow.flow_modules.errors import StepError
from stateflow.flow_modules.types import DEFAULT_PROBE_PARAMS, ProbeTry

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from stateflow.flow_modules.engine.types import Node
    from stateflow.flow_modules.types import (
        AssertionReporter,
        ProbeParams,
        State,
    )

Pair = tuple[object, "State"]


def _failure(
    exc: BaseException,
    step_name: str,
    ctx: RunContext,
    state: State,
) -> IOResult[Pair, StepError]:
    return IOFailure(
        StepError.from_exception(
            exc,
            step_name=step_name,
            description=ctx.description,
            state=state,
        ),
    )


def _evaluate_step(
    step: Step,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    try:
        value, next_state = step.function(state)
    except Exception as exc:  # noqa: BLE001
        return _failure(exc, step.name, ctx, state)
    return IOSuccess((value, next_state))


def _evaluate_context_step(
    step: ContextStep,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    try:
        value = step.function(ctx)
    except Exception as exc:  # noqa: BLE001
        return _failure(exc, step.name, ctx, state)
    return IOSuccess((value, state))


def call_builder(
    builder: Callable[..., object],
    env: Mapping[str, object],
) -> object:
    """Call a lazy builder with the bound values it names."""
    names, optional, takes_all = builder_parameters(builder)
    if takes_all:
        return builder(**env)
    kwargs = {name: env[name] for name in names}
    kwargs.update({name: env[name] for name in optional if name in env})
    return builder(**kwargs)


def _resolve_node(
    target: object,
    env: Mapping[str, object],
    ctx: RunContext,
    state: State,
) -> IOResult[Node, StepError]:
    """Turn a flow element target into a node.

    Nodes pass through; builders are called with the
    environment and must return a node.
    """
    if is_node(target):
        return IOSuccess(target)  # type: ignore[arg-type]
    try:
        built = call_builder(target, env)  # type: ignore[arg-type]
        if not is_node(built):
            msg = (
                f"builder {getattr(target, '__name__', target)!r}"
                f" returned {type(built).__name__}, expected a step or flow"
            )
            raise TypeError(msg)  # noqa: TRY301
    except Exception as exc:  # noqa: BLE001
        return _failure(exc, "builder", ctx, state)
    return IOSuccess(built)  # type: ignore[arg-type]


def _evaluate_flow(
    flow: Flow,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    """Fold the flow's elements left to right.

    Threads the state and a per-flow binding environment.
    The flow's value is the value of its last element.
    """
    inner = ctx.enter(flow.description)
    env: dict[str, object] = {}
    pair: Pair = (None, state)

    for element in flow.elements:
        current_state = pair[1]

        if isinstance(element, Binding) and element.literal:
            env[element.symbol] = element.target
            pair = (element.target, current_state)
            continue

        target = element.target if isinstance(element, Binding) else element
        resolved = _resolve_node(
            target, MappingProxyType(dict(env)), inner, current_state,
        )
        if isinstance(resolved, IOFailure):
            return resolved
        node = unsafe_perform_io(resolved.unwrap())

        result = evaluate(node, current_state, inner)
        if isinstance(result, IOFailure):
            return result
        pair = unsafe_perform_io(result.unwrap())

        if isinstance(element, Binding):
            env[element.symbol] = pair[0]

    return IOSuccess(pair)


def probe_tries(
    target: Node,
    predicate: Callable[[object], object],
    params: ProbeParams,
    state: State,
    ctx: RunContext,
) -> IOResult[tuple[tuple[ProbeTry, ...], State], StepError]:
    """Evaluate target until predicate holds or tries run out.

    Sleeps params.sleep_time_ms between attempts, never after
    the last one. Always returns at least one ProbeTry, the
    last of which is the final observation.
    """
    tries: list[ProbeTry] = []
    current_state = state
    times_to_try = params.times_to_try

    for attempt in range(1, times_to_try + 1):
        result = evaluate(target, current_state, ctx)
        if isinstance(result, IOFailure):
            return result
        value, current_state = unsafe_perform_io(result.unwrap())

        try:
            check_result = bool(predicate(value))
        except Exception as exc:  # noqa: BLE001
            return _failure(exc, "probe", ctx, current_state)
        tries.append(ProbeTry(attempt, value, check_result))

        if check_result or attempt == times_to_try:
            break

        slept = io_ops.sleep_seconds(params.sleep_seconds)
        if isinstance(slept, IOFailure):
            err = unsafe_perform_io(slept.failure())
            return IOFailure(
                replace(
                    err,
                    description=ctx.description,
                    state=current_state,
                ),
            )

    return IOSuccess((tuple(tries), current_state))


def _evaluate_probe(
    probe: Probe,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    return probe_tries(
        probe.target, probe.predicate, probe.params, state, ctx,
    )


def _evaluate_recover(
    recover: Recover,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    result = evaluate(recover.target, state, ctx)
    if isinstance(result, IOFailure):
        err = unsafe_perform_io(result.failure())
        return IOSuccess((err.as_exception(), err.state))
    return result


def evaluate(
    node: Node,
    state: State,
    ctx: RunContext,
) -> IOResult[Pair, StepError]:
    """Evaluate a single node against state within ctx."""
    if isinstance(node, Step):
        return _evaluate_step(node, state, ctx)
    if isinstance(node, Flow):
        return _evaluate_flow(node, state, ctx)
    if isinstance(node, Probe):
        return _evaluate_probe(node, state, ctx)
    if isinstance(node, ContextStep):
        return _evaluate_context_step(node, state, ctx)
    if isinstance(node, Recover):
        return _evaluate_recover(node, state, ctx)
    return _failure(
        TypeError(f"Cannot evaluate {type(node).__name__}: not a step or flow"),
        "executor",
        ctx,
        state,
    )


def execute(
    node: Node,
    state: State,
    *,
    reporter: AssertionReporter | None = None,
    fail_fast: bool = False,
) -> IOResult[Pair, StepError]:
    """Execute node from the top with a fresh run context."""
    ctx = RunContext(reporter=reporter, fail_fast=fail_fast)
    return evaluate(node, state, ctx)


def execute_or_raise(
    node: Node,
    state: State,
) -> Pair:
    """Execute node, raising the original exception on failure."""
    result = execute(node, state)
    if isinstance(result, IOFailure):
        raise unsafe_perform_io(result.failure()).as_exception()
    return unsafe_perform_io(result.unwrap())


def run_probe(
    state: State,
    target: Node,
    predicate: Callable[[object], object],
    params: ProbeParams = DEFAULT_PROBE_PARAMS,
) -> tuple[tuple[ProbeTry, ...], State]:
    """Probe target directly against state.

    Returns (tries, final_state); raises if the target or the
    predicate raises.
    """
    result = probe_tries(target, predicate, params, state, RunContext())
    if isinstance(result, IOFailure):
        raise unsafe_perform_io(result.failure()).as_exception()
    return unsafe_perform_io(result.unwrap())
