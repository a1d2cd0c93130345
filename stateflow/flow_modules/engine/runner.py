"""Runners -- entry points that execute a node against a state.

run is forgiving: a raised exception comes back as the return
value. run_star is strict: by default it logs and re-raises.
"""
from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from returns.io import IOFailure
from returns.unsafe import unsafe_perform_io

from stateflow.flow_modules import io_ops
from stateflow.flow_modules.assertions.reporters import StderrReporter
from stateflow.flow_modules.engine.executor import execute
from stateflow.flow_modules.types import RunConfig

if TYPE_CHECKING:
    from collections.abc import Callable

    from stateflow.flow_modules.engine.types import Node
    from stateflow.flow_modules.types import AssertionReporter, State


def run(
    node: Node,
    state: State = None,
    *,
    reporter: AssertionReporter | None = None,
    fail_fast: bool = False,
) -> tuple[object, State]:
    """Run node against state, returning (value, final_state).

    A None state starts from an empty dict. When a step raises,
    the exception is returned as the value together with the
    state that was current when it was raised.
    """
    initial = {} if state is None else state
    result = execute(node, initial, reporter=reporter, fail_fast=fail_fast)
    if isinstance(result, IOFailure):
        err = unsafe_perform_io(result.failure())
        return err.as_exception(), err.state
    return unsafe_perform_io(result.unwrap())


def log_and_raise(pair: tuple[object, State]) -> tuple[object, State]:
    """Default run_star error handler: log the error, then re-raise it."""
    value, state = pair
    io_ops.write_stderr(
        f"Flow raised {type(value).__name__}: {value} | state={state!r}",
    )
    if isinstance(value, BaseException):
        raise value
    msg = f"Flow failed with {value!r}"
    raise RuntimeError(msg)


def _runner_options(
    runner: Callable[..., tuple[object, State]],
    options: dict[str, object],
) -> dict[str, object]:
    """Keep only the keyword options runner accepts."""
    params = inspect.signature(runner).parameters.values()
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params):
        return options
    names = {p.name for p in params}
    return {name: value for name, value in options.items() if name in names}


def run_star(
    config: RunConfig | None,
    node: Node,
) -> tuple[object, State]:
    """Run node with a fresh state from config.init.

    The runner is called as runner(node, state) plus whichever of
    the reporter and fail_fast keywords it declares.

    cleanup receives the final state (the initial state when the
    runner itself raises). When the run returns an exception as
    its value, config.on_error decides the outcome; the default
    logs and re-raises it.
    """
    cfg = config or RunConfig()
    runner = cfg.runner or run
    reporter = cfg.reporter if cfg.reporter is not None else StderrReporter()
    on_error = cfg.on_error or log_and_raise

    initial = cfg.init()
    final_state = initial
    try:
        options = _runner_options(
            runner, {"reporter": reporter, "fail_fast": cfg.fail_fast},
        )
        pair = runner(node, initial, **options)
        final_state = pair[1]
    finally:
        if cfg.cleanup is not None:
            cfg.cleanup(final_state)

    if isinstance(pair[0], BaseException):
        return on_error(pair)
    return pair
