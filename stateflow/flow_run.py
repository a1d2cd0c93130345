"""Flow runner CLI -- run a flow by its import path.

Resolves ``module:attr`` targets through io_ops, runs the flow
with run_star and reports match failures and errors on stderr.
Exit code 0 when every match passed and nothing raised.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass

import click
from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from stateflow.flow_modules import io_ops
from stateflow.flow_modules.assertions.reporters import RecordingReporter
from stateflow.flow_modules.engine.runner import run_star
from stateflow.flow_modules.engine.types import is_node
from stateflow.flow_modules.errors import StepError
from stateflow.flow_modules.types import RunConfig


@dataclass(frozen=True)
class FlowRunResult:
    """Outcome of a CLI flow run."""

    success: bool
    value: object
    failures: int
    summary: str


def _resolve_flow(target: str) -> IOResult[object, StepError]:
    resolved = io_ops.import_object(target)
    if isinstance(resolved, IOFailure):
        return resolved
    node = unsafe_perform_io(resolved.unwrap())
    if not is_node(node):
        return IOFailure(
            StepError(
                step_name="flow_run",
                error_type="TypeError",
                message=(
                    f"{target} is {type(node).__name__},"
                    " expected a step or flow"
                ),
                context={"target": target},
            ),
        )
    return IOSuccess(node)


def _resolve_init(init: str | None) -> IOResult[object, StepError]:
    if init is None:
        return IOSuccess(dict)
    resolved = io_ops.import_object(init)
    if isinstance(resolved, IOFailure):
        return resolved
    factory = unsafe_perform_io(resolved.unwrap())
    if not callable(factory):
        return IOFailure(
            StepError(
                step_name="flow_run",
                error_type="TypeError",
                message=f"{init} is not callable",
                context={"init": init},
            ),
        )
    return IOSuccess(factory)


def run_flow(
    target: str,
    init: str | None = None,
    *,
    fail_fast: bool = False,
) -> IOResult[FlowRunResult, StepError]:
    """Resolve and run a flow, collecting match reports.

    Returns IOFailure when the target cannot be resolved or the
    flow raises.
    """
    node_result = _resolve_flow(target)
    if isinstance(node_result, IOFailure):
        return node_result
    init_result = _resolve_init(init)
    if isinstance(init_result, IOFailure):
        return init_result

    reporter = RecordingReporter()
    config = RunConfig(
        init=unsafe_perform_io(init_result.unwrap()),  # type: ignore[arg-type]
        reporter=reporter,
        fail_fast=fail_fast,
    )
    try:
        value, _ = run_star(config, unsafe_perform_io(node_result.unwrap()))  # type: ignore[arg-type]
    except Exception as exc:  # noqa: BLE001
        return IOFailure(
            StepError.from_exception(
                exc,
                step_name="flow_run",
                description=target,
                state=None,
            ),
        )

    failures = reporter.failures
    header = (
        f"{target}: {len(reporter.reports)} match(es),"
        f" {len(failures)} failed"
    )
    return IOSuccess(
        FlowRunResult(
            success=not failures,
            value=value,
            failures=len(failures),
            summary=(
                f"{header}\n{reporter.summary()}" if failures else header
            ),
        ),
    )


@click.command()
@click.argument("target")
@click.option(
    "--init",
    default=None,
    help="module:attr of a zero-argument state factory (default: empty dict)",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    help="Stop the flow at the first failed match",
)
def main(target: str, init: str | None, fail_fast: bool) -> None:
    """Run the flow at TARGET (module:attr) and report the outcome."""
    result = run_flow(target, init, fail_fast=fail_fast)
    if isinstance(result, IOFailure):
        err = unsafe_perform_io(result.failure())
        io_ops.write_stderr(f"Flow run failed: {err}")
        sys.exit(1)

    outcome = unsafe_perform_io(result.unwrap())
    io_ops.write_stderr(outcome.summary)
    if not outcome.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
