"""I/O boundary module -- ALL external I/O goes through here.

This is the single mock point for the test suite. The engine
never sleeps, writes or imports user code directly; it calls
io_ops functions.
"""
from __future__ import annotations

import importlib
import sys
import time

from returns.io import IOFailure, IOResult, IOSuccess

from stateflow.flow_modules.errors import StepError


def sleep_seconds(
    seconds: float,
) -> IOResult[None, StepError]:
    """Sleep for specified seconds. Returns IOResult, never raises."""
    try:
        time.sleep(seconds)
    except OSError as exc:
        return IOFailure(
            StepError(
                step_name="io_ops.sleep_seconds",
                error_type=type(exc).__name__,
                message=f"Sleep interrupted: {exc}",
                exception=exc,
                context={"seconds": seconds},
            ),
        )
    else:
        return IOSuccess(None)


def write_stderr(
    message: str,
) -> IOResult[None, StepError]:
    """Write a line to stderr.

    Returns IOSuccess(None) or IOFailure on error.
    """
    try:
        sys.stderr.write(message if message.endswith("\n") else message + "\n")
    except OSError as exc:
        return IOFailure(
            StepError(
                step_name="io_ops.write_stderr",
                error_type=type(exc).__name__,
                message=f"Failed to write to stderr: {exc}",
                exception=exc,
            ),
        )
    else:
        return IOSuccess(None)


def import_object(
    path: str,
) -> IOResult[object, StepError]:
    """Resolve a ``module:attr`` path to the named object."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        return IOFailure(
            StepError(
                step_name="io_ops.import_object",
                error_type="ValueError",
                message=f"Expected 'module:attr', got {path!r}",
                context={"path": path},
            ),
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        return IOFailure(
            StepError(
                step_name="io_ops.import_object",
                error_type=type(exc).__name__,
                message=f"Cannot import module {module_name!r}: {exc}",
                exception=exc,
                context={"path": path},
            ),
        )
    obj = module
    for part in attr.split("."):
        if not hasattr(obj, part):
            return IOFailure(
                StepError(
                    step_name="io_ops.import_object",
                    error_type="AttributeError",
                    message=f"{module_name!r} has no attribute {attr!r}",
                    context={"path": path},
                ),
            )
        obj = getattr(obj, part)
    return IOSuccess(obj)
