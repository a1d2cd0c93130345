"""Engine package -- state-threading step composition with ROP error handling."""
from stateflow.flow_modules.engine.combinators import (
    bind,
    flow,
    for_each,
    ignore_error,
    let,
    probe,
    when,
)
from stateflow.flow_modules.engine.executor import execute, run_probe
from stateflow.flow_modules.engine.primitives import (
    current_description,
    ensure_step,
    fmap,
    get_state,
    invoke,
    return_value,
    step,
    swap_state,
)
from stateflow.flow_modules.engine.runner import log_and_raise, run, run_star

__all__ = [
    "bind",
    "current_description",
    "ensure_step",
    "execute",
    "flow",
    "fmap",
    "for_each",
    "get_state",
    "ignore_error",
    "invoke",
    "let",
    "log_and_raise",
    "probe",
    "return_value",
    "run",
    "run_probe",
    "run_star",
    "step",
    "swap_state",
    "when",
]
