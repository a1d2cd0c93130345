"""Primitive step constructors.

Each constructor returns a node; none of them run anything
until the node is evaluated against a state.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from stateflow.flow_modules.engine.types import (
    Binding,
    ContextStep,
    Flow,
    Step,
    is_node,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from stateflow.flow_modules.engine.types import Node, StepFunction
    from stateflow.flow_modules.types import State


def _fn_name(fn: object) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


def step(
    function: StepFunction,
    name: str | None = None,
) -> Step:
    """Wrap a raw ``state -> (value, next_state)`` function."""
    return Step(function=function, name=name or _fn_name(function))


def get_state(
    fn: Callable[..., object] | None = None,
    *args: object,
    **kwargs: object,
) -> Step:
    """Return fn(state, *args, **kwargs), leaving state unchanged.

    With no fn, the state itself is returned.
    """
    if fn is None:
        return Step(function=lambda state: (state, state), name="get_state")

    def _get(state: State) -> tuple[object, State]:
        return fn(state, *args, **kwargs), state

    return Step(function=_get, name=f"get_state({_fn_name(fn)})")


def swap_state(
    fn: Callable[..., State],
    *args: object,
    **kwargs: object,
) -> Step:
    """Replace state with fn(state, *args, **kwargs).

    The return value is the state as it was before the swap.
    """

    def _swap(state: State) -> tuple[object, State]:
        return state, fn(state, *args, **kwargs)

    return Step(function=_swap, name=f"swap_state({_fn_name(fn)})")


def return_value(value: object) -> Step:
    """Return value, leaving state unchanged."""
    return Step(function=lambda state: (value, state), name="return_value")


def invoke(fn: Callable[[], object]) -> Step:
    """Call fn() for its side effect and return None."""

    def _invoke(state: State) -> tuple[object, State]:
        fn()
        return None, state

    return Step(function=_invoke, name=f"invoke({_fn_name(fn)})")


def current_description() -> ContextStep:
    """Return the description path of the enclosing flows."""
    return ContextStep(
        function=lambda ctx: ctx.description,
        name="current_description",
    )


def ensure_step(value: object) -> Node:
    """Pass nodes through; wrap anything else with return_value."""
    if is_node(value):
        return value  # type: ignore[return-value]
    return return_value(value)


def fmap(fn: Callable[[object], object], node: Node) -> Flow:
    """Apply fn to the return value of node."""
    return Flow(
        description="",
        elements=(
            Binding("value", node),
            lambda value: return_value(fn(value)),
        ),
    )
