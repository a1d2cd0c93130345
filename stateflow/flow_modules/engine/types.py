"""Public node types for flow definitions.

Flow authors build these with the constructors in primitives
and combinators. Nodes are data; the executor interprets them.
Calling a node with a state runs it and raises on failure.
"""
from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, TypeAlias, Union

from stateflow.flow_modules.types import DEFAULT_PROBE_PARAMS, ProbeParams

if TYPE_CHECKING:
    from stateflow.flow_modules.types import AssertionReporter, State

StepFunction = Callable[["State"], "tuple[object, State]"]


class _Runnable:
    """Mixin making a node callable as ``node(state) -> (value, state)``."""

    def __call__(self, state: State) -> tuple[object, State]:
        from stateflow.flow_modules.engine.executor import (  # noqa: PLC0415
            execute_or_raise,
        )

        return execute_or_raise(self, state)  # type: ignore[arg-type]


@dataclass(frozen=True, eq=False)
class Step(_Runnable):
    """Atomic computation over the state.

    function takes the current state and returns the pair
    (return_value, next_state).
    """

    function: StepFunction
    name: str = "step"


@dataclass(frozen=True, eq=False)
class Flow(_Runnable):
    """Named, ordered sequence of elements compiled into one node.

    An empty description marks an internal grouping that does
    not show up in description paths.
    """

    description: str
    elements: tuple[object, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Binding:
    """Flow element storing a value under symbol for later elements.

    When literal is False, target is a node (or a builder that
    produces one) and the node's return value is stored.
    """

    symbol: str
    target: object
    literal: bool = False


@dataclass(frozen=True, eq=False)
class Probe(_Runnable):
    """Re-evaluate target until predicate holds or tries run out."""

    target: Node
    predicate: Callable[[object], object]
    params: ProbeParams = DEFAULT_PROBE_PARAMS


@dataclass(frozen=True)
class RunContext:
    """Evaluation context visible to context steps.

    path holds the descriptions of the enclosing flows.
    """

    path: tuple[str, ...] = ()
    reporter: AssertionReporter | None = None
    fail_fast: bool = False

    @property
    def description(self) -> str:
        return " -> ".join(self.path)

    def enter(self, description: str) -> RunContext:
        """Return a context nested one flow deeper."""
        if not description:
            return self
        return replace(self, path=(*self.path, description))


@dataclass(frozen=True, eq=False)
class ContextStep(_Runnable):
    """Returns function(run_context); state unchanged."""

    function: Callable[[RunContext], object]
    name: str = "context_step"


@dataclass(frozen=True, eq=False)
class Recover(_Runnable):
    """Evaluate target, returning a raised exception as the value."""

    target: Node


Node: TypeAlias = Union[Step, Flow, Probe, ContextStep, Recover]

NODE_TYPES: tuple[type, ...] = (Step, Flow, Probe, ContextStep, Recover)


def is_node(obj: object) -> bool:
    """Return True when obj can be evaluated by the executor."""
    return isinstance(obj, NODE_TYPES)


def builder_parameters(
    builder: Callable[..., object],
) -> tuple[tuple[str, ...], tuple[str, ...], bool]:
    """Return the symbols a lazy builder consumes.

    Returns (required, optional, takes_all). Optional names have
    defaults and receive the bound value when one exists. takes_all
    is True when the builder takes ``**kwargs`` and so receives the
    whole environment. Raises TypeError for builders declaring
    ``*args`` or positional-only parameters.
    """
    names: list[str] = []
    optional: list[str] = []
    takes_all = False
    for param in inspect.signature(builder).parameters.values():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            takes_all = True
        elif param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.POSITIONAL_ONLY,
        ):
            msg = f"builder parameter {param.name!r} cannot be bound by name"
            raise TypeError(msg)
        elif param.default is inspect.Parameter.empty:
            names.append(param.name)
        else:
            optional.append(param.name)
    return tuple(names), tuple(optional), takes_all
