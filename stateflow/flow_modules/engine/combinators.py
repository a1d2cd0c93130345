"""Flow combinators -- pure data composition (Tier 2).

Combinators produce Flow/Binding/Probe nodes (Tier 1 types).
They do NOT execute steps or touch ROP. The executor handles
execution. Structural mistakes are rejected here, before any
state is threaded.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from stateflow.flow_modules.engine.primitives import return_value
from stateflow.flow_modules.engine.types import (
    Binding,
    Flow,
    Probe,
    Recover,
    builder_parameters,
    is_node,
)
from stateflow.flow_modules.errors import FlowDefinitionError
from stateflow.flow_modules.types import DEFAULT_PROBE_PARAMS, ProbeParams

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from stateflow.flow_modules.engine.types import Node


def _check_symbol(symbol: object) -> str:
    if not isinstance(symbol, str) or not symbol.isidentifier():
        msg = f"Binding symbol must be an identifier, got {symbol!r}"
        raise FlowDefinitionError(msg)
    return symbol


def bind(symbol: str, target: object) -> Binding:
    """Bind the return value of target to symbol.

    target is a step, a flow, or a builder taking earlier
    symbols as parameters and returning one.
    """
    return Binding(_check_symbol(symbol), target)


def let(symbol: str, value: object) -> Binding:
    """Bind a literal value to symbol."""
    return Binding(_check_symbol(symbol), value, literal=True)


def _check_target(
    target: object,
    bound: set[str],
    description: str,
    index: int,
) -> None:
    """Validate one element target against the symbols bound so far."""
    if is_node(target):
        return
    if not callable(target):
        msg = (
            f"Flow {description!r} element {index} is"
            f" {type(target).__name__}, expected a step, flow,"
            " binding or builder"
        )
        raise FlowDefinitionError(msg)
    try:
        names, _, _ = builder_parameters(target)
    except (TypeError, ValueError) as exc:
        msg = f"Flow {description!r} element {index}: {exc}"
        raise FlowDefinitionError(msg) from exc
    missing = [name for name in names if name not in bound]
    if missing:
        msg = (
            f"Flow {description!r} element {index} references"
            f" unbound symbol(s) {missing}."
            f" Bound so far: {sorted(bound)}"
        )
        raise FlowDefinitionError(msg)


def flow(description: str, *elements: object) -> Flow:
    """Compose elements into a single named flow.

    Elements run in order, each receiving the state produced by
    its predecessor. Bindings are visible only to the elements
    that follow them in this flow. A nested flow that needs an
    outer value is built by a builder naming that symbol::

        flow(
            "outer",
            let("user_id", 7),
            lambda user_id: flow("inner", fetch_user(user_id)),
        )

    Writing ``flow("inner", lambda user_id: ...)`` directly as an
    element raises FlowDefinitionError, since the inner flow is
    validated on its own.
    """
    if not isinstance(description, str):
        msg = (
            "Flow description must be a string,"
            f" got {type(description).__name__}"
        )
        raise FlowDefinitionError(msg)
    if not elements:
        msg = f"Empty flow {description!r}: at least one element is required"
        raise FlowDefinitionError(msg)

    bound: set[str] = set()
    for index, element in enumerate(elements):
        if isinstance(element, Binding):
            if not element.literal:
                _check_target(element.target, bound, description, index)
            bound.add(element.symbol)
        else:
            _check_target(element, bound, description, index)

    return Flow(description=description, elements=tuple(elements))


def when(condition: object, node: Node) -> Node:
    """Evaluate node only when condition is truthy.

    Otherwise return None and leave the state unchanged.
    """
    return node if condition else return_value(None)


def for_each(
    values: Iterable[object],
    builder: Callable[[object], Node],
) -> Node:
    """Evaluate builder(value) for each value, in order.

    builder is called at construction time. The return value is
    the list of each node's return value.
    """
    items = list(values)
    if not items:
        return return_value([])
    symbols = [f"item_{i}" for i in range(len(items))]
    elements: list[object] = [
        Binding(symbol, builder(item))
        for symbol, item in zip(symbols, items, strict=True)
    ]
    elements.append(
        lambda **env: return_value([env[s] for s in symbols]),
    )
    return Flow(description="", elements=tuple(elements))


def ignore_error(node: Node) -> Recover:
    """Return a raised exception as the value instead of failing."""
    return Recover(target=node)


def as_probe_params(
    params: ProbeParams | Mapping[str, object] | None,
    default: ProbeParams = DEFAULT_PROBE_PARAMS,
) -> ProbeParams:
    """Coerce None, a mapping or ProbeParams into ProbeParams.

    Raises pydantic.ValidationError for out-of-range values.
    """
    if params is None:
        return default
    if isinstance(params, ProbeParams):
        return params
    if isinstance(params, Mapping):
        return default.model_validate({**default.model_dump(), **params})
    msg = f"Expected ProbeParams or a mapping, got {type(params).__name__}"
    raise FlowDefinitionError(msg)


def probe(
    node: Node,
    predicate: Callable[[object], object],
    params: ProbeParams | Mapping[str, object] | None = None,
) -> Probe:
    """Retry node until predicate(value) holds.

    The return value is the tuple of ProbeTry observations;
    the last entry is the final attempt.
    """
    if not is_node(node):
        msg = f"probe target must be a step or flow, got {type(node).__name__}"
        raise FlowDefinitionError(msg)
    return Probe(
        target=node,
        predicate=predicate,
        params=as_probe_params(params),
    )
