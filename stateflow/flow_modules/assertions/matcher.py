"""Structural matcher -- compares expected against observed values.

Pure functions, no I/O. Dicts match by embedding (extra keys
in the observed value are ignored), sequences element-wise and
in order, callables and regex patterns as predicates, types by
isinstance, everything else by equality.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from stateflow.flow_modules.types import MatchResult


def _prefix(path: str, message: str) -> str:
    return f"{path}: {message}" if path else message


def _mismatches(
    expected: object,
    actual: object,
    path: str,
) -> list[str]:
    if isinstance(expected, Mapping):
        if not isinstance(actual, Mapping):
            return [_prefix(path, f"expected a mapping, observed {actual!r}")]
        found: list[str] = []
        for key, sub_expected in expected.items():
            sub_path = f"{path}[{key!r}]"
            if key not in actual:
                found.append(_prefix(sub_path, "missing key"))
                continue
            found.extend(_mismatches(sub_expected, actual[key], sub_path))
        return found

    if isinstance(expected, (list, tuple)):
        if isinstance(actual, (str, bytes)) or not isinstance(actual, Sequence):
            return [_prefix(path, f"expected a sequence, observed {actual!r}")]
        if len(expected) != len(actual):
            return [
                _prefix(
                    path,
                    f"expected {len(expected)} elements,"
                    f" observed {len(actual)}: {actual!r}",
                ),
            ]
        found = []
        for index, (sub_expected, sub_actual) in enumerate(
            zip(expected, actual, strict=True),
        ):
            found.extend(
                _mismatches(sub_expected, sub_actual, f"{path}[{index}]"),
            )
        return found

    if isinstance(expected, re.Pattern):
        if isinstance(actual, str) and expected.search(actual):
            return []
        return [
            _prefix(path, f"expected match for /{expected.pattern}/, observed {actual!r}"),
        ]

    if isinstance(expected, type):
        if isinstance(actual, expected):
            return []
        return [
            _prefix(path, f"expected instance of {expected.__name__}, observed {actual!r}"),
        ]

    if callable(expected):
        if expected(actual):
            return []
        name = getattr(expected, "__name__", repr(expected))
        return [_prefix(path, f"expected {name} to hold, observed {actual!r}")]

    if expected == actual:
        return []
    return [_prefix(path, f"expected {expected!r}, observed {actual!r}")]


def match_value(expected: object, actual: object) -> MatchResult:
    """Compare expected against actual.

    Returns MatchResult with one mismatch line per failing path.
    A predicate that raises propagates its exception.
    """
    found = _mismatches(expected, actual, "")
    return MatchResult(success=not found, mismatches=tuple(found))
