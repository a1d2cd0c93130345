"""Assertions package -- match steps, structural matcher, reporters."""
from stateflow.flow_modules.assertions.match import match
from stateflow.flow_modules.assertions.matcher import match_value
from stateflow.flow_modules.assertions.reporters import (
    RecordingReporter,
    StderrReporter,
)

__all__ = [
    "RecordingReporter",
    "StderrReporter",
    "match",
    "match_value",
]
