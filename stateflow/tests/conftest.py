"""Shared test fixtures for the stateflow test suite."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from returns.io import IOSuccess

from stateflow.flow_modules.assertions.reporters import RecordingReporter

if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from pytest_mock import MockerFixture


@pytest.fixture
def counter_state() -> dict[str, object]:
    """Return a fresh state with a zeroed counter."""
    return {"count": 0}


@pytest.fixture
def reporter() -> RecordingReporter:
    """Return an empty RecordingReporter."""
    return RecordingReporter()


@pytest.fixture
def mock_sleep(mocker: MockerFixture) -> MagicMock:
    """Patch io_ops.sleep_seconds so probes never block."""
    return mocker.patch(  # type: ignore[no-any-return]
        "stateflow.flow_modules.io_ops.sleep_seconds",
        return_value=IOSuccess(None),
    )


@pytest.fixture
def mock_stderr(mocker: MockerFixture) -> MagicMock:
    """Patch io_ops.write_stderr to capture log lines."""
    return mocker.patch(  # type: ignore[no-any-return]
        "stateflow.flow_modules.io_ops.write_stderr",
        return_value=IOSuccess(None),
    )
