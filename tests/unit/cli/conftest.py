"""Shared fixtures for CLI unit tests."""

from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Fixture providing a CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_container() -> Generator[MagicMock, None, None]:
    """Fixture providing a mocked DI container.

    Patches the container in all CLI modules to ensure mock is used.
    """
    mock = MagicMock()

    with (
        patch("mediaflow.cli.container", mock),
        patch("mediaflow.cli.pipeline.container", mock),
    ):
        yield mock


@pytest.fixture
def mock_settings(mock_container: MagicMock) -> MagicMock:
    """Fixture providing mocked settings from the container."""
    settings = MagicMock()
    settings.pipeline_timeout = None
    mock_container.settings.return_value = settings
    return settings


@pytest.fixture
def mock_executor(mock_container: MagicMock) -> MagicMock:
    """Fixture providing a mocked PipelineExecutor from the container."""
    executor = MagicMock()
    mock_container.executor.return_value = executor
    return executor


@pytest.fixture
def mock_poller(mock_container: MagicMock) -> MagicMock:
    """Fixture providing a mocked ConsistencyPoller from the container."""
    poller = MagicMock()
    mock_container.poller.return_value = poller
    return poller
