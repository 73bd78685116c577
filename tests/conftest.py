"""
Shared pytest fixtures for balance-simulator tests.
"""

import logging
from pathlib import Path

import pytest

from balancesim import PolicyConfig, ServiceTimeRange


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy inspection.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def quiet_policy() -> PolicyConfig:
    """Every tick brings one admissible 5-tick request and no backlog."""
    return PolicyConfig(
        admission_probability=1.0,
        blocked_ranges=(),
        streaming_service_time=ServiceTimeRange(5, 5),
        batch_service_time=ServiceTimeRange(5, 5),
        backlog_per_worker=0,
    )


@pytest.fixture(autouse=True)
def reset_balancesim_logging():
    """Reset logging state before and after each test.

    Leaves only the library's NullHandler attached and the level unset so
    one test's logging setup cannot leak into another.
    """

    def _reset():
        logger = logging.getLogger("balancesim")
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
