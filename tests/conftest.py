"""Global pytest configuration and shared fixtures."""

import pytest
import logging

from patternbus.core.message_bus import Bus, BusConfig
from patternbus.core.message_bus import factory
from tests.unit.fixtures.manual_scheduler import ManualScheduler

# Configure logging for tests
logging.basicConfig(level=logging.DEBUG, format='%(name)s - %(levelname)s - %(message)s')


@pytest.fixture
def scheduler():
    """Create a hand-driven scheduler."""
    return ManualScheduler()


@pytest.fixture
def bus(scheduler):
    """Create a bus whose timers only fire when the test advances them."""
    bus = Bus(scheduler=scheduler)
    yield bus
    bus.destroy()


@pytest.fixture
def async_bus():
    """Create a bus using the default event loop scheduler."""
    bus = Bus()
    yield bus
    bus.destroy()


@pytest.fixture
def abort_bus(scheduler):
    """Create a bus that aborts fan-out when a transform fails."""
    bus = Bus(config=BusConfig(transform_failures="abort"), scheduler=scheduler)
    yield bus
    bus.destroy()


@pytest.fixture
def reset_global_bus():
    """Forget the process-global bus and its configuration around a test."""
    factory._global_bus = None
    factory._bus_config = None
    yield
    factory._global_bus = None
    factory._bus_config = None


# Utility Fixtures
@pytest.fixture
def capture_logs():
    """Capture log messages during test execution."""
    from io import StringIO

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)

    # Add to root logger
    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield log_capture

    # Cleanup
    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


# Test Markers
def pytest_configure(config):
    """Configure custom test markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# Test Collection Configuration
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
