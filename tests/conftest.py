import logging

import pytest

pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    """Capture tablequery debug output so SQL logging is exercised."""
    caplog.set_level(logging.DEBUG, logger='tablequery')
    yield
