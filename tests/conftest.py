import logging

import pytest


@pytest.fixture()
def observed():
    """Collects session progress messages; pass ``observed.append``."""
    return []


@pytest.fixture(autouse=True)
def quiet_logging():
    root = logging.getLogger()
    level = root.level
    root.setLevel(logging.WARNING)
    yield
    root.setLevel(level)
