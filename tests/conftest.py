"""
Shared test configuration.

Clears SWARMGRID_DEFAULT_PRESET for the test session so a developer's
.env cannot change the default session settings under test.
"""

import os

import pytest


@pytest.fixture(autouse=True, scope="session")
def _isolate_env():
    """Run every test against the stock default settings."""
    saved = os.environ.pop("SWARMGRID_DEFAULT_PRESET", None)
    yield
    if saved is not None:
        os.environ["SWARMGRID_DEFAULT_PRESET"] = saved
