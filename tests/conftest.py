"""Pytest configuration and shared fixtures."""
import pytest

from tests import fakes


@pytest.fixture(autouse=True)
def reset_save_log():
    """Clear the fake save journal before each test."""
    fakes.SAVE_LOG.clear()
    yield
    fakes.SAVE_LOG.clear()


@pytest.fixture
def fake_order():
    """A persisted FakeOrder with nested shipping, carrier and billing objects."""
    return fakes.make_order(pk=7, total=10, status="new")


@pytest.fixture
def new_fake_order():
    """An unsaved FakeOrder with nested objects."""
    return fakes.make_order()
