"""Unit tests configuration file."""

import logging
import os

import pytest

from dartbridge.generator.registry import Category, CategoryRegistry

TESTS_DIR = os.path.dirname(os.path.realpath(__file__))


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def registry():
    return CategoryRegistry(
        {
            "Filter": Category.ENUM,
            "Todo": Category.STRUCT,
            "Id": Category.PRIM,
        }
    )


@pytest.fixture
def todo_file():
    return os.path.join(TESTS_DIR, "generator", "todo.rid")


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers bound to CLI runner streams."""
    yield
    logger = logging.getLogger("dartbridge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
