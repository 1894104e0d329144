"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers the CLI attaches to the content_files logger.

    _configure_logging() adds stream and file handlers; without this, they
    would leak between CliRunner invocations.
    """
    yield
    app_logger = logging.getLogger("content_files")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.setLevel(logging.NOTSET)
