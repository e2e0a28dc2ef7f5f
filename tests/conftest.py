"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_datainspect_logging():
    """Drop handlers installed by setup_logging() so streams never outlive a test."""
    yield
    logger = logging.getLogger("datainspect")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
