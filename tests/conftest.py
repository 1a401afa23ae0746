import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop handlers installed by setup_logging so later tests don't write to closed streams."""
    yield
    for name in ("annodeck", ""):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if handler.__class__.__module__.startswith("_pytest"):
                continue
            logger.removeHandler(handler)
            handler.close()
