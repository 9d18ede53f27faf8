import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the handlers and level that cli.setup_logging installs."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
