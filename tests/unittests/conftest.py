# This file is part of netconverge. See LICENSE file for license information.

import logging

import pytest


@pytest.fixture
def root_logger():
    """The root logger, with its handlers and level restored afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    converter = logging.Formatter.converter
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.Formatter.converter = converter
    # fileConfig disables every logger it was not told about
    for logger in logging.root.manager.loggerDict.values():
        if isinstance(logger, logging.Logger):
            logger.disabled = False
