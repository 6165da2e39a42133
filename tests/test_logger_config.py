# tests/test_logger_config.py
import io
import logging

from openrepo.logger_config import get_logger, setup_logging


def test_setup_logging_levels_and_single_handler():
    stream = io.StringIO()
    setup_logging(stream=stream)
    setup_logging(verbose=True, stream=stream)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1

    get_logger("openrepo.test").debug("hello")
    assert "openrepo.test - DEBUG - hello" in stream.getvalue()

    setup_logging(stream=stream)
    assert logging.getLogger().level == logging.WARNING
