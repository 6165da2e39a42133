# src/openrepo/logger_config.py
import logging
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, stream=None) -> None:
    """
    Configures the root logger with a single console handler.
    WARNING by default, DEBUG when verbose. Writes to stream, or stderr.
    """
    numeric_level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Calling this twice must not stack handlers.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    output_stream = stream if stream is not None else sys.stderr
    console_handler = logging.StreamHandler(output_stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
