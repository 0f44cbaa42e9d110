"""
@file: logging_setup.py
Logging setup module for the BERT QA system.

This module provides a function to configure logging for the application, including:
- Rotating file logging with line buffering
- Console logging at a configurable level
- Automatic log directory creation
- Quieter defaults for the HTTP client libraries used by the model download

Usage:
    from bert_qa.logging_setup import setup_logging
    setup_logging()

"""

import logging
import logging.handlers
import os
from pathlib import Path

# Third-party loggers that are chatty at INFO during the model download
NOISY_LOGGERS = ("httpx", "httpcore")

class LineBufferedRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    RotatingFileHandler with line buffering enabled.
    Ensures each log record is flushed to disk immediately.
    """
    def _open(self):
        return open(self.baseFilename, self.mode, encoding=self.encoding, buffering=1)


def setup_logging(LOG_FILE: str = "logs/bert_qa.log", LEVEL: str = None, config_path: str = None) -> None:
    """
    Set up logging configuration for the BERT QA system.

    This configures both file and console logging:
    - File logs are written to LOG_FILE, rotated at 10MB, with 5 backups, at the configured LEVEL.
    - Console logs are written at the specified LEVEL (default: INFO).
    - Log directory is created if it does not exist.

    Args:
        LOG_FILE: Path to the log file (default: 'logs/bert_qa.log')
        LEVEL: Logging level for output (DEBUG, INFO, WARNING, ERROR, CRITICAL). If None, will read from config.yaml LOGGING.LEVEL.
        config_path: Optional path to config.yaml to use for loading the log level if LEVEL is None.
    """
    if LEVEL is None:
        from bert_qa.config import get_config
        try:
            LEVEL = get_config(config_path).get_nested('LOGGING.LEVEL', 'INFO')
        except Exception as e:
            logging.getLogger(__name__).warning(f"Could not read log level from config: {e}")
            LEVEL = 'INFO'

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

    numeric_level = getattr(logging, str(LEVEL).upper(), logging.INFO)
    logging.root.setLevel(numeric_level)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    file_handler = LineBufferedRotatingFileHandler(
        LOG_FILE,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setFormatter(file_formatter)
    file_handler.setLevel(numeric_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    logging.root.handlers = []
    logging.root.addHandler(file_handler)
    logging.root.addHandler(console_handler)

    if numeric_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if numeric_level <= logging.INFO:
        logging.getLogger(__name__).info(f"Logging setup complete (level {LEVEL})")
