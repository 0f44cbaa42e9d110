import os
import logging
import pytest
from pathlib import Path
from bert_qa.logging_setup import setup_logging

@pytest.fixture(autouse=True)
def restore_root_logger():
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    for handler in logging.root.handlers:
        if handler not in handlers:
            handler.close()
    logging.root.handlers = handlers
    logging.root.setLevel(level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.NOTSET)

@pytest.mark.usefixtures("temp_log_file")
def test_logging_creates_log_file(temp_log_file):
    if os.path.exists(temp_log_file):
        os.remove(temp_log_file)
    setup_logging(LOG_FILE=temp_log_file, LEVEL="INFO")
    logger = logging.getLogger("bert_qa.tests.test_logging_setup")
    logger.info("Test log file creation")
    logging.shutdown()
    assert os.path.exists(temp_log_file)
    with open(temp_log_file) as f:
        content = f.read()
        assert "Test log file creation" in content

def test_logging_creates_log_directory(tmp_path):
    log_file = tmp_path / "nested" / "logs" / "bert_qa.log"
    setup_logging(LOG_FILE=str(log_file), LEVEL="INFO")
    logging.getLogger("bert_qa.tests.test_logging_setup").info("In a new directory")
    logging.shutdown()
    assert log_file.exists()

@pytest.mark.usefixtures("temp_log_file")
def test_logging_level_respected(temp_log_file):
    setup_logging(LOG_FILE=temp_log_file, LEVEL="ERROR")
    logger = logging.getLogger("bert_qa.tests.test_logging_setup")
    logger.info("This should not appear")
    logger.error("This should appear")
    logging.shutdown()
    with open(temp_log_file) as f:
        content = f.read()
        assert "This should appear" in content
        assert "This should not appear" not in content

@pytest.mark.usefixtures("temp_log_file")
def test_log_rotation(temp_log_file):
    from logging.handlers import RotatingFileHandler
    setup_logging(LOG_FILE=temp_log_file, LEVEL="INFO")
    logger = logging.getLogger("bert_qa.tests.test_logging_setup")
    for handler in logging.root.handlers:
        if isinstance(handler, RotatingFileHandler):
            handler.maxBytes = 100
            handler.backupCount = 2
    for i in range(50):
        logger.info(f"Log line {i}")
    logging.shutdown()
    rotated_files = list(Path(temp_log_file).parent.glob(Path(temp_log_file).name + '*'))
    assert any(str(f) != temp_log_file for f in rotated_files)

@pytest.mark.usefixtures("temp_log_file")
def test_console_and_file_output(temp_log_file, capsys):
    setup_logging(LOG_FILE=temp_log_file, LEVEL="INFO")
    logger = logging.getLogger("bert_qa.tests.test_logging_setup")
    logger.info("Console and file test")
    logging.shutdown()
    with open(temp_log_file) as f:
        content = f.read()
        assert "Console and file test" in content
    captured = capsys.readouterr()
    assert "Console and file test" in captured.out or "Console and file test" in captured.err

@pytest.mark.usefixtures("temp_log_file")
def test_debug_level_and_format(temp_log_file):
    setup_logging(LOG_FILE=temp_log_file, LEVEL="DEBUG")
    logger = logging.getLogger("bert_qa.tests.test_logging_setup")
    logger.debug("Debug message")
    logging.shutdown()
    with open(temp_log_file) as f:
        content = f.read()
        assert "- bert_qa.tests.test_logging_setup - MainThread - DEBUG - Debug message" in content

def test_http_client_loggers_quieted(temp_log_file):
    setup_logging(LOG_FILE=temp_log_file, LEVEL="INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING

def test_level_read_from_config(tmp_path, temp_log_file):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("LOGGING:\n  LEVEL: \"WARNING\"\n")
    setup_logging(LOG_FILE=temp_log_file, config_path=str(config_file))
    assert logging.root.level == logging.WARNING
