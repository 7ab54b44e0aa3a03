import logging

import pytest

from Bifrost.logging_config import setup_logging, LOGGER_NAME


@pytest.fixture
def bifrost_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_is_idempotent(bifrost_logger):
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)
    assert bifrost_logger.level == logging.DEBUG
    assert len(bifrost_logger.handlers) == 1


def test_setup_logging_with_file(bifrost_logger, tmp_path):
    log_file = tmp_path / "bifrost.log"
    setup_logging(logging.INFO, log_file=str(log_file))
    logging.getLogger("Bifrost.EvaluationBridge").info("Device replied '2' to '1+1'")
    for handler in bifrost_logger.handlers:
        handler.flush()

    assert len(bifrost_logger.handlers) == 2
    assert "Device replied '2' to '1+1'" in log_file.read_text(encoding="utf-8")


def test_records_name_their_module(bifrost_logger, tmp_path):
    log_file = tmp_path / "bifrost.log"
    setup_logging(logging.WARNING, log_file=str(log_file))
    logging.getLogger("Bifrost.Transport").warning("Port busy")
    logging.getLogger("Bifrost.Transport").info("not written")
    for handler in bifrost_logger.handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert "WARNING" in lines[0] and "[Bifrost.Transport] Port busy" in lines[0]
