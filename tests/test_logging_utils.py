import logging
import os
from logging.handlers import RotatingFileHandler

from healthlog.logging_utils import setup_logging


def _reset(logger):
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_setup_logging_writes_to_rotating_file(tmp_path):
    _reset(logging.getLogger("healthlog"))
    logger, log_path = setup_logging(str(tmp_path / "logs"))
    try:
        assert log_path.endswith("healthlog.log")
        logger.info("capture started")
        for handler in logger.handlers:
            handler.flush()
        with open(log_path, "r", encoding="utf-8") as handle:
            assert "capture started" in handle.read()
    finally:
        _reset(logger)


def test_setup_logging_is_idempotent(tmp_path):
    _reset(logging.getLogger("healthlog"))
    log_dir = str(tmp_path / "logs")
    logger, _ = setup_logging(log_dir, console=True)
    try:
        setup_logging(log_dir, console=True)
        files = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        consoles = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        assert len(files) == 1
        assert len(consoles) == 1
        assert os.path.isdir(log_dir)
    finally:
        _reset(logger)
