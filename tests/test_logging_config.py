from __future__ import annotations

import logging

from geosetup.logging_config import setup_logging


def test_setup_logging_replaces_handlers_and_writes_file(tmp_path) -> None:
    log_file = tmp_path / "build.log"

    setup_logging(logging.INFO)
    logger = setup_logging(logging.DEBUG, log_file=str(log_file))
    try:
        assert logger.name == "geosetup"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("geosetup.geometry").debug("Box placed: %d nodes", 12)
        for handler in logger.handlers:
            handler.flush()
        assert "Box placed: 12 nodes" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
