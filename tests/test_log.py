import logging

import pytest

from ytrss.log import LOGGER_NAME, configure_logging


@pytest.fixture
def fresh_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved


def test_writes_to_file_once(tmp_path, fresh_logger):
    path = tmp_path / "ytrss.log"
    configure_logging(debug=True, path=path)
    configure_logging(debug=True, path=path)

    assert len(fresh_logger.handlers) == 1
    assert fresh_logger.level == logging.DEBUG
    assert not fresh_logger.propagate

    logging.getLogger("ytrss.client").debug("hello from the client")
    fresh_logger.handlers[0].flush()
    assert "hello from the client" in path.read_text(encoding="utf-8")


def test_default_level_is_info(tmp_path, fresh_logger):
    configure_logging(path=tmp_path / "ytrss.log")
    assert fresh_logger.level == logging.INFO
