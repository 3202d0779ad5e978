from loguru import logger

from logger import LOG_LEVEL_ENV, resolve_level, setup_logging


def test_resolve_level_prefers_argument(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "warning")
    assert resolve_level("debug") == "DEBUG"
    assert resolve_level() == "WARNING"


def test_resolve_level_defaults_to_info(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    assert resolve_level() == "INFO"


def test_setup_logging_installs_single_sink():
    handler_id = setup_logging("ERROR")
    assert handler_id >= 0
    logger.remove(handler_id)
