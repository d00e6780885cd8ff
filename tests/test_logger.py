import logging

import pytest

from league.logger import NAMESPACE, get_logger, set_log_level


@pytest.fixture
def namespace():
    base = logging.getLogger(NAMESPACE)
    level = base.level
    yield base
    base.setLevel(level)


def test_loggers_live_under_the_league_namespace():
    assert get_logger("league.app").name == "league.app"
    assert get_logger("importer").name == "league.importer"
    assert get_logger("leaguetable").name == "league.leaguetable"


def test_namespace_gets_a_single_handler(namespace):
    get_logger("league.app")
    get_logger("league.database")

    assert len(namespace.handlers) == 1
    assert namespace.propagate is False


def test_set_log_level_accepts_names_and_numbers(namespace):
    set_log_level("debug")
    assert get_logger("league.database").getEffectiveLevel() == logging.DEBUG

    set_log_level(logging.ERROR)
    assert get_logger("league.database").getEffectiveLevel() == logging.ERROR
