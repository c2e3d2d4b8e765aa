import logging

import pytest
from dynaconf import Dynaconf

from natsbasic.conf import Settings
from natsbasic.logging import ModeLoggerAdapter, get_mode_logger
from tests.fakes import FakeNATS
from tests.types import SettingsFactory


@pytest.fixture(scope="session")
def settings_factory() -> SettingsFactory:
    def _get_settings(
        url: str = "nats://127.0.0.1:4222",
        user: str | None = None,
        password: str | None = None,
        logging: dict | None = None,
        **overrides,
    ) -> Settings:
        logging = logging or {
            "debug": True,
            "rich": False,
        }
        values = {
            "NAME": "NATS-BASIC",
            "CONNECT_TIMEOUT": 2,
            "RECONNECT_TIME_WAIT": 2,
            "MAX_RECONNECT_ATTEMPTS": 60,
            "RETRY_ON_FAILED_CONNECT": False,
            "FLUSH_TIMEOUT": 10,
            "DRAIN_TIMEOUT": 30,
        }
        values.update({key.upper(): value for key, value in overrides.items()})
        settings = Dynaconf(
            environments=True,
            settings_files=[],
            ENV_FOR_DYNACONF="testing",
            URL=url,
            USER=user,
            PASSWORD=password,
            LOGGING=logging,
            **values,
        )

        return settings

    return _get_settings


@pytest.fixture()
def settings(settings_factory: SettingsFactory) -> Settings:
    return settings_factory()


@pytest.fixture()
def fake_nats() -> FakeNATS:
    return FakeNATS()


@pytest.fixture()
def pub_logger() -> ModeLoggerAdapter:
    return get_mode_logger("pub")


@pytest.fixture()
def sub_logger() -> ModeLoggerAdapter:
    return get_mode_logger("sub")


@pytest.fixture(autouse=True)
def propagate_natsbasic_logs():
    logger = logging.getLogger("natsbasic")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous
