from unittest.mock import AsyncMock

import pytest

from monad_bot.logger import AsyncLogger
from monad_bot.models import Account, Config, DelayRange

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
MAIN_PRIVATE_KEY = "0x" + "ab" * 32


@pytest.fixture(autouse=True)
def silent_logger(monkeypatch):
    mock = AsyncMock()
    monkeypatch.setattr(AsyncLogger, "logger_msg", mock)
    return mock


@pytest.fixture
def account() -> Account:
    return Account(keypair=PRIVATE_KEY, index=1)


@pytest.fixture
def config(account) -> Config:
    return Config(
        accounts=[account],
        delay_before_start=DelayRange(min=0, max=0),
        delay_between_tasks=DelayRange(min=0, max=0),
        main_wallet_private_key=MAIN_PRIVATE_KEY,
        api_key_2captcha="test-key",
        cycles=2,
    )


@pytest.fixture
def no_sleep(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("monad_bot.tasks.base.random_sleep", sleep)
    return sleep
