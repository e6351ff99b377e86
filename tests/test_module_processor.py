import asyncio
import importlib
from unittest.mock import AsyncMock, MagicMock

import pytest

import monad_bot.utils as utils
from monad_bot.exceptions.api_exceptions import APIClientError
from monad_bot.models import Account
from monad_bot.utils import AccountProgress, get_address
from tests.conftest import PRIVATE_KEY

SECOND_KEY = "0x" + "11" * 32
THIRD_KEY = "0x" + "22" * 32


class StopScheduler(Exception):
    pass


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(keypair=key, index=index)
        for index, key in enumerate((PRIVATE_KEY, SECOND_KEY, THIRD_KEY), start=1)
    ]


@pytest.fixture
def processor_module(monkeypatch, config):
    # module_processor reads the runtime config on import
    monkeypatch.setattr(utils, "load_config", lambda *args, **kwargs: config)
    module = importlib.import_module("module_processor")

    monkeypatch.setattr(module, "random_sleep", AsyncMock())
    monkeypatch.setattr(module, "check_proxy", AsyncMock(return_value="1.2.3.4"))
    return module


@pytest.fixture
def use_config(monkeypatch, processor_module):
    def apply(config):
        monkeypatch.setattr(processor_module, "config", config)
        monkeypatch.setattr(processor_module, "progress", AccountProgress(len(config.accounts)))
        monkeypatch.setattr(processor_module, "semaphore", asyncio.Semaphore(config.threads))
        return config
    return apply


@pytest.fixture
def processor(processor_module, use_config, config):
    use_config(config)
    processor = processor_module.ModuleProcessor()
    processor.console = MagicMock()
    return processor


async def test_failed_proxy_check_skips_account(processor, processor_module, account):
    processor_module.check_proxy.side_effect = APIClientError("proxy dead")
    process_func = AsyncMock()

    result = await processor.process_account(account, process_func)

    assert result == (False, "Proxy check failed")
    process_func.assert_not_awaited()
    assert processor_module.progress.processed == 1
    assert processor_module.progress.success == 0


async def test_account_result_is_recorded(processor, processor_module, account, config):
    process_func = AsyncMock(return_value=(True, "Completed 2/2 cycles"))

    result = await processor.process_account(account, process_func)

    assert result == (True, "Completed 2/2 cycles")
    process_func.assert_awaited_once_with(account, config)
    assert processor.results == [(1, get_address(PRIVATE_KEY), True, "Completed 2/2 cycles")]
    assert processor_module.progress.success_rate == 100


async def test_error_in_one_account_does_not_stop_the_batch(processor, use_config, config, accounts):
    use_config(config.model_copy(update={"accounts": accounts[:2], "threads": 2}))

    async def process_func(account, _config):
        if account.index == 1:
            raise RuntimeError("boom")
        return True, "ok"

    await processor._run_pass(process_func)

    assert sorted(processor.results) == [
        (1, get_address(PRIVATE_KEY), False, "boom"),
        (2, get_address(SECOND_KEY), True, "ok"),
    ]
    processor.console.show_results.assert_called_once()


async def test_accounts_run_in_batches_of_threads(processor, use_config, config, accounts):
    use_config(config.model_copy(update={"accounts": accounts, "threads": 2}))
    events = []

    async def process_func(account, _config):
        events.append(("start", account.index))
        await asyncio.sleep(0)
        events.append(("end", account.index))
        return True, "ok"

    await processor._run_pass(process_func)

    third_start = events.index(("start", 3))
    assert third_start > events.index(("end", 1))
    assert third_start > events.index(("end", 2))
    assert len(processor.results) == 3


async def test_switch_delay_between_accounts(processor, processor_module, use_config, config, accounts):
    use_config(config.model_copy(update={"accounts": accounts[:2]}))

    await processor._run_pass(AsyncMock(return_value=(True, "ok")))

    # no delay after the last account
    assert processor_module.random_sleep.await_count == 1


async def test_single_pass_without_interval(processor, processor_module):
    process_func = AsyncMock(return_value=(True, "ok"))
    processor.module_functions["rubic"] = process_func

    assert await processor.process_module("rubic") is False
    process_func.assert_awaited_once()
    processor_module.random_sleep.assert_not_awaited()


async def test_pass_repeats_after_interval(processor, processor_module, use_config, config):
    use_config(config.model_copy(update={"interval_hours": 2}))
    process_func = AsyncMock(return_value=(True, "ok"))
    processor.module_functions["rubic"] = process_func
    processor_module.random_sleep.side_effect = [None, StopScheduler()]

    with pytest.raises(StopScheduler):
        await processor.process_module("rubic")

    assert process_func.await_count == 2
    assert processor_module.random_sleep.await_args.kwargs == {"min_sec": 7200, "max_sec": 7200}


async def test_unknown_module(processor):
    assert await processor.process_module("bebop") is False


async def test_exit(processor):
    assert await processor.process_module("exit") is True
