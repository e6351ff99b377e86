from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from monad_bot.exceptions.custom_exceptions import ConfigurationError
from monad_bot.models import Account
from monad_bot.tasks import DeployModule, SendModule
from monad_bot.tasks.deploy import get_constructor_args
from monad_bot.utils import from_units, get_address, to_units
from tests.conftest import MAIN_PRIVATE_KEY
from configs import DEPLOY_GAS_RANGE


class TestDeploy:
    def test_constructor_arguments(self):
        assert get_constructor_args("SimpleStorage") == [0]
        assert get_constructor_args("Greeter") == ["Hello"]
        assert get_constructor_args("DataStore") == [123]
        assert get_constructor_args("HelloWorld") == []

    def test_constructor_arguments_are_copies(self):
        get_constructor_args("Greeter").append("mutated")
        assert get_constructor_args("Greeter") == ["Hello"]

    def test_all_wallets_selected_by_default(self, account, config, monkeypatch):
        monkeypatch.setattr("monad_bot.tasks.deploy.DEPLOY_WALLETS", [])
        assert DeployModule(account, config).is_selected()

    async def test_unselected_wallet_is_skipped(self, account, config, monkeypatch):
        monkeypatch.setattr("monad_bot.tasks.deploy.DEPLOY_WALLETS", [2, 3])
        compile_mock = AsyncMock()
        monkeypatch.setattr("monad_bot.tasks.deploy.asyncio.to_thread", compile_mock)

        status, message = await DeployModule(account, config).run()

        assert (status, message) == (True, "Skipped")
        compile_mock.assert_not_awaited()

    async def test_fee_uses_base_fee_buffer(self, account, config):
        module = DeployModule(account, config)
        module.eth.get_block = AsyncMock(return_value={"baseFeePerGas": 1000})

        assert await module.get_fee() == 1300

    async def test_gas_estimate_buffer_and_fallback(self, account, config):
        module = DeployModule(account, config)
        constructor = AsyncMock()
        constructor.estimate_gas = AsyncMock(return_value=100_000)
        assert await module.estimate_gas(constructor) == 130_000

        constructor.estimate_gas = AsyncMock(side_effect=ValueError("no estimate"))
        low, high = DEPLOY_GAS_RANGE
        assert low <= await module.estimate_gas(constructor) <= high


class TestSend:
    def test_requires_main_wallet(self, account, config):
        config = config.model_copy(update={"main_wallet_private_key": ""})

        with pytest.raises(ConfigurationError):
            SendModule(account, config)

    def test_sends_from_main_wallet_to_account(self, account, config):
        module = SendModule(account, config)

        assert module.wallet_address == get_address(MAIN_PRIVATE_KEY)
        assert module.recipient == get_address(account.keypair)

    def test_random_amount_has_six_decimals(self):
        for _ in range(20):
            amount = from_units(SendModule.random_amount())
            assert Decimal("0.01") <= amount <= Decimal("0.05")
            assert amount == amount.quantize(Decimal("0.000001"))

    async def test_main_wallet_is_not_funded(self, config):
        module = SendModule(Account(MAIN_PRIVATE_KEY, index=5), config)
        module.execute_transaction = AsyncMock()

        status, message = await module.run()

        assert (status, message) == (True, "Skipped")
        module.execute_transaction.assert_not_awaited()

    async def test_transfer_uses_legacy_gas(self, account, config):
        module = SendModule(account, config)
        module.eth.get_balance = AsyncMock(return_value=to_units(10))
        module.build_transaction_params = AsyncMock(return_value={"tx": 1})
        module.execute_transaction = AsyncMock(return_value=(True, "0xhash"))
        module.get_gas_price = AsyncMock(return_value=7)

        status, _ = await module.run()

        assert status
        kwargs = module.build_transaction_params.await_args.kwargs
        assert kwargs["to"] == module.recipient
        assert kwargs["gas"] == 21_000
        assert kwargs["gas_price"] == 7

    async def test_low_main_balance(self, account, config):
        module = SendModule(account, config)
        module.eth.get_balance = AsyncMock(return_value=0)
        module.execute_transaction = AsyncMock()

        status, _ = await module.run()

        assert not status
        module.execute_transaction.assert_not_awaited()

