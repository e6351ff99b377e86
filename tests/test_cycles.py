from unittest.mock import AsyncMock

import pytest

from monad_bot.exceptions.custom_exceptions import WalletError
from monad_bot.tasks import AprioriModule, IzumiModule, MagmaModule, RubicModule
from monad_bot.utils import to_units


def with_balance(module, balance: int):
    module.eth.get_balance = AsyncMock(return_value=balance)
    return module


class TestWrapCycles:
    async def test_rubic_runs_cycles_back_to_back(self, account, config, no_sleep):
        rubic = with_balance(RubicModule(account, config), to_units(1))
        rubic.wrap = AsyncMock(return_value=(True, "0x1"))
        rubic.unwrap = AsyncMock(return_value=(True, "0x2"))

        status, message = await rubic.run()

        assert status
        assert message == "Completed 2/2 cycles"
        amount = rubic.wrap.await_args.args[0]
        rubic.unwrap.assert_awaited_with(amount, RubicModule.GAS_LIMIT)
        no_sleep.assert_not_awaited()

    async def test_rubic_uses_floor_for_small_balance(self, account, config, no_sleep):
        rubic = with_balance(RubicModule(account, config), 1000)
        rubic.wrap = AsyncMock(return_value=(True, "0x1"))
        rubic.unwrap = AsyncMock(return_value=(True, "0x2"))

        await rubic.run()

        assert rubic.wrap.await_args.args[0] == to_units("0.0001")

    async def test_izumi_sleeps_between_cycles(self, account, config, no_sleep):
        izumi = with_balance(IzumiModule(account, config), to_units(1))
        izumi.wrap = AsyncMock(return_value=(True, "0x1"))
        izumi.unwrap = AsyncMock(return_value=(False, "reverted"))

        status, message = await izumi.run()

        assert not status
        assert message == "Completed 0/2 cycles"
        assert no_sleep.await_count == 1

    async def test_izumi_strict_amount_fails_on_empty_balance(self, account, config, no_sleep):
        izumi = with_balance(IzumiModule(account, config), 10)
        izumi.wrap = AsyncMock()

        status, _ = await izumi.run()

        assert not status
        izumi.wrap.assert_not_awaited()

    async def test_rubic_keeps_completed_cycles_when_a_later_cycle_raises(self, account, config, no_sleep):
        rubic = with_balance(RubicModule(account, config), to_units(1))
        rubic.wrap = AsyncMock(side_effect=[(True, "0x1"), WalletError("Failed to get nonce after 3 attempts")])
        rubic.unwrap = AsyncMock(return_value=(True, "0x2"))

        status, message = await rubic.run()

        assert status
        assert message == "Completed 1/2 cycles"

    async def test_izumi_moves_on_after_a_cycle_error(self, account, config, no_sleep):
        izumi = with_balance(IzumiModule(account, config), to_units(1))
        izumi.wrap = AsyncMock(side_effect=[RuntimeError("rpc down"), (True, "0x1")])
        izumi.unwrap = AsyncMock(return_value=(True, "0x2"))

        status, message = await izumi.run()

        assert izumi.wrap.await_count == 2
        assert (status, message) == (True, "Completed 1/2 cycles")
        assert no_sleep.await_count == 1


@pytest.fixture
def tx_mocks():
    def attach(module):
        module.build_transaction_params = AsyncMock(side_effect=lambda **kwargs: kwargs)
        module.execute_transaction = AsyncMock(return_value=(True, "0xhash"))
        module.log_balance = AsyncMock(return_value=to_units(1))
        return module
    return attach


class TestStakeCycles:
    async def test_magma_stakes_then_unstakes_same_amount(self, account, config, no_sleep, tx_mocks):
        magma = tx_mocks(with_balance(MagmaModule(account, config), to_units(1)))

        status, message = await magma.run()

        assert status
        assert message == "Completed 2/2 Magma cycles"
        stake_call, unstake_call = magma.build_transaction_params.await_args_list[:2]
        amount = stake_call.kwargs["value"]
        assert stake_call.kwargs["data"] == "0xd5575982"
        assert stake_call.kwargs["gas"] == 500_000
        assert unstake_call.kwargs["data"] == magma.unstake_calldata(amount)
        assert unstake_call.kwargs["gas"] == 800_000

    async def test_failed_cycle_stops_remaining_cycles(self, account, config, no_sleep, tx_mocks):
        magma = tx_mocks(with_balance(MagmaModule(account, config), to_units(1)))
        magma.execute_transaction.side_effect = [(False, "reverted")]

        status, message = await magma.run()

        assert not status
        assert magma.execute_transaction.await_count == 1
        assert message == "Completed 0/2 Magma cycles"

    async def test_apriori_claims_after_unstake(self, account, config, no_sleep, tx_mocks, monkeypatch):
        monkeypatch.setattr("monad_bot.tasks.stake.random_sleep", AsyncMock())
        apriori = tx_mocks(with_balance(AprioriModule(account, config.model_copy(update={"cycles": 1})), to_units(1)))
        apriori.find_claimable_request = AsyncMock(return_value=9)

        status, _ = await apriori.run()

        assert status
        claim_call = apriori.build_transaction_params.await_args_list[-1]
        assert claim_call.kwargs["data"] == apriori.claim_calldata(9)
        assert claim_call.kwargs["gas"] == AprioriModule.CLAIM_GAS

    async def test_apriori_nothing_to_claim(self, account, config, tx_mocks):
        apriori = tx_mocks(AprioriModule(account, config))
        apriori.find_claimable_request = AsyncMock(return_value=None)

        status, message = await apriori.claim()

        assert (status, message) == (False, "Nothing to claim")
        apriori.execute_transaction.assert_not_awaited()

    async def test_error_in_later_cycle_keeps_completed_stakes(self, account, config, no_sleep, tx_mocks):
        magma = tx_mocks(with_balance(MagmaModule(account, config), to_units(1)))
        magma.execute_transaction.side_effect = [
            (True, "0xstake"),
            (True, "0xunstake"),
            WalletError("Failed to get nonce after 3 attempts"),
        ]

        status, message = await magma.run()

        assert (status, message) == (True, "Completed 1/2 Magma cycles")
        assert magma.execute_transaction.await_count == 3
        assert magma.log_balance.await_count == 2
