from abc import ABC, abstractmethod

from monad_bot.api import AprioriClient
from monad_bot.exceptions.api_exceptions import APIClientError
from monad_bot.exceptions.custom_exceptions import InsufficientFundsError
from monad_bot.tasks.base import BaseMonadModule, build_calldata
from monad_bot.utils import get_random_amount, random_sleep, from_units, to_units
from configs import PERCENT_TRANSACTION, APRIORI_CLAIM_WAIT


class BaseStakeModule(BaseMonadModule, ABC):
    """
    Stake a random share of the MON balance, wait, then unstake it.

    A failed stake or unstake stops the remaining cycles of the wallet.
    """
    CONTRACT_ADDRESS: str = ""
    STAKE_GAS = 500_000
    UNSTAKE_GAS = 800_000
    MIN_AMOUNT: int | None = to_units("0.0001")
    STAKED_TOKEN = "MON"

    @property
    @abstractmethod
    def protocol(self) -> str:
        pass

    @abstractmethod
    def stake_calldata(self, amount: int) -> str | None:
        pass

    @abstractmethod
    def unstake_calldata(self, amount: int) -> str:
        pass

    async def calculate_amount(self) -> int:
        balance = await self.eth.get_balance(self.wallet_address)
        return get_random_amount(balance, PERCENT_TRANSACTION, self.MIN_AMOUNT)

    async def stake(self, amount: int) -> tuple[bool, str]:
        extra = {}
        if data := self.stake_calldata(amount):
            extra["data"] = data

        tx_params = await self.build_transaction_params(
            to=self.CONTRACT_ADDRESS,
            value=amount,
            gas=self.STAKE_GAS,
            **extra
        )
        return await self.execute_transaction(
            tx_params, f"Stake {from_units(amount):.6f} MON on {self.protocol}"
        )

    async def unstake(self, amount: int) -> tuple[bool, str]:
        tx_params = await self.build_transaction_params(
            to=self.CONTRACT_ADDRESS,
            gas=self.UNSTAKE_GAS,
            data=self.unstake_calldata(amount)
        )
        return await self.execute_transaction(
            tx_params, f"Unstake {from_units(amount):.6f} {self.STAKED_TOKEN} on {self.protocol}"
        )

    async def after_unstake(self, amount: int) -> None:
        pass

    async def run_cycle(self, cycle: int) -> tuple[bool, str]:
        await self.logger_msg(
            msg=f"{self.protocol} cycle {cycle}/{self.config.cycles}",
            type_msg="info", address=self.wallet_address
        )
        amount = await self.calculate_amount()

        status, result = await self.stake(amount)
        if not status:
            return False, f"Stake failed: {result}"

        await self.sleep_between()

        status, result = await self.unstake(amount)
        if not status:
            return False, f"Unstake failed: {result}"

        await self.after_unstake(amount)
        return True, result

    async def run(self) -> tuple[bool, str]:
        initial_balance = await self.log_balance("Initial balance")
        completed = 0

        for cycle in range(1, self.config.cycles + 1):
            try:
                status, result = await self.run_cycle(cycle)
            except InsufficientFundsError as e:
                status, result = False, str(e)
            except Exception as e:
                status, result = False, await self._analyze_transaction_error(e)

            if not status:
                await self.logger_msg(
                    msg=f"Cycle {cycle} failed, skipping the remaining cycles: {result}",
                    type_msg="error", address=self.wallet_address, method_name="run"
                )
                break

            completed += 1
            if cycle < self.config.cycles:
                await self.sleep_between()

        final_balance = await self.log_balance("Final balance")
        difference = from_units(final_balance - initial_balance)
        await self.logger_msg(
            msg=f"Balance {'profit' if difference >= 0 else 'loss'}: {difference:.6f} MON",
            type_msg="info", address=self.wallet_address
        )

        message = f"Completed {completed}/{self.config.cycles} {self.protocol} cycles"
        return completed > 0, message


class MagmaModule(BaseStakeModule):
    CONTRACT_ADDRESS = "0x2c9C959516e9AAEdB2C748224a41249202ca8BE7"
    MIN_AMOUNT = None
    STAKED_TOKEN = "gMON"

    @property
    def protocol(self) -> str:
        return "Magma"

    def stake_calldata(self, amount: int) -> str:
        return "0xd5575982"

    def unstake_calldata(self, amount: int) -> str:
        return build_calldata("0x6fed1ea7", ["uint256"], [amount])


class KintsuModule(BaseStakeModule):
    CONTRACT_ADDRESS = "0x07AabD925866E8353407E67C1D157836f7Ad923e"
    STAKED_TOKEN = "sMON"

    @property
    def protocol(self) -> str:
        return "Kintsu"

    def stake_calldata(self, amount: int) -> None:
        return None

    def unstake_calldata(self, amount: int) -> str:
        return build_calldata(
            "0x30af6b2e",
            ["uint256", "address", "address"],
            [amount, self.wallet_address, self.wallet_address]
        )


class AprioriModule(BaseStakeModule):
    CONTRACT_ADDRESS = "0xb2f82D0f38dc453D596Ad40A37799446Cc89274A"
    CLAIM_GAS = 800_000
    STAKED_TOKEN = "aprMON"

    @property
    def protocol(self) -> str:
        return "aPriori"

    def stake_calldata(self, amount: int) -> str:
        # deposit(uint256 assets, address receiver)
        return build_calldata("0x6e553f65", ["uint256", "address"], [amount, self.wallet_address])

    def unstake_calldata(self, amount: int) -> str:
        # requestRedeem(uint256 shares, address controller, address owner)
        return build_calldata(
            "0x7d41c86e",
            ["uint256", "address", "address"],
            [amount, self.wallet_address, self.wallet_address]
        )

    def claim_calldata(self, request_id: int) -> str:
        # redeem(uint256[] requestIds, address receiver)
        return build_calldata("0x492e47d2", ["uint256[]", "address"], [[request_id], self.wallet_address])

    async def find_claimable_request(self) -> int | None:
        async with AprioriClient(self.account.proxy) as client:
            request = await client.find_claimable_request(self.wallet_address)
        return int(request["id"]) if request else None

    async def claim(self) -> tuple[bool, str]:
        try:
            request_id = await self.find_claimable_request()
        except APIClientError as e:
            await self.logger_msg(
                msg=f"Failed to check withdrawal requests: {e}",
                type_msg="error", address=self.wallet_address, method_name="claim"
            )
            return False, str(e)

        if request_id is None:
            await self.logger_msg(
                msg="No claimable withdrawal requests at this time",
                type_msg="warning", address=self.wallet_address
            )
            return False, "Nothing to claim"

        tx_params = await self.build_transaction_params(
            to=self.CONTRACT_ADDRESS,
            gas=self.CLAIM_GAS,
            data=self.claim_calldata(request_id)
        )
        return await self.execute_transaction(
            tx_params, f"Claim withdrawal request {request_id} on {self.protocol}"
        )

    async def after_unstake(self, amount: int) -> None:
        await self.logger_msg(
            msg=f"Waiting {APRIORI_CLAIM_WAIT} seconds before checking claim status",
            type_msg="info", address=self.wallet_address
        )
        await random_sleep(self.wallet_address, APRIORI_CLAIM_WAIT, APRIORI_CLAIM_WAIT)
        await self.claim()
