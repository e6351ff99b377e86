import random
import time
from typing import Self

from monad_bot.exceptions.custom_exceptions import WalletError
from monad_bot.models import WMON_ADDRESS, UniswapRouterContract
from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import random_sleep, from_units, to_units
from configs import MONAD_RPCS, UNISWAP_SWAP_RANGE, UNISWAP_PAUSE_RANGE


class UniswapModule(BaseMonadModule):
    TOKENS = {
        "DAC": "0x0f0bdebf0f83cd1ee3974779bcb7315f9808c714",
        "USDT": "0x88b8e2161dedc77ef4ab7585569d2415a1c1055d",
        "WETH": "0x836047a99e11f376522b447bffb6e3495dd0637c",
        "MUK": "0x989d38aeed8408452f0273c7d4a17fef20878e62",
        "USDC": "0xf817257fed379853cDe0fa4F97AB987181B1E5Ea",
        "CHOG": "0xE0590015A873bF326bd645c3E1266d4db41C4E6B",
    }
    GAS_LIMIT = 210_000
    DEADLINE_SECONDS = 10 * 60

    async def __aenter__(self) -> Self:
        await super().__aenter__()
        try:
            await self.connect()
        except WalletError:
            await self.close()
            raise
        return self

    async def connect(self) -> str:
        for rpc_url in MONAD_RPCS:
            try:
                await self.switch_rpc(rpc_url)
                await self.logger_msg(
                    msg=f"Connected to {rpc_url}", type_msg="info", address=self.wallet_address
                )
                return rpc_url
            except Exception as e:
                await self.logger_msg(
                    msg=f"Failed to connect to {rpc_url}, trying another: {e}",
                    type_msg="warning", address=self.wallet_address, method_name="connect"
                )
        raise WalletError("Unable to connect to any Monad RPC")

    @staticmethod
    def random_mon_amount() -> int:
        return to_units(f"{random.uniform(*UNISWAP_SWAP_RANGE):.6f}")

    def _deadline(self) -> int:
        return int(time.time()) + self.DEADLINE_SECONDS

    async def log_balances(self) -> None:
        mon_balance = await self.eth.get_balance(self.wallet_address)
        wrapped_balance = await self.token_balance(WMON_ADDRESS)
        await self.logger_msg(
            msg=f"MON: {from_units(mon_balance):.6f} | WETH: {from_units(wrapped_balance):.6f}",
            type_msg="info", address=self.wallet_address
        )

    async def swap_mon_for_token(self, symbol: str, token_address: str, amount: int) -> bool:
        router = await self.get_contract(UniswapRouterContract())
        try:
            tx_params = await self.build_transaction_params(
                router.functions.swapExactETHForTokens(
                    0,
                    [self._get_checksum_address(WMON_ADDRESS), self._get_checksum_address(token_address)],
                    self.wallet_address,
                    self._deadline()
                ),
                value=amount,
                gas=self.GAS_LIMIT
            )
            status, _ = await self.execute_transaction(
                tx_params, f"Swap {from_units(amount):.6f} MON -> {symbol}"
            )
            return status
        except Exception as e:
            await self.logger_msg(
                msg=f"Failed swap MON -> {symbol}: {await self._analyze_transaction_error(e)}",
                type_msg="error", address=self.wallet_address, method_name="swap_mon_for_token"
            )
            return False

    async def swap_token_for_mon(self, symbol: str, token_address: str) -> bool:
        balance = await self.token_balance(token_address)
        if balance == 0:
            await self.logger_msg(
                msg=f"No balance {symbol}, skip", type_msg="info", address=self.wallet_address
            )
            return False

        router_contract = UniswapRouterContract()
        approved, approve_result = await self._check_and_approve_token(
            token_address, router_contract.address, balance
        )
        if not approved:
            await self.logger_msg(
                msg=f"Failed to approve {symbol}: {approve_result}",
                type_msg="error", address=self.wallet_address
            )
            return False

        router = await self.get_contract(router_contract)
        try:
            tx_params = await self.build_transaction_params(
                router.functions.swapExactTokensForETH(
                    balance,
                    0,
                    [self._get_checksum_address(token_address), self._get_checksum_address(WMON_ADDRESS)],
                    self.wallet_address,
                    self._deadline()
                ),
                gas=self.GAS_LIMIT
            )
            status, _ = await self.execute_transaction(tx_params, f"Swap {symbol} -> MON")
        except Exception as e:
            await self.logger_msg(
                msg=f"Failed swap {symbol} -> MON: {await self._analyze_transaction_error(e)}",
                type_msg="error", address=self.wallet_address, method_name="swap_token_for_mon"
            )
            return False

        await random_sleep(self.wallet_address, *UNISWAP_PAUSE_RANGE)
        return status

    async def run_cycle(self, cycle: int) -> int:
        await self.logger_msg(
            msg=f"Uniswap cycle {cycle}/{self.config.cycles}",
            type_msg="info", address=self.wallet_address
        )
        await self.log_balances()

        swaps = 0
        for symbol, token_address in self.TOKENS.items():
            if await self.swap_mon_for_token(symbol, token_address, self.random_mon_amount()):
                swaps += 1
            await random_sleep(self.wallet_address, *UNISWAP_PAUSE_RANGE)

        await self.logger_msg(
            msg="Swapping all tokens back to MON", type_msg="info", address=self.wallet_address
        )
        for symbol, token_address in self.TOKENS.items():
            if await self.swap_token_for_mon(symbol, token_address):
                swaps += 1

        return swaps

    async def run(self) -> tuple[bool, str]:
        await self.log_balance()
        total_swaps = 0

        try:
            for cycle in range(1, self.config.cycles + 1):
                total_swaps += await self.run_cycle(cycle)
                if cycle < self.config.cycles:
                    await self.sleep_between()

        except Exception as e:
            error_msg = await self._analyze_transaction_error(e)
            await self.logger_msg(
                msg=f"Account processing failed: {error_msg}",
                type_msg="error", address=self.wallet_address, method_name="run"
            )
            return False, error_msg

        message = f"Completed {self.config.cycles} Uniswap cycles with {total_swaps} successful swaps"
        return total_swaps > 0, message
