from typing import Any, Self

from eth_abi import encode

from monad_bot.wallet import Wallet
from monad_bot.logger import AsyncLogger
from monad_bot.models import Account, Config, WMONContract
from monad_bot.utils import show_trx_log, random_sleep, from_units
from monad_bot.utils.logger_trx import PENDING_PREFIX
from configs import CYCLE_SLEEP_RANGE


def build_calldata(selector: str, types: list[str] | None = None, values: list[Any] | None = None) -> str:
    """Raw calldata: 4-byte selector followed by ABI-encoded arguments."""
    if not types:
        return selector
    return selector + encode(types, values).hex()


class BaseMonadModule(AsyncLogger, Wallet):
    def __init__(self, account: Account, config: Config, rpc_url: str | None = None) -> None:
        Wallet.__init__(self, account.keypair, rpc_url or config.monad_rpc, account.proxy)
        AsyncLogger.__init__(self)
        self.account = account
        self.config = config

    async def __aenter__(self) -> Self:
        await Wallet.__aenter__(self)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Wallet.__aexit__(self, exc_type, exc_val, exc_tb)

    @property
    def explorer_url(self) -> str:
        return self.config.monad_explorer

    async def sleep_between(self, multiplier: int = 1) -> None:
        min_sec, max_sec = CYCLE_SLEEP_RANGE
        await random_sleep(self.wallet_address, min_sec * multiplier, max_sec * multiplier)

    async def _analyze_transaction_error(self, error: Exception) -> str:
        error_str = str(error)

        if "{'code': -32002" in error_str and "timed out" in error_str:
            return "Network timeout: RPC node may be overloaded or unavailable"

        if "insufficient funds" in error_str.lower():
            return "Insufficient MON balance to cover value and gas"

        if "execution reverted" in error_str:
            return "Transaction execution reverted by the blockchain"

        return error_str

    async def execute_transaction(self, tx_params: dict, trx_type: str) -> tuple[bool, str]:
        status, result = await self._process_transaction(tx_params)
        await show_trx_log(self.wallet_address, trx_type, status, self.explorer_url, result)

        if not status and result.startswith(PENDING_PREFIX):
            return False, f"Transaction is pending (timeout). Hash: {result[len(PENDING_PREFIX):]}"
        return status, result

    async def wrap(self, amount: int, gas: int | None = None) -> tuple[bool, str]:
        contract = await self.get_contract(WMONContract())
        tx_params = await self.build_transaction_params(
            contract.functions.deposit(),
            value=amount,
            gas=gas
        )
        return await self.execute_transaction(
            tx_params, f"Wrap {from_units(amount):.6f} MON -> WMON"
        )

    async def unwrap(self, amount: int, gas: int | None = None) -> tuple[bool, str]:
        contract = await self.get_contract(WMONContract())
        tx_params = await self.build_transaction_params(
            contract.functions.withdraw(amount),
            gas=gas
        )
        return await self.execute_transaction(
            tx_params, f"Unwrap {from_units(amount):.6f} WMON -> MON"
        )

    async def log_balance(self, label: str = "Balance") -> int:
        balance = await self.eth.get_balance(self.wallet_address)
        await self.logger_msg(
            msg=f"{label}: {from_units(balance):.6f} MON",
            type_msg="info", address=self.wallet_address
        )
        return balance
