from monad_bot.exceptions.custom_exceptions import InsufficientFundsError
from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import get_random_amount, to_units
from configs import PERCENT_TRANSACTION


class BaseWrapModule(BaseMonadModule):
    """MON -> WMON -> MON cycles on the wrapped MON contract."""
    GAS_LIMIT = 500_000
    SLEEP_BETWEEN_CYCLES = False
    MIN_AMOUNT: int | None = None

    async def run_cycle(self, cycle: int) -> bool:
        await self.logger_msg(
            msg=f"Cycle {cycle}/{self.config.cycles}",
            type_msg="info", address=self.wallet_address
        )
        balance = await self.eth.get_balance(self.wallet_address)
        amount = get_random_amount(balance, PERCENT_TRANSACTION, self.MIN_AMOUNT)

        status, _ = await self.wrap(amount, self.GAS_LIMIT)
        if not status:
            return False

        status, _ = await self.unwrap(amount, self.GAS_LIMIT)
        return status

    async def run(self) -> tuple[bool, str]:
        await self.log_balance()
        completed = 0

        for cycle in range(1, self.config.cycles + 1):
            try:
                success = await self.run_cycle(cycle)
            except InsufficientFundsError as e:
                await self.logger_msg(
                    msg=str(e), type_msg="error", address=self.wallet_address, method_name="run"
                )
                success = False
            except Exception as e:
                error_msg = await self._analyze_transaction_error(e)
                await self.logger_msg(
                    msg=f"Error in cycle {cycle}: {error_msg}",
                    type_msg="error", address=self.wallet_address, method_name="run"
                )
                success = False

            if success:
                completed += 1
            else:
                await self.logger_msg(
                    msg=f"Cycle {cycle} failed, moving to the next cycle",
                    type_msg="warning", address=self.wallet_address
                )

            if self.SLEEP_BETWEEN_CYCLES and cycle < self.config.cycles:
                await self.sleep_between()

        message = f"Completed {completed}/{self.config.cycles} cycles"
        await self.logger_msg(
            msg=message,
            type_msg="success" if completed else "warning",
            address=self.wallet_address
        )
        return completed > 0, message


class RubicModule(BaseWrapModule):
    MIN_AMOUNT = to_units("0.0001")


class IzumiModule(BaseWrapModule):
    SLEEP_BETWEEN_CYCLES = True
