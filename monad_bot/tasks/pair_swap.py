import asyncio
import random
from abc import ABC, abstractmethod

from monad_bot.models import Token, MON
from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import get_random_amount, from_units, to_units
from configs import PERCENT_TRANSACTION


class BasePairSwapModule(BaseMonadModule, ABC):
    """
    Random pair swap cycles shared by the DEX modules.

    A cycle swaps A -> B, sleeps, then swaps B back to A. Tokens below the
    minimum balance are topped up from MON first.
    """
    TOKENS: dict[str, Token] = {}
    MIN_TOKEN_BALANCE = "0.0001"
    MIN_MON_FOR_TOP_UP = "0.001"
    TO_NATIVE_SHARE = 99
    BALANCE_RETRIES = 3
    BALANCE_RETRY_DELAY = 5

    @property
    @abstractmethod
    def dex_name(self) -> str:
        pass

    @abstractmethod
    async def swap_tokens(self, token_a: Token, token_b: Token, amount: int) -> bool:
        pass

    def adjust_amount(self, amount: int, token: Token) -> int:
        return amount

    async def get_balance(self, token: Token) -> int:
        for attempt in range(1, self.BALANCE_RETRIES + 1):
            try:
                return await self.get_token_balance(token)
            except Exception as e:
                await self.logger_msg(
                    msg=f"Error fetching {token.name} balance (attempt {attempt}/{self.BALANCE_RETRIES}): {e}",
                    type_msg="warning", address=self.wallet_address, method_name="get_balance"
                )
                if attempt == self.BALANCE_RETRIES:
                    raise
                await asyncio.sleep(self.BALANCE_RETRY_DELAY)

    async def calculate_amount(self, token: Token, to_native: bool = False) -> int:
        balance = await self.get_balance(token)

        if to_native:
            amount = balance * self.TO_NATIVE_SHARE // 100
        else:
            amount = get_random_amount(
                balance, PERCENT_TRANSACTION, to_units(self.MIN_TOKEN_BALANCE, token.decimals)
            )
        return self.adjust_amount(amount, token)

    def random_pair(self, exclude: Token | None = None) -> tuple[Token, Token] | None:
        tokens = [token for token in self.TOKENS.values() if exclude is None or token.name != exclude.name]
        if len(tokens) < 2:
            return None
        token_a, token_b = random.sample(tokens, 2)
        return token_a, token_b

    def _is_wrap(self, token_a: Token, token_b: Token) -> bool:
        return token_a.native and token_b.name == "WMON"

    def _is_unwrap(self, token_a: Token, token_b: Token) -> bool:
        return token_a.name == "WMON" and token_b.native

    async def swap(self, token_a: Token, token_b: Token, amount: int) -> bool:
        try:
            if "WMON" in self.TOKENS:
                if self._is_wrap(token_a, token_b):
                    status, _ = await self.wrap(amount, 500_000)
                    return status
                if self._is_unwrap(token_a, token_b):
                    status, _ = await self.unwrap(amount, 500_000)
                    return status

            await self.logger_msg(
                msg=f"Swap {from_units(amount, token_a.decimals):.6f} {token_a.name} -> {token_b.name} on {self.dex_name}",
                type_msg="info", address=self.wallet_address
            )
            return await self.swap_tokens(token_a, token_b, amount)

        except Exception as e:
            error_msg = await self._analyze_transaction_error(e)
            await self.logger_msg(
                msg=f"Error swapping {token_a.name} -> {token_b.name}: {error_msg}",
                type_msg="error", address=self.wallet_address, method_name="swap"
            )
            return False

    async def top_up(self, token: Token) -> bool:
        await self.logger_msg(
            msg=f"Balance of {token.name} is too low, swapping MON to {token.name}",
            type_msg="warning", address=self.wallet_address
        )

        mon_balance = await self.get_balance(MON)
        if mon_balance < to_units(self.MIN_MON_FOR_TOP_UP):
            await self.logger_msg(
                msg="MON balance too low to perform swap",
                type_msg="error", address=self.wallet_address
            )
            return False

        amount = await self.calculate_amount(MON)
        return await self.swap(MON, token, amount)

    async def ensure_balance(self, token: Token) -> bool:
        balance = await self.get_balance(token)
        await self.logger_msg(
            msg=f"Balance of {token.name}: {from_units(balance, token.decimals):.6f}",
            type_msg="info", address=self.wallet_address
        )

        if balance >= to_units(self.MIN_TOKEN_BALANCE, token.decimals):
            return True

        if token.native:
            await self.logger_msg(
                msg="MON balance too low to perform transaction",
                type_msg="warning", address=self.wallet_address
            )
            return False

        return await self.top_up(token)

    async def retry_with_different_pair(self, exclude: Token) -> bool:
        pair = self.random_pair(exclude)
        if pair is None:
            await self.logger_msg(
                msg="Not enough valid tokens to try again",
                type_msg="warning", address=self.wallet_address
            )
            return False

        token_a, token_b = pair
        await self.logger_msg(
            msg=f"Trying again with pair: {token_a.name} -> {token_b.name}",
            type_msg="info", address=self.wallet_address
        )

        if not await self.ensure_balance(token_a):
            return False

        amount = await self.calculate_amount(token_a, token_b.native)
        return await self.swap(token_a, token_b, amount)

    async def perform_cycle(self, cycle: int) -> bool:
        token_a, token_b = self.random_pair()
        await self.logger_msg(
            msg=f"Cycle {cycle}/{self.config.cycles}: selected pair {token_a.name} -> {token_b.name}",
            type_msg="info", address=self.wallet_address
        )

        if not await self.ensure_balance(token_a):
            return await self.retry_with_different_pair(token_a)

        amount = await self.calculate_amount(token_a, token_b.native)
        if not await self.swap(token_a, token_b, amount):
            return await self.retry_with_different_pair(token_a)

        await self.sleep_between()

        if not await self.ensure_balance(token_b):
            await self.logger_msg(
                msg="Cannot swap back, but the initial transaction was successful",
                type_msg="warning", address=self.wallet_address
            )
            return True

        reverse_amount = await self.calculate_amount(token_b, token_a.native)
        if not await self.swap(token_b, token_a, reverse_amount):
            await self.logger_msg(
                msg=f"Reverse swap {token_b.name} -> {token_a.name} failed",
                type_msg="warning", address=self.wallet_address
            )
        return True

    async def run(self) -> tuple[bool, str]:
        await self.log_balance()
        completed = 0

        for cycle in range(1, self.config.cycles + 1):
            try:
                success = await self.perform_cycle(cycle)
            except Exception as e:
                error_msg = await self._analyze_transaction_error(e)
                await self.logger_msg(
                    msg=f"Swap cycle error: {error_msg}",
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

            if cycle < self.config.cycles:
                await self.sleep_between(multiplier=2)

        message = f"Completed {completed}/{self.config.cycles} {self.dex_name} cycles"
        await self.logger_msg(
            msg=message, type_msg="success" if completed else "warning", address=self.wallet_address
        )
        return completed > 0, message
