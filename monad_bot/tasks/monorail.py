import asyncio

from monad_bot.api import MonorailClient
from monad_bot.exceptions.api_exceptions import APIServerSideError
from monad_bot.models import Token, MON, WMON, MonorailRouterContract
from monad_bot.tasks.pair_swap import BasePairSwapModule
from monad_bot.utils import from_units
from monad_bot.wallet import MAX_UINT256
from configs import MAX_RETRY_ATTEMPTS, RETRY_SLEEP_RANGE


class MonorailModule(BasePairSwapModule):
    TOKENS = {
        "MON": MON,
        "WMON": WMON,
        "USDC": Token(name="USDC", address="0xf817257fed379853cde0fa4f97ab987181b1e5ea", decimals=6),
        "WETH": Token(name="WETH", address="0xb5a30b0fdc5ea94a52fdc42e3e9760cb8449fb37"),
    }
    GAS_LIMIT = 500_000

    @property
    def dex_name(self) -> str:
        return "Monorail"

    @staticmethod
    def is_server_error(error: Exception) -> bool:
        if isinstance(error, APIServerSideError):
            return True
        error_str = str(error)
        return any(marker in error_str for marker in ("SERVER_ERROR", "503", "bad response"))

    @staticmethod
    def parse_value(value: str | int | None) -> int:
        if value is None or value == "":
            return 0
        if isinstance(value, int):
            return value
        return int(value, 16) if value.lower().startswith("0x") else int(value)

    async def with_retry(self, operation, operation_name: str):
        """Retries ``operation`` on server errors only; anything else propagates."""
        for attempt in range(1, MAX_RETRY_ATTEMPTS + 1):
            try:
                return await operation()
            except Exception as e:
                if not self.is_server_error(e) or attempt == MAX_RETRY_ATTEMPTS:
                    raise
                await self.logger_msg(
                    msg=f"{operation_name} failed with server error (attempt {attempt}/{MAX_RETRY_ATTEMPTS}), retrying",
                    type_msg="warning", address=self.wallet_address, method_name="with_retry"
                )
                await asyncio.sleep(RETRY_SLEEP_RANGE[0])

    async def get_quote(self, token_a: Token, token_b: Token, amount: int) -> dict:
        async with MonorailClient(self.account.proxy) as client:
            return await client.get_quote(
                amount=format(from_units(amount, token_a.decimals), "f"),
                from_token=self.ZERO_ADDRESS if token_a.native else token_a.address,
                to_token=self.ZERO_ADDRESS if token_b.native else token_b.address,
                sender=self.wallet_address
            )

    async def swap_tokens(self, token_a: Token, token_b: Token, amount: int) -> bool:
        router_address = MonorailRouterContract().address

        async def approve() -> tuple[bool, str]:
            approved, result = await self._check_and_approve_token(
                token_a.address, router_address, amount, MAX_UINT256
            )
            if not approved and self.is_server_error(Exception(result)):
                raise APIServerSideError(result)
            return approved, result

        if not token_a.native:
            approved, approve_result = await self.with_retry(approve, f"Approving {token_a.name}")
            if not approved:
                await self.logger_msg(
                    msg=f"Cannot approve token {token_a.name}: {approve_result}",
                    type_msg="error", address=self.wallet_address
                )
                return False

        transaction = await self.with_retry(
            lambda: self.get_quote(token_a, token_b, amount),
            "Getting Monorail quote"
        )

        async def send_swap() -> bool:
            tx_params = await self.build_transaction_params(
                to=transaction["to"],
                value=self.parse_value(transaction.get("value")) if token_a.native else 0,
                data=transaction["data"],
                gas=self.GAS_LIMIT
            )
            status, result = await self.execute_transaction(
                tx_params, f"Swap {token_a.name} -> {token_b.name} on {self.dex_name}"
            )
            if not status and self.is_server_error(Exception(result)):
                raise APIServerSideError(result)
            return status

        return await self.with_retry(send_swap, f"Executing swap {token_a.name} -> {token_b.name}")
