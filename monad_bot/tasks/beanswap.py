import random
import time

from monad_bot.models import Token, MON, WMON, BeanswapRouterContract
from monad_bot.tasks.pair_swap import BasePairSwapModule
from monad_bot.wallet import MAX_UINT256


class BeanswapModule(BasePairSwapModule):
    TOKENS = {
        "MON": MON,
        "WMON": WMON,
        "USDC": Token(name="USDC", address="0x62534E4bBD6D9ebAC0ac99aeaa0aa48E56372df0", decimals=6),
        "BEAN": Token(name="BEAN", address="0x268E4E24E0051EC27b3D27A95977E71cE6875a05"),
        "JAI": Token(name="JAI", address="0x70F893f65E3C1d7f82aad72f71615eb220b74D10"),
    }
    BALANCE_RETRIES = 1
    SLIPPAGE_PERCENT = 95
    DEADLINE_SECONDS = 6 * 3600
    GAS_RANGE = (250_000, 350_000)

    @property
    def dex_name(self) -> str:
        return "Beanswap"

    @staticmethod
    def build_path(token_a: Token, token_b: Token) -> list[str]:
        return [
            WMON.address if token.native else token.address
            for token in (token_a, token_b)
        ]

    async def get_amount_out(self, router, amount: int, path: list[str]) -> int | None:
        try:
            amounts = await router.functions.getAmountsOut(
                amount, [self._get_checksum_address(address) for address in path]
            ).call()
            return amounts[-1]
        except Exception as e:
            await self.logger_msg(
                msg=f"Not enough liquidity for {path[0]} -> {path[-1]}: {e}",
                type_msg="warning", address=self.wallet_address, method_name="get_amount_out"
            )
            return None

    async def swap_tokens(self, token_a: Token, token_b: Token, amount: int) -> bool:
        router_contract = BeanswapRouterContract()

        if not token_a.native:
            approved, approve_result = await self._check_and_approve_token(
                token_a.address, router_contract.address, amount, MAX_UINT256
            )
            if not approved:
                await self.logger_msg(
                    msg=f"Failed to approve {token_a.name}: {approve_result}",
                    type_msg="error", address=self.wallet_address
                )
                return False

        router = await self.get_contract(router_contract)
        path = [self._get_checksum_address(address) for address in self.build_path(token_a, token_b)]

        expected_out = await self.get_amount_out(router, amount, path)
        if expected_out is None:
            return False
        min_amount_out = expected_out * self.SLIPPAGE_PERCENT // 100

        deadline = int(time.time()) + self.DEADLINE_SECONDS
        gas = random.randint(*self.GAS_RANGE)

        if token_a.native:
            function = router.functions.swapExactETHForTokens(
                min_amount_out, path, self.wallet_address, deadline
            )
            value = amount
        elif token_b.native:
            function = router.functions.swapExactTokensForETH(
                amount, min_amount_out, path, self.wallet_address, deadline
            )
            value = 0
        else:
            function = router.functions.swapExactTokensForTokens(
                amount, min_amount_out, path, self.wallet_address, deadline
            )
            value = 0

        tx_params = await self.build_transaction_params(function, value=value, gas=gas)
        status, _ = await self.execute_transaction(
            tx_params, f"Swap {token_a.name} -> {token_b.name} on {self.dex_name}"
        )
        return status
