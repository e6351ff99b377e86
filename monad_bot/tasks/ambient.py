import random

from eth_abi import encode

from monad_bot.models import Token, MON, AmbientDexContract
from monad_bot.tasks.pair_swap import BasePairSwapModule
from monad_bot.utils import round_amount
from monad_bot.wallet import MAX_UINT256


class AmbientModule(BasePairSwapModule):
    TOKENS = {
        "MON": MON,
        "USDT": Token(name="USDT", address="0x88b8E2161DEDC77EF4ab7585569D2415a1C1055D", decimals=6),
    }
    BALANCE_RETRIES = 5
    BALANCE_RETRY_DELAY = 5
    GAS_RANGE = (250_000, 350_000)

    SWAP_CALLPATH = 1
    POOL_INDEX = 36000
    TIP = 0
    # CrocSwap limit prices: sell side floor and buy side ceiling
    LIMIT_PRICE_SELL = 1
    LIMIT_PRICE_BUY = 0x010001

    @property
    def dex_name(self) -> str:
        return "Ambient"

    def adjust_amount(self, amount: int, token: Token) -> int:
        return round_amount(amount, token.decimals)

    def encode_swap(
        self,
        base: str,
        quote: str,
        is_buy: bool,
        in_base_qty: bool,
        qty: int,
        limit_price: int,
        min_out: int,
        reserve_flags: int
    ) -> bytes:
        return encode(
            ["address", "address", "uint256", "bool", "bool", "uint128", "uint16", "uint128", "uint128", "uint8"],
            [
                self._get_checksum_address(base),
                self._get_checksum_address(quote),
                self.POOL_INDEX,
                is_buy,
                in_base_qty,
                qty,
                self.TIP,
                limit_price,
                min_out,
                reserve_flags,
            ]
        )

    def build_swap_command(self, token_a: Token, token_b: Token, amount: int) -> bytes:
        if token_a.native:
            return self.encode_swap(
                base=self.ZERO_ADDRESS,
                quote=token_b.address,
                is_buy=False,
                in_base_qty=True,
                qty=amount,
                limit_price=self.LIMIT_PRICE_SELL,
                min_out=amount * 95 // 100,
                reserve_flags=0
            )

        if token_b.native:
            base, quote, is_buy = self.ZERO_ADDRESS, token_a.address, False
        else:
            base, quote, is_buy = token_b.address, token_a.address, True

        return self.encode_swap(
            base=base,
            quote=quote,
            is_buy=is_buy,
            in_base_qty=False,
            qty=amount,
            limit_price=self.LIMIT_PRICE_BUY if is_buy else self.LIMIT_PRICE_SELL,
            min_out=amount * 97 // 100,
            reserve_flags=2
        )

    async def swap_tokens(self, token_a: Token, token_b: Token, amount: int) -> bool:
        dex_contract = AmbientDexContract()
        amount = round_amount(amount, token_a.decimals)

        if not token_a.native:
            approved, approve_result = await self._check_and_approve_token(
                token_a.address, dex_contract.address, amount, MAX_UINT256
            )
            if not approved:
                await self.logger_msg(
                    msg=f"Cannot approve token {token_a.name}: {approve_result}",
                    type_msg="error", address=self.wallet_address
                )
                return False

        dex = await self.get_contract(dex_contract)
        command = self.build_swap_command(token_a, token_b, amount)

        tx_params = await self.build_transaction_params(
            dex.functions.userCmd(self.SWAP_CALLPATH, command),
            value=amount if token_a.native else 0,
            gas=random.randint(*self.GAS_RANGE)
        )
        status, _ = await self.execute_transaction(
            tx_params, f"Swap {token_a.name} -> {token_b.name} on {self.dex_name}"
        )
        return status
