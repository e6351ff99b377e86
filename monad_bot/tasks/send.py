import random

from monad_bot.exceptions.custom_exceptions import ConfigurationError
from monad_bot.models import Account, Config
from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import get_address, to_units, from_units
from configs import AMOUNT_SEND_FEE


class SendModule(BaseMonadModule):
    """Funds an account from the main wallet configured in settings.yaml."""
    GAS_LIMIT = 21_000

    def __init__(self, account: Account, config: Config) -> None:
        if not config.main_wallet_private_key:
            raise ConfigurationError("main_wallet_private_key is not set in settings.yaml")

        main_account = Account(config.main_wallet_private_key, account.proxy, account.index)
        super().__init__(main_account, config)
        self.recipient = get_address(account.keypair)

    @staticmethod
    def random_amount() -> int:
        amount = round(random.uniform(*AMOUNT_SEND_FEE), 6)
        return to_units(amount)

    async def get_gas_price(self) -> int:
        return await self.eth.gas_price

    async def run(self) -> tuple[bool, str]:
        if self.recipient.lower() == self.wallet_address.lower():
            await self.logger_msg(
                msg="Recipient is the main wallet, skipping", type_msg="info", address=self.wallet_address
            )
            return True, "Skipped"

        amount = self.random_amount()
        try:
            balance = await self.eth.get_balance(self.wallet_address)
            if balance < amount:
                message = f"Main wallet balance {from_units(balance):.6f} MON is too low to send {from_units(amount)} MON"
                await self.logger_msg(
                    msg=message, type_msg="error", address=self.wallet_address, method_name="run"
                )
                return False, message

            tx_params = await self.build_transaction_params(
                to=self.recipient,
                value=amount,
                gas=self.GAS_LIMIT,
                gas_price=await self.get_gas_price()
            )
            return await self.execute_transaction(
                tx_params, f"Send {from_units(amount)} MON to {self.recipient}"
            )

        except Exception as e:
            error_msg = await self._analyze_transaction_error(e)
            await self.logger_msg(
                msg=f"Error sending MON: {error_msg}",
                type_msg="error", address=self.wallet_address, method_name="run"
            )
            return False, error_msg
