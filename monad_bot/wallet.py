import asyncio
import random
from typing import Any, Union, Self

import aiohttp
from better_proxy import Proxy
from eth_account import Account
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from pydantic import HttpUrl
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract
from web3.eth import AsyncEth
from web3.types import Nonce, TxParams
from web3.middleware import ExtraDataToPOAMiddleware

from monad_bot.exceptions.custom_exceptions import WalletError
from monad_bot.models.chains import Token
from monad_bot.models.onchain_model import BaseContract, ERC20Contract
from monad_bot.logger import AsyncLogger
from monad_bot.utils.logger_trx import PENDING_PREFIX


logger = AsyncLogger()
Account.enable_unaudited_hdwallet_features()

MAX_UINT256 = 2 ** 256 - 1


class BlockchainError(Exception):
    """Gas estimation or fee lookup failed on the RPC side"""


class Wallet(AsyncWeb3, Account):
    """
    Signing account bound to a Monad RPC.

    Sending goes through ``send_and_verify_transaction`` which returns
    ``(True, tx_hash)``, ``(False, reason)`` or ``(False, "PENDING:<hash>")``
    when the receipt did not arrive in time.
    """
    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
    RECEIPT_TIMEOUT = 60
    MAX_RETRIES = 3

    def __init__(
        self,
        keypair: str,
        rpc_url: Union[HttpUrl, str],
        proxy: Proxy | None = None,
        request_timeout: int = 30
    ) -> None:
        self._proxy = proxy
        self._request_timeout = request_timeout
        self._provider = self._create_provider(rpc_url, proxy, request_timeout)

        super().__init__(self._provider, modules={"eth": AsyncEth})
        self.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        self.keypair = self._initialize_account(keypair)
        self._contracts_cache: dict[str, AsyncContract] = {}
        self._is_closed = False

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._is_closed:
            return

        try:
            await self._provider.disconnect()
        except Exception as e:
            await logger.logger_msg(
                msg=f"Error while disconnecting provider: {e}",
                type_msg="warning", method_name="close"
            )
        finally:
            self._contracts_cache.clear()
            self._is_closed = True

    @staticmethod
    def _create_provider(
        rpc_url: Union[HttpUrl, str],
        proxy: Proxy | None,
        request_timeout: int
    ) -> AsyncHTTPProvider:
        return AsyncHTTPProvider(
            str(rpc_url),
            request_kwargs={
                "proxy": proxy.as_url if proxy else None,
                "timeout": aiohttp.ClientTimeout(total=request_timeout)
            }
        )

    async def switch_rpc(self, rpc_url: str) -> int:
        """Points the wallet at another RPC and returns its chain id."""
        await self._provider.disconnect()
        self._provider = self._create_provider(rpc_url, self._proxy, self._request_timeout)
        self.provider = self._provider
        self._contracts_cache.clear()
        return await self.eth.chain_id

    @staticmethod
    def _initialize_account(input_str: str) -> Account:
        input_str = input_str.strip()
        key_body = input_str.removeprefix('0x')

        if len(key_body) == 64 and all(c in '0123456789abcdefABCDEF' for c in key_body):
            try:
                return Account.from_key('0x' + key_body)
            except ValueError as e:
                raise WalletError(f"Invalid private key: {e}") from e

        words = input_str.split()
        if len(words) in (12, 24):
            try:
                return Account.from_mnemonic(' '.join(words))
            except ValueError as e:
                raise WalletError(f"Invalid mnemonic phrase: {e}") from e

        raise WalletError("Expected a 64-character hex private key or a 12/24 word mnemonic")

    @property
    def wallet_address(self) -> ChecksumAddress:
        return self.keypair.address

    @property
    async def use_eip1559(self) -> bool:
        try:
            latest_block = await self.eth.get_block('latest')
        except Exception as e:
            await logger.logger_msg(
                msg=f"Error checking EIP-1559 support: {e}", type_msg="warning",
                address=self.wallet_address, method_name="use_eip1559"
            )
            return False
        return 'baseFeePerGas' in latest_block

    @staticmethod
    def _get_checksum_address(address: str) -> ChecksumAddress:
        return AsyncWeb3.to_checksum_address(address)

    async def get_contract(self, contract: Union[BaseContract, str]) -> AsyncContract:
        """Plain addresses are treated as ERC-20 tokens."""
        if isinstance(contract, str):
            contract = ERC20Contract(address=contract)
        if not isinstance(contract, BaseContract):
            raise TypeError("Invalid contract type: expected BaseContract or str")

        address = self._get_checksum_address(contract.address)
        cache_key = f"{address}:{contract.abi_file}"
        if cache_key not in self._contracts_cache:
            self._contracts_cache[cache_key] = self.eth.contract(
                address=address, abi=await contract.get_abi()
            )
        return self._contracts_cache[cache_key]

    async def token_balance(self, token_address: str) -> int:
        contract = await self.get_contract(token_address)
        return await contract.functions.balanceOf(self.wallet_address).call()

    async def get_token_balance(self, token: Token) -> int:
        if token.native or token.address is None:
            return await self.eth.get_balance(self.wallet_address)
        return await self.token_balance(token.address)

    async def get_nonce(self) -> Nonce:
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                return Nonce(await self.eth.get_transaction_count(self.wallet_address, 'pending'))
            except Exception as e:
                if attempt == self.MAX_RETRIES:
                    raise WalletError(f"Failed to get nonce after {self.MAX_RETRIES} attempts") from e
                await logger.logger_msg(
                    msg=f"Failed to get nonce (attempt {attempt}): {e}", type_msg="warning",
                    address=self.wallet_address, method_name="get_nonce"
                )
                await asyncio.sleep(1)

    async def _estimate_gas_params(
        self,
        tx_params: dict,
        gas_buffer: float = 1.2,
        gas_price_buffer: float = 1.05,
        estimate_gas: bool = True,
        set_fees: bool = True
    ) -> dict:
        try:
            if estimate_gas:
                tx_params["gas"] = int(await self.eth.estimate_gas(tx_params) * gas_buffer)

            if not set_fees:
                return tx_params

            if await self.use_eip1559:
                latest_block = await self.eth.get_block('latest')
                base_fee = latest_block['baseFeePerGas']
                priority_fee = await self.eth.max_priority_fee
                tx_params["maxPriorityFeePerGas"] = int(priority_fee * gas_price_buffer)
                tx_params["maxFeePerGas"] = int((base_fee * 2 + priority_fee) * gas_price_buffer)
            else:
                tx_params["gasPrice"] = int(await self.eth.gas_price * gas_price_buffer)

            return tx_params
        except Exception as error:
            raise BlockchainError(f"Failed to estimate gas: {error}") from error

    async def build_transaction_params(
        self,
        contract_function: Any = None,
        to: str = None,
        value: int = 0,
        gas_buffer: float = 1.2,
        gas_price_buffer: float = 1.05,
        gas: int = None,
        gas_price: int = None,
        **kwargs
    ) -> dict:
        """
        Builds a ready-to-sign transaction.

        A given ``gas`` skips estimation, a given ``gas_price`` (or
        ``maxFeePerGas`` in kwargs) skips fee lookup. Without
        ``contract_function`` the transaction goes to ``to`` with ``kwargs``
        such as raw ``data``.
        """
        base_params = {
            "from": self.wallet_address,
            "nonce": await self.get_nonce(),
            "value": value,
            "chainId": await self.eth.chain_id,
            **kwargs
        }
        if gas is not None:
            base_params["gas"] = gas
        if gas_price is not None:
            base_params["gasPrice"] = gas_price

        has_fees = "gasPrice" in base_params or "maxFeePerGas" in base_params

        if contract_function is not None:
            tx_params = await contract_function.build_transaction(base_params)
        elif to is not None:
            tx_params = {**base_params, "to": self._get_checksum_address(to)}
        else:
            raise ValueError("'to' address required when no contract function is given")

        if gas is not None and has_fees:
            return tx_params

        return await self._estimate_gas_params(
            tx_params,
            gas_buffer,
            gas_price_buffer,
            estimate_gas=gas is None,
            set_fees=not has_fees
        )

    async def _check_and_approve_token(
        self,
        token_address: str,
        spender_address: str,
        amount: int,
        approve_amount: int | None = None
    ) -> tuple[bool, str]:
        """Approves ``approve_amount`` (default ``amount``) when the allowance is below ``amount``."""
        try:
            token_contract = await self.get_contract(token_address)
            spender = self._get_checksum_address(spender_address)

            allowance = await token_contract.functions.allowance(self.wallet_address, spender).call()
            if allowance >= amount:
                return True, "Allowance already sufficient"

            approve_params = await self.build_transaction_params(
                token_contract.functions.approve(
                    spender, amount if approve_amount is None else approve_amount
                )
            )
            success, result = await self._process_transaction(approve_params)
            if not success:
                return False, f"Approval failed: {result}"

            return True, result

        except Exception as error:
            return False, f"Error during approval: {error}"

    async def _refresh_nonce(self, transaction: dict) -> None:
        try:
            new_nonce = await self.eth.get_transaction_count(self.wallet_address, 'pending')
        except Exception as error:
            await logger.logger_msg(
                msg=f"Error getting new nonce: {error}", type_msg="error",
                address=self.wallet_address, method_name="_refresh_nonce"
            )
            return

        transaction['nonce'] = max(new_nonce, transaction['nonce'] + 1)
        await logger.logger_msg(
            msg=f"Nonce too low, retrying with nonce {transaction['nonce']}", type_msg="warning",
            address=self.wallet_address, method_name="_refresh_nonce"
        )

    async def _send_signed(self, transaction: dict) -> HexBytes:
        signed = self.keypair.sign_transaction(transaction)
        return await self.eth.send_raw_transaction(signed.raw_transaction)

    async def send_and_verify_transaction(self, transaction: Any) -> tuple[bool, str]:
        last_error: Exception | None = None

        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                tx_hash = await self._send_signed(transaction)
            except Exception as error:
                last_error = error
                error_str = str(error).lower()
                if "nonce too low" in error_str or "nonce_too_small" in error_str:
                    await self._refresh_nonce(transaction)
                if attempt < self.MAX_RETRIES:
                    await asyncio.sleep(random.uniform(1, 3) * (2 ** attempt))
                continue

            try:
                receipt = await asyncio.wait_for(
                    self.eth.wait_for_transaction_receipt(tx_hash),
                    timeout=self.RECEIPT_TIMEOUT
                )
            except (asyncio.TimeoutError, TimeoutError):
                await logger.logger_msg(
                    msg=f"Transaction sent but confirmation timed out. Hash: {tx_hash.hex()}",
                    type_msg="warning", address=self.wallet_address,
                    method_name="send_and_verify_transaction"
                )
                return False, f"{PENDING_PREFIX}{tx_hash.hex()}"

            if receipt["status"] == 1:
                return True, tx_hash.hex()
            return False, f"Transaction reverted. Hash: {tx_hash.hex()}"

        return False, f"Failed to execute transaction after {self.MAX_RETRIES} attempts. Last error: {last_error}"

    async def _process_transaction(self, transaction: TxParams | dict) -> tuple[bool, str]:
        try:
            return await self.send_and_verify_transaction(transaction)
        except Exception as error:
            return False, str(error)
