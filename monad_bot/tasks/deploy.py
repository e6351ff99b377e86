import asyncio
import random
from functools import lru_cache
from pathlib import Path
from typing import Any

from solcx import compile_standard, get_installed_solc_versions, install_solc

from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import from_units, explorer_link
from configs import DEPLOY_WALLETS, SOLC_VERSION, DEPLOY_GAS_RANGE


CONTRACTS_PATH = Path(__file__).parent.parent.parent.absolute() / "contracts" / "contracts.sol"

CONSTRUCTOR_ARGS: dict[str, list[Any]] = {
    "SimpleStorage": [0],
    "Greeter": ["Hello"],
    "DataStore": [123],
}


@lru_cache(maxsize=4)
def compile_contracts(
    source_path: Path = CONTRACTS_PATH,
    solc_version: str = SOLC_VERSION
) -> dict[str, dict[str, Any]]:
    """Compiles every contract in the source file, returns ``{name: {"abi", "bytecode"}}``."""
    if solc_version not in {str(version) for version in get_installed_solc_versions()}:
        install_solc(solc_version)

    compiled = compile_standard(
        {
            "language": "Solidity",
            "sources": {source_path.name: {"content": source_path.read_text(encoding="utf-8")}},
            "settings": {"outputSelection": {"*": {"*": ["abi", "evm.bytecode"]}}},
        },
        solc_version=solc_version,
    )

    return {
        name: {"abi": data["abi"], "bytecode": data["evm"]["bytecode"]["object"]}
        for name, data in compiled["contracts"][source_path.name].items()
    }


def get_constructor_args(contract_name: str) -> list[Any]:
    return list(CONSTRUCTOR_ARGS.get(contract_name, []))


class DeployModule(BaseMonadModule):
    GAS_BUFFER = 1.3
    FEE_BUFFER = 1.3
    COST_BUFFER = 1.2

    def is_selected(self) -> bool:
        return not DEPLOY_WALLETS or self.account.index in DEPLOY_WALLETS

    async def estimate_gas(self, constructor) -> int:
        try:
            estimate = await constructor.estimate_gas({"from": self.wallet_address})
            return int(estimate * self.GAS_BUFFER)
        except Exception as e:
            await self.logger_msg(
                msg=f"Unable to accurately estimate gas: {e}",
                type_msg="warning", address=self.wallet_address, method_name="estimate_gas"
            )
            return random.randint(*DEPLOY_GAS_RANGE)

    async def get_fee(self) -> int:
        latest_block = await self.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas") or await self.eth.gas_price
        return int(base_fee * self.FEE_BUFFER)

    async def deploy(self, contract_name: str, contract_data: dict[str, Any]) -> tuple[bool, str]:
        factory = self.eth.contract(abi=contract_data["abi"], bytecode=contract_data["bytecode"])
        constructor = factory.constructor(*get_constructor_args(contract_name))

        gas = await self.estimate_gas(constructor)
        fee = await self.get_fee()
        cost = int(gas * fee * self.COST_BUFFER)
        balance = await self.eth.get_balance(self.wallet_address)

        await self.logger_msg(
            msg=f"Balance: {from_units(balance):.6f} MON | Estimated cost: {from_units(cost):.6f} MON",
            type_msg="info", address=self.wallet_address
        )

        if balance < cost:
            return False, (
                f"Not enough MON to deploy {contract_name}. "
                f"Needs an additional {from_units(cost - balance):.6f} MON"
            )

        tx_params = await self.build_transaction_params(
            constructor,
            gas=gas,
            maxFeePerGas=fee,
            maxPriorityFeePerGas=fee
        )
        status, result = await self.execute_transaction(tx_params, f"Deploy {contract_name}")
        if not status:
            return False, result

        tx_hash = result if result.startswith("0x") else f"0x{result}"
        receipt = await self.eth.get_transaction_receipt(tx_hash)
        contract_address = receipt["contractAddress"]
        await self.logger_msg(
            msg=f"Contract successfully deployed: {explorer_link(self.explorer_url, 'address', contract_address)}",
            type_msg="success", address=self.wallet_address
        )
        return True, contract_address

    async def run(self) -> tuple[bool, str]:
        if not self.is_selected():
            await self.logger_msg(
                msg=f"Wallet #{self.account.index} is not selected for deployment, skipping",
                type_msg="info", address=self.wallet_address
            )
            return True, "Skipped"

        try:
            contracts = await asyncio.to_thread(compile_contracts)
            contract_name = random.choice(list(contracts))
            await self.logger_msg(
                msg=f"Compiled contracts, deploying {contract_name}",
                type_msg="info", address=self.wallet_address
            )

            status, result = await self.deploy(contract_name, contracts[contract_name])
            if not status:
                await self.logger_msg(
                    msg=result, type_msg="error", address=self.wallet_address, method_name="run"
                )
            return status, result

        except Exception as e:
            error_msg = await self._analyze_transaction_error(e)
            await self.logger_msg(
                msg=f"Contract deployment error: {error_msg}",
                type_msg="error", address=self.wallet_address, method_name="run"
            )
            return False, error_msg
