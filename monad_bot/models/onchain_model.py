import asyncio
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar


class ContractError(Exception):
    """Base exception for contract-related errors"""


@dataclass(slots=True)
class BaseContract:
    address: str
    abi_file: str = "erc_20.json"

    _abi_cache: ClassVar[dict[str, tuple[list[dict[str, Any]], float]]] = {}
    _cache_lock: ClassVar[asyncio.Lock] = asyncio.Lock()
    _abi_path: ClassVar[Path] = Path(__file__).parent.parent.parent.absolute() / "abi"
    CACHE_TTL: ClassVar[int] = 3600

    async def get_abi(self) -> list[dict[str, Any]]:
        async with self._cache_lock:
            await self._validate_cache()
            return self._abi_cache[self.abi_file][0]

    async def _validate_cache(self) -> None:
        current_time = time.time()
        if (cached := self._abi_cache.get(self.abi_file)) and (current_time - cached[1]) < self.CACHE_TTL:
            return
        await self._load_abi_file(current_time)

    async def _load_abi_file(self, timestamp: float) -> None:
        file_path = self._abi_path / self.abi_file
        try:
            content = await asyncio.to_thread(file_path.read_bytes)
            abi_data = json.loads(content)
            if not isinstance(abi_data, list):
                raise ContractError(f"Invalid ABI structure in {file_path}")
            self._abi_cache[self.abi_file] = (abi_data, timestamp)
        except FileNotFoundError as e:
            raise ContractError(f"ABI file not found: {file_path}") from e
        except json.JSONDecodeError as e:
            raise ContractError(f"Invalid JSON in ABI file: {file_path}") from e


@dataclass(slots=True)
class ERC20Contract(BaseContract):
    address: str = ""
    abi_file: str = "erc_20.json"


@dataclass(slots=True)
class WMONContract(BaseContract):
    address: str = "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701"
    abi_file: str = "wmon.json"


@dataclass(slots=True)
class BeanswapRouterContract(BaseContract):
    address: str = "0xCa810D095e90Daae6e867c19DF6D9A8C56db2c89"
    abi_file: str = "uniswap_v2_router.json"


@dataclass(slots=True)
class UniswapRouterContract(BaseContract):
    address: str = "0xCa810D095e90Daae6e867c19DF6D9A8C56db2c89"
    abi_file: str = "uniswap_v2_router.json"


@dataclass(slots=True)
class MonorailRouterContract(BaseContract):
    address: str = "0xC995498c22a012353FAE7eCC701810D673E25794"
    abi_file: str = "uniswap_v2_router.json"


@dataclass(slots=True)
class AmbientDexContract(BaseContract):
    address: str = "0x88B96aF200c8a9c35442C8AC6cd3D22695AaE4F0"
    abi_file: str = "ambient_dex.json"
