import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import aiofiles


class FaucetStatusStore:
    """
    JSON file keeping the last faucet claim per address.

    Layout: ``{address: {"last_faucet": ISO-8601, "ip": str | null}}``.
    """
    _lock = asyncio.Lock()

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}

        async with aiofiles.open(self.path, 'r', encoding='utf-8') as file:
            content = await file.read()

        if not content.strip():
            return {}

        data = json.loads(content)
        return data if isinstance(data, dict) else {}

    async def get(self, address: str) -> dict[str, Any] | None:
        return (await self.load()).get(address.lower())

    async def last_claim(self, address: str) -> datetime | None:
        record = await self.get(address)
        if not record or not record.get("last_faucet"):
            return None
        claimed_at = datetime.fromisoformat(record["last_faucet"])
        if claimed_at.tzinfo is None:
            claimed_at = claimed_at.replace(tzinfo=timezone.utc)
        return claimed_at

    async def is_on_cooldown(
        self,
        address: str,
        hours: float,
        now: datetime | None = None
    ) -> bool:
        claimed_at = await self.last_claim(address)
        if claimed_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now - claimed_at < timedelta(hours=hours)

    async def save_claim(
        self,
        address: str,
        ip: str | None = None,
        claimed_at: datetime | None = None
    ) -> None:
        claimed_at = claimed_at or datetime.now(timezone.utc)

        async with self._lock:
            data = await self.load()
            data[address.lower()] = {
                "last_faucet": claimed_at.isoformat(),
                "ip": ip,
            }

            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, 'w', encoding='utf-8') as file:
                await file.write(json.dumps(data, indent=2))
