from typing import Any

from better_proxy import Proxy

from monad_bot.api.base_client import BaseAPIClient
from monad_bot.exceptions.api_exceptions import APIResponseError


class IpifyClient(BaseAPIClient):
    def __init__(self, proxy: Proxy | None = None) -> None:
        super().__init__(base_url="https://api.ipify.org", proxy=proxy)

    async def get_ip(self) -> str:
        response = await self.send_request(
            request_type="GET",
            params={"format": "json"},
            url=self.base_url,
            max_retries=2,
            timeout=15
        )
        data = response.get("data") or {}
        if "ip" not in data:
            raise APIResponseError("ipify returned no ip", response.get("status_code"), response)
        return data["ip"]


async def check_proxy(proxy: Proxy | None) -> str | None:
    async with IpifyClient(proxy) as client:
        return await client.get_ip()


class MonorailClient(BaseAPIClient):
    def __init__(self, proxy: Proxy | None = None) -> None:
        super().__init__(base_url="https://testnet-pathfinder.monorail.xyz/v1", proxy=proxy)

    async def get_quote(
        self,
        amount: str,
        from_token: str,
        to_token: str,
        sender: str,
        slippage: int = 100,
        deadline: int = 60
    ) -> dict[str, Any]:
        response = await self.send_request(
            request_type="GET",
            method="/router/quote",
            params={
                "amount": amount,
                "from": from_token,
                "to": to_token,
                "slippage": slippage,
                "deadline": deadline,
                "source": "fe",
                "sender": sender,
            },
            max_retries=1
        )
        data = response.get("data") or {}
        transaction = (data.get("quote") or {}).get("transaction")
        if not transaction:
            raise APIResponseError(
                f"Monorail quote without transaction: {response.get('text')}",
                response.get("status_code"),
                response
            )
        return transaction


class AprioriClient(BaseAPIClient):
    def __init__(self, proxy: Proxy | None = None) -> None:
        super().__init__(base_url="https://stake-api.apr.io", proxy=proxy)

    async def get_withdrawal_requests(self, address: str) -> list[dict[str, Any]]:
        response = await self.send_request(
            request_type="GET",
            method="/withdrawal_requests",
            params={"address": address},
        )
        data = response.get("data")
        return data if isinstance(data, list) else []

    async def find_claimable_request(self, address: str) -> dict[str, Any] | None:
        for request in await self.get_withdrawal_requests(address):
            if not request.get("claimed") and request.get("is_claimable"):
                return request
        return None
