import asyncio
import json
import random
import ssl
from types import TracebackType
from typing import Literal, Any, Self, Type

import aiohttp
import certifi
import ua_generator
from yarl import URL
from better_proxy import Proxy

from monad_bot.exceptions.api_exceptions import (
    APIClientError, APIConnectionError, APITimeoutError,
    APIRateLimitError, APIClientSideError, APIServerSideError,
    APISessionError, APISSLError
)


class BaseAPIClient:
    """
    JSON-over-HTTP client shared by the captcha, quote and status services.

    Every response is returned as ``{"status_code", "url", "text", "data"}``
    where ``data`` is the decoded JSON body or None.
    """
    RETRYABLE_ERRORS = (
        APIServerSideError,
        APIRateLimitError,
        APITimeoutError,
        APISSLError,
        APISessionError,
    )

    def __init__(self, base_url: str, proxy: Proxy | None = None) -> None:
        self.base_url: str = base_url
        self.proxy: Proxy | None = proxy
        self.session: aiohttp.ClientSession | None = None
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._headers: dict[str, str] = self._generate_headers()

    @staticmethod
    def _generate_headers() -> dict[str, str]:
        user_agent = ua_generator.generate(
            device='desktop',
            platform='windows',
            browser='chrome'
        )

        return {
            'accept': 'application/json, text/plain, */*',
            'accept-language': 'en-US;q=0.9,en;q=0.8',
            'sec-ch-ua': user_agent.ch.brands,
            'sec-ch-ua-mobile': user_agent.ch.mobile,
            'sec-ch-ua-platform': user_agent.ch.platform,
            'user-agent': user_agent.text
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(ssl=self._ssl_context, limit=10),
                headers=self._headers
            )
        return self.session

    async def __aenter__(self) -> Self:
        await self._get_session()
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None
    ) -> None:
        await self.close()

    def _build_url(self, method: str | None, url: str | None) -> str:
        if url:
            return str(URL(url))
        if not method:
            raise APIClientError("Either url or method must be provided")
        return str(URL(self.base_url) / method.lstrip('/'))

    @staticmethod
    def _backoff(attempt: int, retry_delay: tuple[float, float]) -> float:
        return random.uniform(*retry_delay) * min(2 ** (attempt - 1), 30)

    @staticmethod
    async def _parse_response(response: aiohttp.ClientResponse) -> dict[str, Any]:
        text = await response.text()
        result = {
            "status_code": response.status,
            "url": str(response.url),
            "text": text,
            "data": None
        }

        if text and text.lstrip()[:1] in ('{', '['):
            try:
                result["data"] = json.loads(text)
            except json.JSONDecodeError:
                result["data"] = None
        return result

    @staticmethod
    def _raise_for_status(result: dict[str, Any]) -> None:
        status_code = result["status_code"]
        if status_code == 429:
            raise APIRateLimitError(f"Too many requests: {status_code}")
        if 400 <= status_code < 500:
            raise APIClientSideError(f"Client error: {status_code}", status_code, result)
        if status_code >= 500:
            raise APIServerSideError(f"Server error: {status_code}", status_code, result)

    async def _request_once(
        self,
        request_type: str,
        target_url: str,
        json_data: dict[str, Any] | None,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: float
    ) -> dict[str, Any]:
        session = await self._get_session()

        try:
            async with session.request(
                method=request_type,
                url=target_url,
                json=json_data,
                params=params,
                headers=headers,
                proxy=self.proxy.as_url if self.proxy else None,
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:
                return await self._parse_response(response)

        except asyncio.TimeoutError as e:
            raise APITimeoutError(f"Request to {target_url} timed out after {timeout} seconds") from e
        except aiohttp.ClientSSLError as e:
            await self.close()
            raise APISSLError(f"SSL error: {e}") from e
        except aiohttp.ClientConnectorError as e:
            raise APIConnectionError(f"Connection error: {e}") from e
        except (aiohttp.ClientOSError, aiohttp.ServerDisconnectedError) as e:
            await self.close()
            raise APISessionError(f"Connection disrupted: {e}") from e

    async def send_request(
        self,
        request_type: Literal["POST", "GET", "PUT"] = "POST",
        method: str | None = None,
        json_data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        url: str | None = None,
        headers: dict[str, str] | None = None,
        verify: bool = True,
        max_retries: int = 3,
        retry_delay: tuple[float, float] = (1.5, 5.0),
        timeout: float = 30.0
    ) -> dict[str, Any]:
        target_url = self._build_url(method, url)

        for attempt in range(1, max_retries + 1):
            try:
                result = await self._request_once(
                    request_type, target_url, json_data, params, headers, timeout
                )
                if verify:
                    self._raise_for_status(result)
                return result

            except self.RETRYABLE_ERRORS as error:
                if attempt == max_retries:
                    if isinstance(error, (APIRateLimitError, APIServerSideError)):
                        raise
                    raise APIServerSideError(
                        f"The request failed after {max_retries} attempts to {target_url}",
                        None,
                        {"error": str(error)}
                    ) from error

                await asyncio.sleep(self._backoff(attempt, retry_delay))

        raise APIServerSideError(f"All {max_retries} attempts to {target_url} have been exhausted")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
