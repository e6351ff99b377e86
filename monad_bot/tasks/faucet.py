import secrets
from pathlib import Path
from typing import Any, Self

import ua_generator
from curl_cffi.requests import AsyncSession

from monad_bot.api import get_captcha_solver, check_proxy
from monad_bot.exceptions.api_exceptions import APIClientError
from monad_bot.exceptions.custom_exceptions import CaptchaError, ConfigurationError
from monad_bot.models import Account, Config
from monad_bot.tasks.base import BaseMonadModule
from monad_bot.utils import FaucetStatusStore
from configs import FAUCET_COOLDOWN_HOURS


STATUS_PATH = Path(__file__).parent.parent.parent.absolute() / "config" / "data" / "status.json"


class FaucetModule(BaseMonadModule):
    CLAIM_URL = "https://testnet.monad.xyz/api/claim"

    def __init__(
        self,
        account: Account,
        config: Config,
        status_store: FaucetStatusStore | None = None
    ) -> None:
        super().__init__(account, config)
        self.status_store = status_store or FaucetStatusStore(STATUS_PATH)
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> Self:
        await super().__aenter__()
        proxy_url = self.account.proxy.as_url if self.account.proxy else None
        self.session = AsyncSession(
            impersonate="chrome110",
            timeout=30,
            proxies={'http': proxy_url, 'https': proxy_url} if proxy_url else None
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
        await super().__aexit__(exc_type, exc_val, exc_tb)

    @staticmethod
    def _claim_headers() -> dict[str, str]:
        user_agent = ua_generator.generate(device='desktop', platform='windows', browser='chrome')
        return {
            'accept': '*/*',
            'content-type': 'application/json',
            'origin': 'https://testnet.monad.xyz',
            'referer': 'https://testnet.monad.xyz/',
            'user-agent': user_agent.text,
        }

    async def solve_captcha(self) -> str:
        async with get_captcha_solver(self.config.captcha_type, self.config.captcha_api_key) as solver:
            return await solver.solve_recaptcha(
                self.config.captcha_url, self.config.captcha_website_key
            )

    async def claim(self, recaptcha_token: str) -> dict[str, Any]:
        response = await self.session.post(
            self.CLAIM_URL,
            json={
                "address": self.wallet_address,
                "visitorId": secrets.token_hex(16),
                "recaptchaToken": recaptcha_token,
            },
            headers=self._claim_headers()
        )
        try:
            return response.json()
        except ValueError:
            return {"message": response.text, "status_code": response.status_code}

    async def _current_ip(self) -> str | None:
        try:
            return await check_proxy(self.account.proxy)
        except APIClientError as e:
            await self.logger_msg(
                msg=f"Unable to determine IP address: {e}",
                type_msg="warning", address=self.wallet_address, method_name="_current_ip"
            )
            return None

    async def run(self) -> tuple[bool, str]:
        if await self.status_store.is_on_cooldown(self.wallet_address, FAUCET_COOLDOWN_HOURS):
            last_claim = await self.status_store.last_claim(self.wallet_address)
            message = f"Faucet already claimed at {last_claim:%Y-%m-%d %H:%M} UTC, waiting for the cooldown"
            await self.logger_msg(msg=message, type_msg="warning", address=self.wallet_address)
            return True, message

        await self.logger_msg(
            msg="Solving captcha for the faucet", type_msg="info", address=self.wallet_address
        )

        try:
            recaptcha_token = await self.solve_captcha()
            await self.logger_msg(
                msg="Captcha solved, requesting MON", type_msg="success", address=self.wallet_address
            )

            data = await self.claim(recaptcha_token)
            if data.get("message") != "Success":
                message = f"Faucet claim failed: {data.get('message', data)}"
                await self.logger_msg(
                    msg=message, type_msg="error", address=self.wallet_address, method_name="run"
                )
                return False, message

            await self.status_store.save_claim(self.wallet_address, await self._current_ip())
            await self.logger_msg(
                msg="Successfully claimed MON from the faucet", type_msg="success", address=self.wallet_address
            )
            return True, "Success"

        except (CaptchaError, ConfigurationError, APIClientError) as e:
            await self.logger_msg(
                msg=f"Faucet claim aborted: {e}", type_msg="error", address=self.wallet_address, method_name="run"
            )
            return False, str(e)

        except Exception as e:
            await self.logger_msg(
                msg=f"Faucet error: {e}", type_msg="error", address=self.wallet_address, method_name="run"
            )
            return False, str(e)
