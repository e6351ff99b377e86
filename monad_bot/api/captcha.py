import asyncio
from typing import Any

from better_proxy import Proxy

from monad_bot.api.base_client import BaseAPIClient
from monad_bot.exceptions.custom_exceptions import CaptchaError, ConfigurationError
from monad_bot.logger import AsyncLogger


class CaptchaSolver(BaseAPIClient):
    """
    Solves reCAPTCHA v2 through a createTask/getTaskResult service.

    Subclasses describe the task payload and where the token lives
    in the finished solution.
    """
    SERVICE_URL: str = ""
    TASK_TYPE: str = ""
    SOLUTION_FIELD: str = ""

    POLL_INTERVAL: float = 10
    POLL_ATTEMPTS: int = 5

    def __init__(self, api_key: str, proxy: Proxy | None = None) -> None:
        if not api_key:
            raise ConfigurationError(f"API key for {self.__class__.__name__} is not set")
        super().__init__(base_url=self.SERVICE_URL, proxy=proxy)
        self.api_key = api_key
        self.logger = AsyncLogger()

    def _build_task(self, website_url: str, website_key: str) -> dict[str, Any]:
        return {
            "type": self.TASK_TYPE,
            "websiteURL": website_url,
            "websiteKey": website_key,
        }

    async def create_task(self, website_url: str, website_key: str) -> int:
        response = await self.send_request(
            request_type="POST",
            method="/createTask",
            json_data={
                "clientKey": self.api_key,
                "task": self._build_task(website_url, website_key),
            },
        )
        data = response.get("data") or {}

        if data.get("errorId"):
            raise CaptchaError(
                f"Failed to create task: {data.get('errorCode')} {data.get('errorDescription', '')}".strip()
            )
        if "taskId" not in data:
            raise CaptchaError(f"Unexpected createTask response: {response.get('text')}")

        return data["taskId"]

    async def get_task_result(self, task_id: int) -> str:
        for attempt in range(1, self.POLL_ATTEMPTS + 1):
            await asyncio.sleep(self.POLL_INTERVAL)

            response = await self.send_request(
                request_type="POST",
                method="/getTaskResult",
                json_data={"clientKey": self.api_key, "taskId": task_id},
            )
            data = response.get("data") or {}

            if data.get("errorId"):
                raise CaptchaError(f"Task {task_id} failed: {data.get('errorCode')}")

            if data.get("status") == "ready":
                token = (data.get("solution") or {}).get(self.SOLUTION_FIELD)
                if not token:
                    raise CaptchaError(f"Task {task_id} is ready but has no {self.SOLUTION_FIELD}")
                return token

            await self.logger.logger_msg(
                f"Captcha not ready yet ({attempt}/{self.POLL_ATTEMPTS})",
                type_msg="debug", method_name="get_task_result"
            )

        raise CaptchaError(f"Captcha was not solved after {self.POLL_ATTEMPTS} attempts")

    async def solve_recaptcha(self, website_url: str, website_key: str) -> str:
        task_id = await self.create_task(website_url, website_key)
        await self.logger.logger_msg(
            f"Captcha task {task_id} created", type_msg="info", method_name="solve_recaptcha"
        )
        return await self.get_task_result(task_id)


class TwoCaptchaSolver(CaptchaSolver):
    SERVICE_URL = "https://api.2captcha.com"
    TASK_TYPE = "RecaptchaV2TaskProxyless"
    SOLUTION_FIELD = "token"

    def _build_task(self, website_url: str, website_key: str) -> dict[str, Any]:
        task = super()._build_task(website_url, website_key)
        task["isInvisible"] = False
        return task


class AntiCaptchaSolver(CaptchaSolver):
    SERVICE_URL = "https://api.anti-captcha.com"
    TASK_TYPE = "NoCaptchaTaskProxyless"
    SOLUTION_FIELD = "gRecaptchaResponse"


CAPTCHA_SOLVERS: dict[str, type[CaptchaSolver]] = {
    "2captcha": TwoCaptchaSolver,
    "anticaptcha": AntiCaptchaSolver,
}


def get_captcha_solver(captcha_type: str, api_key: str) -> CaptchaSolver:
    solver_cls = CAPTCHA_SOLVERS.get(captcha_type)
    if solver_cls is None:
        raise ConfigurationError(f"Unknown captcha type: {captcha_type}")
    return solver_cls(api_key)
