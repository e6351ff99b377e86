from unittest.mock import AsyncMock

import pytest

from monad_bot.api import AntiCaptchaSolver, TwoCaptchaSolver, get_captcha_solver
from monad_bot.exceptions.custom_exceptions import CaptchaError, ConfigurationError


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("monad_bot.api.captcha.asyncio.sleep", sleep)
    return sleep


def response(data: dict) -> dict:
    return {"status_code": 200, "data": data, "text": str(data)}


async def test_factory_selects_solver():
    assert isinstance(get_captcha_solver("2captcha", "key"), TwoCaptchaSolver)
    assert isinstance(get_captcha_solver("anticaptcha", "key"), AntiCaptchaSolver)


async def test_factory_rejects_unknown_type():
    with pytest.raises(ConfigurationError):
        get_captcha_solver("capmonster", "key")


async def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        get_captcha_solver("2captcha", "")


async def test_two_captcha_task_payload():
    solver = TwoCaptchaSolver("key")
    solver.send_request = AsyncMock(return_value=response({"errorId": 0, "taskId": 77}))

    assert await solver.create_task("https://site", "site-key") == 77

    payload = solver.send_request.call_args.kwargs["json_data"]
    assert payload["clientKey"] == "key"
    assert payload["task"] == {
        "type": "RecaptchaV2TaskProxyless",
        "websiteURL": "https://site",
        "websiteKey": "site-key",
        "isInvisible": False,
    }


async def test_create_task_error():
    solver = AntiCaptchaSolver("key")
    solver.send_request = AsyncMock(
        return_value=response({"errorId": 1, "errorCode": "ERROR_KEY_DOES_NOT_EXIST"})
    )

    with pytest.raises(CaptchaError, match="ERROR_KEY_DOES_NOT_EXIST"):
        await solver.create_task("https://site", "site-key")


async def test_polls_until_ready(fast_polling):
    solver = TwoCaptchaSolver("key")
    solver.send_request = AsyncMock(side_effect=[
        response({"errorId": 0, "status": "processing"}),
        response({"errorId": 0, "status": "processing"}),
        response({"errorId": 0, "status": "ready", "solution": {"token": "captcha-token"}}),
    ])

    assert await solver.get_task_result(77) == "captcha-token"
    assert solver.send_request.await_count == 3
    fast_polling.assert_awaited_with(TwoCaptchaSolver.POLL_INTERVAL)


async def test_anti_captcha_reads_recaptcha_response():
    solver = AntiCaptchaSolver("key")
    solver.send_request = AsyncMock(side_effect=[
        response({"errorId": 0, "taskId": 5}),
        response({"errorId": 0, "status": "ready", "solution": {"gRecaptchaResponse": "g-token"}}),
    ])

    assert await solver.solve_recaptcha("https://site", "site-key") == "g-token"


async def test_gives_up_after_poll_attempts():
    solver = TwoCaptchaSolver("key")
    solver.send_request = AsyncMock(return_value=response({"errorId": 0, "status": "processing"}))

    with pytest.raises(CaptchaError, match="not solved"):
        await solver.get_task_result(77)
    assert solver.send_request.await_count == TwoCaptchaSolver.POLL_ATTEMPTS


async def test_ready_without_token():
    solver = TwoCaptchaSolver("key")
    solver.send_request = AsyncMock(return_value=response({"errorId": 0, "status": "ready", "solution": {}}))

    with pytest.raises(CaptchaError):
        await solver.get_task_result(77)
