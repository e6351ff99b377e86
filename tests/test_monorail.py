from unittest.mock import AsyncMock

import pytest

from monad_bot.exceptions.api_exceptions import APIServerSideError
from monad_bot.tasks import MonorailModule


@pytest.fixture
def monorail(account, config, monkeypatch) -> MonorailModule:
    monkeypatch.setattr("monad_bot.tasks.monorail.asyncio.sleep", AsyncMock())
    return MonorailModule(account, config)


def test_parse_value():
    assert MonorailModule.parse_value("0x10") == 16
    assert MonorailModule.parse_value("25") == 25
    assert MonorailModule.parse_value(7) == 7
    assert MonorailModule.parse_value(None) == 0
    assert MonorailModule.parse_value("") == 0


def test_server_error_detection():
    assert MonorailModule.is_server_error(APIServerSideError("boom", 502))
    assert MonorailModule.is_server_error(Exception("missing response (code=SERVER_ERROR)"))
    assert MonorailModule.is_server_error(Exception("bad response from node"))
    assert not MonorailModule.is_server_error(ValueError("insufficient funds"))


async def test_retries_server_errors(monorail):
    operation = AsyncMock(side_effect=[APIServerSideError("down", 503), "quote"])

    assert await monorail.with_retry(operation, "quote") == "quote"
    assert operation.await_count == 2


async def test_other_errors_propagate_immediately(monorail):
    operation = AsyncMock(side_effect=ValueError("insufficient funds"))

    with pytest.raises(ValueError):
        await monorail.with_retry(operation, "quote")
    assert operation.await_count == 1


async def test_gives_up_after_max_attempts(monorail):
    operation = AsyncMock(side_effect=APIServerSideError("down", 503))

    with pytest.raises(APIServerSideError):
        await monorail.with_retry(operation, "quote")
    assert operation.await_count == 3


async def test_swap_submits_quoted_transaction(monorail):
    mon, usdc = monorail.TOKENS["MON"], monorail.TOKENS["USDC"]
    monorail.get_quote = AsyncMock(return_value={"to": "0xrouter", "data": "0xdead", "value": "0x64"})
    monorail.build_transaction_params = AsyncMock(return_value={"tx": 1})
    monorail.execute_transaction = AsyncMock(return_value=(True, "0xhash"))

    assert await monorail.swap_tokens(mon, usdc, 100)

    monorail.build_transaction_params.assert_awaited_once_with(
        to="0xrouter", value=100, data="0xdead", gas=MonorailModule.GAS_LIMIT
    )


async def test_approval_server_error_is_retried(monorail):
    usdc, mon = monorail.TOKENS["USDC"], monorail.TOKENS["MON"]
    monorail._check_and_approve_token = AsyncMock(side_effect=[
        (False, "Error during approval: 503 Service Unavailable"),
        (True, "0xapprove"),
    ])
    monorail.get_quote = AsyncMock(return_value={"to": "0xrouter", "data": "0xdead", "value": "0x0"})
    monorail.build_transaction_params = AsyncMock(return_value={"tx": 1})
    monorail.execute_transaction = AsyncMock(return_value=(True, "0xhash"))

    assert await monorail.swap_tokens(usdc, mon, 100)
    assert monorail._check_and_approve_token.await_count == 2


async def test_approval_rejection_is_not_retried(monorail):
    usdc, mon = monorail.TOKENS["USDC"], monorail.TOKENS["MON"]
    monorail._check_and_approve_token = AsyncMock(return_value=(False, "Approval failed: reverted"))
    monorail.get_quote = AsyncMock()

    assert not await monorail.swap_tokens(usdc, mon, 100)
    assert monorail._check_and_approve_token.await_count == 1
    monorail.get_quote.assert_not_awaited()
