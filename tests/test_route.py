from unittest.mock import AsyncMock

import pytest

import route_manager
from monad_bot.models import DelayRange
from monad_bot.task_manager import MonadBot
from route_manager import RouteManager, get_optimized_route, process_route

MODULES = {
    "deploy", "send", "faucet", "rubic", "izumi", "magma", "apriori",
    "kintsu", "beanswap", "monorail", "ambient", "uniswap",
}


def test_every_module_has_a_process_function():
    assert MODULES <= set(RouteManager().module_functions)
    assert "auto_route" not in RouteManager().module_functions
    assert hasattr(MonadBot, "process_auto_route")


def test_route_keeps_configured_order():
    tasks = ["rubic", "izumi", "beanswap"]
    route = RouteManager.create_route(tasks, shuffle=False)

    assert route == tasks
    assert route is not tasks


def test_shuffled_route_keeps_all_tasks():
    tasks = ["rubic", "izumi", "beanswap", "magma"]
    assert sorted(RouteManager.create_route(tasks, shuffle=True)) == sorted(tasks)


async def test_validate_route_drops_unknown_tasks():
    assert await RouteManager().validate_route(["rubic", "bridge", "magma"]) == ["rubic", "magma"]


async def test_optimized_route_uses_route_task(monkeypatch, config):
    monkeypatch.setattr(route_manager, "ROUTE_TASK", ["magma", "unknown", "rubic"])
    assert await get_optimized_route(config) == ["magma", "rubic"]


async def test_empty_route_task(monkeypatch, config):
    monkeypatch.setattr(route_manager, "ROUTE_TASK", [])
    assert await get_optimized_route(config) == []


@pytest.fixture
def patched_tasks(monkeypatch):
    rubic = AsyncMock(return_value=(True, "rubic done"))
    magma = AsyncMock(return_value=(False, "magma failed"))
    kintsu = AsyncMock(side_effect=RuntimeError("rpc down"))
    monkeypatch.setattr(MonadBot, "process_rubic", staticmethod(rubic))
    monkeypatch.setattr(MonadBot, "process_magma", staticmethod(magma))
    monkeypatch.setattr(MonadBot, "process_kintsu", staticmethod(kintsu))
    monkeypatch.setattr(route_manager, "ROUTE_TASK", ["rubic", "magma", "kintsu"])
    return rubic, magma, kintsu


async def test_execute_route_reports_each_task(patched_tasks, account, config):
    rubic, magma, kintsu = patched_tasks

    results = await RouteManager(config).execute_route(account, ["rubic", "magma", "kintsu"])

    assert results["rubic"] == {"success": True, "message": "rubic done"}
    assert results["magma"] == {"success": False, "message": "magma failed"}
    assert results["kintsu"]["success"] is False
    assert "rpc down" in results["kintsu"]["message"]
    rubic.assert_awaited_once_with(account, config)


async def test_delay_between_tasks(monkeypatch, patched_tasks, account, config):
    sleep = AsyncMock()
    monkeypatch.setattr(route_manager, "random_sleep", sleep)
    config = config.model_copy(update={"delay_between_tasks": DelayRange(min=1, max=2)})

    await RouteManager(config).execute_route(account, ["rubic", "magma", "kintsu"])

    assert sleep.await_count == 2


async def test_process_route_succeeds_when_any_task_succeeds(patched_tasks, account, config):
    status, message = await process_route(account, config)

    assert status
    assert message.startswith("Completed tasks: 1/3")


async def test_process_route_fails_when_all_tasks_fail(patched_tasks, account, config):
    patched_tasks[0].return_value = (False, "rubic failed")

    status, _ = await process_route(account, config)

    assert not status
