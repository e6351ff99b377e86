import random
from typing import Any, Callable

from monad_bot.models import Account, Config
from monad_bot.logger import AsyncLogger
from monad_bot.task_manager import MonadBot
from monad_bot.utils import get_address, random_sleep
from configs import ROUTE_TASK, SHUFFLE_ROUTE

logger = AsyncLogger()


class RouteManager:
    def __init__(self, config: Config | None = None):
        self.config = config
        self.module_functions = self._load_module_functions()

    @staticmethod
    def _load_module_functions() -> dict[str, Callable]:
        return {
            attr_name[8:]: getattr(MonadBot, attr_name)
            for attr_name in dir(MonadBot)
            if attr_name.startswith('process_') and attr_name != 'process_auto_route'
        }

    @staticmethod
    def create_route(tasks: list[str], shuffle: bool = SHUFFLE_ROUTE) -> list[str]:
        route = list(tasks)
        if shuffle:
            random.shuffle(route)
        return route

    async def validate_route(self, route: list[str]) -> list[str]:
        valid_route = []
        for task in route:
            if task in self.module_functions:
                valid_route.append(task)
            else:
                await logger.logger_msg(
                    f"Task '{task}' is not implemented and will be skipped", type_msg="warning"
                )

        return valid_route

    async def _delay_between_tasks(self, address: str) -> None:
        if self.config is None:
            return
        delay = self.config.delay_between_tasks
        if delay.max > 0:
            await random_sleep(address, delay.min, delay.max)

    async def execute_route(self, account: Account, route: list[str]) -> dict[str, dict[str, Any]]:
        results = {}
        address = get_address(account.keypair)

        for position, task_name in enumerate(route):
            process_func = self.module_functions.get(task_name)
            if not process_func:
                continue

            await logger.logger_msg(
                f"Running task {position + 1}/{len(route)}: {task_name}", type_msg="info", address=address
            )

            try:
                success, message = await process_func(account, self.config)
            except Exception as e:
                await logger.logger_msg(
                    f"Error executing task {task_name}: {e}", type_msg="error",
                    address=address, method_name="execute_route"
                )
                success, message = False, f"Exception: {e}"

            results[task_name] = {"success": success, "message": message}

            if position < len(route) - 1:
                await self._delay_between_tasks(address)

        return results


async def get_optimized_route(config: Config | None = None) -> list[str]:
    if not ROUTE_TASK:
        await logger.logger_msg(
            "ROUTE_TASK not found in configuration or empty", type_msg="warning"
        )
        return []

    route_manager = RouteManager(config)
    route = route_manager.create_route(ROUTE_TASK)
    valid_route = await route_manager.validate_route(route)

    if len(valid_route) != len(route):
        await logger.logger_msg(
            f"Some tasks were excluded from the route. Original: {len(route)}, Valid: {len(valid_route)}",
            type_msg="warning"
        )

    return valid_route


async def process_route(account: Account, config: Config | None = None) -> tuple[bool, str]:
    if config is None:
        from bot_loader import config

    route = await get_optimized_route(config)
    if not route:
        return False, "Route is empty or unavailable"

    address = get_address(account.keypair)
    await logger.logger_msg(
        f"Start of route execution: {', '.join(route)}", type_msg="info", address=address
    )

    results = await RouteManager(config).execute_route(account, route)

    success_count = sum(1 for res in results.values() if res["success"])
    total_count = len(results)
    success_rate = (success_count / total_count) * 100 if total_count else 0

    for task_name, result in results.items():
        await logger.logger_msg(
            f"{task_name}: {'OK' if result['success'] else 'FAILED'} | {result['message']}",
            type_msg="success" if result["success"] else "warning", address=address
        )

    return success_count > 0, f"Completed tasks: {success_count}/{total_count} ({success_rate:.1f}%)"


def integrate_route_processor():
    setattr(MonadBot, "process_auto_route", staticmethod(process_route))


integrate_route_processor()
