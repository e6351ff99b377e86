import asyncio
import os
from typing import Callable

from monad_bot.api import check_proxy
from monad_bot.console import Console
from monad_bot.exceptions.api_exceptions import APIClientError
from monad_bot.task_manager import MonadBot
from bot_loader import config, progress, semaphore
from monad_bot.logger import AsyncLogger
from monad_bot.models import Account
from monad_bot.utils import get_address, random_sleep
from route_manager import get_optimized_route
from configs import ACCOUNT_SWITCH_DELAY


logger = AsyncLogger()


class ModuleProcessor:
    def __init__(self):
        self.console = Console()
        self.module_functions = {
            attr_name[8:]: getattr(MonadBot, attr_name)
            for attr_name in dir(MonadBot)
            if attr_name.startswith('process_')
        }
        # (account index, address, success, message) of the current pass
        self.results: list[tuple[int, str, bool, str]] = []

    async def _check_proxy(self, account: Account, address: str) -> bool:
        try:
            ip = await check_proxy(account.proxy)
        except APIClientError as e:
            await logger.logger_msg(
                f"Proxy check failed, skipping the account: {e}",
                address=address, type_msg="error", method_name="_check_proxy"
            )
            return False

        route = "proxy" if account.proxy else "direct connection"
        await logger.logger_msg(f"Using {route}, IP {ip}", address=address, type_msg="info")
        return True

    async def _run_for_account(self, account: Account, address: str, process_func: Callable) -> tuple[bool, str]:
        if config.delay_before_start.max > 0:
            await random_sleep(address, config.delay_before_start.min, config.delay_before_start.max)

        if not await self._check_proxy(account, address):
            return False, "Proxy check failed"

        result = await process_func(account, config)
        if isinstance(result, tuple) and len(result) >= 2:
            return bool(result[0]), str(result[1])
        return bool(result), "Successfully completed" if result else "Execution failed"

    async def process_account(self, account: Account, process_func: Callable) -> tuple[bool, str]:
        address = get_address(account.keypair)

        async with semaphore:
            try:
                success, message = await self._run_for_account(account, address, process_func)
            except Exception as e:
                await logger.logger_msg(
                    f"Error: {e}", address=address, type_msg="error", method_name="process_account"
                )
                success, message = False, str(e)

            await self._record(account, address, success, message)

            if progress.processed < progress.total:
                await random_sleep(address, ACCOUNT_SWITCH_DELAY, ACCOUNT_SWITCH_DELAY)

        return success, message

    async def _record(self, account: Account, address: str, success: bool, message: str) -> None:
        self.results.append((account.index, address, success, message))
        if success:
            progress.success += 1
        progress.increment()

        await logger.logger_msg(
            f"📊 Statistics: {progress.processed}/{progress.total} accounts processed | "
            f"✅ Success: {progress.success} ({progress.success_rate}%)",
            type_msg="info"
        )

    async def _run_pass(self, process_func: Callable) -> None:
        progress.reset()
        progress.total = len(config.accounts)
        self.results = []

        for i in range(0, len(config.accounts), config.threads):
            batch = config.accounts[i:i + config.threads]
            await asyncio.gather(*(self.process_account(account, process_func) for account in batch))

        self.console.show_results(sorted(self.results))

    async def process_module(self, module_name: str) -> bool:
        if module_name == "exit":
            await logger.logger_msg("🔴 Exit program...", type_msg="info")
            return True

        if module_name == "auto_route":
            route = await get_optimized_route(config)
            if not route:
                await logger.logger_msg(
                    "Auto-route is empty or unavailable. Check the ROUTE_TASK configuration.",
                    type_msg="error", method_name="process_module"
                )
                return False
            await logger.logger_msg(f"Starting auto-route: {', '.join(route)}", type_msg="info")

        process_func = self.module_functions.get(module_name)
        if not process_func:
            await logger.logger_msg(
                f"Module {module_name} is not implemented!", type_msg="error", method_name="process_module"
            )
            return False

        while True:
            await self._run_pass(process_func)

            if config.interval_hours <= 0:
                return False

            await logger.logger_msg(
                f"⏰ Next run of {module_name} in {config.interval_hours} hours", type_msg="info"
            )
            interval = config.interval_hours * 3600
            await random_sleep(min_sec=interval, max_sec=interval)

    async def execute(self) -> bool:
        self.console.build()
        try:
            return await self.process_module(config.module)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await logger.logger_msg(f"Execution failed: {e}", type_msg="error", method_name="execute")
            return True


async def main_loop() -> None:
    await logger.logger_msg("✅ The program has been started", type_msg="info")

    while True:
        try:
            if await ModuleProcessor().execute():
                break
        except (KeyboardInterrupt, asyncio.CancelledError):
            await logger.logger_msg("🚨 Manual interruption!", type_msg="warning", method_name="main_loop")
            break

        input("\nPress Enter to return to the menu...")
        os.system("cls" if os.name == "nt" else "clear")

    await logger.logger_msg("👋 Goodbye! The terminal is ready for commands.", type_msg="info")
