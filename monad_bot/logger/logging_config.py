import sys
import time
from pathlib import Path
from typing import Literal, ClassVar
from functools import lru_cache

import aiofiles
from aiologger import Logger
from aiologger.levels import LogLevel
from aiologger.handlers.base import Handler
from colorama import init, Fore, Style

init(autoreset=True)

ROOT_DIR = Path(__file__).parent.parent.parent.absolute()
LOGS_FILE_PATH = ROOT_DIR / "logs"

# aiologger has no SUCCESS level, success messages travel as INFO with this marker
SUCCESS_PREFIX = "[success]"
LEVEL_WIDTH = 8


def short_address(address: str) -> str:
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


class LogFormatter:
    __slots__ = ('_time_format', '_colored')

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.WHITE,
        "SUCCESS": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.MAGENTA + Style.BRIGHT,
    }

    def __init__(self, colored: bool, time_format: str) -> None:
        self._colored = colored
        self._time_format = time_format

    @staticmethod
    def level_and_message(record) -> tuple[str, str]:
        msg = str(record.msg)
        if record.levelname == "INFO" and msg.startswith(SUCCESS_PREFIX):
            return "SUCCESS", msg[len(SUCCESS_PREFIX):].lstrip()
        return record.levelname, msg

    def format(self, record) -> str:
        timestamp = time.strftime(self._time_format, time.localtime(record.created))
        levelname, msg = self.level_and_message(record)
        level = f"[{levelname}]".ljust(LEVEL_WIDTH + 2)

        if not self._colored:
            return f"[{timestamp}] | [{record.name}] | {level} | {msg}"

        color = self.LEVEL_COLORS.get(levelname, Fore.WHITE)
        return (
            f"{Fore.CYAN}[{timestamp}]{Style.RESET_ALL} | "
            f"{color}{level}{Style.RESET_ALL} | "
            f"{color}{msg}{Style.RESET_ALL}"
        )


class AsyncConsoleHandler(Handler):
    __slots__ = ('formatter',)

    def __init__(self, level=LogLevel.DEBUG) -> None:
        super().__init__(level=level)
        self.formatter = LogFormatter(colored=True, time_format="%H:%M:%S")

    @property
    def initialized(self) -> bool:
        return True

    async def emit(self, record) -> None:
        sys.stdout.write(self.formatter.format(record) + "\n")
        sys.stdout.flush()

    async def close(self) -> None:
        sys.stdout.flush()


class AsyncFileHandler(Handler):
    __slots__ = ('file_path', 'formatter')

    def __init__(self, base_name: str = "app_log", level=LogLevel.DEBUG) -> None:
        super().__init__(level=level)
        self.file_path = LOGS_FILE_PATH / f"{base_name}.log"
        self.formatter = LogFormatter(colored=False, time_format="%Y-%m-%d %H:%M:%S")

    @property
    def initialized(self) -> bool:
        return self.file_path.parent.exists()

    async def emit(self, record) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.file_path, mode="a", encoding="utf-8") as f:
            await f.write(self.formatter.format(record) + "\n")

    async def close(self) -> None:
        pass


class AsyncLogger:
    """
    Console plus ``logs/<file_base_name>.log`` logger.

    Tasks inherit from it and call ``self.logger_msg``, everything else keeps a
    module-level instance.
    """
    __slots__ = ('_logger', '_log_type_methods')

    def __init__(
        self,
        name: str = "Monad Bot",
        file_base_name: str = "app_log"
    ) -> None:
        self._logger = Logger(name=name, level=LogLevel.DEBUG)
        self._logger.add_handler(AsyncConsoleHandler(level=LogLevel.INFO))
        self._logger.add_handler(AsyncFileHandler(base_name=file_base_name))

        self._log_type_methods = {
            "success": self._logger.info,
            "info": self._logger.info,
            "error": self._logger.error,
            "warning": self._logger.warning,
            "debug": self._logger.debug
        }

    @staticmethod
    @lru_cache(maxsize=256)
    def _build_info(
        account_name: str | None,
        address: str | None,
        method_name: str | None,
    ) -> str:
        info_parts = []
        if account_name:
            info_parts.append(f"[{account_name}]")
        if address:
            info_parts.append(f"[{short_address(address)}]")
        if method_name:
            info_parts.append(f"[{method_name}]")
        return " | ".join(info_parts)

    async def logger_msg(
        self,
        msg: str = "",
        type_msg: Literal["info", "error", "success", "warning", "debug"] = "info",
        address: str | None = None,
        account_name: str | None = None,
        method_name: str | None = None,
    ) -> None:
        info = self._build_info(account_name, address, method_name)
        full_msg = f"{info} {msg}" if info else msg

        if type_msg == "success":
            full_msg = f"{SUCCESS_PREFIX} {full_msg}"

        await self._log_type_methods[type_msg](full_msg)
