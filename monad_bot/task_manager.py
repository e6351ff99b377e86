from monad_bot.tasks import *
from monad_bot.models import Account, Config


def _runtime_config() -> Config:
    from bot_loader import config
    return config


class MonadBot:
    @staticmethod
    async def process_deploy(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with DeployModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_send(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with SendModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_faucet(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with FaucetModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_rubic(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with RubicModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_izumi(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with IzumiModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_magma(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with MagmaModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_apriori(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with AprioriModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_kintsu(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with KintsuModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_beanswap(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with BeanswapModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_monorail(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with MonorailModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_ambient(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with AmbientModule(account, config or _runtime_config()) as module:
            return await module.run()

    @staticmethod
    async def process_uniswap(account: Account, config: Config | None = None) -> tuple[bool, str]:
        async with UniswapModule(account, config or _runtime_config()) as module:
            return await module.run()
