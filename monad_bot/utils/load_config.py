import random
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

from better_proxy import Proxy
from ruamel.yaml import YAML

from configs import SHUFFLE_WALLETS
from monad_bot.exceptions.custom_exceptions import ConfigurationError
from monad_bot.models import Account, Config


yaml = YAML(typ='safe')


@dataclass
class FileData:
    path: Path
    required: bool = True
    allow_empty: bool = False


class ConfigLoader:
    REQUIRED_PARAMS: frozenset[str] = frozenset({
        'threads',
        'delay_before_start',
    })

    def __init__(self, base_path: str | Path | None = None) -> None:
        self.base_path = Path(base_path or Path(__file__).parent.parent.parent)
        self.config_path = self.base_path / 'config'
        self.data_client_path = self.config_path / 'data' / 'client'
        self.settings_path = self.config_path / 'settings.yaml'
        self.file_paths = {
            'private_keys': FileData(self.data_client_path / 'private_keys.txt'),
            'proxies': FileData(self.data_client_path / 'proxies.txt', required=False, allow_empty=True),
        }

    def _load_yaml(self) -> dict:
        try:
            with open(self.settings_path, 'r', encoding='utf-8') as file:
                config = yaml.load(file)
        except FileNotFoundError as error:
            raise ConfigurationError(f'Settings file not found: {self.settings_path}') from error
        except Exception as error:
            raise ConfigurationError(f'Error loading configuration: {error}') from error

        if not isinstance(config, dict):
            raise ConfigurationError('Configuration must be a dictionary')

        missing_fields = self.REQUIRED_PARAMS - set(config.keys())
        if missing_fields:
            raise ConfigurationError(
                f'Missing required fields: {", ".join(sorted(missing_fields))}'
            )

        config.setdefault('delay_between_tasks', {'min': 5, 'max': 5})
        return {key: value for key, value in config.items() if value is not None}

    def _read_lines(self, name: str) -> list[str]:
        file_data = self.file_paths[name]

        if not file_data.path.exists():
            if file_data.required:
                raise ConfigurationError(f'File not found: {file_data.path}')
            return []

        with open(file_data.path, 'r', encoding='utf-8') as file:
            lines = [line.replace('\r', '').strip() for line in file]

        lines = [line for line in lines if line and not line.startswith('#')]
        if not lines and not file_data.allow_empty:
            raise ConfigurationError(f'File is empty: {file_data.path}')

        return lines

    def _parse_proxies(self) -> list[Proxy]:
        proxies = []
        for line_number, line in enumerate(self._read_lines('proxies'), start=1):
            try:
                proxies.append(Proxy.from_str(line))
            except ValueError as error:
                raise ConfigurationError(f'Invalid proxy on line {line_number}: {error}') from error
        return proxies

    def _get_accounts(self) -> Generator[Account, None, None]:
        keys = self._read_lines('private_keys')
        proxies = self._parse_proxies()

        for index, keypair in enumerate(keys):
            yield Account(
                keypair=keypair,
                proxy=proxies[index] if index < len(proxies) else None,
                index=index + 1
            )

    def load(self) -> Config:
        try:
            params = self._load_yaml()
            accounts = list(self._get_accounts())

            if not accounts:
                raise ConfigurationError('No valid accounts found')

            if SHUFFLE_WALLETS:
                random.shuffle(accounts)

            return Config(accounts=accounts, **params)

        except ConfigurationError as error:
            raise ConfigurationError(
                f'Configuration error: {error}'
            ) from error

        except Exception as error:
            raise ConfigurationError(
                f'Unexpected error during configuration loading: {error}'
            ) from error


def load_config(base_path: str | Path | None = None) -> Config:
    return ConfigLoader(base_path).load()
