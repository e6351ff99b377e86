from typing import Literal

from better_proxy import Proxy
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Account:
    __slots__ = (
        'index',
        'keypair',
        'proxy',
    )

    def __init__(
        self,
        keypair: str,
        proxy: Proxy | None = None,
        index: int = 0
    ) -> None:
        self.index = index
        self.keypair = keypair
        self.proxy = proxy

    def __repr__(self) -> str:
        return f'Account(index={self.index}, proxy={self.proxy!r})'


class DelayRange(BaseModel):
    min: int
    max: int

    @field_validator('max')
    @classmethod
    def validate_max(cls, value: int, info: ValidationInfo) -> int:
        if value < info.data['min']:
            raise ValueError('max must be greater than or equal to min')
        return value

    model_config = ConfigDict(frozen=True)


class PercentRange(BaseModel):
    min: int = Field(ge=0, le=100)
    max: int = Field(ge=0, le=100)

    @field_validator('max')
    @classmethod
    def validate_max(cls, value: int, info: ValidationInfo) -> int:
        if value < info.data['min']:
            raise ValueError('max must be greater than or equal to min')
        return value

    model_config = ConfigDict(frozen=True)


class Config(BaseModel):
    accounts: list[Account] = Field(default_factory=list)
    threads: int = Field(default=1, ge=1)
    delay_before_start: DelayRange
    delay_between_tasks: DelayRange
    monad_rpc: str = "https://testnet-rpc.monad.xyz/"
    monad_explorer: str = "https://testnet.monadexplorer.com"
    main_wallet_private_key: str = ""
    captcha_type: Literal["2captcha", "anticaptcha"] = "2captcha"
    api_key_2captcha: str = ""
    api_key_anticaptcha: str = ""
    captcha_url: str = "https://testnet.monad.xyz/"
    captcha_website_key: str = "6Lcwt-IqAAAAAFRPmCa63N5IEc5SKzSCjtZ1vjzn"

    # chosen in the console at runtime
    module: str = ""
    cycles: int = Field(default=1, ge=1)
    interval_hours: float = Field(default=0, ge=0)

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra='forbid',
    )

    @property
    def captcha_api_key(self) -> str:
        if self.captcha_type == "anticaptcha":
            return self.api_key_anticaptcha
        return self.api_key_2captcha
