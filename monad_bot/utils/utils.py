import asyncio
import random
from decimal import Decimal

from eth_account import Account

from monad_bot.exceptions.custom_exceptions import InsufficientFundsError
from monad_bot.logger import AsyncLogger
from monad_bot.models.config_model import PercentRange


async def random_sleep(
    address: str | None = None,
    min_sec: float = 30,
    max_sec: float = 60
) -> None:
    logger = AsyncLogger()
    delay = random.uniform(min_sec, max_sec)

    minutes, seconds = divmod(delay, 60)
    template = (
        f"Sleep "
        f"{int(minutes)} minutes {seconds:.1f} seconds" if minutes > 0 else
        f"Sleep {seconds:.1f} seconds"
    )
    await logger.logger_msg(template, type_msg="info", address=address)

    chunk_size = 0.1
    chunks = int(delay / chunk_size)
    remainder = delay - (chunks * chunk_size)

    try:
        for _ in range(chunks):
            await asyncio.sleep(chunk_size)

        if remainder > 0:
            await asyncio.sleep(remainder)

    except asyncio.CancelledError:
        await logger.logger_msg(
            "Sleep interrupted", type_msg="warning", address=address
        )
        raise


_ACCOUNT = Account()
Account.enable_unaudited_hdwallet_features()


def get_address(mnemonic: str) -> str:
    normalized_mnemonic = ' '.join(word for word in mnemonic.split() if word)

    if len(normalized_mnemonic.split()) in (12, 24):
        return _ACCOUNT.from_mnemonic(normalized_mnemonic).address

    if not mnemonic.startswith('0x'):
        mnemonic = '0x' + mnemonic
    return _ACCOUNT.from_key(mnemonic).address


def to_units(amount: float | str | Decimal, decimals: int = 18) -> int:
    return int(Decimal(str(amount)) * (Decimal(10) ** decimals))


def from_units(amount: int, decimals: int = 18) -> Decimal:
    return Decimal(amount) / (Decimal(10) ** decimals)


def get_random_amount(
    balance: int,
    percent_range: PercentRange | tuple[int, int],
    min_amount: int | None = None
) -> int:
    """
    Picks a random amount between min% and max% of the balance.

    Without ``min_amount`` a zero lower bound raises InsufficientFundsError.
    With it, any lower bound below ``min_amount`` is replaced by ``min_amount``.
    """
    if isinstance(percent_range, PercentRange):
        min_percent, max_percent = percent_range.min, percent_range.max
    else:
        min_percent, max_percent = percent_range

    min_value = balance * min_percent // 100
    max_value = balance * max_percent // 100

    if min_amount is not None:
        if min_value < min_amount:
            return min_amount
    elif min_value == 0:
        raise InsufficientFundsError(
            f"Balance {balance} is too low for a {min_percent}-{max_percent}% amount"
        )

    return random.randint(min_value, max_value)


def round_amount(amount: int, decimals: int) -> int:
    """Rounds up to 3 decimal places for 18-decimal tokens, 2 for the rest."""
    places = 3 if decimals == 18 else 2
    step = 10 ** (decimals - places)
    return -(-amount // step) * step
