from .load_config import load_config, ConfigLoader
from .logger_trx import show_trx_log, explorer_link
from .progress import AccountProgress
from .status_store import FaucetStatusStore
from .utils import (
    random_sleep,
    get_address,
    get_random_amount,
    round_amount,
    to_units,
    from_units,
)
