from .logging_config import AsyncLogger, short_address
