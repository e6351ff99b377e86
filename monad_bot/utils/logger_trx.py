from monad_bot.logger import AsyncLogger

PENDING_PREFIX = "PENDING:"


def explorer_link(explorer: str, kind: str, value: str) -> str:
    """``{explorer}/tx/0x..`` or ``{explorer}/address/0x..``."""
    if not value.startswith("0x"):
        value = f"0x{value}"
    return f"{explorer.rstrip('/')}/{kind}/{value}"


async def show_trx_log(
    address: str,
    trx_type: str,
    status: bool,
    explorer: str,
    result: str | dict | Exception
) -> None:
    logger = AsyncLogger()

    if status:
        await logger.logger_msg(
            f"{trx_type} | Explorer: {explorer_link(explorer, 'tx', str(result))}",
            type_msg="success", address=address
        )
        return

    if isinstance(result, str) and result.startswith(PENDING_PREFIX):
        tx_hash = result[len(PENDING_PREFIX):]
        await logger.logger_msg(
            f"{trx_type} | Not confirmed in time, check it later: {explorer_link(explorer, 'tx', tx_hash)}",
            type_msg="warning", address=address
        )
        return

    message = result.get("message", str(result)) if isinstance(result, dict) else str(result)
    await logger.logger_msg(f"{trx_type} | Failed: {message}", type_msg="error", address=address)
