from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Token:
    name: str
    address: str | None
    decimals: int = 18
    native: bool = False


WMON_ADDRESS = "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701"

MON = Token(name="MON", address=None, decimals=18, native=True)
WMON = Token(name="WMON", address=WMON_ADDRESS)
