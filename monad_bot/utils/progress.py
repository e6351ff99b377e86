from dataclasses import dataclass


@dataclass
class AccountProgress:
    total: int
    processed: int = 0
    success: int = 0

    def increment(self) -> None:
        self.processed += 1

    def reset(self) -> None:
        self.processed = 0
        self.success = 0

    @property
    def success_rate(self) -> float:
        return round(self.success / self.processed * 100, 2) if self.processed else 0
