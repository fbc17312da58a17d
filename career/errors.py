# career/errors.py
from __future__ import annotations


class CareerError(Exception):
    """Base class for every recoverable action failure."""


class InsufficientFunds(CareerError):
    def __init__(self, needed: int, available: int, what: str = "this") -> None:
        self.needed = int(needed)
        self.available = int(available)
        super().__init__(
            f"Not enough funds for {what}: need £{self.needed:,}, have £{self.available:,}."
        )


class InvalidLineup(CareerError):
    def __init__(self, count: int, required: int = 11) -> None:
        self.count = int(count)
        self.required = int(required)
        super().__init__(f"Select exactly {self.required} starters ({self.count} selected).")


class CapacityExceeded(CareerError):
    pass


class OracleFailure(CareerError):
    pass


class SeasonComplete(CareerError):
    def __init__(self, matchday: int) -> None:
        self.matchday = int(matchday)
        super().__init__(f"Season finished after matchday {self.matchday}.")


class CareerStateError(CareerError):
    pass


class PlaybackActive(CareerError):
    pass


class NotEmployed(CareerError):
    pass
