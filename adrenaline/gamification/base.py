"""
Multiplier sources
"""
from typing import Protocol


class MultiplierSource(Protocol):
    """Anything that contributes a factor to the composed reward multiplier"""

    name: str

    def is_active(self, now: int) -> bool:
        ...

    def current_multiplier(self, now: int) -> float:
        ...

    def describe(self, now: int) -> str:
        """Human-readable breakdown line for an active source"""
        ...


def format_multiplier(value: float) -> str:
    """1.5 -> 'x1.5', 2.0 -> 'x2'"""
    return f"x{value:g}"
