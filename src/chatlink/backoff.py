"""Reconnect delay bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatlink.config import Settings


@dataclass(slots=True)
class BackoffState:
    """Exponential backoff with a ceiling.

    ``current_delay`` is the delay the next failure will wait. It grows by
    ``multiplier`` per failure, never passes ``ceiling`` and only drops back
    to ``base`` through :meth:`reset`.
    """

    base: float
    multiplier: float
    ceiling: float
    current_delay: float = field(init=False)
    attempts: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.base <= 0 or self.multiplier < 1 or self.ceiling < self.base:
            raise ValueError(
                f"invalid backoff: base={self.base} multiplier={self.multiplier} ceiling={self.ceiling}"
            )
        self.current_delay = self.base

    @classmethod
    def from_settings(cls, settings: Settings) -> BackoffState:
        return cls(
            base=settings.backoff_base,
            multiplier=settings.backoff_multiplier,
            ceiling=settings.backoff_max,
        )

    def record_failure(self) -> float:
        """Count a failure and return how long to wait before retrying."""
        delay = self.current_delay
        self.current_delay = min(self.current_delay * self.multiplier, self.ceiling)
        self.attempts += 1
        return delay

    def reset(self) -> None:
        self.current_delay = self.base
        self.attempts = 0
