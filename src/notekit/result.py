"""Best-effort results carrying non-fatal diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A component's best-effort ``value`` plus what it had to give up on.

    ``diagnostics`` are human-readable messages meant for logging only;
    ``value`` is always usable regardless of their presence.
    """

    value: T
    diagnostics: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.diagnostics
