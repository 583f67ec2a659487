"""
Bind parameter allocation for a single statement call.

One manager is created per statement and threaded explicitly through every
builder that emits placeholders, so SET and WHERE share one counter:

    UPDATE "t" SET "a"=$p1 WHERE "b" = $p2    ->  {'p1': ..., 'p2': ...}
"""
import logging
from typing import Any

from sqlgen.types import UNSET

logger = logging.getLogger(__name__)


class BindParameterManager:
    """Sequential placeholder allocator and value accumulator.

    Tokens are `<marker><prefix><n>` with n starting at 1. Values are never
    deduplicated or reordered.
    """

    def __init__(self, prefix: str = 'p', marker: str = '$'):
        self.prefix = prefix
        self.marker = marker
        self._values: dict[str, Any] = {}
        self._counter = 0

    def __len__(self) -> int:
        return len(self._values)

    def _allocate(self) -> str:
        self._counter += 1
        return f'{self.prefix}{self._counter}'

    def token(self, name: str) -> str:
        return f'{self.marker}{name}'

    def next(self) -> str:
        """Allocate the next placeholder token and reserve its slot.

        The slot holds `UNSET` in the finalized mapping until the caller
        supplies a value, so every emitted token keeps a mapping entry.
        """
        return self.register(UNSET)

    def register(self, value: Any) -> str:
        """Allocate a placeholder for value and return its token."""
        name = self._allocate()
        self._values[name] = value
        return self.token(name)

    def finalize(self) -> dict[str, Any]:
        """Return a copy of the accumulated placeholder -> value mapping."""
        return dict(self._values)
