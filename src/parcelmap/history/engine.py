"""Generic undo/redo container over opaque snapshots.

The container holds ``past`` (oldest first), ``present`` and ``future``
(nearest redo first). Any new edit discards the redo branch. The engine
never inspects snapshots beyond comparing them with the configured
equality discipline:

* ``Equality.STRUCTURAL`` (default) compares with ``==``. For pydantic
  models this compares field values, so re-applying an identical edit is
  a no-op.
* ``Equality.IDENTITY`` compares with ``is``. Every new object counts as
  an edit, even when it is equal to ``present``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from parcelmap.core.types import Equality

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryState(Generic[T]):
    """Point-in-time view of an EditHistory."""

    past: tuple[T, ...]
    present: T
    future: tuple[T, ...]


class EditHistory(Generic[T]):
    """Undo/redo state container owned by a single editing session.

    Not safe for concurrent writers; callers serialize ``set`` themselves.
    Undo and redo on an empty stack are no-ops, never errors.
    """

    def __init__(self, initial: T, equality: Equality | str = Equality.STRUCTURAL) -> None:
        self._past: list[T] = []
        self._present: T = initial
        self._future: deque[T] = deque()
        self._equality = Equality(equality)

    @property
    def equality(self) -> Equality:
        return self._equality

    @property
    def present(self) -> T:
        return self._present

    @property
    def past(self) -> tuple[T, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[T, ...]:
        return tuple(self._future)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    @property
    def state(self) -> HistoryState[T]:
        return HistoryState(past=self.past, present=self._present, future=self.future)

    def set(self, value: T | Callable[[T], T]) -> bool:
        """Commit a new present value.

        A callable is treated as an updater and called with the current
        present. Returns False (and records nothing) when the candidate is
        the same as the present value.
        """
        candidate = value(self._present) if callable(value) else value
        if self._same(candidate, self._present):
            return False
        self._past.append(self._present)
        self._present = candidate
        self._future.clear()
        return True

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.appendleft(self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.popleft()
        return True

    def reset(self, value: T) -> None:
        """Replace the present and forget all history (e.g. a new source was loaded)."""
        self._past.clear()
        self._future.clear()
        self._present = value

    def _same(self, a: T, b: T) -> bool:
        if self._equality is Equality.IDENTITY:
            return a is b
        return a is b or a == b
