"""
Content providers.

A provider wraps a finite, ordered sequence of content items with a cursor:
- the sequence is fixed at construction (optionally shuffled once with a seeded RNG),
- the cursor only moves forward through `next()` and back to 0 through `reset()`,
- `progress().total` never changes.

Callers must check the boolean returned by `next()` (or `progress()`) instead of
assuming the cursor moved; an empty provider is valid and `current()` is then None.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Iterable, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Progress:
    index: int
    total: int

    @property
    def is_last(self) -> bool:
        return self.total == 0 or self.index >= self.total - 1

    def as_dict(self) -> dict:
        return {"index": self.index, "total": self.total}


class ContentProvider(ABC, Generic[T]):
    """Contract consumed by phase controllers."""

    @abstractmethod
    def current(self) -> Optional[T]:
        ...

    @abstractmethod
    def next(self) -> bool:
        ...

    @abstractmethod
    def progress(self) -> Progress:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...


class StaticListProvider(ContentProvider[T]):
    """Provider over an in-memory list (questions loaded from JSON)."""

    def __init__(self, items: Iterable[T] = (), *, shuffle: bool = False, seed: Optional[int] = None) -> None:
        self._items: Tuple[T, ...] = ()
        self._index = 0
        self.initialize(items, shuffle=shuffle, seed=seed)

    def initialize(self, items: Iterable[T], *, shuffle: bool = False, seed: Optional[int] = None) -> None:
        """(Re)build the sequence; with `shuffle`, exactly one permutation is drawn."""
        pool = list(items)
        if shuffle:
            random.Random(seed).shuffle(pool)
        self._items = tuple(pool)
        self._index = 0

    @property
    def items(self) -> Tuple[T, ...]:
        return self._items

    def current(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items[self._index]

    def next(self) -> bool:
        if self._index + 1 >= len(self._items):
            return False
        self._index += 1
        return True

    def progress(self) -> Progress:
        return Progress(index=self._index, total=len(self._items))

    def reset(self) -> None:
        self._index = 0
