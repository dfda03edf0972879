"""Fresh temporary names for the forward unfolding pass."""

from __future__ import annotations

from typing import Iterable


class SymbolGenerator:
    """Hands out `prefix + counter` names, post-incrementing the counter.

    Names listed in `reserved` are skipped, so a temporary never collides
    with an input variable of the expression being unfolded. One generator
    belongs to one build; there is no shared global counter.
    """

    def __init__(self, prefix: str = "t", start: int = 1, reserved: Iterable[str] = ()):
        if not prefix or not (prefix[0].isalpha() or prefix[0] == "_"):
            raise ValueError(f"Symbol prefix must start with a letter or '_', got {prefix!r}")
        self.prefix = prefix
        self._counter = start
        self._reserved = set(reserved)

    @property
    def counter(self) -> int:
        return self._counter

    def reserve(self, names: Iterable[str]) -> None:
        self._reserved.update(names)

    def reset(self, start: int = 1) -> None:
        self._counter = start

    def next_symbol(self) -> str:
        while True:
            name = f"{self.prefix}{self._counter}"
            self._counter += 1
            if name not in self._reserved:
                return name
