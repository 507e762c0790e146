"""Class-name files and reproducible per-class colours."""

from __future__ import annotations

from functools import lru_cache
from os import PathLike

_MASK32 = 0xFFFFFFFF


class MersenneTwister:
    """The 32-bit Mersenne Twister (MT19937) with its standard seeding."""

    _N = 624
    _M = 397
    _UPPER = 0x80000000
    _LOWER = 0x7FFFFFFF
    _MATRIX_A = 0x9908B0DF

    def __init__(self, seed: int = 5489) -> None:
        state = [seed & _MASK32]
        for i in range(1, self._N):
            prev = state[-1]
            state.append((1812433253 * (prev ^ (prev >> 30)) + i) & _MASK32)
        self._state = state
        self._index = self._N

    def _twist(self) -> None:
        state = self._state
        n, m = self._N, self._M
        for i in range(n):
            y = (state[i] & self._UPPER) | (state[(i + 1) % n] & self._LOWER)
            value = state[(i + m) % n] ^ (y >> 1)
            if y & 1:
                value ^= self._MATRIX_A
            state[i] = value
        self._index = 0

    def next_uint32(self) -> int:
        """Return the next 32-bit output."""
        if self._index >= self._N:
            self._twist()
        y = self._state[self._index]
        self._index += 1
        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & _MASK32

    def uniform_int(self, low: int, high: int) -> int:
        """Return an integer uniformly drawn from ``[low, high]``."""
        if low > high:
            raise ValueError(f"empty range [{low}, {high}]")
        span = high - low
        if span > _MASK32:
            raise ValueError("range wider than 32 bits is not supported")
        if span == _MASK32:
            return low + self.next_uint32()
        extent = span + 1
        product = self.next_uint32() * extent
        if (product & _MASK32) < extent:
            threshold = (-extent) % (1 << 32) % extent
            while (product & _MASK32) < threshold:
                product = self.next_uint32() * extent
        return low + (product >> 32)


def load_class_names(path: str | PathLike[str]) -> list[str]:
    """Read one class name per line, dropping a trailing carriage return."""
    with open(path, encoding="utf-8", newline="") as handle:
        text = handle.read()
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@lru_cache(maxsize=None)
def _colors_for(names: tuple[str, ...], seed: int) -> tuple[tuple[int, int, int], ...]:
    rng = MersenneTwister(seed)
    return tuple(
        (rng.uniform_int(0, 255), rng.uniform_int(0, 255), rng.uniform_int(0, 255))
        for _ in names
    )


def generate_colors(class_names, seed: int = 42) -> list[tuple[int, int, int]]:
    """Return one BGR colour per class, the same every time for the same input."""
    return list(_colors_for(tuple(class_names), seed))