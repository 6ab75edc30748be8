# utils/sampling.py
from typing import List, Literal, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")
RepeatOption = Literal["no-repeats", "non-sequential-repeats", "allow-repeats"]


class SampleSizeError(ValueError):
    pass


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def draw_random(items: Sequence[T], rng: Optional[np.random.Generator] = None) -> T:
    if len(items) == 0:
        raise ValueError("Cannot draw from an empty sequence")
    return items[int(_rng(rng).integers(0, len(items)))]


def draw_random_sample(items: Sequence[T], size: int, repeat: RepeatOption = "allow-repeats",
                       rng: Optional[np.random.Generator] = None):
    """Draw `size` items. An ndarray input gives an ndarray back (fancy
    indexed along the first axis), anything else gives a list."""
    rng = _rng(rng)
    n = len(items)
    if size <= 0:
        return items[:0] if isinstance(items, np.ndarray) else []
    if n == 0:
        raise SampleSizeError(f"can't sample {size} items from an empty list")

    if repeat == "allow-repeats":
        idx = rng.integers(0, n, size=size)
    elif repeat == "no-repeats":
        if size > n:
            raise SampleSizeError(
                f"can't randomly sample {size} items with no repeats from a list with {n} elements")
        idx = rng.choice(n, size=size, replace=False)
    elif repeat == "non-sequential-repeats":
        if n < 2 and size > 1:
            raise SampleSizeError("non-sequential repeats need at least two items")
        idx = [int(rng.integers(0, n))]
        while len(idx) < size:
            # shift by 1..n-1 so the next pick never equals the last one
            idx.append((idx[-1] + int(rng.integers(1, n))) % n)
    else:
        raise ValueError(f"Unknown repeat option: {repeat}")
    if isinstance(items, np.ndarray):
        return items[np.asarray(idx)]
    return [items[int(i)] for i in idx]


def shuffle(items: List[T], rng: Optional[np.random.Generator] = None):
    """In-place Fisher-Yates."""
    rng = _rng(rng)
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        items[i], items[j] = items[j], items[i]
