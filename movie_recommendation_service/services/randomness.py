"""Seedable randomness for sort-key choice and presentation shuffles."""
from typing import List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a random generator; pass a seed to replay a sequence."""
    return np.random.default_rng(seed)


def fisher_yates_shuffle(items: Sequence[T], rng: np.random.Generator) -> List[T]:
    """
    Return a shuffled copy of items.

    Args:
        items: Items to shuffle (left untouched)
        rng: Random generator

    Returns:
        New list in random order
    """
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def choose(options: Sequence[T], rng: np.random.Generator) -> T:
    """Pick one option uniformly at random."""
    return options[int(rng.integers(0, len(options)))]
