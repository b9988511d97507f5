"""
Random streams for stochastic returns.

Every trial batch owns its own numpy Generator, spawned from a single
SeedSequence, so parallel workers never share random state.
"""
import math
from typing import Union

import numpy as np

SeedLike = Union[int, np.random.SeedSequence, None]


def standard_normal(rng: np.random.Generator) -> float:
    """
    Draw one standard normal value with the Box-Muller transform.

    Consumes two uniform draws from rng per sample.
    """
    u = 0.0
    v = 0.0
    # random() is in [0, 1); log(0) is undefined
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def sample_annual_return(
    rng: np.random.Generator,
    expected_return: float,
    volatility: float
) -> float:
    """Expected return plus a normal shock with the given standard deviation."""
    return expected_return + standard_normal(rng) * volatility


def as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)
