"""
Random generator helpers.

Every stochastic component owns an explicit ``numpy.random.Generator``
instead of sharing the global numpy state.
"""

import numpy as np


def make_rng(rng=None, seed=None):
    """
    Return ``rng`` if given, else a new generator seeded with ``seed``.

    Parameters
    ----------
    rng : np.random.Generator, optional
        Generator to use as is
    seed : int or None, optional
        Seed for a fresh generator when ``rng`` is None
    """
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def spawn_generators(seed, n):
    """
    Derive ``n`` independent generators from one master seed.

    Streams come from ``SeedSequence.spawn`` so they do not overlap and
    are reproducible for a given seed; use one per worker when
    per-particle work is spread across threads or processes.

    Parameters
    ----------
    seed : int or None
        Master seed
    n : int
        Number of generators

    Returns
    -------
    list of np.random.Generator
    """
    children = np.random.SeedSequence(seed).spawn(n)
    return [np.random.default_rng(child) for child in children]
