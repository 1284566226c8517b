"""Smallest-prime-factor decomposition of a spectrum.

Every harmonic index n >= 2 has exactly one smallest prime factor, so the
harmonic spectrum splits into disjoint branches keyed by prime:

    p = 2: 2, 4, 6, 8, 10, ...
    p = 3: 3, 9, 15, 21, ...
    p = 5: 5, 25, 35, 55, ...

Summing the branches for every prime gives back the original partials
(minus DC and the fundamental, which belong to no branch).
"""

from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

from wavetool.dsp.primes import divisible_by_prime_less_than, is_prime
from wavetool.types import PARTIAL_COUNT, PartialSet


@lru_cache(maxsize=None)
def branch_mask(prime: int) -> NDArray[np.bool_]:
    """Indices whose smallest prime factor is ``prime``.

    Raises:
        ValueError: If ``prime`` is not prime.
    """
    if not is_prime(prime):
        raise ValueError(f"{prime} is not a prime number")

    mask = np.zeros(PARTIAL_COUNT, dtype=bool)
    # DC stays out of every branch
    for n in range(prime, PARTIAL_COUNT, prime):
        mask[n] = not divisible_by_prime_less_than(n, prime)
    mask.flags.writeable = False
    return mask


def shift_down(partials: PartialSet, prime: int) -> PartialSet:
    """Re-index so that harmonic ``j * prime`` lands on harmonic ``j``.

    Indices whose source ``j * prime`` is past the last partial become zero.
    DC is left as it was.
    """
    shifted = PartialSet.zeros()
    shifted.partials[0] = partials.partials[0]
    count = (PARTIAL_COUNT - 1) // prime
    targets = np.arange(1, count + 1)
    shifted.partials[targets] = partials.partials[targets * prime]
    return shifted


def factor_by_prime(partials: PartialSet, prime: int, shift: bool = False) -> PartialSet:
    """Keep only the partials in ``prime``'s branch.

    Args:
        partials: Source partials; not modified.
        prime: The branch to isolate.
        shift: Compress the branch down to the fundamental, as if its
            members were harmonics of a fundamental ``prime`` times higher.

    Returns:
        A new PartialSet with DC zero and every other branch zeroed.
    """
    selected = PartialSet.zeros()
    mask = branch_mask(prime)
    selected.partials[mask] = partials.partials[mask]

    if shift:
        selected = shift_down(selected, prime)

    return selected
