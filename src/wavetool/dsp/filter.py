"""Partial mask filter.

Masks zero out partials by index. Options are applied in a fixed order
(even, odd, bitmap, pattern, keep primes, remove primes) and only ever
remove partials; fundamental protection runs last and always wins for
index 1.
"""

from collections.abc import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from wavetool.dsp.factor import branch_mask
from wavetool.dsp.primes import is_prime
from wavetool.errors import MalformedInputError
from wavetool.types import PARTIAL_COUNT, MaskSettings, PartialSet

_INDICES = np.arange(PARTIAL_COUNT)


def parse_mask(text: str) -> tuple[bool, ...]:
    """Parse a string of ``0``/``1`` characters into a boolean mask."""
    mask = []
    for position, char in enumerate(text):
        if char == "1":
            mask.append(True)
        elif char == "0":
            mask.append(False)
        else:
            raise MalformedInputError(
                f"Invalid mask character {char!r} at position {position}; "
                "masks may only contain '0' and '1'"
            )
    return tuple(mask)


def parse_prime_list(text: str) -> frozenset[int]:
    """Parse a comma separated list of primes such as ``"2,3,7"``."""
    result = set()
    for part in text.split(","):
        part = part.strip()
        try:
            value = int(part)
        except ValueError as e:
            raise MalformedInputError(f"Invalid prime {part!r}: not an integer") from e
        if not is_prime(value):
            raise MalformedInputError(f"Invalid prime {value}: not a prime number")
        result.add(value)
    return frozenset(result)


def bitmap_mask(mask: Sequence[bool]) -> NDArray[np.bool_]:
    """Keep index p only if p is inside ``mask`` and ``mask[p]`` is set."""
    keep = np.zeros(PARTIAL_COUNT, dtype=bool)
    span = min(len(mask), PARTIAL_COUNT)
    keep[:span] = np.asarray(mask[:span], dtype=bool)
    return keep


def pattern_mask(mask: Sequence[bool]) -> NDArray[np.bool_]:
    """Keep index p only if ``mask[p % len(mask)]`` is set."""
    if len(mask) == 0:
        raise MalformedInputError("Pattern mask must not be empty")
    return np.asarray(mask, dtype=bool)[_INDICES % len(mask)]


def prime_branch_mask(branches: Iterable[int]) -> NDArray[np.bool_]:
    """True where the index's smallest prime factor is one of ``branches``."""
    keep = np.zeros(PARTIAL_COUNT, dtype=bool)
    for prime in branches:
        keep |= branch_mask(prime)
    return keep


def apply_masks(partials: PartialSet, settings: MaskSettings) -> PartialSet:
    """Return a filtered copy of ``partials``.

    Args:
        partials: The partial set to filter; left untouched.
        settings: Which masks to apply.

    Returns:
        A new PartialSet with every rejected partial set to zero.
    """
    result = partials.copy()
    fundamental = partials.fundamental

    keep = np.ones(PARTIAL_COUNT, dtype=bool)
    if settings.keep_even:
        keep &= _INDICES % 2 == 0
    if settings.keep_odd:
        keep &= _INDICES % 2 == 1
    if settings.keep_bitmap is not None:
        keep &= bitmap_mask(settings.keep_bitmap)
    if settings.keep_pattern is not None:
        keep &= pattern_mask(settings.keep_pattern)
    if settings.keep_primes is not None:
        keep &= prime_branch_mask(settings.keep_primes)
    if settings.remove_primes is not None:
        keep &= ~prime_branch_mask(settings.remove_primes)

    result.partials[~keep] = 0

    if settings.protect_fundamental:
        result.partials[1] = fundamental

    return result
