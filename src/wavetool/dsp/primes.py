"""Lazy prime sequences and small number-theory helpers."""

import itertools
from collections.abc import Iterator
from functools import lru_cache


def primes() -> Iterator[int]:
    """Yield 2, 3, 5, 7, ... without bound.

    Incremental sieve of Eratosthenes: ``composites`` maps each upcoming
    composite to the primes that mark it. Every call returns an independent
    sequence starting from 2.
    """
    composites: dict[int, list[int]] = {}
    for n in itertools.count(2):
        factors = composites.pop(n, None)
        if factors is None:
            yield n
            composites[n * n] = [n]
        else:
            for p in factors:
                composites.setdefault(n + p, []).append(p)


@lru_cache(maxsize=None)
def primes_below(limit: int) -> tuple[int, ...]:
    """All primes strictly less than ``limit``."""
    return tuple(itertools.takewhile(lambda p: p < limit, primes()))


def primes_up_to(ceiling: int) -> tuple[int, ...]:
    """All primes less than or equal to ``ceiling``."""
    return primes_below(ceiling + 1)


def is_prime(n: int) -> bool:
    if n < 2:
        return False
    return smallest_prime_factor(n) == n


def divisible_by_prime_less_than(n: int, prime: int) -> bool:
    """True when some prime strictly below ``prime`` divides ``n``."""
    for p in primes():
        if p >= prime:
            return False
        if n % p == 0:
            return True
    return False


def smallest_prime_factor(n: int) -> int | None:
    """Smallest prime dividing ``n``, or None for 0 and 1."""
    if n < 2:
        return None
    for p in primes():
        if p * p > n:
            return n
        if n % p == 0:
            return p
    raise AssertionError("unreachable: the prime sequence is unbounded")
