"""Spectral editing engine: transform, masks, prime factoring, normalization."""

from wavetool.dsp.factor import branch_mask, factor_by_prime, shift_down
from wavetool.dsp.filter import apply_masks, parse_mask, parse_prime_list
from wavetool.dsp.normalize import normalize_table, table_gain
from wavetool.dsp.primes import primes, primes_below, primes_up_to
from wavetool.dsp.spectral import forward, inverse

__all__ = [
    "forward",
    "inverse",
    "apply_masks",
    "parse_mask",
    "parse_prime_list",
    "branch_mask",
    "factor_by_prime",
    "shift_down",
    "normalize_table",
    "table_gain",
    "primes",
    "primes_below",
    "primes_up_to",
]
