"""wavetool - Wavetable editing and analysis toolkit.

This package moves each cycle of a wavetable between the time domain and
its partials (DC + 1024 harmonics), edits the partials and rebuilds the
cycles.

Example Usage
-------------
>>> from wavetool import load_wavetable, save_wavetable, factor_by_prime, forward, inverse
>>>
>>> table = load_wavetable("saw.wav")
>>> # Keep only the harmonics whose smallest prime factor is 3
>>> cycles = [inverse(factor_by_prime(forward(c), 3)) for c in table.cycles]
>>> save_wavetable("saw_p03.wav", table.with_cycles(cycles))
"""

from wavetool.dsp import (
    apply_masks,
    factor_by_prime,
    forward,
    inverse,
    normalize_table,
    parse_mask,
    primes,
)
from wavetool.errors import (
    InvariantViolationError,
    MalformedInputError,
    ResourceError,
    WavetoolError,
)
from wavetool.format import load_wavetable, save_wavetable
from wavetool.types import (
    CYCLE_LENGTH,
    PARTIAL_COUNT,
    Cycle,
    MaskSettings,
    PartialSet,
    Spectrogram,
    WaveTable,
)

__all__ = [
    # Types
    "CYCLE_LENGTH",
    "PARTIAL_COUNT",
    "Cycle",
    "PartialSet",
    "Spectrogram",
    "WaveTable",
    "MaskSettings",
    # Engine
    "forward",
    "inverse",
    "apply_masks",
    "parse_mask",
    "factor_by_prime",
    "normalize_table",
    "primes",
    # Files
    "load_wavetable",
    "save_wavetable",
    # Errors
    "WavetoolError",
    "MalformedInputError",
    "InvariantViolationError",
    "ResourceError",
]
