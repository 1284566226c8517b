import numpy as np

from wavetool.errors import MalformedInputError
from wavetool.types import Cycle, WaveTable


def table_gain(table: WaveTable) -> float:
    """Gain that brings the loudest sample in the whole table to unity.

    The gain is always positive, so the sign of every sample is kept.

    Raises:
        MalformedInputError: If the table is silent or holds non-finite samples.
    """
    samples = table.samples()
    if not np.all(np.isfinite(samples)):
        raise MalformedInputError("Cannot normalize a wavetable with NaN or Inf samples")

    peak = float(np.max(np.abs(samples)))
    if peak == 0.0:
        raise MalformedInputError("Cannot normalize a silent wavetable")
    return 1.0 / peak


def normalize_table(table: WaveTable) -> WaveTable:
    """Scale every cycle by one table-wide gain (see ``table_gain``).

    Relative levels between cycles are preserved, unlike per-cycle
    normalization.
    """
    gain = table_gain(table)
    return table.with_cycles(
        Cycle((cycle.samples.astype(np.float64) * gain).astype(np.float32))
        for cycle in table.cycles
    )
