"""Forward and inverse spectral transform for single cycles.

When working with real signals, the output of an FFT has some redundancy:
the upper half of the spectrum is the complex conjugate of the lower half,
mirrored around the Nyquist bin. ``forward`` keeps only the lower half
(DC + 1024 partials) so that editing happens on independent values, and
``inverse`` rebuilds the mirrored half before transforming back.
"""

import numpy as np
from numpy.typing import NDArray

from wavetool.errors import InvariantViolationError
from wavetool.types import (
    CYCLE_LENGTH,
    NYQUIST_INDEX,
    PARTIAL_COUNT,
    Cycle,
    PartialSet,
)

# Largest imaginary part tolerated in a reconstructed sample.
IMAGINARY_TOLERANCE = 1e-6


def forward(cycle: Cycle) -> PartialSet:
    """Transform one cycle into its partials.

    Coefficients are divided by the transform size so that a full-scale
    sine at harmonic k has magnitude 0.5 at index k.

    Args:
        cycle: The time-domain cycle.

    Returns:
        PartialSet with PARTIAL_COUNT coefficients.
    """
    signal = cycle.samples.astype(np.complex128)
    spectrum = np.fft.fft(signal, n=CYCLE_LENGTH, norm="forward")
    return PartialSet(spectrum[:PARTIAL_COUNT])


def mirror_spectrum(partials: PartialSet) -> NDArray[np.complex128]:
    """Rebuild the full CYCLE_LENGTH spectrum from the stored half.

    Position ``NYQUIST_INDEX + i`` receives the conjugate of position
    ``NYQUIST_INDEX - i`` for i in 1..NYQUIST_INDEX-1. The Nyquist bin
    itself is used as-is.
    """
    full = np.empty(CYCLE_LENGTH, dtype=np.complex128)
    full[:PARTIAL_COUNT] = partials.partials
    full[PARTIAL_COUNT:] = np.conj(partials.partials[1:NYQUIST_INDEX][::-1])
    return full


def inverse(partials: PartialSet) -> Cycle:
    """Transform partials back into a time-domain cycle.

    Raises:
        InvariantViolationError: If the reconstruction has an imaginary
            component larger than IMAGINARY_TOLERANCE, which means the
            edited partials no longer describe a real signal (e.g. a complex
            DC or Nyquist value).
    """
    # norm="forward" leaves the inverse unscaled, undoing the division in forward()
    signal = np.fft.ifft(mirror_spectrum(partials), n=CYCLE_LENGTH, norm="forward")

    residue = float(np.max(np.abs(signal.imag)))
    if residue >= IMAGINARY_TOLERANCE:
        raise InvariantViolationError(
            f"Inverse transform produced an imaginary residue of {residue:.3g} "
            f"(tolerance {IMAGINARY_TOLERANCE:g}); partials are not conjugate-symmetric",
            residue=residue,
        )

    return Cycle(signal.real.astype(np.float32))
