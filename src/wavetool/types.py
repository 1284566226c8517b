from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

import numpy as np
from numpy.typing import ArrayLike, NDArray

from wavetool.errors import MalformedInputError

# Serum et al. use 2048 samples to represent a single cycle.
CYCLE_LENGTH = 2048
# DC offset + 1024 partials.
PARTIAL_COUNT = CYCLE_LENGTH // 2 + 1
NYQUIST_INDEX = CYCLE_LENGTH // 2
OUTPUT_SAMPLE_RATE = 44100
# Branches above this prime carry almost nothing audible in practice.
MAX_FACTOR_PRIME = 43

CycleSamples: TypeAlias = NDArray[np.float32]
Partials: TypeAlias = NDArray[np.complex128]


@dataclass
class Cycle:
    """One period of a waveform: exactly CYCLE_LENGTH float32 samples."""

    samples: CycleSamples

    def __post_init__(self) -> None:
        self.samples = np.array(self.samples, dtype=np.float32, copy=True)
        if self.samples.shape != (CYCLE_LENGTH,):
            raise MalformedInputError(
                f"A cycle must hold {CYCLE_LENGTH} samples, got shape {self.samples.shape}"
            )

    @classmethod
    def silent(cls) -> Cycle:
        return cls(np.zeros(CYCLE_LENGTH, dtype=np.float32))


@dataclass
class PartialSet:
    """The non-redundant half spectrum of one cycle.

    Index 0 is the DC component and index k is the k-th harmonic. The upper
    half of the full spectrum is the complex conjugate of this half and is
    never stored.
    """

    partials: Partials

    def __post_init__(self) -> None:
        self.partials = np.array(self.partials, dtype=np.complex128, copy=True)
        if self.partials.shape != (PARTIAL_COUNT,):
            raise MalformedInputError(
                f"A partial set must hold {PARTIAL_COUNT} coefficients, "
                f"got shape {self.partials.shape}"
            )

    @classmethod
    def zeros(cls) -> PartialSet:
        return cls(np.zeros(PARTIAL_COUNT, dtype=np.complex128))

    @property
    def fundamental(self) -> complex:
        return complex(self.partials[1])

    def magnitudes(self) -> NDArray[np.float64]:
        return np.abs(self.partials)

    def copy(self) -> PartialSet:
        return PartialSet(self.partials)


@dataclass
class Spectrogram:
    """One PartialSet per wavetable cycle, in table order."""

    partial_sets: list[PartialSet]

    def __len__(self) -> int:
        return len(self.partial_sets)

    def __iter__(self) -> Iterator[PartialSet]:
        return iter(self.partial_sets)

    def as_array(self) -> NDArray[np.complex128]:
        """Stack into an array of shape (num_cycles, PARTIAL_COUNT)."""
        return np.stack([ps.partials for ps in self.partial_sets])


@dataclass
class WaveTable:
    """An ordered sequence of cycles plus the source file's vendor chunk.

    ``metadata`` is carried through load/save byte-for-byte and never
    interpreted.
    """

    cycles: list[Cycle]
    metadata: bytes | None = None
    sample_rate: int = OUTPUT_SAMPLE_RATE

    def __post_init__(self) -> None:
        if not self.cycles:
            raise MalformedInputError("A wavetable must contain at least one cycle")

    @classmethod
    def from_samples(
        cls,
        samples: ArrayLike,
        metadata: bytes | None = None,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
    ) -> WaveTable:
        """Split a flat sample stream into cycles."""
        data = np.asarray(samples, dtype=np.float32).reshape(-1)
        if len(data) == 0 or len(data) % CYCLE_LENGTH != 0:
            raise MalformedInputError(
                f"Invalid wavetable: {len(data)} samples is empty or not a multiple "
                f"of {CYCLE_LENGTH}"
            )
        frames = data.reshape(-1, CYCLE_LENGTH)
        return cls([Cycle(frame) for frame in frames], metadata, sample_rate)

    @property
    def num_cycles(self) -> int:
        return len(self.cycles)

    def samples(self) -> NDArray[np.float32]:
        return np.concatenate([cycle.samples for cycle in self.cycles])

    def peak(self) -> float:
        return float(np.max(np.abs(self.samples())))

    def is_silent(self) -> bool:
        return self.peak() == 0.0

    def with_cycles(self, cycles: Iterable[Cycle]) -> WaveTable:
        """Build a new table from ``cycles`` keeping this table's metadata."""
        return WaveTable(list(cycles), self.metadata, self.sample_rate)

    def to_spectrogram(self) -> Spectrogram:
        from wavetool.dsp.spectral import forward

        return Spectrogram([forward(cycle) for cycle in self.cycles])


@dataclass
class MaskSettings:
    """Which partials the mask filter keeps.

    Options are cumulative: each one that is set zeroes more partials.
    """

    keep_even: bool = False
    keep_odd: bool = False
    keep_bitmap: Sequence[bool] | None = None
    keep_pattern: Sequence[bool] | None = None
    keep_primes: frozenset[int] | None = None
    remove_primes: frozenset[int] | None = None
    protect_fundamental: bool = False

    def is_empty(self) -> bool:
        return not (
            self.keep_even
            or self.keep_odd
            or self.keep_bitmap is not None
            or self.keep_pattern is not None
            or self.keep_primes is not None
            or self.remove_primes is not None
        )


@dataclass
class FactorSettings:
    input_file: str
    normalize: bool = False
    shift: bool = False
    recursive: bool = False
    max_prime: int = MAX_FACTOR_PRIME
    max_depth: int | None = None


@dataclass
class FilterSettings:
    input_file: str
    output_file: str | None = None
    masks: MaskSettings = field(default_factory=MaskSettings)
    normalize: bool = False
