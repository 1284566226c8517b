"""Table-level pipelines: factor, filter and spectrogram.

Each pipeline loads a wavetable, runs the spectral engine over every cycle
and writes its output next to the input, named after the input file and
the active options.
"""

from pathlib import Path

import numpy as np
from rich.console import Console

from wavetool.dsp.factor import factor_by_prime
from wavetool.dsp.filter import apply_masks
from wavetool.dsp.normalize import normalize_table
from wavetool.dsp.primes import primes_up_to
from wavetool.dsp.spectral import forward, inverse
from wavetool.format.wav import load_wavetable, save_wavetable
from wavetool.render.spectrogram import render_spectrogram, save_spectrogram_png
from wavetool.types import (
    PARTIAL_COUNT,
    FactorSettings,
    FilterSettings,
    MaskSettings,
    Spectrogram,
    WaveTable,
)

# Branches quieter than this, relative to the table they came from, are
# float32 rounding noise and are not factored any further.
RELATIVE_SILENCE = 1e-5
# A branch this close to its source table is the table itself.
FIXED_POINT_TOLERANCE = 1e-5


def factor_output_path(source: Path | str, prime: int, shift: bool, normalize: bool) -> Path:
    """``<source>.<s|u><n|u>p<NN>.wav``"""
    shift_flag = "s" if shift else "u"
    normalize_flag = "n" if normalize else "u"
    return Path(f"{source}.{shift_flag}{normalize_flag}p{prime:02d}.wav")


def filter_output_path(source: Path | str) -> Path:
    return Path(f"{source}.filtered.wav")


def spectrogram_output_path(source: Path | str) -> Path:
    return Path(f"{source}.spectrum.png")


def factor_table(
    table: WaveTable, spectrogram: Spectrogram, prime: int, shift: bool = False
) -> WaveTable:
    """Isolate ``prime``'s branch in every cycle of ``table``.

    ``spectrogram`` must be ``table.to_spectrogram()``; it is passed in so
    a sweep over many primes transforms each cycle only once.
    """
    return table.with_cycles(
        inverse(factor_by_prime(partials, prime, shift)) for partials in spectrogram
    )


def filter_table(table: WaveTable, masks: MaskSettings) -> WaveTable:
    return table.with_cycles(inverse(apply_masks(forward(cycle), masks)) for cycle in table.cycles)


def _is_exhausted(branch: WaveTable, source: WaveTable) -> bool:
    return branch.peak() <= source.peak() * RELATIVE_SILENCE


def _is_fixed_point(branch: WaveTable, source: WaveTable) -> bool:
    return bool(np.allclose(branch.samples(), source.samples(), rtol=0, atol=FIXED_POINT_TOLERANCE))


def run_factor(settings: FactorSettings, console: Console | None = None) -> list[Path]:
    """Split a wavetable into one file per smallest-prime-factor branch.

    In recursive mode every written branch is queued and factored in turn.
    The queue is an explicit stack of (file, depth) tasks. A branch is not
    queued when it is silent, when it equals the table it came from (an
    unshifted branch factored by its own prime), or when ``max_depth`` is
    reached. Without ``max_depth`` the sweep ends once every branch is
    silent or a fixed point; shifting moves content toward the fundamental,
    which belongs to no branch.

    Returns:
        Paths of every file written, in the order they were written.

    Raises:
        ValueError: If ``max_prime`` is outside 2..PARTIAL_COUNT-1.
    """
    console = console or Console()

    if not 2 <= settings.max_prime < PARTIAL_COUNT:
        raise ValueError(
            f"max_prime must be between 2 and {PARTIAL_COUNT - 1}, got {settings.max_prime}"
        )
    sweep = primes_up_to(settings.max_prime)

    written: list[Path] = []
    pending: list[tuple[Path, int]] = [(Path(settings.input_file), 0)]

    while pending:
        source, depth = pending.pop()
        table = load_wavetable(source)
        spectrogram = table.to_spectrogram()
        console.print(f"Factoring {source} ({table.num_cycles} cycles, depth {depth})...")

        children: list[Path] = []
        for prime in sweep:
            branch = factor_table(table, spectrogram, prime, settings.shift)
            exhausted = _is_exhausted(branch, table)

            if settings.normalize:
                if exhausted:
                    console.print(
                        f"  p{prime:02d}: branch is silent, writing it without normalization",
                        style="bold yellow",
                    )
                else:
                    branch = normalize_table(branch)

            output = factor_output_path(source, prime, settings.shift, settings.normalize)
            save_wavetable(output, branch)
            written.append(output)
            console.print(f"  p{prime:02d} -> {output}")

            if not settings.recursive or exhausted or _is_fixed_point(branch, table):
                continue
            if settings.max_depth is not None and depth >= settings.max_depth:
                continue
            children.append(output)

        # Reversed so the lowest prime's branch is expanded first.
        pending.extend((child, depth + 1) for child in reversed(children))

    return written


def run_filter(settings: FilterSettings, console: Console | None = None) -> Path:
    """Apply the mask filter to every cycle and write the result.

    Returns:
        The output path.
    """
    console = console or Console()

    table = load_wavetable(settings.input_file)
    filtered = filter_table(table, settings.masks)
    if settings.normalize:
        filtered = normalize_table(filtered)

    output = (
        Path(settings.output_file)
        if settings.output_file
        else filter_output_path(settings.input_file)
    )
    save_wavetable(output, filtered)
    console.print(f"Filtered {table.num_cycles} cycles -> {output}")
    return output


def run_spectrogram(
    input_file: Path | str, phase: bool = False, console: Console | None = None
) -> Path:
    """Render a wavetable's spectrogram to ``<input>.spectrum.png``."""
    console = console or Console()

    table = load_wavetable(input_file)
    image = render_spectrogram(table.to_spectrogram(), phase=phase)

    output = spectrogram_output_path(input_file)
    save_spectrogram_png(output, image)
    console.print(f"Spectrogram ({image.shape[1]}x{image.shape[0]} px) -> {output}")
    return output
