import sys
from pathlib import Path
from typing import Annotated

import numpy as np
from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from wavetool.cli.validators import (
    validate_mask_string,
    validate_non_negative_integer,
    validate_prime_list,
)
from wavetool.dsp.factor import branch_mask
from wavetool.dsp.filter import parse_mask, parse_prime_list
from wavetool.dsp.primes import primes_up_to
from wavetool.errors import WavetoolError
from wavetool.format import load_wavetable
from wavetool.pipeline import run_factor, run_filter, run_spectrogram
from wavetool.types import (
    MAX_FACTOR_PRIME,
    FactorSettings,
    FilterSettings,
    MaskSettings,
)

app = App(name="wavetool", help="Serum wavetable editing / analysis tool.")
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


@app.command
def factor(
    file: Path,
    normalize: Annotated[bool, Parameter(name=["--normalize", "-n"])] = False,
    shift: Annotated[bool, Parameter(name=["--shift", "-s"])] = False,
    recursive: Annotated[bool, Parameter(name=["--recursive", "-r"])] = False,
    max_depth: Annotated[
        int | None, Parameter(validator=validate_non_negative_integer)
    ] = None,
    max_prime: int = MAX_FACTOR_PRIME,
) -> int:
    """
    Factor a wavetable into its prime-multiple-of-fundamental components.

    Writes one wavetable per prime p up to max_prime, named
    '<file>.<s|u><n|u>p<NN>.wav', holding the harmonics whose smallest
    prime factor is p.

    Parameters
    ----------
    file: Path
        The wavetable to factor
    normalize: bool
        Normalize each output to full scale with one table-wide gain
    shift: bool
        Shift each prime's harmonics down to the fundamental
    recursive: bool
        Factor generated wavetables recursively
    max_depth: int | None
        Stop recursing after this many levels (default: unbounded)
    max_prime: int
        Largest prime to split out (default: 43)
    """
    settings = FactorSettings(
        input_file=str(file),
        normalize=normalize,
        shift=shift,
        recursive=recursive,
        max_prime=max_prime,
        max_depth=max_depth,
    )

    try:
        written = run_factor(settings, console=console)
    except (WavetoolError, ValueError) as e:
        print_error(f"Error: {e}")
        return 1

    print_success(f"Factored {file} into {len(written)} wavetables")
    return 0


@app.command(name="filter")
def filter_(
    file: Path,
    output: Path | None = None,
    even: Annotated[bool, Parameter(name=["--even", "-e"])] = False,
    odd: Annotated[bool, Parameter(name=["--odd", "-o"])] = False,
    bitmap: Annotated[
        str | None, Parameter(name=["--bitmap", "-b"], validator=validate_mask_string)
    ] = None,
    pattern: Annotated[
        str | None, Parameter(name=["--pattern", "-p"], validator=validate_mask_string)
    ] = None,
    keep_primes: Annotated[
        str | None, Parameter(name=["--keep-primes", "-k"], validator=validate_prime_list)
    ] = None,
    remove_primes: Annotated[
        str | None, Parameter(name=["--remove-primes", "-x"], validator=validate_prime_list)
    ] = None,
    fundamental: Annotated[bool, Parameter(name=["--fundamental", "-f"])] = False,
    normalize: Annotated[bool, Parameter(name=["--normalize", "-n"])] = False,
) -> int:
    """
    Filter harmonics in various ways.

    Filters are cumulative; each one given removes more harmonics.

    Parameters
    ----------
    file: Path
        The wavetable to be filtered
    output: Path | None
        Output file (default: '<file>.filtered.wav')
    even: bool
        Keep only the even harmonics
    odd: bool
        Keep only the odd harmonics
    bitmap: str | None
        Keep only the harmonics set in a bitmap such as '0110'
        (index 0 is DC; harmonics past the end are removed)
    pattern: str | None
        Repeat a bitmap up the spectrum
    keep_primes: str | None
        Keep only these prime-factorization branches, e.g. '2,3'
    remove_primes: str | None
        Remove these prime-factorization branches, e.g. '5,7'
    fundamental: bool
        Protect the fundamental (overrides other filters)
    normalize: bool
        Normalize the output
    """
    try:
        masks = MaskSettings(
            keep_even=even,
            keep_odd=odd,
            keep_bitmap=parse_mask(bitmap) if bitmap is not None else None,
            keep_pattern=parse_mask(pattern) if pattern is not None else None,
            keep_primes=parse_prime_list(keep_primes) if keep_primes is not None else None,
            remove_primes=parse_prime_list(remove_primes) if remove_primes is not None else None,
            protect_fundamental=fundamental,
        )
        settings = FilterSettings(
            input_file=str(file),
            output_file=str(output) if output is not None else None,
            masks=masks,
            normalize=normalize,
        )
        written = run_filter(settings, console=console)
    except WavetoolError as e:
        print_error(f"Error: {e}")
        return 1

    print_success(f"Wrote {written}")
    return 0


@app.command
def spectrogram(
    file: Path,
    phase: bool = False,
) -> int:
    """
    Generate a spectrogram image from a wavetable.

    Parameters
    ----------
    file: Path
        The wavetable to analyze
    phase: bool
        Color each partial by its phase
    """
    try:
        written = run_spectrogram(file, phase=phase, console=console)
    except WavetoolError as e:
        print_error(f"Error: {e}")
        return 1

    print_success(f"Wrote {written}")
    return 0


@app.command
def info(file: Path) -> int:
    """
    Display information about a wavetable file.

    Parameters
    ----------
    file: Path
        The path to the wavetable
    """
    try:
        table = load_wavetable(file)
    except WavetoolError as e:
        print_error(f"Error: {e}")
        return 1

    samples = table.samples()
    console.print(f"Wavetable: {file}")
    console.print(f"  Cycles: {table.num_cycles}")
    console.print(f"  Sample rate: {table.sample_rate} Hz")
    console.print(f"  Peak: {table.peak():.4f}")
    console.print(f"  RMS: {np.sqrt(np.mean(samples.astype(np.float64) ** 2)):.4f}")
    if table.metadata is not None:
        console.print(f"  Vendor chunk: {len(table.metadata)} bytes")
    else:
        console.print("  Vendor chunk: none")

    power = np.abs(table.to_spectrogram().as_array()) ** 2
    total = float(np.sum(power[:, 1:]))
    if total == 0.0:
        console.print("  Spectrum: silent")
        return 0

    branches = Table(show_header=True, header_style="bold")
    branches.add_column("Branch", justify="right")
    branches.add_column("Energy", justify="right")
    branches.add_row("fundamental", f"{np.sum(power[:, 1]) / total:.1%}")
    for prime in primes_up_to(MAX_FACTOR_PRIME):
        share = float(np.sum(power[:, branch_mask(prime)])) / total
        branches.add_row(f"p{prime:02d}", f"{share:.1%}")

    console.print("")
    console.print("[bold]Harmonic energy by smallest prime factor:[/bold]")
    console.print(branches)
    return 0


if __name__ == "__main__":
    sys.exit(app())
