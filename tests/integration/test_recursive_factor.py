"""Integration tests for recursive factoring.

A recursive sweep reads every branch it writes back from disk and factors
it again, so these tests exercise the codec, the spectral engine and the
worklist together.
"""

from pathlib import Path

import numpy as np
import pytest
from rich.console import Console

from wavetool.dsp.spectral import forward
from wavetool.format import load_wavetable, save_wavetable
from wavetool.pipeline import factor_output_path, run_factor
from wavetool.types import CYCLE_LENGTH, Cycle, FactorSettings, WaveTable

PHASE = np.arange(CYCLE_LENGTH) / CYCLE_LENGTH
QUIET = Console(quiet=True)


def write_harmonics(path: Path, harmonics, metadata=None) -> Path:
    samples = sum(0.3 * np.cos(2 * np.pi * h * PHASE) / h for h in harmonics)
    save_wavetable(path, WaveTable([Cycle(samples)], metadata=metadata))
    return path


class TestRecursiveUnshifted:
    """Recursion without shifting stops at fixed points."""

    def test_each_branch_expanded_once(self, tmp_path: Path) -> None:
        """Harmonics 1-12 have five non-empty branches (2, 3, 5, 7, 11).

        Each is factored once more; its own prime gives it back unchanged
        and the rest are silent, so the sweep stops at depth 1.
        """
        source = write_harmonics(tmp_path / "t.wav", range(1, 13))

        written = run_factor(
            FactorSettings(input_file=str(source), recursive=True), console=QUIET
        )

        assert len(written) == 14 + 5 * 14
        assert len(set(written)) == len(written)
        assert all(path.exists() for path in written)

        expanded = {p.name for p in written if p.name.count(".uup") == 2}
        assert {name.split(".uup")[1][:2] for name in expanded} == {"02", "03", "05", "07", "11"}

    def test_lowest_prime_expanded_first(self, tmp_path: Path) -> None:
        source = write_harmonics(tmp_path / "t.wav", range(1, 13))

        written = run_factor(
            FactorSettings(input_file=str(source), recursive=True), console=QUIET
        )

        assert written[14] == factor_output_path(
            factor_output_path(source, 2, False, False), 2, False, False
        )
        assert written[-1].name == "t.wav.uup11.wav.uup43.wav"

    def test_nested_branch_matches_parent(self, tmp_path: Path) -> None:
        source = write_harmonics(tmp_path / "t.wav", range(1, 13))
        run_factor(FactorSettings(input_file=str(source), recursive=True), console=QUIET)

        parent = factor_output_path(source, 3, False, False)
        nested = factor_output_path(parent, 3, False, False)
        np.testing.assert_allclose(
            load_wavetable(nested).samples(), load_wavetable(parent).samples(), atol=1e-6
        )


class TestRecursiveShifted:
    """Recursion with shifting walks content down to the fundamental."""

    def test_walks_down_to_fundamental(self, tmp_path: Path) -> None:
        """Harmonic 4 shifts to 2, then to 1, which belongs to no branch."""
        source = write_harmonics(tmp_path / "t.wav", [4], metadata=b"keep me")

        written = run_factor(
            FactorSettings(input_file=str(source), shift=True, recursive=True), console=QUIET
        )

        assert len(written) == 3 * 14

        level1 = factor_output_path(source, 2, True, False)
        level2 = factor_output_path(level1, 2, True, False)
        assert level1 in written
        assert level2 in written

        magnitudes = forward(load_wavetable(level2).cycles[0]).magnitudes()
        assert np.argmax(magnitudes) == 1
        assert load_wavetable(level2).metadata == b"keep me"

    @pytest.mark.parametrize("max_depth, expected", [(0, 14), (1, 28), (5, 42)])
    def test_max_depth(self, tmp_path: Path, max_depth: int, expected: int) -> None:
        source = write_harmonics(tmp_path / "t.wav", [4])

        written = run_factor(
            FactorSettings(
                input_file=str(source), shift=True, recursive=True, max_depth=max_depth
            ),
            console=QUIET,
        )

        assert len(written) == expected

    def test_normalized_recursion(self, tmp_path: Path) -> None:
        """Normalized branches are factored again without re-normalizing silence."""
        source = write_harmonics(tmp_path / "t.wav", [4, 8])

        written = run_factor(
            FactorSettings(
                input_file=str(source), shift=True, normalize=True, recursive=True
            ),
            console=QUIET,
        )

        for path in written:
            peak = load_wavetable(path).peak()
            assert peak < 1e-5 or peak == pytest.approx(1.0, abs=1e-6)
