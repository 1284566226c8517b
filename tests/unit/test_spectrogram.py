import numpy as np
import pytest
from matplotlib import image as mpimg

from wavetool.render.spectrogram import (
    DISPLAYED_PARTIALS,
    PIXEL_SIZE,
    hsl_to_rgb,
    lightness,
    render_spectrogram,
    save_spectrogram_png,
)
from wavetool.types import CYCLE_LENGTH, PARTIAL_COUNT, Cycle, WaveTable

PHASE = np.arange(CYCLE_LENGTH) / CYCLE_LENGTH


def sine_spectrogram(num_cycles=3):
    cycle = Cycle(np.sin(2 * np.pi * PHASE))
    return WaveTable([cycle] * num_cycles).to_spectrogram()


def cell(image, partial, cycle=0):
    """Pixel at the centre of the block for (cycle, partial)."""
    row = (DISPLAYED_PARTIALS - 1 - partial) * PIXEL_SIZE + PIXEL_SIZE // 2
    col = cycle * PIXEL_SIZE + PIXEL_SIZE // 2
    return image[row, col]


def test_displayed_partials_fit_in_partial_set():
    assert DISPLAYED_PARTIALS <= PARTIAL_COUNT


def test_image_shape_and_dtype():
    image = render_spectrogram(sine_spectrogram(3))

    assert image.dtype == np.uint8
    assert image.shape == (DISPLAYED_PARTIALS * PIXEL_SIZE, 3 * PIXEL_SIZE, 3)


def test_fundamental_is_light_grey_and_dc_is_black():
    image = render_spectrogram(sine_spectrogram(2))

    # |0.5|^2 is -6 dB -> (255 - 24) / 255
    np.testing.assert_array_equal(cell(image, 1), [231, 231, 231])
    np.testing.assert_array_equal(cell(image, 1, cycle=1), [231, 231, 231])
    np.testing.assert_array_equal(cell(image, 0), [0, 0, 0])
    np.testing.assert_array_equal(cell(image, 7), [0, 0, 0])


def test_low_partials_at_the_bottom():
    image = render_spectrogram(sine_spectrogram(1))
    lit_rows = np.flatnonzero(image[:, 0, 0])

    assert lit_rows.min() == (DISPLAYED_PARTIALS - 2) * PIXEL_SIZE
    assert lit_rows.max() == (DISPLAYED_PARTIALS - 1) * PIXEL_SIZE - 1


def test_blocks_are_uniform():
    image = render_spectrogram(sine_spectrogram(1))
    block = image[(DISPLAYED_PARTIALS - 2) * PIXEL_SIZE : (DISPLAYED_PARTIALS - 1) * PIXEL_SIZE]
    assert np.all(block == block[0, 0])


def test_phase_coloring():
    """A sine's fundamental sits at -90 degrees, which maps to a violet hue."""
    image = render_spectrogram(sine_spectrogram(1), phase=True)
    r, g, b = (int(v) for v in cell(image, 1))

    assert b > r > g
    np.testing.assert_array_equal(cell(image, 0), [0, 0, 0])


def test_lightness_clipping():
    values = lightness(np.array([0.0, 1.0, 1e-5, 10.0], dtype=np.complex128))
    np.testing.assert_allclose(values, [0.0, 1.0, 0.0, 1.0])


@pytest.mark.parametrize(
    "hue, light, expected",
    [
        (0.0, 0.5, [1.0, 0.0, 0.0]),
        (120.0, 0.5, [0.0, 1.0, 0.0]),
        (240.0, 0.5, [0.0, 0.0, 1.0]),
        (-120.0, 0.5, [0.0, 0.0, 1.0]),
        (60.0, 0.5, [1.0, 1.0, 0.0]),
        (200.0, 1.0, [1.0, 1.0, 1.0]),
        (300.0, 0.0, [0.0, 0.0, 0.0]),
    ],
)
def test_hsl_to_rgb(hue, light, expected):
    rgb = hsl_to_rgb(np.array([hue]), 1.0, np.array([light]))
    np.testing.assert_allclose(rgb[0], expected, atol=1e-12)


def test_save_png(tmp_path):
    image = render_spectrogram(sine_spectrogram(2))
    output_path = tmp_path / "spectrum.png"

    save_spectrogram_png(output_path, image)

    assert output_path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    assert mpimg.imread(output_path).shape[:2] == image.shape[:2]
