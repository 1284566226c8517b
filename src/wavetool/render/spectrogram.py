"""Spectrogram rendering.

Columns are cycles, rows are partials with the lowest at the bottom. Each
(cycle, partial) cell is a PIXEL_SIZE x PIXEL_SIZE block whose lightness
follows the partial's power in dB and, optionally, whose hue follows its
phase.
"""

import io
from pathlib import Path

import numpy as np
from matplotlib import image as mpimg
from numpy.typing import NDArray

from wavetool.types import Spectrogram
from wavetool.utils import write_bytes_atomic

PIXEL_SIZE = 10
# Serum only lets you edit up to 512, so the rest don't matter (+ DC offset)
DISPLAYED_PARTIALS = 513

_SECTOR_ORDER = np.array(
    [
        [0, 1, 2],
        [1, 0, 2],
        [2, 0, 1],
        [2, 1, 0],
        [1, 2, 0],
        [0, 2, 1],
    ]
)


def lightness(partials: NDArray[np.complex128]) -> NDArray[np.float64]:
    """Map power to lightness in [0, 1].

    Lightness drops by 4/255 per dB and saturates at black below about -64 dB.
    """
    power = np.abs(partials) ** 2
    with np.errstate(divide="ignore"):
        db = 10.0 * np.log10(power)
    return np.clip((255.0 + db * 4.0) / 255.0, 0.0, 1.0)


def hsl_to_rgb(
    hue: NDArray[np.float64],
    saturation: NDArray[np.float64] | float,
    light: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Vectorized HSL to RGB; hue in degrees, the rest in [0, 1].

    Returns:
        Array with a trailing axis of length 3 holding R, G, B in [0, 1].
    """
    hue = np.mod(hue, 360.0) / 60.0
    light = np.asarray(light, dtype=np.float64)
    chroma = (1.0 - np.abs(2.0 * light - 1.0)) * saturation
    x = chroma * (1.0 - np.abs(np.mod(hue, 2.0) - 1.0))
    sector = np.floor(hue).astype(int) % 6

    # (chroma, x, 0) -> (r, g, b) for each 60 degree sector of the hue wheel
    components = np.stack([chroma, x, np.zeros_like(chroma)], axis=-1)
    rgb = np.take_along_axis(components, _SECTOR_ORDER[sector], axis=-1)
    return rgb + (light - chroma / 2.0)[..., None]


def render_spectrogram(spectrogram: Spectrogram, phase: bool = False) -> NDArray[np.uint8]:
    """Render ``spectrogram`` to an RGB image.

    Args:
        spectrogram: One partial set per cycle.
        phase: Color each cell by the partial's phase; grey otherwise.

    Returns:
        uint8 array of shape (DISPLAYED_PARTIALS * PIXEL_SIZE,
        num_cycles * PIXEL_SIZE, 3).
    """
    # rows = partials, flipped so it goes low->high from bottom->top
    cells = spectrogram.as_array()[:, :DISPLAYED_PARTIALS].T[::-1]

    light = lightness(cells)
    if phase:
        hue = np.degrees(np.angle(cells))
        rgb = hsl_to_rgb(hue, 1.0, light)
    else:
        rgb = np.repeat(light[..., None], 3, axis=-1)

    pixels = np.round(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    return np.repeat(np.repeat(pixels, PIXEL_SIZE, axis=0), PIXEL_SIZE, axis=1)


def save_spectrogram_png(path: Path | str, image: NDArray[np.uint8]) -> None:
    """Write ``image`` as a PNG file."""
    buffer = io.BytesIO()
    mpimg.imsave(buffer, image, format="png")
    write_bytes_atomic(path, buffer.getvalue())
