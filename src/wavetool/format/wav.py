"""Wavetable WAV codec.

Wavetables are mono WAV files holding whole 2048-sample cycles back to
back. Any sample format soundfile understands can be loaded; tables are
always saved as 32-bit float at 44100 Hz, with the source file's vendor
chunk re-emitted ahead of the sample data.
"""

from pathlib import Path

import numpy as np
import soundfile as sf

from wavetool.errors import MalformedInputError, ResourceError
from wavetool.format.riff import build_wav, read_vendor_chunk
from wavetool.types import OUTPUT_SAMPLE_RATE, WaveTable
from wavetool.utils import write_bytes_atomic


def load_wavetable(path: Path | str) -> WaveTable:
    """Load a wavetable from a mono WAV file.

    Args:
        path: Path to the WAV file.

    Returns:
        WaveTable with one Cycle per 2048 samples and the vendor chunk, if any.

    Raises:
        ResourceError: If the file cannot be opened or decoded.
        MalformedInputError: If the file is not mono or its sample count is
            not a positive multiple of the cycle length.
    """
    path = Path(path)
    metadata = read_vendor_chunk(path)

    try:
        data, sample_rate = sf.read(path, dtype="float32", always_2d=True)
    except sf.SoundFileError as e:
        raise ResourceError("Cannot decode wavetable", path) from e

    if data.shape[1] != 1:
        raise MalformedInputError(
            f"Invalid wavetable: {path} has {data.shape[1]} channels, expected mono"
        )

    return WaveTable.from_samples(data[:, 0], metadata=metadata, sample_rate=int(sample_rate))


def encode_wavetable(table: WaveTable) -> bytes:
    """Encode ``table`` as the bytes of a 32-bit float WAV file."""
    samples = table.samples().astype("<f4")
    return build_wav(samples.tobytes(), OUTPUT_SAMPLE_RATE, vendor_data=table.metadata)


def save_wavetable(path: Path | str, table: WaveTable) -> None:
    """Save ``table`` as a mono 32-bit float WAV file.

    The file appears under ``path`` only once it is completely written.

    Raises:
        MalformedInputError: If the table contains NaN or Inf samples.
        ResourceError: If the file cannot be written.
    """
    if not np.all(np.isfinite(table.samples())):
        raise MalformedInputError("Refusing to save a wavetable with NaN or Inf samples")
    write_bytes_atomic(path, encode_wavetable(table))
