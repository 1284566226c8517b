"""Wavetable file format module.

Format Overview
---------------
A wavetable is a standard mono WAV file whose sample count is a multiple
of 2048, one cycle after another:

    +----------------------------------------+
    | RIFF Header ("WAVE")                   |
    +----------------------------------------+
    | fmt  chunk (32-bit float, 44100 Hz)    |
    +----------------------------------------+
    | clm  chunk (optional, vendor data,     |
    |   passed through unchanged)            |
    +----------------------------------------+
    | data chunk (cycle 0, cycle 1, ...)     |
    +----------------------------------------+

Example Usage
-------------
>>> from wavetool.format import load_wavetable, save_wavetable
>>> table = load_wavetable("saw.wav")
>>> print(f"{table.num_cycles} cycles, vendor chunk: {table.metadata is not None}")
>>> save_wavetable("copy.wav", table)
"""

from wavetool.format.riff import RiffError
from wavetool.format.wav import encode_wavetable, load_wavetable, save_wavetable

__all__ = [
    "load_wavetable",
    "save_wavetable",
    "encode_wavetable",
    "RiffError",
]
