"""RIFF chunk walking and WAV assembly for wavetable files.

Only the chunk structure is handled here. Sample decoding is left to
soundfile; this module exists so that the vendor chunk (``clm `` in Serum
wavetables) can be found on load and re-emitted on save without ever being
interpreted.
"""

import struct
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from wavetool.errors import MalformedInputError, ResourceError

RIFF_ID = b"RIFF"
WAVE_ID = b"WAVE"
FMT_ID = b"fmt "
DATA_ID = b"data"
VENDOR_ID = b"clm "

WAVE_FORMAT_IEEE_FLOAT = 3

# FourCC + little-endian payload size
_CHUNK_HEADER = struct.Struct("<4sI")
# "RIFF", size of everything after this field, "WAVE"
_RIFF_HEADER = struct.Struct("<4sI4s")
# format tag, channels, sample rate, byte rate, block align, bits per sample
_FMT_PAYLOAD = struct.Struct("<HHIIHH")


class RiffError(MalformedInputError):
    """The file's RIFF chunk structure is invalid or truncated."""


def read_chunk_header(f: BinaryIO) -> tuple[bytes, int]:
    """Read the 8-byte header at the current position.

    Returns:
        (FourCC, payload size)

    Raises:
        RiffError: If fewer than 8 bytes remain.
    """
    raw = f.read(_CHUNK_HEADER.size)
    if len(raw) < _CHUNK_HEADER.size:
        raise RiffError("File ends in the middle of a chunk header")
    chunk_id, size = _CHUNK_HEADER.unpack(raw)
    return chunk_id, size


def read_riff_header(f: BinaryIO) -> int:
    """Check the ``RIFF....WAVE`` preamble.

    Returns:
        Offset one past the last byte the RIFF header claims to cover.
    """
    raw = f.read(_RIFF_HEADER.size)
    if len(raw) < _RIFF_HEADER.size:
        raise RiffError("File is too short to hold a RIFF header")

    riff, body_size, form = _RIFF_HEADER.unpack(raw)
    if riff != RIFF_ID:
        raise RiffError(f"Expected a RIFF file, found {riff!r}")
    if form != WAVE_ID:
        raise RiffError(f"Expected a WAVE form, found {form!r}")
    return body_size + 8


def iter_chunks(f: BinaryIO, end: int) -> Iterator[tuple[bytes, int]]:
    """Yield (FourCC, payload size) for every chunk before ``end``.

    After each yield ``f`` is positioned at the start of that chunk's
    payload. The caller may read from it; the walk re-seeks to the next
    chunk either way. A header cut off by the end of the file stops the
    walk quietly.
    """
    position = f.tell()
    while position < end:
        f.seek(position)
        try:
            chunk_id, size = read_chunk_header(f)
        except RiffError:
            return
        yield chunk_id, size
        # payloads are padded to an even length
        position += _CHUNK_HEADER.size + size + (size & 1)


def find_chunk(f: BinaryIO, target_id: bytes, file_size: int) -> bytes | None:
    """Return the payload of the first ``target_id`` chunk, or None.

    ``f`` must be positioned just after the RIFF header.

    Raises:
        RiffError: If the chunk is found but its payload is truncated.
    """
    for chunk_id, size in iter_chunks(f, file_size):
        if chunk_id != target_id:
            continue
        payload = f.read(size)
        if len(payload) < size:
            raise RiffError(
                f"Chunk {target_id!r} declares {size} bytes but only "
                f"{len(payload)} are present"
            )
        return payload
    return None


def read_vendor_chunk(file_path: Path | str) -> bytes | None:
    """Return the ``clm `` payload of a WAV file, or None if it has none.

    Raises:
        ResourceError: If the file cannot be opened or read.
        RiffError: If the file is not a RIFF/WAVE file.
    """
    file_path = Path(file_path)
    try:
        with open(file_path, "rb") as f:
            end = read_riff_header(f)
            return find_chunk(f, VENDOR_ID, end)
    except OSError as e:
        raise ResourceError("Cannot read wavetable", file_path) from e


def _chunk(chunk_id: bytes, payload: bytes) -> bytes:
    pad = b"\x00" * (len(payload) & 1)
    return _CHUNK_HEADER.pack(chunk_id, len(payload)) + payload + pad


def build_wav(samples: bytes, sample_rate: int, vendor_data: bytes | None = None) -> bytes:
    """Assemble a mono 32-bit float WAV file.

    Chunks are written as ``fmt ``, then the vendor chunk when
    ``vendor_data`` is given, then ``data``. Synths that read the vendor
    chunk expect it ahead of the samples.

    Args:
        samples: Little-endian float32 sample bytes.
        sample_rate: Sample rate in Hz.
        vendor_data: Opaque vendor chunk payload, copied byte-for-byte.
    """
    bytes_per_sample = 4
    fmt = _FMT_PAYLOAD.pack(
        WAVE_FORMAT_IEEE_FLOAT,
        1,
        sample_rate,
        sample_rate * bytes_per_sample,
        bytes_per_sample,
        8 * bytes_per_sample,
    )

    chunks = [_chunk(FMT_ID, fmt)]
    if vendor_data is not None:
        chunks.append(_chunk(VENDOR_ID, vendor_data))
    chunks.append(_chunk(DATA_ID, samples))

    body = b"".join(chunks)
    return _RIFF_HEADER.pack(RIFF_ID, len(body) + len(WAVE_ID), WAVE_ID) + body
