"""Unit tests for RIFF chunk handling."""

import io
import struct
from pathlib import Path

import pytest

from wavetool.errors import ResourceError
from wavetool.format.riff import (
    DATA_ID,
    FMT_ID,
    VENDOR_ID,
    WAVE_FORMAT_IEEE_FLOAT,
    RiffError,
    build_wav,
    find_chunk,
    iter_chunks,
    read_chunk_header,
    read_riff_header,
    read_vendor_chunk,
)


def chunk_ids(wav: bytes) -> list[bytes]:
    """List the chunk FourCCs of a WAV file in file order."""
    ids = []
    pos = 12
    while pos < len(wav):
        chunk_id = wav[pos : pos + 4]
        size = struct.unpack("<I", wav[pos + 4 : pos + 8])[0]
        ids.append(chunk_id)
        pos += 8 + size + (size % 2)
    return ids


class TestBuildWav:
    """Test WAV file assembly."""

    def test_header(self):
        wav = build_wav(b"\x00" * 16, 44100)

        assert wav[:4] == b"RIFF"
        assert wav[8:12] == b"WAVE"
        assert struct.unpack("<I", wav[4:8])[0] == len(wav) - 8

    def test_float_format_chunk(self):
        wav = build_wav(b"\x00" * 16, 44100)
        f = io.BytesIO(wav)
        file_size = read_riff_header(f)
        fmt = find_chunk(f, FMT_ID, file_size)

        audio_format, channels, rate, byte_rate, align, bits = struct.unpack("<HHIIHH", fmt)
        assert audio_format == WAVE_FORMAT_IEEE_FLOAT
        assert channels == 1
        assert rate == 44100
        assert byte_rate == 44100 * 4
        assert align == 4
        assert bits == 32

    def test_vendor_chunk_precedes_data(self):
        wav = build_wav(b"\x00" * 16, 44100, vendor_data=b"<!>2048 10000000 wavetable")
        assert chunk_ids(wav) == [FMT_ID, VENDOR_ID, DATA_ID]

    def test_no_vendor_chunk(self):
        wav = build_wav(b"\x00" * 16, 44100)
        assert chunk_ids(wav) == [FMT_ID, DATA_ID]

    def test_odd_vendor_chunk_is_padded(self):
        """Test that an odd-length payload is padded and read back unchanged."""
        payload = b"abc"
        wav = build_wav(b"\x00" * 8, 44100, vendor_data=payload)
        f = io.BytesIO(wav)
        file_size = read_riff_header(f)

        assert len(wav) % 2 == 0
        assert find_chunk(f, VENDOR_ID, file_size) == payload
        f.seek(12)
        assert find_chunk(f, DATA_ID, file_size) == b"\x00" * 8


class TestReadChunks:
    """Test chunk parsing."""

    def test_read_chunk_header(self):
        f = io.BytesIO(b"data" + struct.pack("<I", 42))
        assert read_chunk_header(f) == (b"data", 42)

    def test_short_chunk_header(self):
        with pytest.raises(RiffError):
            read_chunk_header(io.BytesIO(b"dat"))

    @pytest.mark.parametrize(
        "header",
        [b"RIFF", b"RIFX\x00\x00\x00\x00WAVE", b"RIFF\x00\x00\x00\x00AVI "],
    )
    def test_bad_riff_header(self, header):
        with pytest.raises(RiffError):
            read_riff_header(io.BytesIO(header))

    def test_missing_chunk(self):
        f = io.BytesIO(build_wav(b"\x00" * 8, 44100))
        file_size = read_riff_header(f)
        assert find_chunk(f, VENDOR_ID, file_size) is None

    def test_truncated_chunk(self):
        wav = build_wav(b"\x00" * 8, 44100, vendor_data=b"x" * 100)
        f = io.BytesIO(wav[:-60])
        file_size = read_riff_header(f)

        with pytest.raises(RiffError, match="declares"):
            find_chunk(f, VENDOR_ID, file_size)


class TestReadVendorChunk:
    """Test vendor chunk extraction from files."""

    def test_read_vendor_chunk(self, tmp_path: Path) -> None:
        path = tmp_path / "table.wav"
        path.write_bytes(build_wav(b"\x00" * 8, 44100, vendor_data=b"\x01\x02\x03\x04"))
        assert read_vendor_chunk(path) == b"\x01\x02\x03\x04"

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "missing.wav"
        with pytest.raises(ResourceError) as e:
            read_vendor_chunk(path)
        assert e.value.path == path

    def test_not_a_wav(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("definitely not audio")
        with pytest.raises(RiffError):
            read_vendor_chunk(path)


def test_iter_chunks_walks_every_chunk():
    wav = build_wav(b"\x00" * 12, 44100, vendor_data=b"odd")
    f = io.BytesIO(wav)
    end = read_riff_header(f)

    assert [(chunk_id, size) for chunk_id, size in iter_chunks(f, end)] == [
        (FMT_ID, 16),
        (VENDOR_ID, 3),
        (DATA_ID, 12),
    ]
