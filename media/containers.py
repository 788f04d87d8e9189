"""
Header parsers for the containers we can measure without decoding.

All parsers work on an in-memory buffer, never trust declared lengths and
fail closed: anything missing, truncated or inconsistent raises
``FormatParseError`` instead of returning a plausible zero.
"""

import os
import struct
import logging
from dataclasses import dataclass
from typing import Iterator, Tuple

from media.constants import MIME_TYPES, DEFAULT_MIME_TYPE
from media.exceptions import FormatParseError

logger = logging.getLogger(__name__)

MP4_FAMILY = {"mp4", "m4a", "mov", "m4v"}
_MP4_TOP_LEVEL_ATOMS = {b"ftyp", b"moov", b"mdat", b"free", b"wide", b"skip"}


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower().lstrip(".")


def detect_container(buffer: bytes, filename: str = "") -> str:
    """
    Identify the container from magic bytes, falling back to the extension.

    Returns a short lowercase name ("wav", "mp3", "mp4", ...) or "unknown".
    """
    ext = file_extension(filename)

    if len(buffer) >= 12 and buffer[:4] == b"RIFF" and buffer[8:12] == b"WAVE":
        return "wav"
    if buffer[:3] == b"ID3":
        return "mp3"
    if len(buffer) >= 2 and buffer[0] == 0xFF and (buffer[1] & 0xE0) == 0xE0:
        # Layer bits 00 mark ADTS AAC, not MPEG audio
        if buffer[1] & 0x06:
            return "mp3"
        if (buffer[1] & 0xF0) == 0xF0:
            return "aac"
    if len(buffer) >= 8 and buffer[4:8] in _MP4_TOP_LEVEL_ATOMS:
        return ext if ext in MP4_FAMILY else "mp4"
    if buffer[:4] == b"OggS":
        return "ogg"
    if buffer[:4] == b"fLaC":
        return "flac"
    if buffer[:4] == b"\x1a\x45\xdf\xa3":
        return "webm" if ext != "mkv" else "mkv"

    return ext or "unknown"


def detect_mime_type(buffer: bytes, filename: str = "") -> str:
    """MIME type by extension first, then by magic bytes."""
    ext = file_extension(filename)
    if ext in MIME_TYPES:
        return MIME_TYPES[ext]
    return MIME_TYPES.get(detect_container(buffer), DEFAULT_MIME_TYPE)


# --------------------------
# WAV
# --------------------------
@dataclass(frozen=True)
class WavHeader:
    sample_rate: int
    channels: int
    byte_rate: int
    bits_per_sample: int
    data_offset: int
    data_size: int

    @property
    def duration_seconds(self) -> float:
        return self.data_size / self.byte_rate


def parse_wav_header(buffer: bytes) -> WavHeader:
    """
    Walk the RIFF sub-chunks and return the format and data descriptors.

    A ``data`` chunk that claims more bytes than the buffer holds is clamped
    to the bytes actually present.
    """
    if len(buffer) < 12 or buffer[:4] != b"RIFF" or buffer[8:12] != b"WAVE":
        raise FormatParseError("not a RIFF/WAVE buffer")

    fmt = None
    data_offset = data_size = None
    offset = 12
    while offset + 8 <= len(buffer):
        chunk_id = buffer[offset:offset + 4]
        (size,) = struct.unpack_from("<I", buffer, offset + 4)
        body = offset + 8
        remaining = len(buffer) - body

        if chunk_id == b"data":
            data_offset = body
            data_size = min(size, remaining)
            if fmt is not None:
                break
        elif size == 0 or size > remaining:
            logger.debug("Stopping RIFF walk at %r: declared size %d, remaining %d",
                         chunk_id, size, remaining)
            break
        elif chunk_id == b"fmt ":
            if size < 16:
                raise FormatParseError("truncated fmt chunk")
            channels, sample_rate, byte_rate = struct.unpack_from("<HII", buffer, body + 2)
            (bits,) = struct.unpack_from("<H", buffer, body + 14)
            fmt = (sample_rate, channels, byte_rate, bits)

        offset = body + size + (size & 1)

    if fmt is None:
        raise FormatParseError("missing fmt chunk")
    if data_size is None:
        raise FormatParseError("missing data chunk")
    sample_rate, channels, byte_rate, bits = fmt
    if byte_rate <= 0:
        raise FormatParseError("invalid byte rate in fmt chunk")
    if data_size <= 0:
        raise FormatParseError("empty data chunk")

    return WavHeader(
        sample_rate=sample_rate,
        channels=channels,
        byte_rate=byte_rate,
        bits_per_sample=bits,
        data_offset=data_offset,
        data_size=data_size,
    )


def parse_wav_duration(buffer: bytes) -> float:
    return parse_wav_header(buffer).duration_seconds


# --------------------------
# MP3 (ID3v2 TLEN)
# --------------------------
def decode_synchsafe(raw: bytes) -> int:
    """Decode a 4-byte ID3 synchsafe integer (7 significant bits per byte)."""
    if len(raw) != 4:
        raise FormatParseError("synchsafe integer needs 4 bytes")
    return (raw[0] & 0x7F) << 21 | (raw[1] & 0x7F) << 14 | (raw[2] & 0x7F) << 7 | (raw[3] & 0x7F)


def parse_mp3_duration(buffer: bytes) -> float:
    """Read the declared length (milliseconds) from an ID3v2 ``TLEN`` frame."""
    if len(buffer) < 10 or buffer[:3] != b"ID3":
        raise FormatParseError("missing ID3v2 header")

    tag_size = decode_synchsafe(buffer[6:10])
    scan_end = min(10 + tag_size, len(buffer) - 10)

    for i in range(10, max(10, scan_end)):
        if buffer[i:i + 4] != b"TLEN":
            continue
        (frame_size,) = struct.unpack_from(">I", buffer, i + 4)
        if not 0 < frame_size < 20:
            raise FormatParseError(f"implausible TLEN frame size {frame_size}")
        if i + 10 + frame_size > len(buffer):
            raise FormatParseError("TLEN frame truncated")
        # 10-byte frame header, then one text-encoding byte
        text = buffer[i + 11:i + 10 + frame_size].decode("latin-1").strip("\x00 ")
        if not text.isdigit() or int(text) <= 0:
            raise FormatParseError(f"non-numeric TLEN value {text!r}")
        return int(text) / 1000.0

    raise FormatParseError("no TLEN frame in ID3 tag")


# --------------------------
# MP4 / QuickTime
# --------------------------
def iter_atoms(buffer: bytes, start: int, end: int) -> Iterator[Tuple[bytes, int, int]]:
    """Yield ``(type, body_start, atom_end)`` for each atom in ``[start, end)``."""
    offset = start
    while offset + 8 <= end:
        size, kind = struct.unpack_from(">I4s", buffer, offset)
        header = 8
        if size == 1:
            if offset + 16 > end:
                return
            (size,) = struct.unpack_from(">Q", buffer, offset + 8)
            header = 16
        elif size == 0:
            size = end - offset
        if size < header or offset + size > end:
            logger.debug("Stopping atom walk at %r: size %d exceeds bounds", kind, size)
            return
        yield kind, offset + header, offset + size
        offset += size


def _read_mvhd(buffer: bytes, body: int, atom_end: int) -> float:
    if body >= atom_end:
        raise FormatParseError("empty mvhd")
    version = buffer[body]
    if version == 1:
        if body + 32 > atom_end:
            raise FormatParseError("truncated mvhd (v1)")
        (timescale,) = struct.unpack_from(">I", buffer, body + 20)
        (duration,) = struct.unpack_from(">Q", buffer, body + 24)
    else:
        if body + 20 > atom_end:
            raise FormatParseError("truncated mvhd (v0)")
        timescale, duration = struct.unpack_from(">II", buffer, body + 12)

    if timescale == 0:
        raise FormatParseError("mvhd timescale is zero")
    if duration == 0:
        raise FormatParseError("mvhd duration is zero")
    return duration / timescale


def parse_mp4_duration(buffer: bytes) -> float:
    """Duration from the movie header (``moov/mvhd``)."""
    for kind, body, atom_end in iter_atoms(buffer, 0, len(buffer)):
        if kind != b"moov":
            continue
        for child, child_body, child_end in iter_atoms(buffer, body, atom_end):
            if child == b"mvhd":
                return _read_mvhd(buffer, child_body, child_end)
        raise FormatParseError("moov atom has no mvhd")
    raise FormatParseError("no moov atom found")


def parse_container_duration(buffer: bytes, filename: str = "") -> float:
    """Dispatch to the header parser for the detected container."""
    container = detect_container(buffer, filename)
    if container == "wav":
        return parse_wav_duration(buffer)
    if container == "mp3":
        return parse_mp3_duration(buffer)
    if container in MP4_FAMILY:
        return parse_mp4_duration(buffer)
    raise FormatParseError(f"no header parser for container '{container}'")
