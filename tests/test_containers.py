import struct

import pytest

from _helpers import atom, make_id3_mp3, make_mp4, make_wav
from media.containers import (
    decode_synchsafe,
    detect_container,
    detect_mime_type,
    parse_container_duration,
    parse_mp3_duration,
    parse_mp4_duration,
    parse_wav_duration,
    parse_wav_header,
)
from media.exceptions import FormatParseError


def test_wav_duration_from_header():
    wav = make_wav(2.0)
    header = parse_wav_header(wav)
    assert header.sample_rate == 16000
    assert header.channels == 1
    assert header.bits_per_sample == 16
    assert parse_wav_duration(wav) == pytest.approx(2.0)


def test_wav_data_chunk_clamped_to_buffer():
    # Header still declares 2 s of data, only 0.5 s is present
    truncated = make_wav(2.0)[:44 + 16000]
    assert parse_wav_duration(truncated) == pytest.approx(0.5)


def test_wav_without_data_chunk_fails():
    fmt = b"fmt " + struct.pack("<IHHIIHH", 16, 1, 1, 16000, 32000, 2, 16)
    riff = b"RIFF" + struct.pack("<I", 4 + len(fmt)) + b"WAVE" + fmt
    with pytest.raises(FormatParseError):
        parse_wav_header(riff)


def test_non_riff_buffer_rejected():
    with pytest.raises(FormatParseError):
        parse_wav_duration(b"not a wave file at all")


def test_mp3_tlen_frame():
    assert parse_mp3_duration(make_id3_mp3(123456)) == pytest.approx(123.456)


def test_mp3_without_tlen_fails():
    with pytest.raises(FormatParseError):
        parse_mp3_duration(make_id3_mp3(None, extra_frames=b"TIT2\x00\x00\x00\x03\x00\x00\x00ab"))


def test_mp3_implausible_tlen_size_fails():
    bad = b"TLEN" + struct.pack(">I", 500) + b"\x00\x00\x00123"
    with pytest.raises(FormatParseError):
        parse_mp3_duration(make_id3_mp3(None, extra_frames=bad))


def test_mp4_mvhd_version_0_and_1():
    assert parse_mp4_duration(make_mp4(30000, 1000)) == pytest.approx(30.0)
    assert parse_mp4_duration(make_mp4(90 * 600, 600, version=1)) == pytest.approx(90.0)


def test_mp4_without_moov_fails():
    with pytest.raises(FormatParseError):
        parse_mp4_duration(make_mp4(1000, with_moov=False))


def test_mp4_zero_timescale_fails():
    with pytest.raises(FormatParseError):
        parse_mp4_duration(make_mp4(1000, timescale=0))


def test_detect_container_prefers_magic_bytes():
    assert detect_container(make_wav(0.1), "clip.mp3") == "wav"
    assert detect_container(make_id3_mp3(1000), "clip.bin") == "mp3"
    assert detect_container(make_mp4(1000), "clip.mov") == "mov"
    assert detect_container(make_mp4(1000), "clip.bin") == "mp4"
    assert detect_container(b"\x00" * 32, "voice.flac") == "flac"
    assert detect_container(b"\x00" * 32, "") == "unknown"


def test_detect_mime_type():
    assert detect_mime_type(b"", "a.mp3") == "audio/mpeg"
    assert detect_mime_type(make_wav(0.1), "noext") == "audio/wav"
    assert detect_mime_type(b"\x00" * 32, "blob") == "application/octet-stream"


def test_decode_synchsafe():
    assert decode_synchsafe(b"\x00\x00\x02\x01") == 257
    with pytest.raises(FormatParseError):
        decode_synchsafe(b"\x00\x01")


def test_parse_container_duration_dispatch():
    assert parse_container_duration(make_wav(1.0), "a.wav") == pytest.approx(1.0)
    assert parse_container_duration(make_mp4(5000), "a.mp4") == pytest.approx(5.0)
    with pytest.raises(FormatParseError):
        parse_container_duration(b"OggS" + b"\x00" * 40, "a.ogg")


def test_mp4_empty_mvhd_fails():
    clip = atom(b"ftyp", b"isom\x00\x00\x02\x00") + atom(b"moov", atom(b"mvhd", b""))
    with pytest.raises(FormatParseError, match="empty mvhd"):
        parse_mp4_duration(clip)


def test_mp4_truncated_mvhd_fails():
    clip = atom(b"ftyp", b"isom\x00\x00\x02\x00") + atom(b"moov", atom(b"mvhd", b"\x00\x00\x00\x00" + b"\x00" * 8))
    with pytest.raises(FormatParseError, match="truncated mvhd"):
        parse_mp4_duration(clip)


def test_mp3_truncated_tlen_frame_fails():
    # Frame declares "12345" but the buffer ends after "12"
    cut = make_id3_mp3(12345)[:23]
    with pytest.raises(FormatParseError, match="truncated"):
        parse_mp3_duration(cut)


def test_adts_aac_is_not_mp3():
    adts = b"\xff\xf1\x50\x80" + b"\x00" * 60
    assert detect_container(adts, "") == "aac"
    assert detect_container(b"\xff\xfb\x90\x00" + b"\x00" * 60, "") == "mp3"
    assert detect_mime_type(adts, "blob") == "audio/aac"
