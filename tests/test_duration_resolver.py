from unittest.mock import patch

from _helpers import atom, make_mp4, make_wav
from media.duration import DurationResolver
from media.exceptions import FormatParseError
from media.models import DurationSource

NO_MUTAGEN = patch("media.duration.probe_duration_via_mutagen", side_effect=FormatParseError("no stream info"))


def test_header_duration_is_exact_and_rounded_half_up():
    estimate = DurationResolver().resolve(make_wav(2.5), "talk.wav")
    assert estimate.seconds == 3
    assert estimate.is_exact
    assert estimate.source is DurationSource.CONTAINER_HEADER


def test_mp4_header_duration():
    estimate = DurationResolver().resolve(make_mp4(61_400, 1000), "talk.mp4")
    assert (estimate.seconds, estimate.is_exact) == (61, True)


def test_metadata_probe_used_when_header_parse_fails():
    with patch("media.duration.probe_duration_via_mutagen", return_value=12.4) as probe:
        estimate = DurationResolver().resolve(b"\x00" * 1000, "talk.ogg")
    probe.assert_called_once()
    assert estimate.seconds == 12
    assert estimate.is_exact
    assert estimate.source is DurationSource.METADATA_PROBE


def test_bitrate_heuristic_uses_container_rate():
    with NO_MUTAGEN:
        mp3 = DurationResolver().resolve(b"\x00" * 32000, "talk.mp3")
        other = DurationResolver().resolve(b"\x00" * 64000, "talk.xyz")
    assert (mp3.seconds, mp3.is_exact, mp3.source) == (2, False, DurationSource.BITRATE_HEURISTIC)
    assert other.seconds == 2


def test_heuristic_never_below_one_second():
    with NO_MUTAGEN:
        estimate = DurationResolver().resolve(b"\x00" * 10, "tiny.xyz")
    assert estimate.seconds == 1


def test_strict_policy_skips_heuristic():
    with NO_MUTAGEN:
        estimate = DurationResolver(policy="strict", default_seconds=45).resolve(b"\x00" * 64000, "talk.xyz")
    assert (estimate.seconds, estimate.is_exact, estimate.source) == (45, False, DurationSource.DEFAULT)


def test_empty_buffer_gets_default():
    estimate = DurationResolver().resolve(b"", "empty.wav")
    assert estimate.source is DurationSource.DEFAULT
    assert estimate.seconds == 60


def test_word_count_estimate():
    resolver = DurationResolver()
    assert resolver.estimate_from_transcript(" ".join(["word"] * 300)).seconds == 120
    # floor of ten seconds for very short transcripts
    assert resolver.estimate_from_transcript("just five words right here").seconds == 10
    assert resolver.estimate_from_transcript("   ") is None


def test_refine_only_replaces_default():
    resolver = DurationResolver()
    text = " ".join(["word"] * 150)

    refined = resolver.refine(resolver.default(), text)
    assert refined.source is DurationSource.WORD_COUNT_HEURISTIC
    assert refined.seconds == 60

    exact = resolver.resolve(make_wav(3.0), "a.wav")
    assert resolver.refine(exact, text) is exact
    assert resolver.refine(resolver.default(), "").source is DurationSource.DEFAULT


def test_broken_mp4_header_falls_through_the_chain():
    clip = atom(b"ftyp", b"isom\x00\x00\x02\x00") + atom(b"moov", atom(b"mvhd", b""))
    with NO_MUTAGEN:
        estimate = DurationResolver().resolve(clip, "clip.mp4")
    assert estimate.source is DurationSource.BITRATE_HEURISTIC
    assert not estimate.is_exact
