from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import numpy as np
import openai
import pytest

from _helpers import make_wav
from media.exceptions import PayloadTooLargeError
from transcription.backends import build_backend
from transcription.exceptions import BackendCallError, ConfigurationError
from transcription.openai_backend import OpenAIWhisperBackend
from transcription.whisper_backend import WhisperBackend, decode_pcm_wav, resolve_device

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")


def status_error(code):
    return openai.APIStatusError(f"status {code}", response=httpx.Response(code, request=REQUEST), body=None)


def openai_backend(side_effect=None, return_value=None, max_payload_bytes=None):
    backend = OpenAIWhisperBackend(api_key="sk-test", max_payload_bytes=max_payload_bytes)
    client = MagicMock()
    client.audio.transcriptions.create.side_effect = side_effect
    client.audio.transcriptions.create.return_value = return_value
    backend._client = client
    return backend, client


def test_openai_requires_api_key():
    with pytest.raises(ConfigurationError):
        OpenAIWhisperBackend(api_key=None).ensure_configured()


def test_openai_transcribe_sends_named_file():
    backend, client = openai_backend(return_value=SimpleNamespace(text="  hello there "))
    result = backend.transcribe(make_wav(0.1), "talk_chunk_2.wav", language="en")

    assert result.text == "hello there"
    kwargs = client.audio.transcriptions.create.call_args.kwargs
    assert kwargs["model"] == "whisper-1"
    assert kwargs["language"] == "en"
    assert kwargs["file"][0] == "talk_chunk_2.wav"
    assert kwargs["file"][2] == "audio/wav"


def test_openai_omits_language_when_unset():
    backend, client = openai_backend(return_value="plain text")
    assert backend.transcribe(b"RIFF", "a.wav").text == "plain text"
    assert "language" not in client.audio.transcriptions.create.call_args.kwargs


def test_openai_payload_checked_before_upload():
    backend, client = openai_backend(max_payload_bytes=10)
    with pytest.raises(PayloadTooLargeError):
        backend.transcribe(b"x" * 11, "a.wav")
    client.audio.transcriptions.create.assert_not_called()


def test_openai_413_is_payload_too_large():
    backend, _ = openai_backend(side_effect=status_error(413))
    with pytest.raises(PayloadTooLargeError):
        backend.transcribe(b"x", "a.wav")


@pytest.mark.parametrize("code", [401, 403])
def test_openai_auth_errors_are_configuration_errors(code):
    backend, _ = openai_backend(side_effect=status_error(code))
    with pytest.raises(ConfigurationError):
        backend.transcribe(b"x", "a.wav")


@pytest.mark.parametrize("code,retryable", [(429, True), (500, True), (503, True), (400, False), (422, False)])
def test_openai_status_retryability(code, retryable):
    backend, _ = openai_backend(side_effect=status_error(code))
    with pytest.raises(BackendCallError) as exc:
        backend.transcribe(b"x", "a.wav")
    assert exc.value.retryable is retryable
    assert exc.value.status_code == code


def test_openai_connection_error_is_retryable():
    backend, _ = openai_backend(side_effect=openai.APIConnectionError(request=REQUEST))
    with pytest.raises(BackendCallError) as exc:
        backend.transcribe(b"x", "a.wav")
    assert exc.value.retryable


def test_decode_pcm_wav():
    samples = decode_pcm_wav(make_wav(1.0))
    assert samples.dtype == np.float32
    assert samples.shape == (16000,)
    assert float(np.abs(samples).max()) <= 1.0


def test_decode_rejects_wrong_format():
    with pytest.raises(BackendCallError) as exc:
        decode_pcm_wav(make_wav(0.1, sample_rate=44100))
    assert not exc.value.retryable


def test_whisper_transcribe_uses_cached_model():
    model = MagicMock()
    model.transcribe.return_value = {"text": " hola mundo ", "language": "es"}
    with patch("transcription.whisper_backend._get_or_load_model", return_value=model) as loader:
        result = WhisperBackend("base", device="cpu").transcribe(make_wav(0.5), "a.wav", "es")

    loader.assert_called_once_with("base", "cpu")
    assert (result.text, result.language) == ("hola mundo", "es")
    assert model.transcribe.call_args.kwargs["fp16"] is False


def test_whisper_runtime_error_is_retryable():
    model = MagicMock()
    model.transcribe.side_effect = RuntimeError("CUDA out of memory")
    with patch("transcription.whisper_backend._get_or_load_model", return_value=model):
        with pytest.raises(BackendCallError) as exc:
            WhisperBackend("base", device="cpu").transcribe(make_wav(0.5), "a.wav")
    assert exc.value.retryable


def test_whisper_missing_package_is_configuration_error():
    with patch("transcription.whisper_backend.whisper", None):
        with pytest.raises(ConfigurationError):
            WhisperBackend("base", device="cpu").ensure_configured()


def test_resolve_device_honours_explicit_choice():
    assert resolve_device("cpu") == "cpu"
    assert resolve_device("cuda") == "cuda"


def test_build_backend():
    base = dict(WHISPER_MODEL="base", WHISPER_DEVICE="cpu", OPENAI_API_KEY="sk", OPENAI_BASE_URL=None,
                OPENAI_TRANSCRIBE_MODEL="whisper-1", BACKEND_MAX_PAYLOAD_BYTES=1024)
    assert isinstance(build_backend(SimpleNamespace(ASR_BACKEND="openai", **base)), OpenAIWhisperBackend)
    assert isinstance(build_backend(SimpleNamespace(ASR_BACKEND="Whisper", **base)), WhisperBackend)
    with pytest.raises(ConfigurationError):
        build_backend(SimpleNamespace(ASR_BACKEND="vosk", **base))
