"""
Constants for media preparation.

Every payload handed to a transcription backend is normalized to the same
target format, so byte sizes and durations convert into each other exactly.
"""

# Target format (mono, 16 kHz, 16-bit PCM WAV)
TARGET_SAMPLE_RATE = 16000
TARGET_CHANNELS = 1
TARGET_AUDIO_CODEC = "pcm_s16le"
TARGET_BYTE_RATE = TARGET_SAMPLE_RATE * TARGET_CHANNELS * 2

# Assumed byte rates (bytes/second) for the size heuristic, keyed by container
ASSUMED_BYTE_RATES = {
    "wav": 176400,   # 44.1 kHz stereo 16-bit
    "mp3": 16000,    # 128 kbps
    "mp4": 125000,   # 1 Mbps
    "m4a": 125000,
    "mov": 125000,
}
DEFAULT_ASSUMED_BYTE_RATE = 32000

# Word-count fallback
ESTIMATED_SPEAKING_WPM = 150
MIN_WORD_COUNT_ESTIMATE_SEC = 10

VIDEO_CONTAINERS = {"mp4", "mov", "webm", "mkv", "avi", "m4v"}
AUDIO_CONTAINERS = {"wav", "mp3", "m4a", "aac", "ogg", "flac", "opus"}

MIME_TYPES = {
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "opus": "audio/opus",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
    "avi": "video/x-msvideo",
}
DEFAULT_MIME_TYPE = "application/octet-stream"
