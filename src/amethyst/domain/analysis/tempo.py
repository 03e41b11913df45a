"""
Tempo analysis for audio files.

Decodes a file into a mono PCM buffer with pydub and estimates the dominant
tempo from the autocorrelation of an energy-onset envelope.
"""

import io
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

import numpy as np
from pydub import AudioSegment

from amethyst.core.exceptions import AnalysisError

HOP_SIZE = 256
MIN_ANALYSIS_SECONDS = 2.0

# Extensions whose ffmpeg demuxer has a different name
CONTAINER_FORMATS = {"opus": "ogg"}


@dataclass(frozen=True)
class SampleBuffer:
    """Mono float32 samples in [-1, 1] plus their sample rate."""

    samples: np.ndarray
    sample_rate: int

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0


def read_file(path: str) -> bytes:
    """Read a whole audio file into memory."""
    return Path(path).read_bytes()


def format_hint(path: str) -> Optional[str]:
    """ffmpeg input format for ``path``, from its extension (None means autodetect)."""
    ext = PurePath(path).suffix.lstrip(".").lower()
    if not ext:
        return None
    return CONTAINER_FORMATS.get(ext, ext)


def decode_audio(data: bytes, fmt: Optional[str] = None) -> SampleBuffer:
    """Decode encoded audio bytes into a mono sample buffer.

    Args:
        data: Encoded file contents
        fmt: Container hint such as "mp3" or "wav" (usually the file extension)

    Raises:
        AnalysisError: If the data cannot be decoded
    """
    if fmt:
        fmt = CONTAINER_FORMATS.get(fmt.lower(), fmt)
    try:
        audio = AudioSegment.from_file(io.BytesIO(data), format=fmt)
    except FileNotFoundError as e:
        raise AnalysisError("ffmpeg not found. Install: apt install ffmpeg") from e
    except Exception as e:
        raise AnalysisError(f"Failed to decode audio: {type(e).__name__}") from e

    audio = audio.set_channels(1)
    samples = np.array(audio.get_array_of_samples(), dtype=np.float32)
    full_scale = float(1 << (8 * audio.sample_width - 1))
    return SampleBuffer(samples=samples / full_scale, sample_rate=audio.frame_rate)


def onset_envelope(samples: np.ndarray, hop_size: int = HOP_SIZE) -> np.ndarray:
    """Half-wave rectified frame-to-frame energy increase."""
    num_frames = len(samples) // hop_size
    frames = samples[: num_frames * hop_size].reshape(num_frames, hop_size)
    energy = np.sqrt(np.mean(frames.astype(np.float64) ** 2, axis=1))
    return np.maximum(np.diff(energy), 0.0)


def _autocorrelate(signal: np.ndarray) -> np.ndarray:
    centered = signal - signal.mean()
    n = 1 << int(np.ceil(np.log2(2 * len(centered))))
    spectrum = np.fft.rfft(centered, n)
    return np.fft.irfft(spectrum * np.conj(spectrum), n)[: len(centered)]


def detect_tempo(
    buffer: SampleBuffer, min_bpm: float = 90.0, max_bpm: float = 180.0
) -> float:
    """Estimate the dominant tempo of ``buffer`` in beats per minute.

    Raises:
        AnalysisError: If the buffer is too short or has no rhythmic content
    """
    if buffer.duration < MIN_ANALYSIS_SECONDS:
        raise AnalysisError(f"Audio too short for tempo analysis ({buffer.duration:.2f}s)")

    envelope = onset_envelope(buffer.samples)
    if not np.any(envelope > 0):
        raise AnalysisError("No onsets found (silent audio?)")

    frame_rate = buffer.sample_rate / HOP_SIZE
    correlation = _autocorrelate(envelope)

    # Lags are in frames; faster tempo means shorter lag
    min_lag = max(1, int(np.floor(60.0 * frame_rate / max_bpm)))
    max_lag = min(len(correlation) - 2, int(np.ceil(60.0 * frame_rate / min_bpm)))
    if max_lag <= min_lag:
        raise AnalysisError("Audio too short for the requested BPM range")

    window = correlation[min_lag : max_lag + 1]
    lag = min_lag + int(np.argmax(window))
    if correlation[lag] <= 0:
        raise AnalysisError("No periodic onsets found")

    # Parabolic interpolation around the peak for sub-frame precision
    left, center, right = correlation[lag - 1], correlation[lag], correlation[lag + 1]
    denominator = left - 2 * center + right
    offset = 0.5 * (left - right) / denominator if denominator else 0.0
    refined_lag = lag + float(np.clip(offset, -0.5, 0.5))

    return 60.0 * frame_rate / refined_lag


def analyze_bpm(path: str, min_bpm: float = 90.0, max_bpm: float = 180.0) -> int:
    """Read, decode and analyze a file in one call, rounded to whole BPM."""
    buffer = decode_audio(read_file(path), format_hint(path))
    return round(detect_tempo(buffer, min_bpm=min_bpm, max_bpm=max_bpm))
