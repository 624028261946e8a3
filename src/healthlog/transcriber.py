"""Utterance transcription with Faster-Whisper."""

from __future__ import annotations

from typing import Any, Optional


def transcribe_utterance(
    audio_path: str,
    model_name: str = "small",
    language: str | None = None,
    device: str | None = None,
    compute_type: str | None = None,
    model: Optional[Any] = None,
) -> str:
    if model is None:
        try:
            from faster_whisper import WhisperModel
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "faster-whisper is required for transcription."
            ) from exc

        kwargs = {}
        if device:
            kwargs["device"] = device
        if compute_type:
            kwargs["compute_type"] = compute_type
        model = WhisperModel(model_name, **kwargs)

    segments, _info = model.transcribe(audio_path, language=language)
    parts = [seg.text.strip() for seg in segments]
    return " ".join(part for part in parts if part)
