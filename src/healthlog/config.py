"""Configuration handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import yaml

from .capture import DEFAULT_SESSION_NOTES


@dataclass
class ValidationConfig:
    duplicate_window_seconds: int = 300
    systolic_min: int = 70
    systolic_max: int = 200
    diastolic_min: int = 40
    diastolic_max: int = 120
    glucose_min: int = 70
    glucose_max: int = 400
    weight_min: float = 30.0
    weight_max: float = 300.0
    heart_rate_min: int = 40
    heart_rate_max: int = 200


@dataclass
class SpeechConfig:
    whisper_model: str = "small"
    language: Optional[str] = None
    device: Optional[str] = None
    compute_type: Optional[str] = None


@dataclass
class Config:
    log_path: str = "healthlog.json"
    log_dir: str = "logs"
    history_days: int = 7
    voice_notes: str = DEFAULT_SESSION_NOTES
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    validation = ValidationConfig(**data.get("validation", {}))
    speech = SpeechConfig(**data.get("speech", {}))

    return Config(
        log_path=data.get("log_path", "healthlog.json"),
        log_dir=data.get("log_dir", "logs"),
        history_days=int(data.get("history_days", 7)),
        voice_notes=data.get("voice_notes", DEFAULT_SESSION_NOTES),
        validation=validation,
        speech=speech,
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "log_path": config.log_path,
        "log_dir": config.log_dir,
        "history_days": config.history_days,
        "voice_notes": config.voice_notes,
        "validation": {
            "duplicate_window_seconds": config.validation.duplicate_window_seconds,
            "systolic_min": config.validation.systolic_min,
            "systolic_max": config.validation.systolic_max,
            "diastolic_min": config.validation.diastolic_min,
            "diastolic_max": config.validation.diastolic_max,
            "glucose_min": config.validation.glucose_min,
            "glucose_max": config.validation.glucose_max,
            "weight_min": config.validation.weight_min,
            "weight_max": config.validation.weight_max,
            "heart_rate_min": config.validation.heart_rate_min,
            "heart_rate_max": config.validation.heart_rate_max,
        },
        "speech": {
            "whisper_model": config.speech.whisper_model,
            "language": config.speech.language,
            "device": config.speech.device,
            "compute_type": config.speech.compute_type,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
