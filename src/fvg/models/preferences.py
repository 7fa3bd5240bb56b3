"""Persisted user preferences for video generation."""

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ModelPreference = Literal["veo3.1", "veo3.1_fast", "veo3"]
RatioPreference = Literal["1280:720", "720:1280", "1080:1920", "1920:1080"]

SUPPORTED_MODELS: tuple[str, ...] = ("veo3.1_fast", "veo3.1", "veo3")
SUPPORTED_RATIOS: tuple[str, ...] = ("1280:720", "720:1280", "1080:1920", "1920:1080")

DEFAULT_MODEL: ModelPreference = "veo3.1_fast"
DEFAULT_RATIO: RatioPreference = "1920:1080"


class UserPreferences(BaseModel):
    """Remembered generation defaults.

    Unknown values never raise: they are replaced by the defaults.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_model: ModelPreference = Field(default=DEFAULT_MODEL, alias="defaultModel")
    last_ratio: RatioPreference = Field(default=DEFAULT_RATIO, alias="lastRatio")

    @field_validator("default_model", mode="before")
    @classmethod
    def _fallback_model(cls, value: Any) -> Any:
        return value if value in SUPPORTED_MODELS else DEFAULT_MODEL

    @field_validator("last_ratio", mode="before")
    @classmethod
    def _fallback_ratio(cls, value: Any) -> Any:
        return value if value in SUPPORTED_RATIOS else DEFAULT_RATIO


def load_preferences(path: Path) -> UserPreferences:
    """Load preferences from disk, falling back to defaults."""
    if not path.exists():
        return UserPreferences()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unreadable preferences at {path}: {e}")
        return UserPreferences()

    if not isinstance(data, dict):
        return UserPreferences()

    return UserPreferences(
        default_model=data.get("defaultModel"),
        last_ratio=data.get("lastRatio"),
    )


def save_preferences(preferences: UserPreferences, path: Path) -> None:
    """Write preferences to disk, normalizing invalid values."""
    normalized = UserPreferences(
        default_model=preferences.default_model,
        last_ratio=preferences.last_ratio,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(normalized.model_dump(by_alias=True), f, indent=2)
