"""Scene plan data model."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ValidationIssue:
    """One defect found while validating a scene plan."""

    path: str
    message: str
    suggestion: Optional[str] = None


class Character(BaseModel):
    """A character that may speak in the plan."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Name matched against dialogue speakers")
    embedding_token: Optional[str] = Field(None, description="Handle referenced inside prompts")
    voice_id: Optional[str] = Field(None, description="Speech provider voice identifier")
    reference_images: Optional[List[str]] = Field(None, description="Local reference image paths")

    @property
    def speakable(self) -> bool:
        """Return True when the character has a voice configured."""
        return bool(self.voice_id)


class Dialogue(BaseModel):
    """A spoken line attached to a beat."""

    model_config = ConfigDict(frozen=True)

    speaker: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class Beat(BaseModel):
    """One timeline unit of the plan, rendered as one clip."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Artifact key used by every stage")
    prompt: str = Field(..., min_length=1, description="Text-to-video prompt")
    duration_sec: float = Field(..., alias="durationSec", gt=0, description="Requested clip length")
    dialogue: Optional[Dialogue] = None
    need_lip_sync: bool = Field(default=False, alias="needLipSync")
    effect: Optional[str] = Field(None, description="Effect tag, e.g. 'kiss'")
    effect_assets: Optional[Dict[str, str]] = Field(None, alias="effectAssets")
    camera: Optional[str] = Field(None, description="Free-text camera hint")


class ScenePlan(BaseModel):
    """Validated, read-only plan driving every pipeline stage."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    characters: List[Character] = Field(default_factory=list)
    beats: List[Beat] = Field(default_factory=list)

    def has_voice_information(self) -> bool:
        """Return True if any character can be voiced."""
        return any(character.speakable for character in self.characters)

    def find_voice(self, speaker: Optional[str]) -> Optional[str]:
        """Resolve a voice id for a dialogue speaker.

        An exact name match wins; otherwise the first character with a voice
        is used. Returns None when no character has a voice at all.
        """
        if speaker:
            for character in self.characters:
                if character.name == speaker and character.voice_id:
                    return character.voice_id
        for character in self.characters:
            if character.voice_id:
                return character.voice_id
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        """Return the plan in its on-disk JSON shape."""
        return self.model_dump(by_alias=True, exclude_none=True)
