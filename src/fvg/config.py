"""Configuration management.

A single ``Config`` is built at process entry (see ``cli.py``) and handed to
every service adapter; nothing below the CLI reads the environment itself.
"""

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigurationError

_ENV_NAMES = {
    "runway_api_key": "RUNWAY_API_KEY",
    "goenhance_api_key": "GOENHANCE_API_KEY",
    "elevenlabs_api_key": "ELEVENLABS_API_KEY",
    "replicate_api_token": "REPLICATE_API_TOKEN",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
}


def load_environment(dotenv_path: Path | None = None) -> None:
    """Load variables from a ``.env`` file into the process environment.

    Without a path, the nearest ``.env`` at or above the working directory is used.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))


class Config(BaseModel):
    """Application configuration."""

    # API keys
    runway_api_key: str = Field(
        default_factory=lambda: os.getenv("RUNWAY_API_KEY", ""),
        description="Runway API key (text-to-video)"
    )
    goenhance_api_key: str = Field(
        default_factory=lambda: os.getenv("GOENHANCE_API_KEY", ""),
        description="GoEnhance API key (video effects)"
    )
    elevenlabs_api_key: str = Field(
        default_factory=lambda: os.getenv("ELEVENLABS_API_KEY", ""),
        description="ElevenLabs API key (speech)"
    )
    replicate_api_token: str = Field(
        default_factory=lambda: os.getenv("REPLICATE_API_TOKEN", ""),
        description="Replicate API token (lip-sync)"
    )
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (scene planning)"
    )

    # Endpoints
    runway_base_url: str = Field(
        default_factory=lambda: os.getenv("RUNWAY_API_BASE_URL", "https://api.dev.runwayml.com"),
    )
    runway_api_version: str = Field(
        default_factory=lambda: os.getenv("RUNWAY_API_VERSION", "2024-11-06"),
    )
    goenhance_base_url: str = Field(
        default_factory=lambda: os.getenv("GOENHANCE_API_BASE_URL", "https://api.goenhance.com"),
    )
    elevenlabs_base_url: str = Field(
        default_factory=lambda: os.getenv("ELEVENLABS_API_BASE_URL", "https://api.elevenlabs.io"),
    )
    elevenlabs_model_id: str = Field(
        default_factory=lambda: os.getenv("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2"),
    )
    replicate_base_url: str = Field(
        default_factory=lambda: os.getenv("REPLICATE_API_BASE_URL", "https://api.replicate.com"),
    )
    wav2lip_version: str = Field(
        default_factory=lambda: os.getenv(
            "WAV2LIP_VERSION",
            "f3bd0cb5538aa0c47a58f3408b233d6cea61bc939f1b256a0e065b4bd11fdd20",
        ),
        description="Replicate model version used for lip-sync"
    )

    # Paths
    plan_path: Path = Field(
        default_factory=lambda: Path(os.getenv("FVG_PLAN_PATH", "data/beats.json")),
        description="Scene plan JSON file"
    )
    narrative_path: Path = Field(
        default_factory=lambda: Path(os.getenv("FVG_NARRATIVE_PATH", "data/fanfic.txt")),
        description="Narrative text used to plan scenes"
    )
    preferences_path: Path = Field(
        default_factory=lambda: Path(os.getenv("FVG_PREFERENCES_PATH", "data/user-preferences.json")),
        description="Persisted user preferences"
    )
    out_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("FVG_OUT_DIR", "out")),
        description="Root directory for every generated artifact"
    )

    # Behaviour
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used by the planner"
    )
    escalation_contact: str = Field(
        default_factory=lambda: os.getenv("FVG_ESCALATION_CONTACT", "support@fanficvideo.local"),
        description="Contact shown next to error messages"
    )
    poll_interval: float = Field(default=2.0, gt=0, description="Seconds between task status checks")
    max_poll_wait: float = Field(default=900.0, gt=0, description="Maximum seconds to wait on a remote task")
    request_timeout: float = Field(default=120.0, gt=0, description="HTTP timeout in seconds")

    def require(self, *fields: str) -> None:
        """Validate that the named credentials are set.

        Raises:
            ConfigurationError: Listing every missing environment variable.
        """
        missing = [
            _ENV_NAMES.get(name, name.upper())
            for name in fields
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables."
            )
