import pytest

from fvg.config import Config
from fvg.stages import ArtifactLayout
from fvg.status import StatusReporter
from fvg.validation import validate_plan


def plan_data(**overrides):
    data = {
        "title": "Rooftop",
        "characters": [
            {"name": "Heroine", "embedding_token": "@HeroineA", "voice_id": "voice-h"},
            {"name": "Rival", "voice_id": "voice-r"},
        ],
        "beats": [
            {"id": "beat1", "prompt": "Rain on a rooftop", "durationSec": 5},
            {
                "id": "beat2",
                "prompt": "Close up whisper",
                "durationSec": 4,
                "dialogue": {"speaker": "Rival", "text": "Not again."},
                "needLipSync": True,
            },
        ],
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_plan():
    def _make(**overrides):
        return validate_plan(plan_data(**overrides))
    return _make


@pytest.fixture
def layout(tmp_path):
    return ArtifactLayout(tmp_path / "out")


@pytest.fixture
def reporter():
    return StatusReporter("test", escalation_contact="help@example.com")


@pytest.fixture
def config(tmp_path):
    return Config(
        runway_api_key="runway-key",
        goenhance_api_key="goenhance-key",
        elevenlabs_api_key="eleven-key",
        replicate_api_token="replicate-token",
        anthropic_api_key="anthropic-key",
        runway_base_url="https://runway.test",
        goenhance_base_url="https://goenhance.test",
        elevenlabs_base_url="https://eleven.test",
        replicate_base_url="https://replicate.test",
        plan_path=tmp_path / "data" / "beats.json",
        narrative_path=tmp_path / "data" / "fanfic.txt",
        preferences_path=tmp_path / "data" / "user-preferences.json",
        out_dir=tmp_path / "out",
    )


@pytest.fixture
def raw_plan():
    return plan_data
