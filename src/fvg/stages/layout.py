"""On-disk layout of pipeline artifacts.

The filesystem is the only state shared between stages: every artifact is
keyed by beat id inside a stage-specific directory under ``out_dir``.
"""

from dataclasses import dataclass
from pathlib import Path

KISS_EFFECT = "kiss"
SUPPORTED_EFFECTS: tuple[str, ...] = (KISS_EFFECT,)

FINAL_FILENAME = "final_scene.mp4"
CONCAT_LIST_FILENAME = "ffconcat.txt"


@dataclass(frozen=True)
class ArtifactLayout:
    """Paths for every artifact of a run."""

    out_dir: Path = Path("out")

    def base(self, beat_id: str) -> Path:
        """Generated clip: ``out/{id}.mp4``."""
        return self.out_dir / f"{beat_id}.mp4"

    def effect(self, beat_id: str, effect: str = KISS_EFFECT) -> Path:
        """Effect clip: ``out/{effect}/{id}.mp4``."""
        return self.out_dir / effect / f"{beat_id}.mp4"

    def audio(self, beat_id: str) -> Path:
        """Dialogue audio: ``out/audio/{id}.mp3``."""
        return self.out_dir / "audio" / f"{beat_id}.mp3"

    def synced(self, beat_id: str) -> Path:
        """Lip-synced clip: ``out/synced/{id}.mp4``."""
        return self.out_dir / "synced" / f"{beat_id}.mp4"

    @property
    def final(self) -> Path:
        return self.out_dir / FINAL_FILENAME

    @property
    def concat_list(self) -> Path:
        return self.out_dir / CONCAT_LIST_FILENAME
