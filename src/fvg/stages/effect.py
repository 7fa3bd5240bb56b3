"""Visual effect stage."""

import asyncio
from pathlib import Path
from typing import List, Protocol

from ..exceptions import MissingArtifactError
from ..models import Beat, ScenePlan
from ..retry import with_retry
from ..status import StatusReporter
from .base import Stage
from .layout import SUPPORTED_EFFECTS, ArtifactLayout


class EffectRenderer(Protocol):
    async def apply_effect(self, effect: str, beat_id: str, video: bytes) -> str:
        ...

    async def download(self, url: str, output_path: Path) -> Path:
        ...


class EffectStage(Stage):
    """Applies effects such as ``kiss`` to base clips.

    Writes ``out/{effect}/{id}.mp4``. Beats asking for an unknown effect are
    skipped with a warning.
    """

    name = "effects"
    empty_context = "Effect queue"
    empty_guidance = "Set \"effect\": \"kiss\" on a beat to render an effect clip."

    def __init__(
        self,
        renderer: EffectRenderer,
        layout: ArtifactLayout,
        reporter: StatusReporter,
        skip_existing: bool = False,
    ) -> None:
        super().__init__(layout, reporter, skip_existing)
        self.renderer = renderer

    def select(self, plan: ScenePlan) -> List[Beat]:
        return [beat for beat in plan.beats if beat.effect]

    def target(self, beat: Beat) -> Path:
        return self.layout.effect(beat.id, beat.effect)

    def describe(self, beat: Beat) -> str:
        return f"Applying '{beat.effect}' effect to {beat.id}"

    def ready(self, beat: Beat, plan: ScenePlan) -> bool:
        if beat.effect in SUPPORTED_EFFECTS:
            return True
        self.reporter.warn(
            f"Skipping {beat.id}: effect '{beat.effect}' is not supported. "
            f"Supported effects: {', '.join(SUPPORTED_EFFECTS)}."
        )
        return False

    async def process(self, beat: Beat, plan: ScenePlan, target: Path) -> None:
        base_video = self.layout.base(beat.id)
        if not base_video.exists():
            raise MissingArtifactError(
                f"Base clip {base_video} is missing",
                details="Run 'fanfic-video generate' first",
            )
        if beat.effect_assets:
            self.reporter.advanced(f"Effect assets: {', '.join(sorted(beat.effect_assets))}")

        video = await asyncio.to_thread(base_video.read_bytes)
        url = await with_retry(lambda: self.renderer.apply_effect(beat.effect, beat.id, video))
        self.reporter.advanced(f"Download URL: {url}")
        await with_retry(lambda: self.renderer.download(url, target))
