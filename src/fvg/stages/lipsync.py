"""Lip-sync stage."""

import asyncio
from pathlib import Path
from typing import List, Protocol

from ..exceptions import MissingArtifactError
from ..models import Beat, ScenePlan
from ..retry import with_retry
from ..status import StatusReporter
from .base import Stage, StageResult
from .layout import ArtifactLayout

LIPSYNC_ATTEMPTS = 2


class LipSyncer(Protocol):
    async def lip_sync(self, video: bytes, audio: bytes) -> str:
        ...

    async def download(self, url: str, output_path: Path) -> Path:
        ...


class LipSyncStage(Stage):
    """Syncs base clips to their dialogue audio into ``out/synced/{id}.mp4``.

    Both the base clip and the audio must already exist.
    """

    name = "lipsync"
    empty_context = "Lip sync queue"
    empty_guidance = "Mark beats with needLipSync: true to generate synced clips."

    def __init__(
        self,
        syncer: LipSyncer,
        layout: ArtifactLayout,
        reporter: StatusReporter,
        skip_existing: bool = False,
    ) -> None:
        super().__init__(layout, reporter, skip_existing)
        self.syncer = syncer

    def select(self, plan: ScenePlan) -> List[Beat]:
        return [beat for beat in plan.beats if beat.need_lip_sync]

    def target(self, beat: Beat) -> Path:
        return self.layout.synced(beat.id)

    def describe(self, beat: Beat) -> str:
        return f"Syncing {beat.id}"

    async def process(self, beat: Beat, plan: ScenePlan, target: Path) -> None:
        video_path = self.layout.base(beat.id)
        audio_path = self.layout.audio(beat.id)
        missing = [str(path) for path in (video_path, audio_path) if not path.exists()]
        if missing:
            raise MissingArtifactError(
                f"Lip sync for {beat.id} needs {', '.join(missing)}",
                details="Run 'fanfic-video generate' and 'fanfic-video speech' first",
            )

        video = await asyncio.to_thread(video_path.read_bytes)
        audio = await asyncio.to_thread(audio_path.read_bytes)
        url = await with_retry(lambda: self.syncer.lip_sync(video, audio), attempts=LIPSYNC_ATTEMPTS)
        self.reporter.advanced(f"Download URL: {url}")
        await with_retry(lambda: self.syncer.download(url, target))

    def finish(self, result: StageResult) -> None:
        if result.produced:
            self.reporter.success(f"Lip sync complete for {len(result.produced)} beat(s).")
