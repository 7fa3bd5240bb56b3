"""Pipeline orchestration: fixed stage order over one scene plan."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .config import Config
from .editor import FFmpegConcatenator, MoviePyConcatenator
from .models import ScenePlan
from .services import ElevenLabsClient, GoEnhanceClient, ReplicateClient, RunwayClient
from .services.base import ServiceClient
from .stages import (
    ArtifactLayout,
    AssembleStage,
    EffectStage,
    GenerateStage,
    LipSyncStage,
    SUPPORTED_EFFECTS,
    SpeechStage,
    StageResult,
)
from .stages.assemble import Concatenator
from .stages.effect import EffectRenderer
from .stages.generate import VideoGenerator
from .stages.lipsync import LipSyncer
from .stages.speech import SpeechSynthesizer
from .status import StatusReporter

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs generate, effect, speech, lip-sync and stitch in that order.

    Service adapters are created from ``config`` only when a stage has work
    to do, so a plan without dialogue never needs a speech API key.
    Collaborators may be injected instead, which is how tests drive it.
    """

    def __init__(
        self,
        config: Config,
        reporter: StatusReporter,
        model: str,
        ratio: str,
        skip_existing: bool = False,
        reencode: bool = False,
        crossfade: float = 0.0,
        cancel_event: Optional[asyncio.Event] = None,
        generator: Optional[VideoGenerator] = None,
        renderer: Optional[EffectRenderer] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
        syncer: Optional[LipSyncer] = None,
        concatenator: Optional[Concatenator] = None,
    ) -> None:
        self.config = config
        self.reporter = reporter
        self.layout = ArtifactLayout(Path(config.out_dir))
        self.model = model
        self.ratio = ratio
        self.skip_existing = skip_existing
        self.reencode = reencode
        self.crossfade = crossfade
        self.cancel_event = cancel_event
        self._generator = generator
        self._renderer = renderer
        self._synthesizer = synthesizer
        self._syncer = syncer
        self._concatenator = concatenator
        self._opened: List[ServiceClient] = []

    def _open(self, client_cls: type) -> ServiceClient:
        client = client_cls(self.config, cancel_event=self.cancel_event)
        self._opened.append(client)
        return client

    async def generate(self, plan: ScenePlan) -> StageResult:
        if self._generator is None and plan.beats:
            self._generator = self._open(RunwayClient)
        stage = GenerateStage(
            self._generator,
            self.layout,
            self.reporter.child(GenerateStage.name),
            model=self.model,
            ratio=self.ratio,
            skip_existing=self.skip_existing,
        )
        return await stage.run(plan)

    async def effects(self, plan: ScenePlan) -> StageResult:
        if self._renderer is None and any(beat.effect in SUPPORTED_EFFECTS for beat in plan.beats):
            self._renderer = self._open(GoEnhanceClient)
        stage = EffectStage(
            self._renderer,
            self.layout,
            self.reporter.child(EffectStage.name),
            skip_existing=self.skip_existing,
        )
        return await stage.run(plan)

    async def speech(self, plan: ScenePlan) -> StageResult:
        if (
            self._synthesizer is None
            and plan.has_voice_information()
            and any(beat.dialogue for beat in plan.beats)
        ):
            self._synthesizer = self._open(ElevenLabsClient)
        stage = SpeechStage(
            self._synthesizer,
            self.layout,
            self.reporter.child(SpeechStage.name),
            skip_existing=self.skip_existing,
        )
        return await stage.run(plan)

    async def lipsync(self, plan: ScenePlan) -> StageResult:
        if self._syncer is None and any(beat.need_lip_sync for beat in plan.beats):
            self._syncer = self._open(ReplicateClient)
        stage = LipSyncStage(
            self._syncer,
            self.layout,
            self.reporter.child(LipSyncStage.name),
            skip_existing=self.skip_existing,
        )
        return await stage.run(plan)

    async def stitch(self, plan: ScenePlan) -> Optional[Path]:
        if self._concatenator is None:
            if self.reencode or self.crossfade > 0:
                self._concatenator = MoviePyConcatenator(transition_duration=self.crossfade)
            else:
                self._concatenator = FFmpegConcatenator(list_path=self.layout.concat_list)
        stage = AssembleStage(self._concatenator, self.layout, self.reporter.child(AssembleStage.name))
        return await stage.run(plan)

    async def run(self, plan: ScenePlan) -> Optional[Path]:
        """Run every stage in order and return the final video path."""
        try:
            await self.generate(plan)
            await self.effects(plan)
            await self.speech(plan)
            await self.lipsync(plan)
            return await self.stitch(plan)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Close every service adapter this pipeline created."""
        while self._opened:
            await self._opened.pop().aclose()
