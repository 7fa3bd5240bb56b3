"""Dialogue speech synthesis stage."""

import asyncio
from pathlib import Path
from typing import List, Protocol

from ..models import Beat, ScenePlan
from ..retry import with_retry
from ..services.http import write_atomically
from ..status import StatusReporter
from .base import Stage, StageResult
from .layout import ArtifactLayout


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        ...


class SpeechStage(Stage):
    """Voices every dialogue line into ``out/audio/{id}.mp3``.

    The voice comes from the character named as speaker, or else from the
    first character with a voice. Beats without any usable voice are skipped.
    """

    name = "tts"
    empty_context = "Dialogue"
    empty_guidance = "Add dialogue blocks to beats that need speech."

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        layout: ArtifactLayout,
        reporter: StatusReporter,
        skip_existing: bool = False,
    ) -> None:
        super().__init__(layout, reporter, skip_existing)
        self.synthesizer = synthesizer

    def select(self, plan: ScenePlan) -> List[Beat]:
        return [beat for beat in plan.beats if beat.dialogue]

    def target(self, beat: Beat) -> Path:
        return self.layout.audio(beat.id)

    def describe(self, beat: Beat) -> str:
        return f"Generating audio for {beat.id}"

    def prepare(self, plan: ScenePlan, beats: List[Beat]) -> bool:
        if plan.has_voice_information():
            return True
        self.reporter.warn("No characters have a voice_id configured. Add one to the plan to enable speech.")
        return False

    def ready(self, beat: Beat, plan: ScenePlan) -> bool:
        if plan.find_voice(beat.dialogue.speaker):
            return True
        self.reporter.warn(f"Skipping {beat.id}: could not find a voice_id for speaker {beat.dialogue.speaker}.")
        return False

    async def process(self, beat: Beat, plan: ScenePlan, target: Path) -> None:
        voice_id = plan.find_voice(beat.dialogue.speaker)
        self.reporter.advanced(f"Voice {voice_id} for speaker {beat.dialogue.speaker}")
        audio = await with_retry(lambda: self.synthesizer.synthesize(beat.dialogue.text, voice_id))
        await asyncio.to_thread(write_atomically, target, audio)

    def finish(self, result: StageResult) -> None:
        if result.produced:
            self.reporter.success(f"Generated {len(result.produced)} audio file(s).")
        elif not result.skipped:
            self.reporter.empty_state(self.empty_context, self.empty_guidance)
