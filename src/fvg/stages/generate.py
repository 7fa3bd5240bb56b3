"""Text-to-video generation stage."""

from pathlib import Path
from typing import List, Protocol

from ..durations import describe_supported_durations, quantize
from ..models import Beat, ScenePlan
from ..retry import with_retry
from ..status import StatusReporter
from .base import Stage
from .layout import ArtifactLayout

GENERATE_ATTEMPTS = 3
GENERATE_RETRY_DELAY = 2.0


class VideoGenerator(Protocol):
    async def generate_video(self, prompt: str, model: str, ratio: str, duration: int) -> str:
        ...

    async def download(self, url: str, output_path: Path) -> Path:
        ...


class GenerateStage(Stage):
    """Renders every beat into ``out/{id}.mp4``."""

    name = "generator"
    empty_context = "Scene plan"
    empty_guidance = "Run 'fanfic-video plan' to generate beats or edit the plan file manually."

    def __init__(
        self,
        generator: VideoGenerator,
        layout: ArtifactLayout,
        reporter: StatusReporter,
        model: str,
        ratio: str,
        skip_existing: bool = False,
    ) -> None:
        super().__init__(layout, reporter, skip_existing)
        self.generator = generator
        self.model = model
        self.ratio = ratio

    def select(self, plan: ScenePlan) -> List[Beat]:
        return list(plan.beats)

    def target(self, beat: Beat) -> Path:
        return self.layout.base(beat.id)

    def describe(self, beat: Beat) -> str:
        return f"Rendering {beat.id} ({quantize(beat.duration_sec)}s)"

    def prepare(self, plan: ScenePlan, beats: List[Beat]) -> bool:
        self.reporter.info(f"Using Runway model {self.model} (ratio {self.ratio}).")
        for beat in beats:
            supported = quantize(beat.duration_sec)
            if supported != beat.duration_sec:
                self.reporter.warn(
                    f"Beat {beat.id} duration {beat.duration_sec:g}s is not supported. "
                    f"Using {supported}s instead. Supported durations: {describe_supported_durations()}."
                )
        return True

    async def process(self, beat: Beat, plan: ScenePlan, target: Path) -> None:
        self.reporter.advanced(f"Prompt: {beat.prompt}")
        url = await with_retry(
            lambda: self.generator.generate_video(
                prompt=beat.prompt,
                model=self.model,
                ratio=self.ratio,
                duration=quantize(beat.duration_sec),
            ),
            attempts=GENERATE_ATTEMPTS,
            delay=GENERATE_RETRY_DELAY,
        )
        self.reporter.advanced(f"Download URL: {url}")
        await with_retry(lambda: self.generator.download(url, target))
