"""Base stage abstraction."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..models import Beat, ScenePlan
from ..status import StatusReporter
from .layout import ArtifactLayout

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """What a stage run wrote and what it left alone."""

    produced: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class Stage(ABC):
    """A pipeline step that turns selected beats into artifacts.

    Beats are processed one after another. Each beat runs inside
    ``StatusReporter.step``, so a failure is reported once and aborts the
    stage. With ``skip_existing`` a re-run only fills in missing artifacts.
    """

    name: str = "stage"
    empty_context: str = "Beat selection"
    empty_guidance: str = "Nothing in the plan needs this stage."

    def __init__(
        self,
        layout: ArtifactLayout,
        reporter: StatusReporter,
        skip_existing: bool = False,
    ) -> None:
        self.layout = layout
        self.reporter = reporter
        self.skip_existing = skip_existing

    @abstractmethod
    def select(self, plan: ScenePlan) -> List[Beat]:
        """Return the beats this stage applies to, in plan order."""
        ...

    @abstractmethod
    def target(self, beat: Beat) -> Path:
        """Return the artifact path this stage writes for ``beat``."""
        ...

    @abstractmethod
    def describe(self, beat: Beat) -> str:
        """Return the step label shown while ``beat`` is processed."""
        ...

    @abstractmethod
    async def process(self, beat: Beat, plan: ScenePlan, target: Path) -> None:
        """Produce ``target`` for ``beat``."""
        ...

    def ready(self, beat: Beat, plan: ScenePlan) -> bool:
        """Return False to skip a beat; the stage should say why."""
        return True

    def prepare(self, plan: ScenePlan, beats: List[Beat]) -> bool:
        """Hook run once before the beats; return False to do no work."""
        return True

    def finish(self, result: StageResult) -> None:
        """Hook run once after every beat succeeded."""
        if result.produced:
            self.reporter.success(f"{self.name}: wrote {len(result.produced)} artifact(s).")

    async def run(self, plan: ScenePlan) -> StageResult:
        """Process every selected beat and return what was written."""
        result = StageResult()
        beats = self.select(plan)
        if not beats:
            self.reporter.empty_state(self.empty_context, self.empty_guidance)
            return result

        if not self.prepare(plan, beats):
            return result

        for beat in beats:
            target = self.target(beat)
            if self.skip_existing and target.exists():
                self.reporter.info(f"Skipping {beat.id}: {target} already exists.")
                result.skipped.append(beat.id)
                continue
            if not self.ready(beat, plan):
                result.skipped.append(beat.id)
                continue

            await self.reporter.step(
                self.describe(beat),
                lambda beat=beat, target=target: self.process(beat, plan, target),
            )
            result.produced.append(target)

        logger.debug(f"{self.name}: produced {len(result.produced)}, skipped {len(result.skipped)}")
        self.finish(result)
        return result
