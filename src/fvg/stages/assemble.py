"""Final assembly: pick the best artifact per beat and concatenate."""

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from ..models import Beat, ScenePlan
from ..status import StatusReporter
from .layout import SUPPORTED_EFFECTS, ArtifactLayout

logger = logging.getLogger(__name__)


class Concatenator(Protocol):
    async def concat(self, clip_paths: Sequence[Path], output_path: Path) -> Path:
        ...


def candidate_paths(beat: Beat, layout: ArtifactLayout) -> List[Tuple[Path, bool]]:
    """Return ``(path, applies)`` pairs in priority order for ``beat``."""
    effect = beat.effect if beat.effect in SUPPORTED_EFFECTS else None
    return [
        (layout.effect(beat.id, effect or ""), effect is not None),
        (layout.synced(beat.id), beat.need_lip_sync),
        (layout.base(beat.id), True),
    ]


def resolve_artifact(beat: Beat, layout: ArtifactLayout) -> Optional[Path]:
    """Return the highest-priority existing artifact for ``beat``, if any."""
    for path, applies in candidate_paths(beat, layout):
        if applies and path.exists():
            return path
    return None


def build_final_sequence(
    plan: ScenePlan,
    layout: ArtifactLayout,
    reporter: StatusReporter,
) -> List[Path]:
    """Return one clip per beat in plan order, dropping beats with none."""
    sequence: List[Path] = []
    for beat in plan.beats:
        path = resolve_artifact(beat, layout)
        if path is None:
            reporter.warn(f"Skipping {beat.id}: no rendered clip found in {layout.out_dir}.")
            continue
        reporter.advanced(f"{beat.id} -> {path}")
        sequence.append(path)
    return sequence


class AssembleStage:
    """Concatenates the reconciled clips into ``out/final_scene.mp4``."""

    name = "stitch"

    def __init__(
        self,
        concatenator: Concatenator,
        layout: ArtifactLayout,
        reporter: StatusReporter,
    ) -> None:
        self.concatenator = concatenator
        self.layout = layout
        self.reporter = reporter

    async def run(self, plan: ScenePlan) -> Optional[Path]:
        """Build the final video; returns None when there is nothing to join."""
        sequence = build_final_sequence(plan, self.layout, self.reporter)
        if not sequence:
            self.reporter.empty_state(
                "Final clip list",
                "Run 'fanfic-video generate' to render clips before stitching.",
            )
            return None

        output = self.layout.final
        await self.reporter.step(
            f"Stitching {len(sequence)} clip(s) into {output}",
            lambda: self.concatenator.concat(sequence, output),
        )
        logger.info(f"Final video written to {output}")
        return output
