"""Pipeline stages, run in a fixed order over a validated scene plan."""

from .assemble import AssembleStage, build_final_sequence, candidate_paths, resolve_artifact
from .base import Stage, StageResult
from .effect import EffectStage
from .generate import GenerateStage
from .layout import KISS_EFFECT, SUPPORTED_EFFECTS, ArtifactLayout
from .lipsync import LipSyncStage
from .speech import SpeechStage

__all__ = [
    "ArtifactLayout",
    "AssembleStage",
    "EffectStage",
    "GenerateStage",
    "KISS_EFFECT",
    "LipSyncStage",
    "SUPPORTED_EFFECTS",
    "SpeechStage",
    "Stage",
    "StageResult",
    "build_final_sequence",
    "candidate_paths",
    "resolve_artifact",
]
