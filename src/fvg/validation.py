"""Scene plan validation and normalization.

Raw plan data is checked against declarative field tables. Every issue is
collected before failing so that one run reports the complete defect set.
Required fields are strict; optional fields are coerced to absence when they
are malformed.
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .exceptions import (
    PlanEmptyError,
    PlanNotFoundError,
    PlanSyntaxError,
    PlanValidationError,
)
from .models.plan import Beat, Character, ScenePlan, ValidationIssue

logger = logging.getLogger(__name__)

DEFAULT_PLAN_PATH = "data/beats.json"
PLAN_HINT = "run 'fanfic-video plan' to generate a starter plan"

Coercer = Callable[[Any, str, List[ValidationIssue]], Any]


@dataclass(frozen=True)
class FieldRule:
    """How one JSON key is read into a model attribute."""

    key: str
    attr: str
    kind: str
    required: bool = False
    suggestion: Optional[str] = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite(value: float) -> bool:
    # Integers beyond float range overflow in isfinite.
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _coerce_text(value: Any, path: str, issues: List[ValidationIssue]) -> Optional[str]:
    if isinstance(value, str):
        return value if value.strip() else None
    if _is_number(value):
        return str(value)
    return None


def _coerce_positive_number(value: Any, path: str, issues: List[ValidationIssue]) -> Optional[float]:
    field = path.rsplit(".", 1)[-1]
    if not _is_number(value):
        issues.append(ValidationIssue(
            path=path,
            message=f"{field} must be a number",
            suggestion=f"Set {field} to the intended clip length in seconds, e.g. 6",
        ))
        return None
    if not _is_finite(value) or value <= 0:
        issues.append(ValidationIssue(
            path=path,
            message=f"{field} must be a positive number",
            suggestion=f"Set {field} to the intended clip length in seconds",
        ))
        return None
    return float(value)


def _coerce_flag(value: Any, path: str, issues: List[ValidationIssue]) -> bool:
    return bool(value)


def _coerce_string_map(value: Any, path: str, issues: List[ValidationIssue]) -> Optional[Dict[str, str]]:
    if not isinstance(value, Mapping):
        return None
    cleaned = {
        str(key): item
        for key, item in value.items()
        if isinstance(item, str) and item.strip()
    }
    return cleaned or None


def _coerce_string_list(value: Any, path: str, issues: List[ValidationIssue]) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    cleaned = [item for item in value if isinstance(item, str) and item.strip()]
    return cleaned or None


def _coerce_dialogue(value: Any, path: str, issues: List[ValidationIssue]) -> Optional[Dict[str, str]]:
    if not isinstance(value, Mapping):
        issues.append(ValidationIssue(
            path=path,
            message="Expected a dialogue object with speaker and text",
            suggestion='Use { "speaker": "Name", "text": "Line" }',
        ))
        return None

    speaker = value.get("speaker")
    text = value.get("text")
    valid = True
    if not isinstance(speaker, str) or not speaker.strip():
        issues.append(ValidationIssue(
            path=f"{path}.speaker",
            message="Speaker is required when dialogue is provided",
            suggestion="Match the speaker to a character name so speech can pick the right voice",
        ))
        valid = False
    if not isinstance(text, str) or not text.strip():
        issues.append(ValidationIssue(
            path=f"{path}.text",
            message="Dialogue text cannot be empty",
            suggestion="Add the line that should be spoken or remove the dialogue block",
        ))
        valid = False
    return {"speaker": speaker, "text": text} if valid else None


COERCERS: Dict[str, Coercer] = {
    "text": _coerce_text,
    "positive_number": _coerce_positive_number,
    "flag": _coerce_flag,
    "string_map": _coerce_string_map,
    "string_list": _coerce_string_list,
    "dialogue": _coerce_dialogue,
}

BEAT_RULES: tuple[FieldRule, ...] = (
    FieldRule("id", "id", "text", required=True),
    FieldRule("prompt", "prompt", "text", required=True),
    FieldRule("durationSec", "duration_sec", "positive_number", required=True),
    FieldRule("dialogue", "dialogue", "dialogue"),
    FieldRule("needLipSync", "need_lip_sync", "flag"),
    FieldRule("effect", "effect", "text"),
    FieldRule("effectAssets", "effect_assets", "string_map"),
    FieldRule("camera", "camera", "text"),
)

CHARACTER_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", "name", "text"),
    FieldRule("embedding_token", "embedding_token", "text"),
    FieldRule("voice_id", "voice_id", "text"),
    FieldRule("reference_images", "reference_images", "string_list"),
)


def apply_rules(
    source: Mapping[str, Any],
    rules: tuple[FieldRule, ...],
    prefix: str,
    issues: List[ValidationIssue],
) -> Dict[str, Any]:
    """Evaluate field rules against one raw object.

    Returns the normalized attributes; problems are appended to ``issues``.
    """
    normalized: Dict[str, Any] = {}
    for rule in rules:
        path = f"{prefix}.{rule.key}"
        raw_value = source.get(rule.key)

        if _is_blank(raw_value):
            if rule.required:
                issues.append(_required_issue(rule, path))
            continue

        before = len(issues)
        value = COERCERS[rule.kind](raw_value, path, issues)
        if value is None:
            if rule.required and len(issues) == before:
                issues.append(_required_issue(rule, path))
            continue
        normalized[rule.attr] = value
    return normalized


def _required_issue(rule: FieldRule, path: str) -> ValidationIssue:
    return ValidationIssue(
        path=path,
        message=f"{rule.key} is required",
        suggestion=rule.suggestion or f"Provide a {rule.key} for this beat so it can be rendered",
    )


def validate_plan(raw: Any, source: str = DEFAULT_PLAN_PATH) -> ScenePlan:
    """Validate raw plan data and return a normalized ``ScenePlan``.

    Raises:
        PlanValidationError: With every issue found, when the data is unusable.
    """
    if not isinstance(raw, Mapping):
        raise PlanValidationError(
            f"Expected {source} to contain a JSON object",
            [ValidationIssue(
                path=source,
                message="The file must contain an object with beats and characters",
                suggestion=f"Check for trailing commas or {PLAN_HINT}",
            )],
        )

    issues: List[ValidationIssue] = []

    beats_raw = raw.get("beats")
    if not isinstance(beats_raw, list) or not beats_raw:
        issues.append(ValidationIssue(
            path="beats",
            message="No beats defined in the plan",
            suggestion=f"Add at least one beat or {PLAN_HINT}",
        ))

    characters_raw = raw.get("characters")
    if not isinstance(characters_raw, list) or not characters_raw:
        issues.append(ValidationIssue(
            path="characters",
            message="The plan must declare at least one character",
            suggestion="List the speaking characters with their voice_id so speech can run",
        ))

    beats: List[Dict[str, Any]] = []
    first_seen: Dict[str, int] = {}
    for index, beat_raw in enumerate(beats_raw if isinstance(beats_raw, list) else []):
        prefix = f"beats[{index}]"
        if not isinstance(beat_raw, Mapping):
            issues.append(ValidationIssue(
                path=prefix,
                message="Each beat must be an object",
                suggestion="Define the beat using curly braces with key/value pairs",
            ))
            continue

        beat = apply_rules(beat_raw, BEAT_RULES, prefix, issues)
        beat_id = beat.get("id")
        if beat_id is not None:
            if beat_id in first_seen:
                issues.append(ValidationIssue(
                    path=f"{prefix}.id",
                    message=f"Duplicate beat id '{beat_id}' (already used by beats[{first_seen[beat_id]}])",
                    suggestion="Give every beat a unique id; ids name the generated files",
                ))
            else:
                first_seen[beat_id] = index
        beats.append(beat)

    characters = [
        apply_rules(character_raw, CHARACTER_RULES, f"characters[{index}]", issues)
        for index, character_raw in enumerate(characters_raw if isinstance(characters_raw, list) else [])
        if isinstance(character_raw, Mapping)
    ]

    if issues:
        raise PlanValidationError(f"Unable to use {source}. See the issues below.", issues)

    title = raw.get("title")
    return ScenePlan(
        title=title if isinstance(title, str) else None,
        characters=[Character(**{"name": "", **c}) for c in characters],
        beats=[Beat(**b) for b in beats],
    )


def load_scene_plan(path: Path) -> ScenePlan:
    """Read and validate a scene plan file.

    Raises:
        PlanNotFoundError: If the file does not exist.
        PlanEmptyError: If the file is blank.
        PlanSyntaxError: If the file is not UTF-8 text or not valid JSON.
        PlanValidationError: If the JSON does not describe a usable plan.
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise PlanNotFoundError(
            f"Missing required scene plan at {path}",
            [ValidationIssue(
                path=str(path),
                message="The scene plan file could not be found",
                suggestion=f"Provide your own {path} or {PLAN_HINT}",
            )],
        )
    except UnicodeDecodeError as e:
        raise PlanSyntaxError(
            f"Could not read {path} as text",
            [ValidationIssue(
                path=str(path),
                message=f"Invalid UTF-8 at byte {e.start}",
                suggestion="Is the file UTF-8 encoded? Re-save it as UTF-8 JSON",
            )],
        )

    if not contents.strip():
        raise PlanEmptyError(
            f"The file {path} is empty",
            [ValidationIssue(
                path=str(path),
                message="Empty files cannot be parsed",
                suggestion="Paste your scene beats or regenerate the file",
            )],
        )

    try:
        parsed = json.loads(contents)
    except json.JSONDecodeError as e:
        raise PlanSyntaxError(
            f"Could not parse {path}",
            [ValidationIssue(path=str(path), message="Invalid JSON encountered", suggestion=str(e))],
        )

    plan = validate_plan(parsed, str(path))
    logger.debug(f"Loaded {len(plan.beats)} beats and {len(plan.characters)} characters from {path}")
    return plan


def write_scene_plan(plan: ScenePlan, path: Path) -> None:
    """Save a plan in its on-disk JSON shape."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(plan.to_json_dict(), f, indent=2, ensure_ascii=False)
