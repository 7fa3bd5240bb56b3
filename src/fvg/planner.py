"""Planning step: make sure a scene plan exists before rendering."""

import logging
from pathlib import Path
from typing import Optional

from .agents.planner import PlannerAgent, PlannerInput
from .models import Beat, Character, Dialogue, ScenePlan
from .status import StatusReporter
from .validation import load_scene_plan, write_scene_plan

logger = logging.getLogger(__name__)

DEFAULT_LINE = "She whispers, I will fix this."


def first_line(narrative: str) -> str:
    """Return the first non-empty line of ``narrative``."""
    for line in narrative.splitlines():
        if line.strip():
            return line.strip()
    return DEFAULT_LINE


def starter_plan(narrative: str) -> ScenePlan:
    """Build a two-beat plan voicing the narrative's first line."""
    return ScenePlan(
        title="Auto Scene",
        characters=[
            Character(
                name="Heroine",
                embedding_token="@HeroineA",
                voice_id="EXAVITQu4vr4xnSDxMaL",
                reference_images=["data/refs/heroine_ref1.jpg", "data/refs/heroine_ref2.jpg"],
            )
        ],
        beats=[
            Beat(
                id="beat1",
                prompt="A rainy neon alley at night with @HeroineA looking back. Cinematic, shallow depth of field.",
                duration_sec=5,
                camera="medium shot",
            ),
            Beat(
                id="beat2",
                prompt="Close up of @HeroineA whispering, rain beads on hair.",
                duration_sec=4,
                dialogue=Dialogue(speaker="Heroine", text=first_line(narrative)),
                need_lip_sync=True,
                camera="tight close up",
            ),
        ],
    )


async def plan_scenes(
    plan_path: Path,
    narrative_path: Path,
    reporter: StatusReporter,
    agent: Optional[PlannerAgent] = None,
    max_beats: int = 6,
    style: Optional[str] = None,
) -> ScenePlan:
    """Return the plan at ``plan_path``, creating it when absent.

    An existing plan is kept as is (after validation). Otherwise the
    narrative is planned by ``agent`` when one is given, or turned into a
    starter plan.
    """
    if plan_path.exists():
        reporter.info(f"{plan_path} present, skipping planning.")
        return load_scene_plan(plan_path)

    if narrative_path.exists():
        narrative = narrative_path.read_text(encoding="utf-8")
    else:
        reporter.warn(f"No narrative found at {narrative_path}; using a placeholder line.")
        narrative = ""

    if agent is not None and narrative.strip():
        plan = await reporter.step(
            f"Planning scenes with {agent.model}",
            lambda: agent.run(PlannerInput(narrative=narrative, max_beats=max_beats, style=style)),
        )
    else:
        reporter.advanced("No planner configured; writing the starter plan.")
        plan = starter_plan(narrative)

    write_scene_plan(plan, plan_path)
    reporter.success(f"Wrote {plan_path} ({len(plan.beats)} beats).")
    return plan
