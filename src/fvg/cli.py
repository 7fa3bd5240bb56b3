"""CLI entry point for the fanfic video generator."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Optional, Sequence, TypeVar

import typer

from . import __version__
from .config import Config, load_environment
from .exceptions import FvgError, PlanValidationError
from .models import UserPreferences, load_preferences, save_preferences
from .models.preferences import SUPPORTED_MODELS, SUPPORTED_RATIOS
from .stages import ArtifactLayout, resolve_artifact
from .status import StatusReporter, was_reported
from .validation import load_scene_plan

T = TypeVar("T")

app = typer.Typer(
    name="fanfic-video",
    help="Turn a short narrative into a stitched AI video",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fanfic-video version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Load API keys from this .env file instead of the nearest one above the working directory"
    ),
) -> None:
    """Fanfic Video Generator - plan, render, voice, sync and stitch scenes."""
    load_environment(env_file)


def build_config(plan: Optional[Path] = None, out: Optional[Path] = None) -> Config:
    """Create the run configuration, applying CLI path overrides."""
    config = Config()
    updates = {}
    if plan is not None:
        updates["plan_path"] = plan
    if out is not None:
        updates["out_dir"] = out
    return config.model_copy(update=updates) if updates else config


def make_reporter(config: Config, scope: str, advanced: bool) -> StatusReporter:
    return StatusReporter(scope, escalation_contact=config.escalation_contact, advanced=advanced)


def execute(reporter: StatusReporter, work: Awaitable[T]) -> T:
    """Run a coroutine, reporting pipeline errors once and exiting non-zero."""
    try:
        return asyncio.run(work)
    except PlanValidationError as e:
        if not was_reported(e):
            reporter.error(e.message)
        typer.echo(e.format_issues(), err=True)
        raise typer.Exit(1)
    except FvgError as e:
        if not was_reported(e):
            reporter.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        if was_reported(e):
            raise typer.Exit(1)
        raise


def normalize_choice(
    value: Optional[str],
    fallback: str,
    supported: Sequence[str],
    label: str,
    reporter: StatusReporter,
) -> str:
    """Return ``value`` if supported, else warn and return ``fallback``."""
    if not value:
        return fallback
    if value in supported:
        return value
    reporter.warn(
        f"{label} {value} is not supported. Falling back to {fallback}. "
        f"Supported: {', '.join(supported)}."
    )
    return fallback


PLAN_OPTION = typer.Option(None, "--plan", "-p", help="Scene plan JSON file (default: data/beats.json)")
OUT_OPTION = typer.Option(None, "--out", "-o", help="Artifact directory (default: out)")
ADVANCED_OPTION = typer.Option(False, "--advanced", help="Show extra diagnostic output")
VERBOSE_OPTION = typer.Option(False, "--verbose", help="Enable verbose logging")
SKIP_OPTION = typer.Option(False, "--skip-existing", "-k", help="Keep artifacts that already exist")
CROSSFADE_OPTION = typer.Option(
    0.0,
    "--crossfade",
    min=0.0,
    help="Crossfade seconds between clips (re-encodes with moviepy)"
)


def _load_plan(config: Config, reporter: StatusReporter):
    async def _load():
        return load_scene_plan(config.plan_path)
    return execute(reporter, _load())


def planner_agent(config: Config, reporter: StatusReporter):
    """Return a Claude planner when an Anthropic key is configured."""
    from .agents import PlannerAgent
    from .services import AnthropicClient

    if not config.anthropic_api_key:
        reporter.advanced("ANTHROPIC_API_KEY not set; the starter plan will be used.")
        return None
    return PlannerAgent(AnthropicClient(config))


def _pipeline(config: Config, reporter: StatusReporter, skip_existing: bool, **kwargs):
    from .pipeline import Pipeline

    preferences = load_preferences(config.preferences_path)
    return Pipeline(
        config,
        reporter,
        model=kwargs.pop("model", preferences.default_model),
        ratio=kwargs.pop("ratio", preferences.last_ratio),
        skip_existing=skip_existing,
        **kwargs,
    )


@app.command()
def plan(
    plan_path: Optional[Path] = PLAN_OPTION,
    narrative: Optional[Path] = typer.Option(
        None,
        "--narrative",
        "-n",
        help="Narrative text file (default: data/fanfic.txt)"
    ),
    max_beats: int = typer.Option(6, "--max-beats", min=1, max=30, help="Upper bound on planned beats"),
    style: Optional[str] = typer.Option(None, "--style", help="Visual style hint for the planner"),
    no_llm: bool = typer.Option(False, "--no-llm", help="Always write the starter plan"),
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create the scene plan from the narrative if it does not exist yet."""
    from .planner import plan_scenes

    setup_logging(verbose)
    config = build_config(plan_path)
    if narrative is not None:
        config = config.model_copy(update={"narrative_path": narrative})
    reporter = make_reporter(config, "planner", advanced)

    agent = None if no_llm else planner_agent(config, reporter)
    execute(reporter, plan_scenes(
        config.plan_path,
        config.narrative_path,
        reporter,
        agent=agent,
        max_beats=max_beats,
        style=style,
    ))


@app.command()
def validate(
    plan_path: Optional[Path] = PLAN_OPTION,
) -> None:
    """Check the scene plan and list every problem found."""
    config = build_config(plan_path)
    reporter = make_reporter(config, "validate", False)
    scene_plan = _load_plan(config, reporter)
    reporter.success(
        f"{config.plan_path} is valid: {len(scene_plan.beats)} beat(s), "
        f"{len(scene_plan.characters)} character(s)."
    )


@app.command()
def status(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
) -> None:
    """Show the plan and which clip each beat would use in the final cut."""
    config = build_config(plan_path, out)
    reporter = make_reporter(config, "status", False)
    scene_plan = _load_plan(config, reporter)
    layout = ArtifactLayout(Path(config.out_dir))

    typer.echo(f"📁 Plan: {scene_plan.title or config.plan_path}")
    typer.echo(f"   Characters: {', '.join(c.name or '?' for c in scene_plan.characters)}")
    typer.echo(f"   Beats: {len(scene_plan.beats)}")
    total_duration = sum(beat.duration_sec for beat in scene_plan.beats)
    typer.echo(f"   Total requested duration: {total_duration:.1f}s")

    typer.echo("\n📽️  Beats:")
    for beat in scene_plan.beats:
        artifact = resolve_artifact(beat, layout)
        status_icon = "✅" if artifact else "⏳"
        extras = [
            flag for flag, enabled in (
                ("dialogue", beat.dialogue is not None),
                ("lip-sync", beat.need_lip_sync),
                (f"effect:{beat.effect}", bool(beat.effect)),
            ) if enabled
        ]
        suffix = f" [{', '.join(extras)}]" if extras else ""
        typer.echo(f"   {status_icon} {beat.id}: {beat.duration_sec:g}s{suffix}")
        if artifact:
            typer.echo(f"      → {artifact}")

    if layout.final.exists():
        typer.echo(f"\n🎬 Final video: {layout.final}")


@app.command()
def generate(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help=f"Runway model ({', '.join(SUPPORTED_MODELS)}); default: saved preference"
    ),
    ratio: Optional[str] = typer.Option(
        None,
        "--ratio",
        "-r",
        help=f"Aspect ratio ({', '.join(SUPPORTED_RATIOS)}); default: saved preference"
    ),
    skip_existing: bool = SKIP_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Render every beat with Runway text-to-video."""
    setup_logging(verbose)
    config = build_config(plan_path, out)
    reporter = make_reporter(config, "generator", advanced)
    scene_plan = _load_plan(config, reporter)

    preferences = load_preferences(config.preferences_path)
    chosen_model = normalize_choice(model, preferences.default_model, SUPPORTED_MODELS, "Model", reporter)
    chosen_ratio = normalize_choice(ratio, preferences.last_ratio, SUPPORTED_RATIOS, "Ratio", reporter)
    if not model:
        reporter.advanced(f"Model filled from {config.preferences_path}. Override with --model if needed.")
    if not ratio:
        reporter.advanced("Aspect ratio remembered from your last run.")

    pipeline = _pipeline(config, reporter, skip_existing, model=chosen_model, ratio=chosen_ratio)

    async def _generate():
        try:
            return await pipeline.generate(scene_plan)
        finally:
            await pipeline.aclose()

    execute(reporter, _generate())
    save_preferences(
        UserPreferences(default_model=chosen_model, last_ratio=chosen_ratio),
        config.preferences_path,
    )
    reporter.success(f"Saved defaults to {config.preferences_path}")


def _run_stage(stage: str, plan_path, out, skip_existing, advanced, verbose, **pipeline_kwargs) -> None:
    setup_logging(verbose)
    config = build_config(plan_path, out)
    reporter = make_reporter(config, stage, advanced)
    scene_plan = _load_plan(config, reporter)
    pipeline = _pipeline(config, reporter, skip_existing, **pipeline_kwargs)

    async def _stage():
        try:
            return await getattr(pipeline, stage)(scene_plan)
        finally:
            await pipeline.aclose()

    execute(reporter, _stage())


@app.command()
def effect(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    skip_existing: bool = SKIP_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Apply GoEnhance effects to beats that request one."""
    _run_stage("effects", plan_path, out, skip_existing, advanced, verbose)


@app.command()
def speech(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    skip_existing: bool = SKIP_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Voice dialogue lines with ElevenLabs."""
    _run_stage("speech", plan_path, out, skip_existing, advanced, verbose)


@app.command()
def lipsync(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    skip_existing: bool = SKIP_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Lip-sync beats marked needLipSync with Wav2Lip on Replicate."""
    _run_stage("lipsync", plan_path, out, skip_existing, advanced, verbose)


@app.command()
def stitch(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    reencode: bool = typer.Option(
        False,
        "--reencode",
        help="Re-encode with moviepy instead of stream-copying with ffmpeg"
    ),
    crossfade: float = CROSSFADE_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Concatenate the best clip of every beat into the final video."""
    _run_stage("stitch", plan_path, out, False, advanced, verbose, reencode=reencode, crossfade=crossfade)


@app.command()
def run(
    plan_path: Optional[Path] = PLAN_OPTION,
    out: Optional[Path] = OUT_OPTION,
    skip_existing: bool = SKIP_OPTION,
    reencode: bool = typer.Option(False, "--reencode", help="Re-encode when stitching"),
    crossfade: float = CROSSFADE_OPTION,
    advanced: bool = ADVANCED_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Run every stage: plan (if needed), generate, effect, speech, lip-sync, stitch."""
    from .planner import plan_scenes

    setup_logging(verbose)
    config = build_config(plan_path, out)
    reporter = make_reporter(config, "pipeline", advanced)
    if config.plan_path.exists():
        scene_plan = _load_plan(config, reporter)
    else:
        planner_reporter = reporter.child("planner")
        scene_plan = execute(planner_reporter, plan_scenes(
            config.plan_path,
            config.narrative_path,
            planner_reporter,
            agent=planner_agent(config, planner_reporter),
        ))
    pipeline = _pipeline(config, reporter, skip_existing, reencode=reencode, crossfade=crossfade)

    final = execute(reporter, pipeline.run(scene_plan))
    if final:
        reporter.success(f"Final video: {final}")


if __name__ == "__main__":
    app()
