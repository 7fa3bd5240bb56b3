import pytest

from fvg.exceptions import ConfigurationError
from fvg.pipeline import Pipeline


class FakeServices:
    def __init__(self):
        self.calls = []

    async def generate_video(self, prompt, model, ratio, duration):
        self.calls.append(("generate", duration))
        return "https://cdn.test/base.mp4"

    async def apply_effect(self, effect, beat_id, video):
        self.calls.append(("effect", beat_id))
        return "https://cdn.test/effect.mp4"

    async def synthesize(self, text, voice_id):
        self.calls.append(("speech", voice_id))
        return b"audio"

    async def lip_sync(self, video, audio):
        self.calls.append(("lipsync", len(audio)))
        return "https://cdn.test/synced.mp4"

    async def download(self, url, output_path):
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(url.encode())
        return output_path

    async def concat(self, clip_paths, output_path):
        self.calls.append(("concat", [path.relative_to(output_path.parent).as_posix() for path in clip_paths]))
        output_path.write_bytes(b"final")
        return output_path


def make_pipeline(config, reporter, services, **kwargs):
    return Pipeline(
        config,
        reporter,
        model="veo3.1_fast",
        ratio="1920:1080",
        generator=services,
        renderer=services,
        synthesizer=services,
        syncer=services,
        concatenator=services,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_run_executes_stages_in_order(config, reporter, make_plan):
    plan = make_plan(beats=[
        {"id": "beat1", "prompt": "Meet", "durationSec": 5, "effect": "kiss"},
        {
            "id": "beat2",
            "prompt": "Whisper",
            "durationSec": 4,
            "dialogue": {"speaker": "Heroine", "text": "Stay."},
            "needLipSync": True,
        },
    ])
    services = FakeServices()

    final = await make_pipeline(config, reporter, services).run(plan)

    assert final == config.out_dir / "final_scene.mp4"
    assert [call[0] for call in services.calls] == [
        "generate", "generate", "effect", "speech", "lipsync", "concat",
    ]
    assert services.calls[-1] == ("concat", ["kiss/beat1.mp4", "synced/beat2.mp4"])


@pytest.mark.asyncio
async def test_rerun_with_skip_existing_only_fills_gaps(config, reporter, make_plan):
    plan = make_plan()
    first = FakeServices()
    await make_pipeline(config, reporter, first).run(plan)

    second = FakeServices()
    await make_pipeline(config, reporter, second, skip_existing=True).run(plan)

    assert [call[0] for call in second.calls] == ["concat"]


@pytest.mark.asyncio
async def test_adapter_built_only_when_needed(config, reporter, make_plan):
    config = config.model_copy(update={"goenhance_api_key": ""})
    pipeline = Pipeline(config, reporter, model="veo3", ratio="1280:720", renderer=None)

    result = await pipeline.effects(make_plan())
    assert result.produced == []

    kiss_plan = make_plan(beats=[{"id": "b", "prompt": "p", "durationSec": 4, "effect": "kiss"}])
    with pytest.raises(ConfigurationError, match="GOENHANCE_API_KEY"):
        await pipeline.effects(kiss_plan)


@pytest.mark.asyncio
async def test_stitch_picks_concatenator(config, reporter, make_plan):
    from fvg.editor import FFmpegConcatenator, MoviePyConcatenator

    default = Pipeline(config, reporter, model="veo3", ratio="1280:720")
    crossfade = Pipeline(config, reporter, model="veo3", ratio="1280:720", crossfade=0.5)

    assert await default.stitch(make_plan()) is None
    assert await crossfade.stitch(make_plan()) is None
    assert isinstance(default._concatenator, FFmpegConcatenator)
    assert isinstance(crossfade._concatenator, MoviePyConcatenator)
    assert crossfade._concatenator._transition_duration == 0.5


@pytest.mark.asyncio
async def test_unsupported_effect_needs_no_effect_adapter(config, reporter, make_plan, capsys):
    config = config.model_copy(update={"goenhance_api_key": ""})
    pipeline = Pipeline(config, reporter, model="veo3", ratio="1280:720")
    plan = make_plan(beats=[{"id": "b", "prompt": "p", "durationSec": 4, "effect": "hug"}])

    result = await pipeline.effects(plan)

    assert result.produced == []
    assert result.skipped == ["b"]
    assert "effect 'hug' is not supported" in capsys.readouterr().err
