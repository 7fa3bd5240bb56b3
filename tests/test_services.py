import base64
import json

import httpx
import pytest

from fvg.config import Config
from fvg.exceptions import CollaboratorError, ConfigurationError, NoOutputError, TaskFailedError
from fvg.services import ElevenLabsClient, GoEnhanceClient, ReplicateClient, RunwayClient, TaskPoller


async def no_sleep(seconds):
    return None


def instant_poller():
    return TaskPoller(interval=0.0, sleep=no_sleep)


def mock_client(routes, captured):
    """Serve ``routes`` keyed by (method, path); each value is a list of responses."""

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        responses = routes[(request.method, request.url.path)]
        return responses.pop(0) if len(responses) > 1 else responses[0]

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_runway_generate_builds_request_and_polls(config):
    captured = []
    routes = {
        ("POST", "/v1/text_to_video"): [httpx.Response(200, json={"id": "task-1"})],
        ("GET", "/v1/tasks/task-1"): [
            httpx.Response(200, json={"status": "RUNNING"}),
            httpx.Response(200, json={"status": "SUCCEEDED", "output": ["https://cdn.test/beat1.mp4"]}),
        ],
    }
    async with mock_client(routes, captured) as http:
        runway = RunwayClient(config, client=http, poller=instant_poller())
        url = await runway.generate_video("Rain on a rooftop", model="veo3.1_fast", ratio="1920:1080", duration=8)

    assert url == "https://cdn.test/beat1.mp4"
    submit = captured[0]
    assert str(submit.url) == "https://runway.test/v1/text_to_video"
    assert submit.headers["Authorization"] == "Bearer runway-key"
    assert submit.headers["X-Runway-Version"] == "2024-11-06"
    assert json.loads(submit.content) == {
        "model": "veo3.1_fast",
        "promptText": "Rain on a rooftop",
        "ratio": "1920:1080",
        "duration": 8,
    }
    assert len(captured) == 3


@pytest.mark.asyncio
async def test_runway_success_without_output(config):
    routes = {
        ("POST", "/v1/text_to_video"): [httpx.Response(200, json={"id": "task-2"})],
        ("GET", "/v1/tasks/task-2"): [httpx.Response(200, json={"status": "SUCCEEDED", "output": []})],
    }
    async with mock_client(routes, []) as http:
        runway = RunwayClient(config, client=http, poller=instant_poller())
        with pytest.raises(NoOutputError, match="No video output from Runway"):
            await runway.generate_video("p", model="veo3", ratio="1280:720", duration=4)


@pytest.mark.asyncio
async def test_runway_failed_task(config):
    routes = {
        ("POST", "/v1/text_to_video"): [httpx.Response(200, json={"id": "task-3"})],
        ("GET", "/v1/tasks/task-3"): [httpx.Response(200, json={"status": "FAILED", "failure": "moderation"})],
    }
    async with mock_client(routes, []) as http:
        runway = RunwayClient(config, client=http, poller=instant_poller())
        with pytest.raises(TaskFailedError) as exc_info:
            await runway.generate_video("p", model="veo3", ratio="1280:720", duration=4)

    assert exc_info.value.remote_error == "moderation"


@pytest.mark.asyncio
async def test_runway_rejected_submission(config):
    routes = {("POST", "/v1/text_to_video"): [httpx.Response(401, text="bad key")]}
    async with mock_client(routes, []) as http:
        runway = RunwayClient(config, client=http, poller=instant_poller())
        with pytest.raises(CollaboratorError) as exc_info:
            await runway.generate_video("p", model="veo3", ratio="1280:720", duration=4)

    assert exc_info.value.status_code == 401
    assert exc_info.value.body == "bad key"
    assert not exc_info.value.retryable


def test_missing_key_is_a_configuration_error(tmp_path):
    config = Config(runway_api_key="", out_dir=tmp_path)
    with pytest.raises(ConfigurationError, match="RUNWAY_API_KEY"):
        RunwayClient(config, client=httpx.AsyncClient())


@pytest.mark.asyncio
async def test_download_writes_file(config, tmp_path):
    routes = {("GET", "/files/beat1.mp4"): [httpx.Response(200, content=b"video-bytes")]}
    async with mock_client(routes, []) as http:
        runway = RunwayClient(config, client=http, poller=instant_poller())
        target = tmp_path / "out" / "beat1.mp4"
        await runway.download("https://cdn.test/files/beat1.mp4", target)

    assert target.read_bytes() == b"video-bytes"
    assert not target.with_suffix(".mp4.tmp").exists()


@pytest.mark.asyncio
async def test_goenhance_effect_with_task_id(config):
    captured = []
    routes = {
        ("POST", "/video-effects/generate"): [httpx.Response(200, json={"task_id": "fx-1"})],
        ("GET", "/tasks/fx-1"): [
            httpx.Response(200, json={"status": "processing"}),
            httpx.Response(200, json={"status": "completed", "result": {"download_url": "https://cdn.test/kiss.mp4"}}),
        ],
    }
    async with mock_client(routes, captured) as http:
        goenhance = GoEnhanceClient(config, client=http, poller=instant_poller())
        url = await goenhance.apply_effect("kiss", "beat1", b"mp4")

    assert url == "https://cdn.test/kiss.mp4"
    body = json.loads(captured[0].content)
    assert body["effect"] == "kiss"
    assert body["metadata"] == {"beatId": "beat1"}
    assert body["input_video"] == "data:video/mp4;base64," + base64.b64encode(b"mp4").decode()
    assert captured[0].headers["Authorization"] == "Bearer goenhance-key"


@pytest.mark.asyncio
async def test_goenhance_effect_with_task_url(config):
    routes = {
        ("POST", "/video-effects/generate"): [httpx.Response(200, json={"taskUrl": "https://goenhance.test/jobs/9"})],
        ("GET", "/jobs/9"): [httpx.Response(200, json={"status": "finished", "output": {"video_url": "https://cdn.test/o.mp4"}})],
    }
    async with mock_client(routes, []) as http:
        goenhance = GoEnhanceClient(config, client=http, poller=instant_poller())
        assert await goenhance.apply_effect("kiss", "beat1", b"mp4") == "https://cdn.test/o.mp4"


@pytest.mark.asyncio
async def test_goenhance_missing_download_url(config):
    routes = {
        ("POST", "/video-effects/generate"): [httpx.Response(200, json={"task_id": "fx-2"})],
        ("GET", "/tasks/fx-2"): [httpx.Response(200, json={"status": "completed", "result": {}})],
    }
    async with mock_client(routes, []) as http:
        goenhance = GoEnhanceClient(config, client=http, poller=instant_poller())
        with pytest.raises(NoOutputError, match="beat1"):
            await goenhance.apply_effect("kiss", "beat1", b"mp4")


@pytest.mark.asyncio
async def test_elevenlabs_synthesize(config):
    captured = []
    routes = {("POST", "/v1/text-to-speech/voice-h"): [httpx.Response(200, content=b"ID3audio")]}
    async with mock_client(routes, captured) as http:
        elevenlabs = ElevenLabsClient(config, client=http)
        audio = await elevenlabs.synthesize("Not again.", "voice-h")

    assert audio == b"ID3audio"
    request = captured[0]
    assert request.headers["xi-api-key"] == "eleven-key"
    assert request.headers["Accept"] == "audio/mpeg"
    body = json.loads(request.content)
    assert body["text"] == "Not again."
    assert body["model_id"] == "eleven_multilingual_v2"
    assert body["voice_settings"] == {"stability": 0.4, "similarity_boost": 0.7}


@pytest.mark.asyncio
async def test_elevenlabs_server_error_is_retryable(config):
    routes = {("POST", "/v1/text-to-speech/v"): [httpx.Response(503, text="busy")]}
    async with mock_client(routes, []) as http:
        elevenlabs = ElevenLabsClient(config, client=http)
        with pytest.raises(CollaboratorError) as exc_info:
            await elevenlabs.synthesize("hi", "v")

    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_replicate_lip_sync(config):
    captured = []
    routes = {
        ("POST", "/v1/predictions"): [httpx.Response(201, json={"id": "pred-1", "status": "starting"})],
        ("GET", "/v1/predictions/pred-1"): [
            httpx.Response(200, json={"status": "processing"}),
            httpx.Response(200, json={"status": "succeeded", "output": "https://cdn.test/synced.mp4"}),
        ],
    }
    async with mock_client(routes, captured) as http:
        replicate = ReplicateClient(config, client=http, poller=instant_poller())
        url = await replicate.lip_sync(b"video", b"audio")

    assert url == "https://cdn.test/synced.mp4"
    submit = captured[0]
    assert submit.headers["Authorization"] == "Token replicate-token"
    body = json.loads(submit.content)
    assert body["version"] == config.wav2lip_version
    assert body["input"]["face"].startswith("data:video/mp4;base64,")
    assert body["input"]["audio"].startswith("data:audio/mpeg;base64,")
    assert body["input"]["pads"] == 0
    assert body["input"]["nosmooth"] is False


@pytest.mark.asyncio
async def test_replicate_list_output(config):
    routes = {
        ("POST", "/v1/predictions"): [httpx.Response(201, json={"id": "pred-2"})],
        ("GET", "/v1/predictions/pred-2"): [httpx.Response(200, json={"status": "succeeded", "output": ["https://cdn.test/a.mp4"]})],
    }
    async with mock_client(routes, []) as http:
        replicate = ReplicateClient(config, client=http, poller=instant_poller())
        assert await replicate.lip_sync(b"v", b"a") == "https://cdn.test/a.mp4"


@pytest.mark.asyncio
async def test_replicate_empty_output(config):
    routes = {
        ("POST", "/v1/predictions"): [httpx.Response(201, json={"id": "pred-3"})],
        ("GET", "/v1/predictions/pred-3"): [httpx.Response(200, json={"status": "succeeded", "output": []})],
    }
    async with mock_client(routes, []) as http:
        replicate = ReplicateClient(config, client=http, poller=instant_poller())
        with pytest.raises(NoOutputError):
            await replicate.lip_sync(b"v", b"a")
