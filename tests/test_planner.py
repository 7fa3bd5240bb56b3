import json

import pytest

from fvg.agents import PlannerAgent, PlannerInput
from fvg.agents.planner import extract_json
from fvg.exceptions import PlanSyntaxError, PlanValidationError
from fvg.planner import DEFAULT_LINE, first_line, plan_scenes, starter_plan
from fvg.validation import load_scene_plan, write_scene_plan


class FakeAgent:
    model = "claude-test"

    def __init__(self, plan):
        self.plan = plan
        self.inputs = []

    async def run(self, input_data):
        self.inputs.append(input_data)
        return self.plan


class FakeClaude:
    model = "claude-test"

    def __init__(self, response):
        self.response = response
        self.requests = []

    async def create_message(self, prompt, max_tokens=4096, system=None, temperature=0.7):
        self.requests.append({"prompt": prompt, "system": system, "temperature": temperature})
        return self.response


def test_first_line_skips_blank_lines():
    assert first_line("\n\n  The rain never stops.  \nMore text") == "The rain never stops."
    assert first_line("   \n") == DEFAULT_LINE


def test_starter_plan_voices_first_line():
    plan = starter_plan("I will fix this.\nThe end.")

    assert [beat.id for beat in plan.beats] == ["beat1", "beat2"]
    assert plan.beats[1].dialogue.text == "I will fix this."
    assert plan.beats[1].need_lip_sync is True
    assert plan.has_voice_information()


@pytest.mark.asyncio
async def test_existing_plan_is_kept(tmp_path, make_plan, reporter):
    plan_path = tmp_path / "beats.json"
    existing = make_plan()
    write_scene_plan(existing, plan_path)
    before = plan_path.read_text(encoding="utf-8")

    result = await plan_scenes(plan_path, tmp_path / "fanfic.txt", reporter, agent=FakeAgent(None))

    assert result == existing
    assert plan_path.read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_starter_plan_written_without_agent(tmp_path, reporter):
    narrative = tmp_path / "fanfic.txt"
    narrative.write_text("We meet again.\n", encoding="utf-8")
    plan_path = tmp_path / "data" / "beats.json"

    plan = await plan_scenes(plan_path, narrative, reporter)

    assert load_scene_plan(plan_path) == plan
    assert plan.beats[1].dialogue.text == "We meet again."


@pytest.mark.asyncio
async def test_missing_narrative_uses_placeholder(tmp_path, reporter, capsys):
    plan = await plan_scenes(tmp_path / "beats.json", tmp_path / "fanfic.txt", reporter)

    assert plan.beats[1].dialogue.text == DEFAULT_LINE
    assert "No narrative found" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_agent_plans_narrative(tmp_path, make_plan, reporter):
    narrative = tmp_path / "fanfic.txt"
    narrative.write_text("A long story.", encoding="utf-8")
    agent = FakeAgent(make_plan())

    plan = await plan_scenes(tmp_path / "beats.json", narrative, reporter, agent=agent, max_beats=3, style="noir")

    assert plan == make_plan()
    assert agent.inputs[0].narrative == "A long story."
    assert agent.inputs[0].max_beats == 3
    assert agent.inputs[0].style == "noir"


@pytest.mark.asyncio
async def test_planner_agent_validates_response(raw_plan):
    claude = FakeClaude("Here you go:\n```json\n" + json.dumps(raw_plan()) + "\n```")
    agent = PlannerAgent(claude)

    plan = await agent.run(PlannerInput(narrative="Story"))

    assert [beat.id for beat in plan.beats] == ["beat1", "beat2"]
    assert "Story" in claude.requests[0]["prompt"]
    assert "4s, 6s, 8s" in claude.requests[0]["prompt"]
    assert claude.requests[0]["system"] == agent.system_prompt


@pytest.mark.asyncio
async def test_planner_agent_rejects_invalid_json():
    agent = PlannerAgent(FakeClaude("{not json}"))

    with pytest.raises(PlanSyntaxError):
        await agent.run(PlannerInput(narrative="Story"))


@pytest.mark.asyncio
async def test_planner_agent_rejects_invalid_plan(raw_plan):
    agent = PlannerAgent(FakeClaude(json.dumps(raw_plan(beats=[]))))

    with pytest.raises(PlanValidationError) as exc_info:
        await agent.run(PlannerInput(narrative="Story"))

    assert "planner response" in exc_info.value.message


def test_extract_json_from_bare_text():
    assert extract_json('Sure! {"a": {"b": 1}} trailing') == '{"a": {"b": 1}}'
