"""Planner agent turning a narrative into a scene plan."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from ..durations import describe_supported_durations
from ..exceptions import PlanSyntaxError
from ..models import ScenePlan, ValidationIssue
from ..validation import validate_plan
from .base import BaseAgent

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a film director breaking a short story into shots for AI video generation.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an object with this shape:
{
  "title": "short title",
  "characters": [
    {"name": "Name", "embedding_token": "@NameA", "voice_id": null}
  ],
  "beats": [
    {
      "id": "beat1",
      "prompt": "visually detailed, cinematic prompt mentioning @NameA",
      "durationSec": 6,
      "camera": "medium shot",
      "dialogue": {"speaker": "Name", "text": "spoken line"},
      "needLipSync": true
    }
  ]
}
Beat ids must be unique. Only add dialogue when a character speaks on screen,
and set needLipSync only for beats with dialogue."""


@dataclass
class PlannerInput:
    """Input data for the planner agent."""

    narrative: str
    max_beats: int = 6
    style: Optional[str] = None


class PlannerAgent(BaseAgent[PlannerInput, ScenePlan]):
    """Agent generating a validated ``ScenePlan`` from narrative text."""

    @property
    def name(self) -> str:
        return "PlannerAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    async def run(self, input_data: PlannerInput) -> ScenePlan:
        """Plan beats for the narrative.

        Raises:
            PlanValidationError: If the response is not a usable plan.
        """
        self._logger.info(f"Planning up to {input_data.max_beats} beats")
        response = await self._create_message(
            prompt=self._build_prompt(input_data),
            max_tokens=4096,
            temperature=0.8,
        )
        return self._parse_response(response)

    def _build_prompt(self, input_data: PlannerInput) -> str:
        prompt_parts = [
            "Create a scene plan for the following story:",
            "",
            input_data.narrative.strip(),
            "",
            f"MAXIMUM BEATS: {input_data.max_beats}",
            f"SUPPORTED CLIP DURATIONS: {describe_supported_durations()}",
        ]
        if input_data.style:
            prompt_parts.append(f"VISUAL STYLE: {input_data.style}")
        return "\n".join(prompt_parts)

    def _parse_response(self, response: str) -> ScenePlan:
        json_str = extract_json(response)
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.debug(f"Raw response: {response}")
            raise PlanSyntaxError(
                "Could not parse the planner response",
                [ValidationIssue(path="planner response", message="Invalid JSON encountered", suggestion=str(e))],
            )
        return validate_plan(data, "planner response")


def extract_json(response: str) -> str:
    """Extract JSON from a response that may contain markdown or other text."""
    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    if "```" in response:
        start = response.find("```") + 3
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    start = response.find("{")
    if start != -1:
        depth = 0
        for i, char in enumerate(response[start:], start):
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return response[start:i + 1]

    return response.strip()
