"""AI agents for scene planning."""

from .base import BaseAgent
from .planner import PlannerAgent, PlannerInput

__all__ = ["BaseAgent", "PlannerAgent", "PlannerInput"]
