"""Data models for the fanfic video generator."""

from .plan import Beat, Character, Dialogue, ScenePlan, ValidationIssue
from .preferences import UserPreferences, load_preferences, save_preferences

__all__ = [
    "Beat",
    "Character",
    "Dialogue",
    "ScenePlan",
    "ValidationIssue",
    "UserPreferences",
    "load_preferences",
    "save_preferences",
]
