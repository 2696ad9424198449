"""
Questionnaire intake from several sources: Adapter pattern
Each source (current web form, legacy export with '/'-packed columns) is
converted into IntakeQuestionnaire; a new source only needs a new Adapter.
"""
from .types import IntakeQuestionnaire, ContactInfo
from .adapters import BaseIntakeAdapter
from .factory import get_adapter

__all__ = [
    "IntakeQuestionnaire",
    "ContactInfo",
    "BaseIntakeAdapter",
    "get_adapter",
]
