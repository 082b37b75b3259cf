"""
Structural detectors: thesis/overview, conclusion and personal opinion.

Each detector is a phrase pattern applied to a fixed window of the essay.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from .models import TaskType

THESIS_WINDOW_CHARS = 800
CONCLUSION_WINDOW_CHARS = 600

THESIS_RE = re.compile(
    r"\b(i (agree|disagree|believe|think)|this essay (argues|will)|in this essay)\b",
    re.IGNORECASE,
)
OVERVIEW_RE = re.compile(
    r"\boverall\b|\bin general\b|\bgenerally\b|\bit is clear that\b", re.IGNORECASE
)
CONCLUSION_RE = re.compile(
    r"\bin conclusion\b|\bto conclude\b|\boverall\b|\bto sum up\b", re.IGNORECASE
)
OPINION_RE = re.compile(
    r"\b(i think|i believe|in my opinion|i would say)\b", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class StructureFlags:
    has_thesis_or_overview: bool
    has_conclusion: bool
    personal_opinion_in_task1: bool


def detect_thesis_or_overview(task_type: TaskType, text: str) -> bool:
    """Essays need a position early on; data descriptions need an overview anywhere."""
    trimmed = text.strip()
    if not trimmed:
        return False
    if task_type == "task2":
        return THESIS_RE.search(trimmed[:THESIS_WINDOW_CHARS]) is not None
    return OVERVIEW_RE.search(trimmed) is not None


def detect_conclusion(text: str) -> bool:
    tail = text[max(0, len(text) - CONCLUSION_WINDOW_CHARS) :]
    return CONCLUSION_RE.search(tail) is not None


def find_personal_opinion(text: str) -> Tuple[int, int] | None:
    """Span of the first first-person opinion phrase, if any."""
    match = OPINION_RE.search(text)
    if match is None:
        return None
    return match.start(), match.end()


def detect_personal_opinion(text: str) -> bool:
    return find_personal_opinion(text) is not None


def detect_structure(task_type: TaskType, text: str) -> StructureFlags:
    """Run the detectors that apply to task_type."""
    return StructureFlags(
        has_thesis_or_overview=detect_thesis_or_overview(task_type, text),
        has_conclusion=detect_conclusion(text) if task_type == "task2" else True,
        personal_opinion_in_task1=(
            detect_personal_opinion(text) if task_type == "task1" else False
        ),
    )
