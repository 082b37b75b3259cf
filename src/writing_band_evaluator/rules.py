from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Mapping

from .errors import InputValidationError


@dataclass(frozen=True, slots=True)
class TaskRules:
    """Static description of one writing task and its length/time limits."""

    title: str
    consists_of: str
    must_do: List[str]
    must_not_do: List[str]
    recommended_structure: str
    min_words: int
    timer_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return dict(asdict(self))


TASK_RULES: Dict[str, TaskRules] = {
    "task1": TaskRules(
        title="IELTS Writing Task 1 (Academic)",
        consists_of=(
            "You are given a visual (graph, chart, table, diagram, or map) and must "
            "summarise the main features in a factual, academic style."
        ),
        must_do=[
            "Select and report the key features and make relevant comparisons.",
            "Write an overview that summarises the main trends or stages.",
        ],
        must_not_do=[
            "Do not give personal opinions or reasons unless the task explicitly asks for them.",
            "Do not list every single number without summarising trends.",
        ],
        recommended_structure=(
            "Introduction (paraphrase the task) -> Overview (main trends) -> "
            "Body 1 (key details) -> Body 2 (comparisons / remaining key details)."
        ),
        min_words=150,
        timer_minutes=20,
    ),
    "task2": TaskRules(
        title="IELTS Writing Task 2 (Essay)",
        consists_of=(
            "You must write an essay responding to a point of view, argument, or problem."
        ),
        must_do=[
            "Address all parts of the task and present a clear position.",
            "Support ideas with explanation and relevant examples.",
        ],
        must_not_do=[
            "Do not write a list of disconnected ideas; develop each main point.",
            "Do not use an informal tone (slang, text abbreviations).",
        ],
        recommended_structure=(
            "Introduction (paraphrase + thesis) -> Body 1 (main idea + support) -> "
            "Body 2 (main idea + support) -> Conclusion (summarise position)."
        ),
        min_words=250,
        timer_minutes=40,
    ),
}


def get_task_rules(
    task_type: str, overrides: Mapping[str, Mapping[str, Any]] | None = None
) -> TaskRules:
    """Look up the rules for task_type, applying any configured field overrides."""
    try:
        rules = TASK_RULES[task_type]
    except KeyError as exc:
        raise InputValidationError(f"Unknown task type '{task_type}'.") from exc
    if not overrides or task_type not in overrides:
        return rules
    allowed = {f.name for f in fields(TaskRules)}
    changes = {
        key: value for key, value in overrides[task_type].items() if key in allowed
    }
    return replace(rules, **changes)
