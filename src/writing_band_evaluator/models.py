from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping

from .errors import InputValidationError

TaskType = Literal["task1", "task2"]
Criterion = Literal["task", "coherence", "lexical", "grammar"]
Severity = Literal["minor", "moderate", "major"]
MatchType = Literal["grammar", "spelling", "style"]

TASK_TYPES = ("task1", "task2")
MATCH_TYPES = ("grammar", "spelling", "style")
CRITERIA = ("task", "coherence", "lexical", "grammar")

PROMPT_MIN_CHARS = 10
PROMPT_MAX_CHARS = 4000
ESSAY_MIN_CHARS = 1
ESSAY_MAX_CHARS = 20000


@dataclass(frozen=True, slots=True)
class WordSpan:
    """A word as counted by the live word counter, with its [start, end) span."""

    text: str
    start: int
    end: int


@dataclass(slots=True)
class TokenFrequency:
    token: str
    count: int


@dataclass(slots=True)
class GrammarMatch:
    """A flagged span reported by the grammar-check collaborator."""

    start: int
    end: int
    message: str
    type: MatchType = "grammar"
    short_message: str | None = None
    replacements: List[str] = field(default_factory=list)
    rule_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GrammarMatch":
        """Build a match from camelCase or snake_case keys."""
        match_type = data.get("type", "grammar")
        if match_type not in MATCH_TYPES:
            raise ValueError(f"Unknown grammar match type '{match_type}'.")
        short_message = data.get("shortMessage", data.get("short_message"))
        rule_id = data.get("ruleId", data.get("rule_id"))
        return cls(
            start=int(data["start"]),
            end=int(data["end"]),
            message=str(data.get("message", "")),
            type=match_type,
            short_message=short_message or None,
            replacements=[str(value) for value in data.get("replacements") or []],
            rule_id=rule_id or None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "start": self.start,
            "end": self.end,
            "message": self.message,
            "replacements": list(self.replacements),
            "type": self.type,
        }
        if self.short_message:
            payload["shortMessage"] = self.short_message
        if self.rule_id:
            payload["ruleId"] = self.rule_id
        return payload


@dataclass(slots=True)
class InformalHit:
    """A span matching one of the informal-tone pattern families."""

    start: int
    end: int
    label: str
    match: str


@dataclass(slots=True)
class Metrics:
    """Per-essay text statistics."""

    word_count: int
    paragraph_count: int
    sentence_count: int
    avg_sentence_length: float
    tokens: List[str]
    tokens_unstemmed: List[str]
    cttr: float
    top_token_frequencies: List[TokenFrequency]
    linking_count: int
    informal_hits: List[InformalHit]


@dataclass(slots=True)
class CriterionResult:
    score: float
    summary: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "summary": self.summary, "evidence": dict(self.evidence)}


@dataclass(slots=True)
class Cap:
    """A ceiling on the overall band."""

    reason: str
    max_overall: float

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason, "maxOverall": self.max_overall}


@dataclass(slots=True)
class TextIssue:
    """An explained problem anchored to a [start, end) span of the essay."""

    id: str
    criterion: Criterion
    category: str
    message: str
    explanation: str
    severity: Severity
    band_impact: float
    start: int
    end: int
    excerpt: str
    suggestion: str | None = None
    improved_version: str | None = None
    improved_why: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "criterion": self.criterion,
            "category": self.category,
            "message": self.message,
            "explanation": self.explanation,
            "severity": self.severity,
            "bandImpact": self.band_impact,
            "start": self.start,
            "end": self.end,
            "excerpt": self.excerpt,
        }
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        if self.improved_version is not None:
            payload["improvedVersion"] = self.improved_version
        if self.improved_why is not None:
            payload["improvedWhy"] = self.improved_why
        return payload


@dataclass(slots=True)
class EvaluationStats:
    word_count: int
    paragraph_count: int
    sentence_count: int
    time_limit_minutes: int
    min_words: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "wordCount": self.word_count,
            "paragraphCount": self.paragraph_count,
            "sentenceCount": self.sentence_count,
            "timeLimitMinutes": self.time_limit_minutes,
            "minWords": self.min_words,
        }


@dataclass(slots=True)
class EvaluationResult:
    """Complete outcome of one evaluation call."""

    overall: float
    criteria: Dict[str, CriterionResult]
    issues: List[TextIssue]
    stats: EvaluationStats
    caps: List[Cap]

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "criteria": {name: self.criteria[name].to_dict() for name in CRITERIA},
            "issues": [issue.to_dict() for issue in self.issues],
            "stats": self.stats.to_dict(),
            "caps": [cap.to_dict() for cap in self.caps],
        }


@dataclass(slots=True)
class EvaluationRequest:
    """
    Validated evaluation input.

    Bounds are checked when the request is built so the engine never sees
    an empty essay or an unknown task type.
    """

    task_type: TaskType
    prompt: str
    essay: str
    grammar_matches: List[GrammarMatch] | None = None

    def __post_init__(self) -> None:
        if self.task_type not in TASK_TYPES:
            raise InputValidationError(
                f"task_type must be one of {', '.join(TASK_TYPES)}; got '{self.task_type}'."
            )
        _check_length("prompt", self.prompt, PROMPT_MIN_CHARS, PROMPT_MAX_CHARS)
        _check_length("essay", self.essay, ESSAY_MIN_CHARS, ESSAY_MAX_CHARS)


def _check_length(name: str, value: object, minimum: int, maximum: int) -> None:
    if not isinstance(value, str):
        raise InputValidationError(f"{name} must be a string.")
    if not minimum <= len(value) <= maximum:
        raise InputValidationError(
            f"{name} must be between {minimum} and {maximum} characters; got {len(value)}."
        )
