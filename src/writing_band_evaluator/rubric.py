from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping

from .models import Cap, CriterionResult, TaskType
from .similarity import OFF_TOPIC_THRESHOLD, WEAK_RELEVANCE_THRESHOLD

MIN_BAND = 1.0
MAX_BAND = 9.0


@dataclass(slots=True)
class TaskScore:
    result: CriterionResult
    caps: List[Cap] = field(default_factory=list)


def clamp_score(score: float) -> float:
    return min(MAX_BAND, max(MIN_BAND, score))


def round_to_half(score: float) -> float:
    """Round to the nearest half band, halves rounding up."""
    return math.floor(score * 2 + 0.5) / 2


def _finalize(score: float) -> float:
    return round_to_half(clamp_score(score))


def score_task(
    *,
    task_type: TaskType,
    word_count: int,
    min_words: int,
    prompt_similarity: float,
    has_thesis_or_overview: bool,
    has_conclusion: bool,
    personal_opinion_in_task1: bool,
) -> TaskScore:
    """Task response/achievement band plus any caps on the overall band."""
    caps: List[Cap] = []
    score = 8.0

    if word_count < min_words:
        ratio = word_count / min_words
        if ratio < 0.6:
            score = 3.5
            caps.append(Cap("Underlength (far below minimum word count).", 4.0))
        elif ratio < 0.8:
            score = 4.5
            caps.append(Cap("Underlength (below minimum word count).", 5.0))
        else:
            score = 5.5
            caps.append(Cap("Slightly under the minimum word count.", 6.0))

    if prompt_similarity < OFF_TOPIC_THRESHOLD:
        score = min(score, 4.0)
        caps.append(Cap("Likely off-topic / weak relevance to the question.", 5.0))
    elif prompt_similarity < WEAK_RELEVANCE_THRESHOLD:
        score -= 1

    if not has_thesis_or_overview:
        score -= 1
    if task_type == "task2" and not has_conclusion:
        score -= 0.5
    if task_type == "task1" and personal_opinion_in_task1:
        score -= 1

    score = _finalize(score)
    return TaskScore(
        result=CriterionResult(
            score=score,
            summary=(
                "The response addresses the task with a clear focus."
                if score >= 7
                else "The response only partially addresses the task and/or lacks clarity of purpose."
            ),
            evidence={
                "wordCount": word_count,
                "minWords": min_words,
                "promptSimilarity": round(prompt_similarity, 3),
                "hasThesisOrOverview": has_thesis_or_overview,
                "hasConclusion": has_conclusion,
                "personalOpinionInTask1": personal_opinion_in_task1,
            },
        ),
        caps=caps,
    )


def score_coherence(
    *, task_type: TaskType, paragraph_count: int, linking_per_100: float
) -> CriterionResult:
    if paragraph_count <= 1:
        score = 4.0
    elif paragraph_count == 2:
        score = 5.0
    elif paragraph_count == 3:
        score = 6.0
    else:
        score = 7.5

    expected_min = 4 if task_type == "task2" else 3
    if paragraph_count < expected_min:
        score -= 0.5

    if linking_per_100 < 0.6:
        score -= 1
    elif linking_per_100 < 1.1:
        score -= 0.5

    score = _finalize(score)
    return CriterionResult(
        score=score,
        summary=(
            "Paragraphing is generally logical and cohesion devices are used appropriately."
            if score >= 7
            else "Organisation and cohesion are weak or inconsistent, reducing clarity."
        ),
        evidence={
            "paragraphCount": paragraph_count,
            "linkingPer100Words": round(linking_per_100, 2),
        },
    )


def score_lexical(
    *, cttr: float, repetition_share: float, informal_hit_count: int
) -> CriterionResult:
    if cttr >= 0.8:
        score = 9.0
    elif cttr >= 0.72:
        score = 8.0
    elif cttr >= 0.65:
        score = 7.0
    elif cttr >= 0.58:
        score = 6.0
    elif cttr >= 0.50:
        score = 5.0
    else:
        score = 4.0

    if repetition_share > 0.06:
        score -= 0.5
    if repetition_share > 0.09:
        score -= 0.5
    if informal_hit_count >= 2:
        score -= 0.5
    if informal_hit_count >= 5:
        score -= 0.5

    score = _finalize(score)
    return CriterionResult(
        score=score,
        summary=(
            "Adequate range with some flexibility and precision."
            if score >= 7
            else "Limited range and/or repetition reduces lexical effectiveness."
        ),
        evidence={
            "cttr": round(cttr, 3),
            "repetitionShare": round(repetition_share, 3),
            "informalHitCount": informal_hit_count,
        },
    )


def score_grammar(
    *,
    word_count: int,
    grammar_issue_count: int,
    spelling_issue_count: int,
    avg_sentence_length: float,
) -> CriterionResult:
    total = grammar_issue_count + spelling_issue_count
    per_100 = total / word_count * 100 if word_count else 100.0

    if per_100 <= 0.6:
        score = 9.0
    elif per_100 <= 1.2:
        score = 8.0
    elif per_100 <= 2.2:
        score = 7.0
    elif per_100 <= 4.0:
        score = 6.0
    elif per_100 <= 6.0:
        score = 5.0
    elif per_100 <= 8.0:
        score = 4.0
    else:
        score = 3.0

    # Short simple sentences limit range; very long ones risk run-ons.
    if 0 < avg_sentence_length < 11:
        score -= 0.5
    if avg_sentence_length > 26:
        score -= 0.5

    score = _finalize(score)
    return CriterionResult(
        score=score,
        summary=(
            "Mostly accurate grammar with occasional slips."
            if score >= 7
            else "Frequent errors reduce clarity and limit grammatical control."
        ),
        evidence={
            "grammarIssueCount": grammar_issue_count,
            "spellingIssueCount": spelling_issue_count,
            "errorPer100Words": round(per_100, 2),
            "avgSentenceLength": round(avg_sentence_length, 1),
        },
    )


def score_overall(criteria: Mapping[str, CriterionResult], caps: Iterable[Cap]) -> float:
    """Mean of the criterion bands rounded to a half band, then capped."""
    scores = [result.score for result in criteria.values()]
    overall = clamp_score(round_to_half(sum(scores) / len(scores))) if scores else MIN_BAND
    for cap in caps:
        overall = min(overall, cap.max_overall)
    return overall
