from __future__ import annotations

import logging
from typing import Iterable, List

from .config import WritingEvaluatorConfig
from .detectors import detect_structure
from .grammar import GrammarChecker, build_checker_from_config
from .issues import collect_issues
from .metrics import basic_metrics, linking_per_100, repetition_share
from .models import (
    EvaluationRequest,
    EvaluationResult,
    EvaluationStats,
    GrammarMatch,
    TaskType,
)
from .rubric import (
    score_coherence,
    score_grammar,
    score_lexical,
    score_overall,
    score_task,
)
from .rules import get_task_rules
from .similarity import prompt_essay_similarity

logger = logging.getLogger(__name__)


def evaluate_writing(
    request: EvaluationRequest,
    config: WritingEvaluatorConfig | None = None,
    checker: GrammarChecker | None = None,
) -> EvaluationResult:
    """
    Score one essay and collect its span-anchored issues.

    Grammar matches come from the request when supplied; otherwise the
    checker (built from config when not given) is called once. A checker
    failure propagates as GrammarCheckError so callers can tell it apart
    from an essay with no errors.
    """
    config = config or WritingEvaluatorConfig()
    essay = request.essay
    rules = get_task_rules(request.task_type, config.task_rules)

    metrics = basic_metrics(essay)
    similarity = prompt_essay_similarity(request.prompt, essay)
    flags = detect_structure(request.task_type, essay)

    if request.grammar_matches is not None:
        raw_matches = request.grammar_matches
    else:
        checker = checker or build_checker_from_config(config)
        raw_matches = checker.check(essay)
    grammar_matches = usable_matches(essay, raw_matches)

    grammar_issue_count = sum(1 for m in grammar_matches if m.type in ("grammar", "style"))
    spelling_issue_count = sum(1 for m in grammar_matches if m.type == "spelling")
    linking_density = linking_per_100(metrics.linking_count, metrics.word_count)

    task = score_task(
        task_type=request.task_type,
        word_count=metrics.word_count,
        min_words=rules.min_words,
        prompt_similarity=similarity,
        has_thesis_or_overview=flags.has_thesis_or_overview,
        has_conclusion=flags.has_conclusion,
        personal_opinion_in_task1=flags.personal_opinion_in_task1,
    )
    criteria = {
        "task": task.result,
        "coherence": score_coherence(
            task_type=request.task_type,
            paragraph_count=metrics.paragraph_count,
            linking_per_100=linking_density,
        ),
        "lexical": score_lexical(
            cttr=metrics.cttr,
            repetition_share=repetition_share(metrics),
            informal_hit_count=len(metrics.informal_hits),
        ),
        "grammar": score_grammar(
            word_count=metrics.word_count,
            grammar_issue_count=grammar_issue_count,
            spelling_issue_count=spelling_issue_count,
            avg_sentence_length=metrics.avg_sentence_length,
        ),
    }
    overall = score_overall(criteria, task.caps)

    issues = collect_issues(
        task_type=request.task_type,
        prompt=request.prompt,
        essay=essay,
        prompt_similarity=similarity,
        flags=flags,
        linking_count=metrics.linking_count,
        word_count=metrics.word_count,
        informal_hits=metrics.informal_hits,
        tokens_unstemmed=metrics.tokens_unstemmed,
        grammar_matches=grammar_matches,
    )

    logger.info(
        "Evaluated %s essay: overall=%.1f words=%d similarity=%.3f issues=%d caps=%d",
        request.task_type,
        overall,
        metrics.word_count,
        similarity,
        len(issues),
        len(task.caps),
    )
    return EvaluationResult(
        overall=overall,
        criteria=criteria,
        issues=issues,
        stats=EvaluationStats(
            word_count=metrics.word_count,
            paragraph_count=metrics.paragraph_count,
            sentence_count=metrics.sentence_count,
            time_limit_minutes=rules.timer_minutes,
            min_words=rules.min_words,
        ),
        caps=list(task.caps),
    )


def evaluate(
    task_type: TaskType,
    prompt: str,
    essay: str,
    grammar_matches: Iterable[GrammarMatch] | None = None,
    *,
    config: WritingEvaluatorConfig | None = None,
    checker: GrammarChecker | None = None,
) -> EvaluationResult:
    """Validate the inputs, then run evaluate_writing()."""
    request = EvaluationRequest(
        task_type=task_type,
        prompt=prompt,
        essay=essay,
        grammar_matches=list(grammar_matches) if grammar_matches is not None else None,
    )
    return evaluate_writing(request, config=config, checker=checker)


def usable_matches(text: str, matches: Iterable[GrammarMatch]) -> List[GrammarMatch]:
    """Drop empty matches and matches whose span does not lie inside text."""
    kept: List[GrammarMatch] = []
    for match in matches:
        if 0 <= match.start < match.end <= len(text):
            kept.append(match)
        else:
            logger.warning(
                "Dropping grammar match with empty or out-of-range span [%d, %d) "
                "for text of length %d",
                match.start,
                match.end,
                len(text),
            )
    return kept
