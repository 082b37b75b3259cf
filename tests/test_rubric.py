import pytest

from writing_band_evaluator.models import Cap, CriterionResult
from writing_band_evaluator.rubric import (
    round_to_half,
    score_coherence,
    score_grammar,
    score_lexical,
    score_overall,
    score_task,
)


def _task(**overrides):
    params = dict(
        task_type="task2",
        word_count=300,
        min_words=250,
        prompt_similarity=0.5,
        has_thesis_or_overview=True,
        has_conclusion=True,
        personal_opinion_in_task1=False,
    )
    params.update(overrides)
    return score_task(**params)


@pytest.mark.parametrize(
    "value, expected",
    [(6.25, 6.5), (6.24, 6.0), (6.75, 7.0), (5.0, 5.0), (7.74, 7.5)],
)
def test_round_to_half_rounds_halves_up(value, expected):
    assert round_to_half(value) == expected


def test_score_task_full_marks_without_penalties():
    scored = _task()

    assert scored.result.score == 8.0
    assert scored.caps == []
    assert scored.result.evidence["promptSimilarity"] == 0.5


@pytest.mark.parametrize(
    "word_count, score, cap",
    [(100, 3.5, 4.0), (160, 4.5, 5.0), (240, 5.5, 6.0)],
)
def test_score_task_underlength_tiers(word_count, score, cap):
    scored = _task(word_count=word_count)

    assert scored.result.score == score
    assert [c.max_overall for c in scored.caps] == [cap]


def test_score_task_off_topic_caps_overall():
    scored = _task(prompt_similarity=0.01)

    assert scored.result.score == 4.0
    assert scored.caps[-1].max_overall == 5.0
    assert "off-topic" in scored.caps[-1].reason


def test_score_task_structure_penalties():
    assert _task(prompt_similarity=0.1).result.score == 7.0
    assert _task(has_thesis_or_overview=False, has_conclusion=False).result.score == 6.5
    report = _task(task_type="task1", min_words=150, personal_opinion_in_task1=True)
    assert report.result.score == 7.0


def test_score_coherence_paragraphs_and_linking():
    assert score_coherence(task_type="task2", paragraph_count=4, linking_per_100=2.0).score == 7.5
    assert score_coherence(task_type="task1", paragraph_count=3, linking_per_100=0.8).score == 5.5
    assert score_coherence(task_type="task2", paragraph_count=1, linking_per_100=0.0).score == 2.5


def test_score_lexical_bands_and_penalties():
    assert score_lexical(cttr=0.85, repetition_share=0.0, informal_hit_count=0).score == 9.0
    result = score_lexical(cttr=0.6, repetition_share=0.1, informal_hit_count=5)
    assert result.score == 4.0
    assert result.evidence["informalHitCount"] == 5
    assert score_lexical(cttr=0.1, repetition_share=0.5, informal_hit_count=9).score == 2.0


def test_score_grammar_density_and_sentence_length():
    clean = score_grammar(
        word_count=300, grammar_issue_count=0, spelling_issue_count=0, avg_sentence_length=18
    )
    assert clean.score == 9.0

    busy = score_grammar(
        word_count=100, grammar_issue_count=3, spelling_issue_count=2, avg_sentence_length=30
    )
    assert busy.score == 4.5
    assert busy.evidence["errorPer100Words"] == 5.0

    short = score_grammar(
        word_count=100, grammar_issue_count=1, spelling_issue_count=0, avg_sentence_length=8
    )
    assert short.score == 7.5


def test_score_grammar_without_words_is_not_a_division_error():
    result = score_grammar(
        word_count=0, grammar_issue_count=0, spelling_issue_count=0, avg_sentence_length=0
    )
    assert result.score == 3.0


def test_score_overall_mean_then_caps():
    criteria = {
        name: CriterionResult(score=score, summary="", evidence={})
        for name, score in zip(("task", "coherence", "lexical", "grammar"), (7.0, 6.5, 6.0, 6.0))
    }

    assert score_overall(criteria, []) == 6.5
    assert score_overall(criteria, [Cap("short", 6.0), Cap("off", 5.0)]) == 5.0


def test_more_words_never_lower_the_task_band():
    scores = [_task(word_count=count).result.score for count in range(0, 400, 10)]
    assert scores == sorted(scores)
