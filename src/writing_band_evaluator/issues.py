from __future__ import annotations

from collections import Counter
from typing import Dict, List

from .detectors import StructureFlags, find_personal_opinion
from .metrics import LINKING_WORDS, linking_per_100
from .models import GrammarMatch, InformalHit, Severity, TaskType, TextIssue, WordSpan
from .similarity import WEAK_RELEVANCE_THRESHOLD
from .textutils import clip_excerpt, sentence_spans
from .tokenization import tokenize, word_spans

MAX_GRAMMAR_ISSUES = 120
MAX_TONE_ISSUES = 10
REPETITION_CANDIDATES = 6
REPETITION_MIN_COUNT = 7
REPETITION_MIN_SHARE = 0.03
REPETITION_MAJOR_SHARE = 0.07
COHESION_WINDOW_CHARS = 220
THESIS_WINDOW_CHARS = 260
CONCLUSION_WINDOW_CHARS = 300
OFF_TOPIC_FALLBACK_CHARS = 120

SEVERITY_IMPACT: Dict[str, float] = {"minor": -0.1, "moderate": -0.2, "major": -0.4}

SYNONYMS: Dict[str, List[str]] = {
    "important": ["significant", "crucial", "essential"],
    "good": ["beneficial", "advantageous", "positive"],
    "bad": ["detrimental", "negative", "harmful"],
    "big": ["substantial", "considerable", "significant"],
    "small": ["minor", "limited", "modest"],
    "people": ["individuals", "citizens", "members of society"],
    "thing": ["factor", "aspect", "issue"],
}


def _severity_for_match(match: GrammarMatch) -> Severity:
    return "minor" if match.type == "style" else "moderate"


def issues_from_grammar(text: str, matches: List[GrammarMatch]) -> List[TextIssue]:
    """One issue per checker match (capped), with an in-place correction when offered."""
    issues: List[TextIssue] = []
    for idx, match in enumerate(matches[:MAX_GRAMMAR_ISSUES]):
        severity = _severity_for_match(match)
        suggestion = match.replacements[0] if match.replacements else None
        improved = (
            text[: match.start] + suggestion + text[match.end :]
            if suggestion is not None
            else None
        )
        is_spelling = match.type == "spelling"
        issues.append(
            TextIssue(
                id=f"g_{idx}",
                criterion="grammar",
                category="spelling" if is_spelling else "grammar",
                message=match.short_message or match.message,
                explanation=(
                    "Spelling mistakes draw attention and reduce the impression of accuracy."
                    if is_spelling
                    else "Grammar errors reduce clarity and can limit the band for "
                    "Grammatical Range and Accuracy."
                ),
                severity=severity,
                band_impact=SEVERITY_IMPACT[severity],
                start=match.start,
                end=match.end,
                excerpt=clip_excerpt(text, match.start, match.end),
                suggestion=suggestion,
                improved_version=improved,
                improved_why=(
                    "Using a correct form improves accuracy and reduces the frequency "
                    "of noticeable errors."
                    if suggestion is not None
                    else None
                ),
            )
        )
    return issues


def issues_from_repetition(text: str, tokens: List[str]) -> List[TextIssue]:
    """Flag heavily repeated words at their first whole-word occurrence."""
    issues: List[TextIssue] = []
    total = max(1, len(tokens))
    first_seen: Dict[str, WordSpan] = {}
    for word in word_spans(text):
        first_seen.setdefault(word.text.lower(), word)

    for token, count in Counter(tokens).most_common(REPETITION_CANDIDATES):
        if count < REPETITION_MIN_COUNT:
            continue
        share = count / total
        if share < REPETITION_MIN_SHARE:
            continue

        found = first_seen.get(token)
        if found is not None:
            start, end = found.start, found.end
        else:
            start, end = 0, min(len(text), len(token))

        synonyms = SYNONYMS.get(token)
        major = share > REPETITION_MAJOR_SHARE
        issues.append(
            TextIssue(
                id=f"rep_{token}",
                criterion="lexical",
                category="repetition",
                message=f"Repetition: “{token}” is used {count} times.",
                explanation=(
                    "Frequent repetition limits lexical range and can make the argument "
                    "sound mechanical."
                ),
                severity="major" if major else "moderate",
                band_impact=-0.5 if major else -0.3,
                start=start,
                end=end,
                excerpt=clip_excerpt(text, start, end),
                suggestion=(
                    f"Consider alternatives: {', '.join(synonyms[:3])}." if synonyms else None
                ),
                improved_why=(
                    "Varying vocabulary improves the Lexical Resource score and helps "
                    "maintain reader interest."
                ),
            )
        )
    return issues


def issues_from_tone(text: str, informal_hits: List[InformalHit]) -> List[TextIssue]:
    return [
        TextIssue(
            id=f"tone_{idx}",
            criterion="lexical",
            category="tone",
            message=f"Informal tone detected ({hit.label}): “{hit.match}”.",
            explanation=(
                "IELTS Writing expects an academic tone. Informal wording can reduce "
                "the Lexical Resource score."
            ),
            severity="moderate",
            band_impact=-0.3,
            start=hit.start,
            end=hit.end,
            excerpt=clip_excerpt(text, hit.start, hit.end),
            suggestion=(
                "Replace informal wording with a more academic alternative "
                "(e.g., avoid contractions and slang)."
            ),
            improved_why="A more formal register aligns better with IELTS examiner expectations.",
        )
        for idx, hit in enumerate(informal_hits[:MAX_TONE_ISSUES])
    ]


def issues_from_cohesion(text: str, linking_count: int, word_count: int) -> List[TextIssue]:
    per_100 = linking_per_100(linking_count, word_count)
    if per_100 >= 1.1:
        return []

    end = min(len(text), COHESION_WINDOW_CHARS)
    major = per_100 < 0.6
    return [
        TextIssue(
            id="coh_1",
            criterion="coherence",
            category="cohesion",
            message="Limited use of clear linking devices.",
            explanation=(
                "Coherence and Cohesion improves when ideas are connected with appropriate "
                "linking words (used accurately, not overused)."
            ),
            severity="major" if major else "moderate",
            band_impact=-0.5 if major else -0.3,
            start=0,
            end=end,
            excerpt=clip_excerpt(text, 0, end),
            suggestion=(
                "Consider adding precise connectors where logical "
                f"(e.g., {', '.join(LINKING_WORDS[:6])})."
            ),
            improved_why="Clear logical connections make your argument easier to follow and raise CC.",
        )
    ]


def issues_from_task_structure(
    task_type: TaskType, text: str, flags: StructureFlags
) -> List[TextIssue]:
    """Synthetic issues for a missing thesis/overview, conclusion, or Task 1 opinions."""
    issues: List[TextIssue] = []
    essay_task = task_type == "task2"

    if not flags.has_thesis_or_overview:
        end = min(len(text), THESIS_WINDOW_CHARS)
        issues.append(
            TextIssue(
                id="task_thesis",
                criterion="task",
                category="structure",
                message=(
                    "Thesis/position is unclear in the introduction."
                    if essay_task
                    else "Overview is missing or unclear."
                ),
                explanation=(
                    "Examiners expect a clear position (thesis) early in Task 2, aligned "
                    "with the question."
                    if essay_task
                    else "Task 1 requires an overview summarising the main trends/stages; "
                    "without it, TA is limited."
                ),
                severity="major",
                band_impact=-0.7,
                start=0,
                end=end,
                excerpt=clip_excerpt(text, 0, end),
                suggestion=(
                    "Add 1 sentence that clearly states your position and previews your "
                    "main reasons."
                    if essay_task
                    else "Add an overview sentence (e.g., “Overall, …”) summarising the "
                    "main trends."
                ),
                improved_why=(
                    "A clear thesis/overview improves task fulfilment and helps the reader "
                    "understand your direction."
                ),
            )
        )

    if essay_task and not flags.has_conclusion:
        start = max(0, len(text) - CONCLUSION_WINDOW_CHARS)
        issues.append(
            TextIssue(
                id="task_conc",
                criterion="task",
                category="structure",
                message="Conclusion is missing or too weak.",
                explanation=(
                    "A conclusion should restate your position and summarise your key ideas "
                    "without adding new arguments."
                ),
                severity="moderate",
                band_impact=-0.3,
                start=start,
                end=len(text),
                excerpt=clip_excerpt(text, start, len(text)),
                suggestion=(
                    "Add a brief conclusion that clearly restates your position and "
                    "summarises the main points."
                ),
                improved_why="A controlled ending improves Task Response and overall coherence.",
            )
        )

    if task_type == "task1" and flags.personal_opinion_in_task1:
        span = find_personal_opinion(text)
        start, end = span if span is not None else (0, min(len(text), 1))
        issues.append(
            TextIssue(
                id="task1_opinion",
                criterion="task",
                category="task-response",
                message="Personal opinion language detected in Task 1.",
                explanation=(
                    "Task 1 is primarily descriptive. Personal opinions are usually "
                    "inappropriate and can reduce Task Achievement."
                ),
                severity="major",
                band_impact=-0.6,
                start=start,
                end=end,
                excerpt=clip_excerpt(text, start, end),
                suggestion="Remove opinion phrases and describe the data/process factually.",
                improved_why="A factual style better matches Task 1 requirements.",
            )
        )

    return issues


def issues_from_off_topic(
    prompt: str, essay: str, prompt_similarity: float
) -> List[TextIssue]:
    """Anchor a relevance issue on the sentence sharing the fewest tokens with the prompt."""
    if prompt_similarity >= WEAK_RELEVANCE_THRESHOLD:
        return []

    prompt_tokens = set(tokenize(prompt))
    spans = sentence_spans(essay)

    worst_idx, worst_overlap = 0, 1.0
    for idx, (start, end) in enumerate(spans):
        tokens = tokenize(essay[start:end])
        overlap = (
            sum(1 for token in tokens if token in prompt_tokens) / len(tokens)
            if tokens
            else 0.0
        )
        if overlap < worst_overlap:
            worst_idx, worst_overlap = idx, overlap

    if spans:
        start, end = spans[worst_idx]
    else:
        start, end = 0, min(len(essay), OFF_TOPIC_FALLBACK_CHARS)

    return [
        TextIssue(
            id="offtopic_1",
            criterion="task",
            category="task-response",
            message="Relevance to the question appears weak (possible off-topic content).",
            explanation=(
                "When content does not directly address the question, Task Response/Task "
                "Achievement is capped even if language is strong."
            ),
            severity="major",
            band_impact=-1.0,
            start=start,
            end=end,
            excerpt=clip_excerpt(essay, start, end),
            suggestion=(
                "Ensure each body paragraph directly answers the prompt. Replace general "
                "statements with specific, prompt-linked arguments."
            ),
            improved_why=(
                "Stronger relevance improves task fulfilment and can raise the overall band "
                "substantially."
            ),
        )
    ]


def collect_issues(
    *,
    task_type: TaskType,
    prompt: str,
    essay: str,
    prompt_similarity: float,
    flags: StructureFlags,
    linking_count: int,
    word_count: int,
    informal_hits: List[InformalHit],
    tokens_unstemmed: List[str],
    grammar_matches: List[GrammarMatch],
) -> List[TextIssue]:
    """All issue families concatenated and ordered by start offset (no overlap merging)."""
    issues = [
        *issues_from_off_topic(prompt, essay, prompt_similarity),
        *issues_from_task_structure(task_type, essay, flags),
        *issues_from_cohesion(essay, linking_count, word_count),
        *issues_from_tone(essay, informal_hits),
        *issues_from_repetition(essay, tokens_unstemmed),
        *issues_from_grammar(essay, grammar_matches),
    ]
    return sorted(issues, key=lambda issue: issue.start)
