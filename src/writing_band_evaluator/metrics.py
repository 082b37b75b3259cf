from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from re import Pattern
from typing import List

from .models import InformalHit, Metrics
from .textutils import count_words, split_paragraphs, split_sentences
from .tokenization import tokenize, tokenize_unstemmed, top_frequencies

logger = logging.getLogger(__name__)

LINKING_WORDS = [
    "however",
    "therefore",
    "moreover",
    "furthermore",
    "in addition",
    "on the other hand",
    "for example",
    "for instance",
    "as a result",
    "consequently",
    "in contrast",
    "in conclusion",
    "overall",
]

TOP_TOKEN_LIMIT = 12


@dataclass(frozen=True, slots=True)
class LabeledPattern:
    pattern: Pattern[str]
    label: str


INFORMAL_PATTERNS = [
    LabeledPattern(
        re.compile(
            r"\b(can't|won't|don't|doesn't|didn't|isn't|aren't|wasn't|weren't"
            r"|it's|that's|there's|I'm|you're|we're)\b",
            re.IGNORECASE,
        ),
        "contractions",
    ),
    LabeledPattern(
        re.compile(
            r"\b(kinda|sorta|gonna|wanna|kids|a lot|lots of|cool|stuff)\b",
            re.IGNORECASE,
        ),
        "informal wording",
    ),
]


def _phrase_pattern(phrase: str) -> Pattern[str]:
    words = [re.escape(word) for word in phrase.split()]
    return re.compile(r"\b" + r"\s+".join(words) + r"\b", re.IGNORECASE)


LINKING_PATTERNS = [_phrase_pattern(phrase) for phrase in LINKING_WORDS]


def count_linking_words(text: str) -> int:
    """Count occurrences of every linking phrase in the catalog."""
    return sum(len(pattern.findall(text)) for pattern in LINKING_PATTERNS)


def find_informal_hits(text: str) -> List[InformalHit]:
    """Return informal-tone hits, family by family, each in text order."""
    hits: List[InformalHit] = []
    for entry in INFORMAL_PATTERNS:
        for match in entry.pattern.finditer(text):
            hits.append(
                InformalHit(
                    start=match.start(),
                    end=match.end(),
                    label=entry.label,
                    match=match.group(0),
                )
            )
    return hits


def basic_metrics(text: str) -> Metrics:
    """Compute counts, lexical diversity, cohesion and tone statistics for text."""
    word_count = count_words(text)
    paragraphs = split_paragraphs(text)
    sentences = split_sentences(text)

    avg_sentence_length = word_count / len(sentences) if sentences else 0.0

    tokens = tokenize(text)
    tokens_unstemmed = tokenize_unstemmed(text)
    # Corrected TTR stays comparable across essay lengths; raw TTR does not.
    cttr = len(set(tokens)) / math.sqrt(2 * len(tokens)) if tokens else 0.0

    metrics = Metrics(
        word_count=word_count,
        paragraph_count=len(paragraphs),
        sentence_count=len(sentences),
        avg_sentence_length=avg_sentence_length,
        tokens=tokens,
        tokens_unstemmed=tokens_unstemmed,
        cttr=cttr,
        top_token_frequencies=top_frequencies(tokens_unstemmed, TOP_TOKEN_LIMIT),
        linking_count=count_linking_words(text),
        informal_hits=find_informal_hits(text),
    )
    logger.debug(
        "Metrics: words=%d paragraphs=%d sentences=%d cttr=%.3f linking=%d informal=%d",
        metrics.word_count,
        metrics.paragraph_count,
        metrics.sentence_count,
        metrics.cttr,
        metrics.linking_count,
        len(metrics.informal_hits),
    )
    return metrics


def linking_per_100(linking_count: int, word_count: int) -> float:
    """Linking phrases per 100 words (0 when there are no words)."""
    return linking_count / word_count * 100 if word_count else 0.0


def repetition_share(metrics: Metrics) -> float:
    """Share of unstemmed tokens taken by the most frequent token."""
    if not metrics.top_token_frequencies:
        return 0.0
    top = metrics.top_token_frequencies[0]
    return top.count / max(1, len(metrics.tokens_unstemmed))
