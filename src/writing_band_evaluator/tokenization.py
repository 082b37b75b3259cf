from __future__ import annotations

import re
from collections import Counter
from typing import List

from nltk.stem.porter import PorterStemmer

from .models import TokenFrequency, WordSpan
from .textutils import WORD_RE

NON_WORD_RE = re.compile(r"[^a-z\s']")

STOPWORDS = frozenset(
    """
    the a an and or but if while of to in on for with as by at from
    this that these those is are was were be been being it its they them their
    i you he she we us my your our me him her
    do does did doing done have has had having will would can could may might must
    not no yes also very more most some any many much such than then there here
    """.split()
)

_STEMMER = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)


def word_spans(text: str) -> List[WordSpan]:
    return [
        WordSpan(text=match.group(), start=match.start(), end=match.end())
        for match in WORD_RE.finditer(text)
    ]


def _base_tokens(text: str) -> List[str]:
    cleaned = NON_WORD_RE.sub(" ", text.lower())
    return [token for token in cleaned.split() if token not in STOPWORDS]


def tokenize(text: str) -> List[str]:
    """Lowercased, stop-word filtered, Porter-stemmed tokens in text order."""
    return [_STEMMER.stem(token) for token in _base_tokens(text)]


def tokenize_unstemmed(text: str) -> List[str]:
    """Same as tokenize() without stemming, for repetition and display."""
    return _base_tokens(text)


def top_frequencies(tokens: List[str], limit: int = 12) -> List[TokenFrequency]:
    """Most frequent tokens; equal counts keep first-seen order."""
    counts = Counter(tokens)
    return [
        TokenFrequency(token=token, count=count)
        for token, count in counts.most_common(limit)
    ]
