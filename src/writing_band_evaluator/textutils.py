from __future__ import annotations

import re
from typing import List, Tuple

# Same pattern as the live word counter shown next to the editor.
WORD_RE = re.compile(r"[A-Za-zÀ-ÖØ-öø-ÿ0-9']+")
PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")
WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "…"


def count_words(text: str) -> int:
    """Count words with the shared WORD_RE."""
    return sum(1 for _ in WORD_RE.finditer(text))


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines, trimming and dropping empty paragraphs."""
    paragraphs = (part.strip() for part in PARAGRAPH_SPLIT_RE.split(text))
    return [paragraph for paragraph in paragraphs if paragraph]


def sentence_spans(text: str) -> List[Tuple[int, int]]:
    """
    Return trimmed [start, end) spans of the sentences in text.

    A sentence ends at '.', '!' or '?' followed by whitespace and an
    uppercase letter. Abbreviations followed by a capitalised word split
    too; that is accepted.
    """
    spans: List[Tuple[int, int]] = []
    cursor = 0
    for match in SENTENCE_BREAK_RE.finditer(text):
        _append_trimmed(text, cursor, match.start(), spans)
        cursor = match.end()
    _append_trimmed(text, cursor, len(text), spans)
    return spans


def split_sentences(text: str) -> List[str]:
    """Split text into whitespace-collapsed sentences (empty only for blank text)."""
    return [collapse_whitespace(text[start:end]) for start, end in sentence_spans(text)]


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def clip_excerpt(text: str, start: int, end: int, pad: int = 28) -> str:
    """Return the span with `pad` characters of context, marking cut edges with an ellipsis."""
    s = max(0, start - pad)
    e = min(len(text), end + pad)
    prefix = ELLIPSIS if s > 0 else ""
    suffix = ELLIPSIS if e < len(text) else ""
    return prefix + text[s:e] + suffix


def utf16_to_index(text: str, offset: int) -> int:
    """Convert a UTF-16 code-unit offset into a str index of text."""
    units = 0
    for index, char in enumerate(text):
        if units >= offset:
            return index
        units += 2 if ord(char) > 0xFFFF else 1
    return len(text)


def index_to_utf16(text: str, index: int) -> int:
    """Convert a str index of text into a UTF-16 code-unit offset."""
    prefix = text[: max(0, index)]
    return len(prefix) + sum(1 for char in prefix if ord(char) > 0xFFFF)


def _append_trimmed(
    text: str, start: int, end: int, spans: List[Tuple[int, int]]
) -> None:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if end > start:
        spans.append((start, end))
