from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from re import Match, Pattern
from typing import Any, Callable, List

from spellchecker import SpellChecker

from ..config import LocalCheckerSettings
from ..models import GrammarMatch
from .base import GrammarChecker

logger = logging.getLogger(__name__)

SPELL_WORD_RE = re.compile(r"[A-Za-z']+")

IRREGULAR_PARTICIPLES = (
    "awoken|been|born|beat|become|begun|bent|bet|bound|bitten|bled|blown|broken|"
    "brought|built|burnt|bought|caught|chosen|come|cost|cut|dealt|done|drawn|"
    "driven|eaten|fallen|fed|felt|fought|found|forbidden|forgotten|forgiven|"
    "frozen|given|gone|grown|heard|hidden|hit|held|hurt|kept|known|laid|led|"
    "left|lent|let|lost|made|meant|met|paid|put|read|ridden|run|said|seen|sold|"
    "sent|set|shaken|shown|shut|spoken|spent|spread|stolen|struck|sworn|taken|"
    "taught|thrown|told|thought|understood|won|withdrawn|written"
)

WORDY_PHRASES = {
    "in order to": "to",
    "due to the fact that": "because",
    "in spite of the fact that": "although",
    "at this point in time": "now",
    "the majority of": "most",
    "has the ability to": "can",
    "in the event that": "if",
    "with regard to": "about",
    "for the purpose of": "for",
    "a large number of": "many",
}


@dataclass(frozen=True, slots=True)
class StyleRule:
    """A clarity rule: pattern, message template and optional replacement builder."""

    rule_id: str
    pattern: Pattern[str]
    message: str
    group: int = 0
    replacements: Callable[[Match[str]], List[str]] | None = None


def _wordy_replacement(match: Match[str]) -> List[str]:
    phrase = re.sub(r"\s+", " ", match.group(0).lower())
    replacement = WORDY_PHRASES.get(phrase)
    if replacement is None:
        return []
    if match.group(0)[0].isupper():
        replacement = replacement[0].upper() + replacement[1:]
    return [replacement]


def _phrase_alternation(phrases: Any) -> str:
    return "|".join(r"\s+".join(map(re.escape, phrase.split())) for phrase in phrases)


STYLE_RULES = [
    StyleRule(
        rule_id="PASSIVE_VOICE",
        pattern=re.compile(
            rf"\b(?:am|are|were|being|is|been|was|be)\s+(?:\w+ed|{IRREGULAR_PARTICIPLES})\b",
            re.IGNORECASE,
        ),
        message='"{text}" may be passive voice',
    ),
    StyleRule(
        rule_id="WEASEL_WORD",
        pattern=re.compile(
            r"\b(?:very|fairly|extremely|exceedingly|quite|remarkably|surprisingly"
            r"|really|basically|actually|totally)\b",
            re.IGNORECASE,
        ),
        message='"{text}" is a weasel word',
    ),
    StyleRule(
        rule_id="WORDY_PHRASE",
        pattern=re.compile(rf"\b(?:{_phrase_alternation(WORDY_PHRASES)})\b", re.IGNORECASE),
        message='"{text}" is wordy or unneeded',
        replacements=_wordy_replacement,
    ),
    StyleRule(
        rule_id="REPEATED_WORD",
        pattern=re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE),
        message='"{text}" is repeated',
        replacements=lambda match: [match.group(1)],
    ),
    StyleRule(
        rule_id="SO_OPENER",
        pattern=re.compile(r"(?:^|[.!?]\s+)(So)\b", re.MULTILINE),
        message='"{text}" adds no meaning',
        group=1,
    ),
    StyleRule(
        rule_id="THERE_IS_OPENER",
        pattern=re.compile(r"(?:^|[.!?]\s+)(There\s+(?:is|are))\b", re.MULTILINE),
        message='"{text}" is unnecessary verbiage',
        group=1,
    ),
]


@lru_cache(maxsize=4)
def _load_spellchecker(language: str) -> SpellChecker:
    logger.debug("Loading spelling dictionary for %s", language)
    return SpellChecker(language=language)


class LocalGrammarChecker(GrammarChecker):
    """
    Offline fallback: dictionary spelling plus rule-based clarity checks.

    Produces only `spelling` and `style` matches; it has no grammar model.
    """

    def __init__(
        self,
        settings: LocalCheckerSettings | None = None,
        spellchecker: SpellChecker | None = None,
    ) -> None:
        self._settings = settings or LocalCheckerSettings()
        self._spellchecker = spellchecker

    def check(self, text: str) -> List[GrammarMatch]:
        matches: List[GrammarMatch] = []
        if self._settings.spelling_enabled:
            matches.extend(self.spelling_matches(text))
        if self._settings.style_enabled:
            matches.extend(style_matches(text))
        matches.sort(key=lambda match: match.start)
        logger.info("Local checker returned %d matches for %d chars", len(matches), len(text))
        return matches

    def spelling_matches(self, text: str) -> List[GrammarMatch]:
        spell = self._spellchecker or _load_spellchecker(self._settings.language)
        candidates = [match for match in SPELL_WORD_RE.finditer(text) if _should_check(match.group())]
        unknown = spell.unknown([match.group() for match in candidates])
        matches: List[GrammarMatch] = []
        for match in candidates:
            word = match.group()
            if word.lower() not in unknown:
                continue
            matches.append(
                GrammarMatch(
                    start=match.start(),
                    end=match.end(),
                    message="Possible spelling mistake.",
                    replacements=self._suggestions(spell, word),
                    rule_id="LOCAL_SPELLING",
                    type="spelling",
                )
            )
        return matches

    def _suggestions(self, spell: SpellChecker, word: str) -> List[str]:
        options = spell.candidates(word.lower()) or set()
        ranked = sorted(options, key=lambda value: (-spell.word_usage_frequency(value), value))
        return [value for value in ranked if value != word.lower()][: self._settings.max_suggestions]


def style_matches(text: str) -> List[GrammarMatch]:
    """Apply every clarity rule to text."""
    matches: List[GrammarMatch] = []
    for rule in STYLE_RULES:
        for found in rule.pattern.finditer(text):
            start, end = found.start(rule.group), found.end(rule.group)
            matches.append(
                GrammarMatch(
                    start=start,
                    end=end,
                    message=rule.message.format(text=found.group(rule.group)),
                    replacements=rule.replacements(found) if rule.replacements else [],
                    rule_id=rule.rule_id,
                    type="style",
                )
            )
    return matches


def _should_check(word: str) -> bool:
    if len(word) <= 2 or "'" in word:
        return False
    # Title Case words are usually proper nouns; all-caps words are acronyms.
    if word[0].isupper() and word[1:] == word[1:].lower():
        return False
    return not word.isupper()
