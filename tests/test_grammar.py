from __future__ import annotations

from typing import Any, Dict, List

import pytest
import requests

from writing_band_evaluator.config import (
    LanguageToolSettings,
    LocalCheckerSettings,
    config_from_dict,
)
from writing_band_evaluator.errors import (
    GrammarResponseError,
    GrammarServiceUnavailableError,
)
from writing_band_evaluator.grammar import (
    LanguageToolChecker,
    LocalGrammarChecker,
    NullGrammarChecker,
    build_checker_from_config,
    create_checker,
)
from writing_band_evaluator.grammar import languagetool as languagetool_module
from writing_band_evaluator.grammar.local import style_matches


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, bad_json: bool = False):
        self._payload = payload
        self.status_code = status_code
        self._bad_json = bad_json

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self) -> Any:
        if self._bad_json:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.posts: List[Dict[str, Any]] = []
        self.gets: List[str] = []

    def _next(self) -> FakeResponse:
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url: str, data: Dict[str, Any], timeout: float) -> FakeResponse:
        self.posts.append({"url": url, "data": data, "timeout": timeout})
        return self._next()

    def get(self, url: str, timeout: float) -> FakeResponse:
        self.gets.append(url)
        return self._next()


def _lt_match(offset: int, length: int, **extra: Any) -> Dict[str, Any]:
    payload = {"offset": offset, "length": length, "message": "Problem", "rule": {"id": "R1"}}
    payload.update(extra)
    return payload


@pytest.fixture
def no_sleep(monkeypatch):
    delays: List[float] = []
    monkeypatch.setattr(languagetool_module.time, "sleep", delays.append)
    return delays


def test_languagetool_parses_matches():
    session = FakeSession(
        [
            FakeResponse(
                {
                    "matches": [
                        _lt_match(
                            4,
                            2,
                            shortMessage="Verb",
                            replacements=[{"value": v} for v in ("goes", "went", "a", "b", "c", "d")],
                        ),
                        _lt_match(10, 6, rule={"id": "MORFOLOGIK", "issueType": "misspelling"}),
                    ]
                }
            )
        ]
    )
    checker = LanguageToolChecker("http://lt.local/", session=session)
    matches = checker.check("She go to scohol.")

    assert session.posts[0]["url"] == "http://lt.local/v2/check"
    assert session.posts[0]["data"] == {"text": "She go to scohol.", "language": "en-US"}
    assert (matches[0].start, matches[0].end) == (4, 6)
    assert matches[0].replacements == ["goes", "went", "a", "b", "c"]
    assert matches[0].short_message == "Verb"
    assert matches[0].rule_id == "R1"
    assert matches[0].type == "grammar"
    assert matches[1].type == "spelling"
    assert matches[1].rule_id == "MORFOLOGIK"


def test_languagetool_converts_utf16_offsets():
    text = "😀 She go home."
    # "go" starts at str index 6 but UTF-16 offset 7.
    session = FakeSession([FakeResponse({"matches": [_lt_match(7, 2)]})])
    match = LanguageToolChecker("http://lt", session=session).check(text)[0]

    assert text[match.start : match.end] == "go"


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(bad_json=True),
        FakeResponse({"unexpected": True}),
        FakeResponse({"matches": ["nope"]}),
        FakeResponse({"matches": [{"message": "no offsets"}]}),
    ],
)
def test_languagetool_rejects_malformed_payloads(response):
    checker = LanguageToolChecker("http://lt", session=FakeSession([response]))

    with pytest.raises(GrammarResponseError):
        checker.check("Some text.")


def test_languagetool_retries_then_gives_up(no_sleep):
    session = FakeSession(
        [requests.ConnectionError("refused"), FakeResponse(status_code=503), FakeResponse({})]
    )
    checker = LanguageToolChecker(
        "http://lt", settings=LanguageToolSettings(max_attempts=2), session=session
    )

    with pytest.raises(GrammarServiceUnavailableError):
        checker.check("Some text.")
    assert len(session.posts) == 2
    assert no_sleep == [1]


def test_languagetool_recovers_after_transient_failure(no_sleep):
    session = FakeSession(
        [requests.Timeout("slow"), FakeResponse({"matches": [_lt_match(0, 4)]})]
    )
    matches = LanguageToolChecker("http://lt", session=session).check("Some text.")

    assert len(matches) == 1
    assert no_sleep == [1]


def test_languagetool_availability_probe():
    session = FakeSession([FakeResponse([]), requests.ConnectionError("down")])
    checker = LanguageToolChecker("http://lt", session=session)

    assert checker.is_available()
    assert not checker.is_available()
    assert session.gets[0] == "http://lt/v2/languages"


def test_languagetool_requires_url():
    with pytest.raises(ValueError):
        LanguageToolChecker("")


class FakeSpellChecker:
    def __init__(self, known: List[str]):
        self.known = set(known)

    def unknown(self, words):
        return {word.lower() for word in words if word.lower() not in self.known}

    def candidates(self, word):
        if word == "recieve":
            return {"receive", "relieve"}
        return None

    def word_usage_frequency(self, word):
        return {"receive": 0.5, "relieve": 0.1}.get(word, 0.0)


def test_local_spelling_skips_names_acronyms_and_contractions():
    spell = FakeSpellChecker(["we", "will", "the", "parcel", "from", "today"])
    checker = LocalGrammarChecker(
        settings=LocalCheckerSettings(style_enabled=False), spellchecker=spell
    )
    text = "We will recieve the parcel from Zorblax at NASA today, won't we?"
    matches = checker.check(text)

    assert [text[m.start : m.end] for m in matches] == ["recieve"]
    assert matches[0].type == "spelling"
    assert matches[0].rule_id == "LOCAL_SPELLING"
    assert matches[0].replacements == ["receive", "relieve"]


def test_style_rules_flag_clarity_problems():
    text = "So the the results were analysed in order to find very clear trends."
    by_rule = {m.rule_id: m for m in style_matches(text)}

    assert text[by_rule["SO_OPENER"].start : by_rule["SO_OPENER"].end] == "So"
    assert by_rule["REPEATED_WORD"].replacements == ["the"]
    assert text[by_rule["PASSIVE_VOICE"].start : by_rule["PASSIVE_VOICE"].end] == "were analysed"
    assert by_rule["WORDY_PHRASE"].replacements == ["to"]
    assert by_rule["WEASEL_WORD"].message == '"very" is a weasel word'
    assert all(m.type == "style" for m in by_rule.values())


def test_local_checker_sorts_spelling_and_style_together():
    spell = FakeSpellChecker(["there", "are", "many", "cars"])
    checker = LocalGrammarChecker(spellchecker=spell)
    text = "There are many carz."
    matches = checker.check(text)

    assert [m.rule_id for m in matches] == ["THERE_IS_OPENER", "LOCAL_SPELLING"]
    assert [m.start for m in matches] == sorted(m.start for m in matches)


def test_create_checker_by_name():
    assert isinstance(create_checker("none"), NullGrammarChecker)
    assert isinstance(create_checker(" Local "), LocalGrammarChecker)
    assert isinstance(create_checker("languagetool", base_url="http://lt"), LanguageToolChecker)
    with pytest.raises(ValueError):
        create_checker("bogus")


def test_auto_backend_prefers_languagetool_from_env(monkeypatch):
    monkeypatch.setenv("LANGUAGETOOL_URL", "http://env-lt:8010")
    checker = build_checker_from_config(config_from_dict({}))

    assert isinstance(checker, LanguageToolChecker)
    assert checker.base_url == "http://env-lt:8010"


def test_auto_backend_falls_back_to_local(monkeypatch):
    monkeypatch.delenv("LANGUAGETOOL_URL", raising=False)

    assert isinstance(build_checker_from_config(config_from_dict({})), LocalGrammarChecker)


def test_explicit_languagetool_without_url_is_an_error(monkeypatch):
    monkeypatch.delenv("LANGUAGETOOL_URL", raising=False)
    config = config_from_dict({"grammar_backend": "languagetool"})

    with pytest.raises(ValueError):
        build_checker_from_config(config)


def test_none_backend_reports_nothing():
    checker = build_checker_from_config(config_from_dict({"grammar_backend": "none"}))
    assert checker.check("Anything at all.") == []


def test_languagetool_client_errors_are_not_retried(no_sleep):
    session = FakeSession([FakeResponse(status_code=413), FakeResponse({"matches": []})])
    checker = LanguageToolChecker(
        "http://lt", settings=LanguageToolSettings(max_attempts=3), session=session
    )

    with pytest.raises(GrammarServiceUnavailableError, match="HTTP 413"):
        checker.check("Some text.")
    assert len(session.posts) == 1
    assert no_sleep == []


def test_languagetool_retries_server_errors(no_sleep):
    session = FakeSession(
        [FakeResponse(status_code=502), FakeResponse(status_code=503), FakeResponse({"matches": []})]
    )
    checker = LanguageToolChecker(
        "http://lt", settings=LanguageToolSettings(max_attempts=3), session=session
    )

    assert checker.check("Some text.") == []
    assert len(session.posts) == 3
    assert no_sleep == [1, 2]
