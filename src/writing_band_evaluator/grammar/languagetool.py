from __future__ import annotations

import logging
import time
from typing import Any, List, Mapping

import requests

from ..config import LanguageToolSettings
from ..errors import GrammarResponseError, GrammarServiceUnavailableError
from ..models import GrammarMatch
from ..textutils import utf16_to_index
from .base import GrammarChecker

logger = logging.getLogger(__name__)


class LanguageToolChecker(GrammarChecker):
    """
    Client for a LanguageTool server (`/v2/check`).

    LanguageTool reports offsets in UTF-16 code units; they are converted to
    str indices here so every span downstream slices the caller's text.
    Transport failures are retried with a capped back-off before giving up.
    """

    def __init__(
        self,
        base_url: str,
        settings: LanguageToolSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("LanguageTool base URL is required.")
        self._base_url = base_url.rstrip("/")
        self._settings = settings or LanguageToolSettings()
        self._session = session or requests.Session()
        self._max_attempts = max(1, self._settings.max_attempts)

    @property
    def base_url(self) -> str:
        return self._base_url

    def check(self, text: str) -> List[GrammarMatch]:
        payload = self._post_check(text)
        matches = _parse_matches(text, payload, self._settings.max_replacements)
        logger.info("LanguageTool returned %d matches for %d chars", len(matches), len(text))
        return matches

    def is_available(self) -> bool:
        try:
            response = self._session.get(
                f"{self._base_url}/v2/languages", timeout=self._settings.request_timeout
            )
        except requests.RequestException as exc:
            logger.warning("LanguageTool probe failed at %s: %s", self._base_url, exc)
            return False
        return response.ok

    def _post_check(self, text: str) -> Any:
        url = f"{self._base_url}/v2/check"
        attempt = 0
        last_error: Exception | None = None
        while attempt < self._max_attempts:
            attempt += 1
            try:
                response = self._session.post(
                    url,
                    data={"text": text, "language": self._settings.language},
                    timeout=self._settings.request_timeout,
                )
                response.raise_for_status()
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = exc
            except requests.HTTPError as exc:
                # A 4xx fails identically on every attempt; only 5xx is retried.
                if response.status_code < 500:
                    raise GrammarServiceUnavailableError(
                        f"LanguageTool rejected the request with HTTP {response.status_code}."
                    ) from exc
                last_error = exc
            except requests.RequestException as exc:
                raise GrammarServiceUnavailableError(
                    f"LanguageTool request to {url} could not be sent."
                ) from exc
            else:
                try:
                    return response.json()
                except ValueError as exc:
                    raise GrammarResponseError(
                        "LanguageTool returned a response that is not valid JSON."
                    ) from exc

            logger.warning(
                "LanguageTool request failed (attempt %s/%s): %s",
                attempt,
                self._max_attempts,
                last_error,
            )
            if attempt < self._max_attempts:
                time.sleep(min(2 ** (attempt - 1), 5))
        raise GrammarServiceUnavailableError(
            f"LanguageTool request failed after {self._max_attempts} attempt(s)."
        ) from last_error


def _parse_matches(text: str, payload: Any, max_replacements: int) -> List[GrammarMatch]:
    if not isinstance(payload, Mapping) or not isinstance(payload.get("matches"), list):
        raise GrammarResponseError("LanguageTool response has no 'matches' list.")

    # Offsets only differ from str indices when text has astral characters.
    needs_mapping = len(text.encode("utf-16-le")) // 2 != len(text)
    matches: List[GrammarMatch] = []
    for raw in payload["matches"]:
        if not isinstance(raw, Mapping):
            raise GrammarResponseError("LanguageTool match is not an object.")
        try:
            offset = int(raw["offset"])
            length = int(raw["length"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GrammarResponseError("LanguageTool match is missing offset/length.") from exc
        if needs_mapping:
            start = utf16_to_index(text, offset)
            end = utf16_to_index(text, offset + length)
        else:
            start, end = offset, offset + length
        rule = raw.get("rule") or {}
        replacements = [
            str(item.get("value"))
            for item in raw.get("replacements") or []
            if isinstance(item, Mapping) and item.get("value") is not None
        ]
        matches.append(
            GrammarMatch(
                start=start,
                end=end,
                message=str(raw.get("message", "")),
                short_message=raw.get("shortMessage") or None,
                replacements=replacements[:max_replacements],
                rule_id=rule.get("id"),
                type="spelling" if rule.get("issueType") == "misspelling" else "grammar",
            )
        )
    return matches
