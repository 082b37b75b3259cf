from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

from .base import GrammarChecker, NullGrammarChecker
from .languagetool import LanguageToolChecker
from .local import LocalGrammarChecker

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..config import LanguageToolSettings, WritingEvaluatorConfig

__all__ = [
    "GrammarChecker",
    "NullGrammarChecker",
    "LanguageToolChecker",
    "LocalGrammarChecker",
    "create_checker",
    "build_checker_from_config",
    "resolve_languagetool_url",
]

logger = logging.getLogger(__name__)


def create_checker(name: str, **kwargs: Any) -> GrammarChecker:
    """Factory for building grammar checkers by backend name."""
    normalized = name.lower().strip()
    if normalized == "languagetool":
        return LanguageToolChecker(**kwargs)
    if normalized == "local":
        return LocalGrammarChecker(**kwargs)
    if normalized == "none":
        return NullGrammarChecker()
    raise ValueError(f"Unknown grammar backend '{name}'.")


def resolve_languagetool_url(settings: "LanguageToolSettings") -> str | None:
    """Explicit base URL first, then the configured environment variable."""
    if settings.base_url:
        return settings.base_url
    if settings.base_url_env:
        return os.environ.get(settings.base_url_env) or None
    return None


def build_checker_from_config(config: "WritingEvaluatorConfig") -> GrammarChecker:
    """Build the configured backend; `auto` prefers LanguageTool when a URL is known."""
    backend = config.grammar_backend.lower().strip()
    if backend in {"auto", "languagetool"}:
        base_url = resolve_languagetool_url(config.languagetool)
        if base_url:
            logger.info("Using LanguageTool grammar backend at %s", base_url)
            return create_checker(
                "languagetool", base_url=base_url, settings=config.languagetool
            )
        if backend == "languagetool":
            raise ValueError(
                "LanguageTool backend selected but no base URL is configured "
                f"(set languagetool.base_url or {config.languagetool.base_url_env})."
            )
    if backend in {"auto", "local"}:
        logger.info("Using local spelling/style grammar backend")
        return create_checker("local", settings=config.local_checker)
    return create_checker(backend)
