from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import GrammarMatch


class GrammarChecker(ABC):
    """Abstract grammar/spelling/style checker returning spans of the input text."""

    @abstractmethod
    def check(self, text: str) -> List[GrammarMatch]:
        """Return matches whose [start, end) spans index into text."""
        raise NotImplementedError

    def is_available(self) -> bool:
        """Capability probe; callers decide whether to degrade when this is False."""
        return True


class NullGrammarChecker(GrammarChecker):
    """Reports no matches. Used when grammar checking is switched off."""

    def check(self, text: str) -> List[GrammarMatch]:
        return []
