from __future__ import annotations


class WritingEvaluatorError(Exception):
    """Base class for errors raised by the writing evaluator."""


class InputValidationError(WritingEvaluatorError, ValueError):
    """Raised when an evaluation request is outside the accepted bounds."""


class GrammarCheckError(WritingEvaluatorError, RuntimeError):
    """Raised when the grammar-check collaborator cannot produce matches."""


class GrammarServiceUnavailableError(GrammarCheckError):
    """The grammar service could not be reached or answered with an error status."""


class GrammarResponseError(GrammarCheckError):
    """The grammar service answered, but the payload was not usable."""
