"""
writing_band_evaluator package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .config import (
    WritingEvaluatorConfig,
    config_from_dict,
    config_from_yaml,
    load_config,
)
from .errors import (
    GrammarCheckError,
    GrammarResponseError,
    GrammarServiceUnavailableError,
    InputValidationError,
    WritingEvaluatorError,
)
from .grammar import build_checker_from_config, create_checker
from .models import EvaluationRequest, EvaluationResult, GrammarMatch, TextIssue
from .pipeline import evaluate, evaluate_writing
from .rules import TASK_RULES, get_task_rules

__all__ = [
    "WritingEvaluatorConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "create_checker",
    "build_checker_from_config",
    "evaluate",
    "evaluate_writing",
    "EvaluationRequest",
    "EvaluationResult",
    "GrammarMatch",
    "TextIssue",
    "TASK_RULES",
    "get_task_rules",
    "WritingEvaluatorError",
    "InputValidationError",
    "GrammarCheckError",
    "GrammarServiceUnavailableError",
    "GrammarResponseError",
]

__version__ = "0.1.0"
