from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import yaml


@dataclass(slots=True)
class LanguageToolSettings:
    """Configuration block for the remote LanguageTool grammar backend."""

    base_url: str | None = None
    base_url_env: str = "LANGUAGETOOL_URL"
    language: str = "en-US"
    request_timeout: float = 15.0
    max_attempts: int = 2
    max_replacements: int = 5


@dataclass(slots=True)
class LocalCheckerSettings:
    """Configuration block for the offline spelling + clarity checker."""

    spelling_enabled: bool = True
    style_enabled: bool = True
    language: str = "en"
    max_suggestions: int = 4


@dataclass(slots=True)
class WritingEvaluatorConfig:
    """Configuration options for the writing evaluator."""

    grammar_backend: str = "auto"
    task_rules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    languagetool: LanguageToolSettings = field(default_factory=LanguageToolSettings)
    local_checker: LocalCheckerSettings = field(default_factory=LocalCheckerSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {f.name for f in fields(WritingEvaluatorConfig)}
    kwargs = {key: data[key] for key in data if key in allowed}
    if "languagetool" in data:
        kwargs["languagetool"] = _build_block(data["languagetool"], LanguageToolSettings)
    if "local_checker" in data:
        kwargs["local_checker"] = _build_block(data["local_checker"], LocalCheckerSettings)
    if kwargs.get("task_rules") is None:
        kwargs.pop("task_rules", None)
    return kwargs


def _build_block(value: Any, block_cls: type) -> Any:
    if isinstance(value, block_cls):
        return value
    if value is None:
        return block_cls()
    if not isinstance(value, Mapping):
        raise ValueError(f"Configuration block for {block_cls.__name__} must be a mapping.")
    allowed = {f.name for f in fields(block_cls)}
    return block_cls(**{key: value[key] for key in value if key in allowed})


def config_from_dict(data: Mapping[str, Any] | None) -> WritingEvaluatorConfig:
    """Build a WritingEvaluatorConfig from a dictionary-like input."""
    if data is None:
        return WritingEvaluatorConfig()
    return WritingEvaluatorConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> WritingEvaluatorConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> WritingEvaluatorConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return WritingEvaluatorConfig()
    return config_from_yaml(path)
