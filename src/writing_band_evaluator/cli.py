from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace as dc_replace
from pathlib import Path
from typing import Any, Dict, List

import typer
import yaml

from .config import WritingEvaluatorConfig, load_config
from .errors import GrammarCheckError, InputValidationError
from .grammar import GrammarChecker, build_checker_from_config
from .models import EvaluationRequest, GrammarMatch
from .pipeline import evaluate_writing, usable_matches
from .rules import TASK_RULES, get_task_rules
from .textutils import index_to_utf16, utf16_to_index

app = typer.Typer(help="Writing Band Evaluator CLI.", no_args_is_help=True)

logger = logging.getLogger(__name__)


@app.callback()
def configure(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level for messages on stderr."
    ),
) -> None:
    """Score IELTS-style essays and explain the score."""
    logging.basicConfig(
        level=log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def evaluate(
    essay_file: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Essay text file."
    ),
    task_type: str = typer.Option("task2", "--task-type", "-t", help="task1 or task2."),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Question text."),
    prompt_file: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="File holding the question."
    ),
    grammar_matches: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        dir_okay=False,
        help="JSON file of precomputed grammar matches (skips the checker).",
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    grammar_backend: str | None = typer.Option(
        None, "--grammar-backend", "-g", help="auto, languagetool, local or none."
    ),
    languagetool_url: str | None = typer.Option(
        None, "--languagetool-url", help="LanguageTool server base URL."
    ),
    allow_degraded: bool = typer.Option(
        False,
        "--allow-degraded/--no-allow-degraded",
        help="Score without grammar matches when the checker fails.",
    ),
    utf16_offsets: bool = typer.Option(
        False, "--utf16-offsets", help="Read and write spans as UTF-16 code-unit offsets."
    ),
) -> None:
    """Evaluate an essay and print the result as JSON."""
    cfg = load_config(config)
    _apply_grammar_overrides(cfg, grammar_backend, languagetool_url)
    essay = essay_file.read_text(encoding="utf-8")
    prompt_text = _resolve_prompt(prompt, prompt_file)
    matches = (
        _load_grammar_matches(grammar_matches, essay, utf16_offsets)
        if grammar_matches is not None
        else None
    )

    try:
        request = EvaluationRequest(
            task_type=task_type,  # type: ignore[arg-type]
            prompt=prompt_text,
            essay=essay,
            grammar_matches=matches,
        )
    except InputValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    checker = _build_checker(cfg) if matches is None else None

    grammar_checked = True
    try:
        result = evaluate_writing(request, cfg, checker)
    except GrammarCheckError as exc:
        if not allow_degraded:
            typer.echo(f"Grammar check failed: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        # Scores still come back; grammar-based issues are simply absent.
        logger.warning("Grammar check failed (%s); evaluating without grammar matches", exc)
        grammar_checked = False
        result = evaluate_writing(dc_replace(request, grammar_matches=[]), cfg)

    payload = result.to_dict()
    if utf16_offsets:
        _spans_to_utf16(essay, payload["issues"])
    payload["grammarChecked"] = grammar_checked
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command("check-grammar")
def check_grammar(
    input_path: Path = typer.Option(..., exists=True, readable=True, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
    grammar_backend: str | None = typer.Option(None, "--grammar-backend", "-g"),
    languagetool_url: str | None = typer.Option(None, "--languagetool-url"),
    utf16_offsets: bool = typer.Option(False, "--utf16-offsets"),
) -> None:
    """Run only the grammar checker and print its matches."""
    cfg = load_config(config)
    _apply_grammar_overrides(cfg, grammar_backend, languagetool_url)
    text = input_path.read_text(encoding="utf-8")
    checker = _build_checker(cfg)
    try:
        matches = usable_matches(text, checker.check(text))
    except GrammarCheckError as exc:
        typer.echo(f"Grammar check failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    items = [match.to_dict() for match in matches]
    if utf16_offsets:
        _spans_to_utf16(text, items)
    typer.echo(json.dumps({"matches": items}, indent=2, ensure_ascii=False))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = WritingEvaluatorConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


@app.command()
def rules(
    task_type: str | None = typer.Argument(None, help="task1 or task2 (default: both)."),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Print the task rules (minimum words, time limit, guidance) as YAML."""
    cfg = load_config(config)
    selected = [task_type] if task_type else list(TASK_RULES)
    try:
        payload = {name: get_task_rules(name, cfg.task_rules).to_dict() for name in selected}
    except InputValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))


def main() -> None:
    app()


def _apply_grammar_overrides(
    config: WritingEvaluatorConfig,
    grammar_backend: str | None,
    languagetool_url: str | None,
) -> None:
    """Apply CLI overrides to grammar-checker config fields when provided."""
    if grammar_backend:
        config.grammar_backend = grammar_backend
    if languagetool_url:
        config.languagetool.base_url = languagetool_url


def _build_checker(config: WritingEvaluatorConfig) -> GrammarChecker:
    try:
        return build_checker_from_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _resolve_prompt(prompt: str | None, prompt_file: Path | None) -> str:
    if prompt and prompt_file:
        raise typer.BadParameter("Pass either --prompt or --prompt-file, not both.")
    if prompt_file is not None:
        return prompt_file.read_text(encoding="utf-8").strip()
    if prompt:
        return prompt
    raise typer.BadParameter("A question is required (--prompt or --prompt-file).")


def _load_grammar_matches(path: Path, essay: str, utf16_offsets: bool) -> List[GrammarMatch]:
    """Read matches from a JSON list or a {"matches": [...]} object."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
        raw_items = data.get("matches") if isinstance(data, dict) else data
        if not isinstance(raw_items, list):
            raise ValueError("expected a list of matches")
        matches = [GrammarMatch.from_dict(item) for item in raw_items]
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise typer.BadParameter(f"Unusable grammar matches in {path}: {exc}") from exc
    if utf16_offsets:
        matches = [
            dc_replace(
                match,
                start=utf16_to_index(essay, match.start),
                end=utf16_to_index(essay, match.end),
            )
            for match in matches
        ]
    return matches


def _spans_to_utf16(text: str, items: List[Dict[str, Any]]) -> None:
    for item in items:
        item["start"] = index_to_utf16(text, item["start"])
        item["end"] = index_to_utf16(text, item["end"])


if __name__ == "__main__":
    main()
