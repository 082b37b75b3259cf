"""
Tiny helper script to sanity check the grammar backend wiring.
Point LANGUAGETOOL_URL at a running server, or leave it unset to use the local checker.
"""

from __future__ import annotations

from writing_band_evaluator import evaluate
from writing_band_evaluator.config import WritingEvaluatorConfig
from writing_band_evaluator.grammar import build_checker_from_config


def main() -> None:
    config = WritingEvaluatorConfig(grammar_backend="auto")
    checker = build_checker_from_config(config)
    print(f"Backend: {type(checker).__name__} (available: {checker.is_available()})")

    prompt = "Some people think cities should ban cars from their centres. Discuss."
    samples = [
        "I believe cars should be banned from city centres becuase they cause pollution.",
        "In my opinion there is alot of traffic. So the the roads are very busy.",
    ]

    for sample in samples:
        print("-" * 40)
        print(sample)
        for match in checker.check(sample):
            print(f"  [{match.type}] {sample[match.start:match.end]!r}: {match.message}")
        result = evaluate("task2", prompt, sample, config=config, checker=checker)
        print(f"Overall band: {result.overall:.1f}")


if __name__ == "__main__":
    main()
