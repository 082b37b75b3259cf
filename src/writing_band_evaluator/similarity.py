from __future__ import annotations

from collections import Counter
from typing import List

import numpy as np

from .tokenization import tokenize

# Below this the response is treated as off-topic (task capped).
OFF_TOPIC_THRESHOLD = 0.08
# Below this relevance is weak: task penalty and an off-topic issue.
WEAK_RELEVANCE_THRESHOLD = 0.12


def term_frequency_vectors(
    left: List[str], right: List[str]
) -> tuple[np.ndarray, np.ndarray]:
    """Align two token lists on their union vocabulary as count vectors."""
    left_counts = Counter(left)
    right_counts = Counter(right)
    vocabulary = list(dict.fromkeys([*left_counts, *right_counts]))
    left_vec = np.array([left_counts[term] for term in vocabulary], dtype=float)
    right_vec = np.array([right_counts[term] for term in vocabulary], dtype=float)
    return left_vec, right_vec


def cosine(left: np.ndarray, right: np.ndarray) -> float:
    left_norm = float(np.linalg.norm(left))
    right_norm = float(np.linalg.norm(right))
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0
    value = float(np.dot(left, right)) / (left_norm * right_norm)
    return min(1.0, max(0.0, value))


def prompt_essay_similarity(prompt: str, essay: str) -> float:
    """Cosine similarity of the prompt and essay term-frequency vectors, in [0, 1]."""
    prompt_vec, essay_vec = term_frequency_vectors(tokenize(prompt), tokenize(essay))
    return cosine(prompt_vec, essay_vec)
