"""
Distance strategies: the metric used to rank vectors.

Each strategy carries two views of the same metric:
  operator: pgvector operator used in ORDER BY on the server
  score:    the same distance recomputed client-side from returned rows

Both live on one object so they cannot drift apart. Smaller is closer for
every strategy; pgvector's <#> already returns the negated inner product,
so the client score negates too.

Usage:
    from vecbox.distance import get_distance_strategy
    strategy = get_distance_strategy("cosine")
    strategy.syntax()            # "vector <=> %s"
    strategy.score([1, 0], [0, 1])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from vecbox.config import ConfigError

Vector = Sequence[float]


def _as_array(v) -> np.ndarray:
    # pgvector hands back numpy arrays already; plain lists come from callers
    return np.asarray(v, dtype=np.float64)


def euclidean_distance(a: Vector, b: Vector) -> float:
    """L2 distance."""
    return float(np.linalg.norm(_as_array(a) - _as_array(b)))


def cosine_distance(a: Vector, b: Vector) -> float:
    """
    1 - cosine similarity. A zero vector counts as similarity 0 (not NaN).

    PostgreSQL's <=> returns NaN for a zero vector and sorts it after every
    real distance, so such a row could follow rows scored above 1.0 here.
    Embedding providers refuse all-zero vectors to keep them out of the table.
    """
    a_arr = _as_array(a)
    b_arr = _as_array(b)
    norm = np.linalg.norm(a_arr) * np.linalg.norm(b_arr)
    if norm == 0:
        return 1.0
    return float(1.0 - np.dot(a_arr, b_arr) / norm)


def negative_inner_product(a: Vector, b: Vector) -> float:
    """Inner product, negated so the most similar vector sorts first."""
    return float(-np.dot(_as_array(a), _as_array(b)))


@dataclass(frozen=True)
class DistanceStrategy:
    name: str
    operator: str
    scorer: Callable[[Vector, Vector], float]

    def syntax(self, column: str = "vector", placeholder: str = "%s") -> str:
        """ORDER BY expression for 'distance from column to the bound query vector'."""
        return f"{column} {self.operator} {placeholder}"

    def score(self, a: Vector, b: Vector) -> float:
        if len(a) != len(b):
            raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")
        return self.scorer(a, b)


EUCLIDEAN = DistanceStrategy("euclidean", "<->", euclidean_distance)
COSINE = DistanceStrategy("cosine", "<=>", cosine_distance)
INNER_PRODUCT = DistanceStrategy("inner_product", "<#>", negative_inner_product)

_REGISTRY: dict[str, DistanceStrategy] = {
    s.name: s for s in (EUCLIDEAN, COSINE, INNER_PRODUCT)
}
_ALIASES = {"l2": "euclidean", "ip": "inner_product", "dot": "inner_product"}


def get_distance_strategy(name: str) -> DistanceStrategy:
    """
    Look up a strategy by name.

    Raises:
        ConfigError: If the name is not one of the registered strategies.
    """
    key = (name or "").strip().lower()
    key = _ALIASES.get(key, key)
    strategy = _REGISTRY.get(key)
    if strategy is None:
        available = ", ".join(_REGISTRY.keys())
        raise ConfigError(
            f"Unknown distance strategy: '{name}'. Available: {available}"
        )
    return strategy


__all__ = [
    "DistanceStrategy",
    "EUCLIDEAN",
    "COSINE",
    "INNER_PRODUCT",
    "get_distance_strategy",
]
