"""
Approximate machine-learning detectors.

Stateless, single-point variants of Isolation Forest and Local Outlier Factor.
No model is trained or kept between calls, so both are safe to call
concurrently. The isolation detector draws random split points; pass a seeded
random.Random to pin its output.
"""

from __future__ import annotations

import random
from math import ceil, log, log2
from typing import Optional, Sequence

from .schema import DetectorOutcome
from .statistical import all_finite, clamp_score

EULER_GAMMA = 0.5772156649


def expected_isolation_depth(n: int) -> float:
    """
    Average path length of an unsuccessful BST search over n points.

    Uses the harmonic-number approximation H(n-1) ~ ln(n-1) + gamma.
    """

    if n <= 1:
        return 0.0
    return 2 * (log(n - 1) + EULER_GAMMA) - (2 * (n - 1)) / n


def isolation_depth(value: float, data: Sequence[float], rng: random.Random) -> int:
    """
    Count random splits needed to isolate value from data.

    Each split draws a threshold uniformly between the subset's min and max and
    keeps the side value falls on. Depth is capped at ceil(log2(len(data))).
    """

    subset = list(data)
    max_depth = ceil(log2(len(data)))
    depth = 0

    while len(subset) > 1 and depth < max_depth:
        low = min(subset)
        high = max(subset)
        split = low + rng.random() * (high - low)

        if value < split:
            subset = [x for x in subset if x < split]
        else:
            subset = [x for x in subset if x >= split]

        depth += 1

    return depth


def isolation_score(
    value: float,
    data: Sequence[float],
    num_trees: int = 100,
    threshold: float = 0.6,
    rng: Optional[random.Random] = None,
) -> DetectorOutcome:
    """
    Isolation-forest-lite score: 2 ** (-avg_depth / expected_depth).

    Requires at least ten points. Scores near 1 mean the value isolates quickly.
    """

    if len(data) < 10 or num_trees < 1 or not all_finite(value, data):
        return DetectorOutcome()

    rng = rng or random.Random()
    total_depth = sum(isolation_depth(value, data, rng) for _ in range(num_trees))
    avg_depth = total_depth / num_trees
    expected = expected_isolation_depth(len(data))

    score = clamp_score(2 ** (-avg_depth / expected))
    return DetectorOutcome(
        is_anomaly=score > threshold,
        score=score,
        deviation=avg_depth,
    )


def lof_score(
    value: float,
    data: Sequence[float],
    k: int = 5,
    threshold: float = 1.5,
    epsilon: float = 1e-4,
) -> DetectorOutcome:
    """
    Local-outlier-factor-lite score.

    Ratio of the mean distance to the k nearest neighbours over the k-th nearest
    distance. The raw ratio is compared with threshold; the reported score is
    min(ratio / 2, 1).
    """

    if k < 1 or len(data) < k + 1 or not all_finite(value, data):
        return DetectorOutcome()

    nearest = sorted(abs(x - value) for x in data)[:k]
    avg_distance = sum(nearest) / k
    ratio = avg_distance / (nearest[-1] + epsilon)

    return DetectorOutcome(
        is_anomaly=ratio > threshold,
        score=clamp_score(ratio / 2),
        deviation=ratio,
    )
