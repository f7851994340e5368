"""Maps raw scores onto a fixed display distribution."""

import math
from collections.abc import Sequence

from feedrank.config.schemas import NormalizationConfig
from feedrank.ranker.models import ScoredArticle


def population_stats(values: Sequence[float]) -> tuple[float, float]:
    """Return (mean, population stddev); (0.0, 0.0) when empty."""
    if not values:
        return 0.0, 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)


def normalize_scores_to_bell_curve(
    items: Sequence[ScoredArticle],
    config: NormalizationConfig | None = None,
) -> list[ScoredArticle]:
    """Set adjusted_score from each raw score's z-score.

    adjusted = round(target_mean + target_stddev * z), clamped at 0. A
    batch with zero spread gets target_mean everywhere. Order and raw
    scores are untouched.

    Args:
        items: Reranked batch.
        config: Target distribution.

    Returns:
        Copies of items with adjusted_score set, same order.
    """
    config = config or NormalizationConfig()
    if not items:
        return []

    mean, stddev = population_stats([s.raw_score for s in items])
    neutral = max(0, round(config.target_mean))

    normalized: list[ScoredArticle] = []
    for item in items:
        if stddev == 0.0:
            adjusted = neutral
        else:
            z_score = (item.raw_score - mean) / stddev
            adjusted = max(
                0, round(config.target_mean + config.target_stddev * z_score)
            )
        normalized.append(item.model_copy(update={"adjusted_score": adjusted}))
    return normalized
