"""Ranking configuration schema and loading."""

from feedrank.config.constants import ONBOARDING_VOTE_THRESHOLD
from feedrank.config.loader import RankingConfigLoader, load_ranking_config
from feedrank.config.schemas import (
    DiversityConfig,
    EmbeddingConfig,
    NormalizationConfig,
    RankingConfig,
    ScoringConfig,
    SuppressionConfig,
    WeightsConfig,
)


__all__ = [
    "ONBOARDING_VOTE_THRESHOLD",
    "DiversityConfig",
    "EmbeddingConfig",
    "NormalizationConfig",
    "RankingConfig",
    "RankingConfigLoader",
    "ScoringConfig",
    "SuppressionConfig",
    "WeightsConfig",
    "load_ranking_config",
]
