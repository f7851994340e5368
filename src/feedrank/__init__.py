"""Personalized ranking for aggregated news feeds."""

from feedrank.config import RankingConfig, load_ranking_config
from feedrank.data_model import Article
from feedrank.errors import (
    ArticleNotFoundError,
    ConfigValidationError,
    FeedRankError,
    FeedRankErrorClass,
    InvalidVoteError,
)
from feedrank.ranker import FeedPhase, RankedFeed, ScoredArticle, select_phase
from feedrank.service import FeedService
from feedrank.weights import ScoringWeights


__version__ = "0.1.0"

__all__ = [
    "Article",
    "ArticleNotFoundError",
    "ConfigValidationError",
    "FeedPhase",
    "FeedRankError",
    "FeedRankErrorClass",
    "FeedService",
    "InvalidVoteError",
    "RankedFeed",
    "RankingConfig",
    "ScoredArticle",
    "ScoringWeights",
    "__version__",
    "load_ranking_config",
    "select_phase",
]
