"""Feed ranking: phases, scoring, suppression, diversity and normalization."""

from feedrank.ranker.filters import (
    FilterResult,
    SuppressionReason,
    filter_candidates,
    suppression_reason,
)
from feedrank.ranker.metrics import RankerMetrics
from feedrank.ranker.models import RankedFeed, ScoredArticle, UserSignals
from feedrank.ranker.normalizer import (
    normalize_scores_to_bell_curve,
    population_stats,
)
from feedrank.ranker.phase import (
    DiversityKey,
    FeedPhase,
    PhasePolicy,
    policy_for,
    select_phase,
)
from feedrank.ranker.ranker import (
    FeedRanker,
    content_scores_for,
    paginate,
    rank_feed_pure,
)
from feedrank.ranker.reranker import (
    DiversityReranker,
    rerank_for_diversity,
    sort_by_raw_score,
)
from feedrank.ranker.scorer import (
    ScoringContext,
    score_adoption,
    score_article,
    score_articles,
    score_logged_out,
    score_onboarding,
    tie_break_factor,
)
from feedrank.ranker.state_machine import (
    RankerState,
    RankerStateMachine,
    RankerStateTransitionError,
)


__all__ = [
    "DiversityKey",
    "DiversityReranker",
    "FeedPhase",
    "FeedRanker",
    "FilterResult",
    "PhasePolicy",
    "RankedFeed",
    "RankerMetrics",
    "RankerState",
    "RankerStateMachine",
    "RankerStateTransitionError",
    "ScoredArticle",
    "ScoringContext",
    "SuppressionReason",
    "UserSignals",
    "content_scores_for",
    "filter_candidates",
    "normalize_scores_to_bell_curve",
    "paginate",
    "policy_for",
    "population_stats",
    "rank_feed_pure",
    "rerank_for_diversity",
    "score_adoption",
    "score_article",
    "score_articles",
    "score_logged_out",
    "score_onboarding",
    "select_phase",
    "sort_by_raw_score",
    "suppression_reason",
    "tie_break_factor",
]
