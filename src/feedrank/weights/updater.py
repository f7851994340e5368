"""Feedback-to-weight updater.

Each vote nudges the article's category and source multipliers by a
fixed step and clamps them to the configured range. A retracted vote
(value 0) leaves weights untouched: reversing an earlier adjustment would
require the adjustment history, which is not kept.
"""

from collections.abc import Iterable

import structlog

from feedrank.config.schemas import WeightsConfig
from feedrank.data_model import Article
from feedrank.feedback.models import WeightDimension
from feedrank.feedback.protocols import FeedbackStore
from feedrank.weights.models import ScoringWeights


logger = structlog.get_logger()

_DEFAULT_CONFIG = WeightsConfig()

# Weights are rounded so repeated +-step arithmetic does not drift.
_WEIGHT_PRECISION = 6


def clamp_weight(value: float, config: WeightsConfig = _DEFAULT_CONFIG) -> float:
    """Clamp a weight into [min_weight, max_weight].

    Args:
        value: Candidate weight.
        config: Weight bounds.

    Returns:
        Clamped, rounded weight.
    """
    clamped = min(max(value, config.min_weight), config.max_weight)
    return round(clamped, _WEIGHT_PRECISION)


def update_weights(
    value: int,
    article: Article,
    weights: ScoringWeights,
    config: WeightsConfig = _DEFAULT_CONFIG,
) -> ScoringWeights:
    """Apply one vote to a weights value.

    Args:
        value: Vote value in {-1, 0, 1}.
        article: Voted article.
        weights: Current weights (not modified).
        config: Weight learning configuration.

    Returns:
        New ScoringWeights with the category and source entries adjusted.
    """
    if value == 0:
        return weights

    adjustment = config.vote_adjustment if value > 0 else -config.vote_adjustment

    categories = dict(weights.categories)
    categories[article.category_id] = clamp_weight(
        weights.category_weight(article.category_id, config.default_weight)
        + adjustment,
        config,
    )
    sources = dict(weights.sources)
    sources[article.source_id] = clamp_weight(
        weights.source_weight(article.source_id, config.default_weight) + adjustment,
        config,
    )
    return ScoringWeights(categories=categories, sources=sources)


def replay_votes(
    history: Iterable[tuple[int, Article]],
    config: WeightsConfig = _DEFAULT_CONFIG,
) -> ScoringWeights:
    """Rebuild weights from defaults by replaying a vote history.

    Args:
        history: (value, article) pairs in chronological order.
        config: Weight learning configuration.

    Returns:
        Final ScoringWeights.
    """
    weights = ScoringWeights()
    for value, article in history:
        weights = update_weights(value, article, weights, config)
    return weights


class WeightUpdater:
    """Sole writer of the weight store.

    ``apply_vote`` is a read-modify-write without locking. Two concurrent
    votes by the same user can lose one adjustment; the weights are a soft
    signal and the next vote or a backfill corrects the drift.
    """

    def __init__(
        self,
        store: FeedbackStore,
        config: WeightsConfig = _DEFAULT_CONFIG,
    ) -> None:
        """Initialize the updater.

        Args:
            store: Feedback store holding the weights.
            config: Weight learning configuration.
        """
        self._store = store
        self._config = config
        self._log = logger.bind(component="weights")

    def load(self, user_id: str) -> ScoringWeights:
        """Read the user's current weights."""
        return ScoringWeights.from_interest_weights(self._store.get_weights(user_id))

    def apply_vote(self, user_id: str, value: int, article: Article) -> ScoringWeights:
        """Apply one vote and persist the touched weights.

        Args:
            user_id: Voting user.
            value: Vote value in {-1, 0, 1}.
            article: Voted article.

        Returns:
            The user's weights after the update.
        """
        current = self.load(user_id)
        updated = update_weights(value, article, current, self._config)
        if updated is current:
            self._log.info(
                "weights_unchanged",
                user_id=user_id,
                article_id=article.article_id,
                vote=value,
            )
            return updated

        category_weight = updated.categories[article.category_id]
        source_weight = updated.sources[article.source_id]
        self._store.set_weight(
            user_id, WeightDimension.CATEGORY, article.category_id, category_weight
        )
        self._store.set_weight(
            user_id, WeightDimension.SOURCE, article.source_id, source_weight
        )
        self._log.info(
            "weights_updated",
            user_id=user_id,
            article_id=article.article_id,
            vote=value,
            category_id=article.category_id,
            category_weight=category_weight,
            source_id=article.source_id,
            source_weight=source_weight,
        )
        return updated

    def replace_all(self, user_id: str, weights: ScoringWeights) -> None:
        """Clear the user's weights and write a full replacement set."""
        self._store.clear_weights(user_id)
        for row in weights.to_interest_weights(user_id):
            self._store.set_weight(user_id, row.dimension, row.key_id, row.weight)
        self._log.info(
            "weights_replaced",
            user_id=user_id,
            category_weights=len(weights.categories),
            source_weights=len(weights.sources),
        )
