"""Interest weights and the feedback-to-weight updater."""

from feedrank.weights.models import ScoringWeights
from feedrank.weights.updater import (
    WeightUpdater,
    clamp_weight,
    replay_votes,
    update_weights,
)


__all__ = [
    "ScoringWeights",
    "WeightUpdater",
    "clamp_weight",
    "replay_votes",
    "update_weights",
]
