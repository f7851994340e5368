"""Embedding similarity and the content score term."""

from collections.abc import Mapping, Sequence

import numpy as np
import numpy.typing as npt

from feedrank.config.schemas import ScoringConfig


Vector = npt.NDArray[np.float64]

_DEFAULT_SCORING = ScoringConfig()


def as_vector(values: Sequence[float] | Vector) -> Vector:
    """Convert a provider vector to a float64 array."""
    return np.asarray(values, dtype=np.float64)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for mismatched dimensions or zero-length vectors.
    """
    if a.shape != b.shape:
        return 0.0
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def content_scale(
    strength: float, config: ScoringConfig = _DEFAULT_SCORING
) -> float:
    """Max boost (and max penalty) for a similarity strength in [0, 1]."""
    strength = min(max(strength, 0.0), 1.0)
    return config.content_min_scale + strength * config.content_scale_range


class ContentScorer:
    """Scores candidates against a user's liked and disliked embeddings.

    The boost is the mean similarity to the liked set times the scale,
    the penalty the mean similarity to the disliked set times the same
    scale. With both sets present the two are averaged by set size, so
    the result stays within [-scale, +scale].
    """

    def __init__(
        self,
        liked: Sequence[Vector],
        disliked: Sequence[Vector],
        strength: float,
        config: ScoringConfig = _DEFAULT_SCORING,
    ) -> None:
        """Initialize the scorer.

        Args:
            liked: Embeddings of upvoted or saved articles.
            disliked: Embeddings of downvoted articles.
            strength: User similarity strength in [0, 1].
            config: Scoring configuration.
        """
        self._liked = list(liked)
        self._disliked = list(disliked)
        self._scale = content_scale(strength, config)

    @property
    def scale(self) -> float:
        """Max absolute content score."""
        return self._scale

    @property
    def has_profile(self) -> bool:
        """Whether any liked or disliked embedding is available."""
        return bool(self._liked or self._disliked)

    def score(self, candidate: Vector | None) -> float:
        """Compute the content score for one candidate.

        Args:
            candidate: Candidate embedding, or None when absent.

        Returns:
            Content score rounded to 2 decimals; 0.0 without data.
        """
        if candidate is None or not self.has_profile:
            return 0.0

        liked_count = len(self._liked)
        disliked_count = len(self._disliked)
        boost = self._mean_similarity(candidate, self._liked) * self._scale
        penalty = self._mean_similarity(candidate, self._disliked) * self._scale

        if liked_count and disliked_count:
            score = (liked_count * boost - disliked_count * penalty) / (
                liked_count + disliked_count
            )
        elif liked_count:
            score = boost
        else:
            score = -penalty
        return round(score, 2)

    def score_all(
        self,
        article_ids: Sequence[str],
        embeddings: Mapping[str, Vector],
    ) -> dict[str, float]:
        """Compute non-zero content scores for many candidates.

        Args:
            article_ids: Candidate ids.
            embeddings: Available candidate embeddings.

        Returns:
            article_id -> content score, omitting zero scores.
        """
        scores: dict[str, float] = {}
        if not self.has_profile:
            return scores
        for article_id in article_ids:
            value = self.score(embeddings.get(article_id))
            if value != 0.0:
                scores[article_id] = value
        return scores

    @staticmethod
    def _mean_similarity(candidate: Vector, vectors: Sequence[Vector]) -> float:
        if not vectors:
            return 0.0
        total = sum(cosine_similarity(candidate, v) for v in vectors)
        return total / len(vectors)
