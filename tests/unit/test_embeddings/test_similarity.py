"""Unit tests for cosine similarity and content scoring."""

import numpy as np
import pytest

from feedrank.embeddings.similarity import (
    ContentScorer,
    as_vector,
    content_scale,
    cosine_similarity,
)


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    @pytest.mark.unit
    def test_identical(self) -> None:
        """Parallel vectors have similarity 1."""
        assert cosine_similarity(as_vector([1, 2]), as_vector([2, 4])) == pytest.approx(
            1.0
        )

    @pytest.mark.unit
    def test_orthogonal(self) -> None:
        """Orthogonal vectors have similarity 0."""
        assert cosine_similarity(as_vector([1, 0]), as_vector([0, 1])) == 0.0

    @pytest.mark.unit
    def test_zero_vector(self) -> None:
        """A zero vector yields 0 instead of dividing by zero."""
        assert cosine_similarity(as_vector([0, 0]), as_vector([1, 1])) == 0.0

    @pytest.mark.unit
    def test_dimension_mismatch(self) -> None:
        """Vectors of different length yield 0."""
        assert cosine_similarity(as_vector([1, 0, 0]), as_vector([1, 0])) == 0.0


class TestContentScale:
    """Tests for content_scale."""

    @pytest.mark.unit
    def test_range(self) -> None:
        """Strength 0 gives 10, strength 1 gives 100."""
        assert content_scale(0.0) == 10.0
        assert content_scale(0.5) == 55.0
        assert content_scale(1.0) == 100.0

    @pytest.mark.unit
    def test_clamped(self) -> None:
        """Out-of-range strength is clamped."""
        assert content_scale(3.0) == 100.0
        assert content_scale(-1.0) == 10.0


class TestContentScorer:
    """Tests for ContentScorer."""

    @pytest.mark.unit
    def test_three_liked_at_point_eight(self) -> None:
        """Three liked embeddings at similarity 0.8, strength 0.5: 0.8 * 55 = 44."""
        liked = [as_vector([0.8, 0.6])] * 3
        scorer = ContentScorer(liked, [], strength=0.5)
        assert scorer.score(as_vector([1.0, 0.0])) == pytest.approx(44.0)

    @pytest.mark.unit
    def test_disliked_only_penalizes(self) -> None:
        """Similarity to disliked articles subtracts."""
        scorer = ContentScorer([], [as_vector([1.0, 0.0])], strength=0.0)
        assert scorer.score(as_vector([1.0, 0.0])) == -10.0

    @pytest.mark.unit
    def test_count_weighted_average(self) -> None:
        """Both sets combine weighted by their sizes."""
        liked = [as_vector([1.0, 0.0])] * 3
        disliked = [as_vector([1.0, 0.0])]
        scorer = ContentScorer(liked, disliked, strength=1.0)
        # (3 * 100 - 1 * 100) / 4
        assert scorer.score(as_vector([1.0, 0.0])) == 50.0

    @pytest.mark.unit
    def test_bounded_by_scale(self) -> None:
        """Scores stay within +-scale."""
        rng = np.random.default_rng(7)
        liked = [rng.normal(size=8) for _ in range(5)]
        disliked = [rng.normal(size=8) for _ in range(3)]
        scorer = ContentScorer(liked, disliked, strength=0.3)
        for _ in range(20):
            assert abs(scorer.score(rng.normal(size=8))) <= scorer.scale

    @pytest.mark.unit
    def test_missing_candidate(self) -> None:
        """No candidate embedding contributes 0."""
        scorer = ContentScorer([as_vector([1.0])], [], strength=0.5)
        assert scorer.score(None) == 0.0

    @pytest.mark.unit
    def test_no_profile(self) -> None:
        """Without liked or disliked embeddings every score is 0."""
        scorer = ContentScorer([], [], strength=0.5)
        assert not scorer.has_profile
        assert scorer.score_all(["a"], {"a": as_vector([1.0])}) == {}

    @pytest.mark.unit
    def test_score_all_skips_zero(self) -> None:
        """score_all omits candidates scoring 0."""
        scorer = ContentScorer([as_vector([1.0, 0.0])], [], strength=0.0)
        embeddings = {"near": as_vector([1.0, 0.0]), "far": as_vector([0.0, 1.0])}
        assert scorer.score_all(["near", "far", "missing"], embeddings) == {
            "near": 10.0
        }
