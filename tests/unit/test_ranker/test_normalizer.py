"""Unit tests for score normalization."""

import statistics

import pytest

from feedrank.config.schemas import NormalizationConfig
from feedrank.data_model import Article
from feedrank.ranker.models import ScoredArticle
from feedrank.ranker.normalizer import normalize_scores_to_bell_curve, population_stats
from tests.helpers.time import FIXED_NOW


def _make_batch(scores: list[float]) -> list[ScoredArticle]:
    """Create scored articles with the given raw scores."""
    return [
        ScoredArticle(
            article=Article(
                article_id=f"a{i}",
                category_id="tech",
                source_id="wire",
                published_at=FIXED_NOW,
            ),
            raw_score=score,
        )
        for i, score in enumerate(scores)
    ]


class TestPopulationStats:
    """Tests for population_stats."""

    @pytest.mark.unit
    def test_population_stddev(self) -> None:
        """Divides by n, not n - 1."""
        mean, stddev = population_stats([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert mean == 5.0
        assert stddev == 2.0

    @pytest.mark.unit
    def test_empty(self) -> None:
        """Empty input yields zeros."""
        assert population_stats([]) == (0.0, 0.0)


class TestNormalizeScoresToBellCurve:
    """Tests for normalize_scores_to_bell_curve."""

    @pytest.mark.unit
    def test_three_point_batch(self) -> None:
        """z-scores of +-1.2247 map to 26 and 74."""
        result = normalize_scores_to_bell_curve(_make_batch([10.0, 20.0, 30.0]))
        assert [s.adjusted_score for s in result] == [26, 50, 74]

    @pytest.mark.unit
    def test_constant_batch_gets_mean(self) -> None:
        """Zero spread assigns the target mean everywhere."""
        result = normalize_scores_to_bell_curve(_make_batch([42.0, 42.0, 42.0]))
        assert [s.adjusted_score for s in result] == [50, 50, 50]

    @pytest.mark.unit
    def test_single_article(self) -> None:
        """A batch of one is constant."""
        result = normalize_scores_to_bell_curve(_make_batch([7.0]))
        assert result[0].adjusted_score == 50

    @pytest.mark.unit
    def test_empty(self) -> None:
        """Empty input returns an empty list."""
        assert normalize_scores_to_bell_curve([]) == []

    @pytest.mark.unit
    def test_clamped_at_zero(self) -> None:
        """A z-score below -2.5 clamps to 0."""
        result = normalize_scores_to_bell_curve(_make_batch([100.0] * 9 + [0.0]))
        assert result[-1].adjusted_score == 0
        assert all(s.adjusted_score >= 0 for s in result)

    @pytest.mark.unit
    def test_order_and_raw_scores_untouched(self) -> None:
        """Normalization never reorders or rescales raw scores."""
        batch = _make_batch([5.0, 90.0, 40.0])
        result = normalize_scores_to_bell_curve(batch)
        assert [s.article_id for s in result] == ["a0", "a1", "a2"]
        assert [s.raw_score for s in result] == [5.0, 90.0, 40.0]

    @pytest.mark.unit
    def test_distribution_targets(self) -> None:
        """Non-constant batches land near mean 50 and stddev 20."""
        result = normalize_scores_to_bell_curve(
            _make_batch([float(v) for v in range(1, 51)])
        )
        adjusted = [s.adjusted_score for s in result]
        assert statistics.fmean(adjusted) == pytest.approx(50.0, abs=0.5)
        assert statistics.pstdev(adjusted) == pytest.approx(20.0, abs=0.5)

    @pytest.mark.unit
    def test_custom_target(self) -> None:
        """Configured targets are honored."""
        config = NormalizationConfig(target_mean=100.0, target_stddev=10.0)
        result = normalize_scores_to_bell_curve(_make_batch([1.0, 3.0]), config)
        assert [s.adjusted_score for s in result] == [90, 110]
