"""Unit tests for the diversity reranker."""

from datetime import timedelta

import pytest

from feedrank.config.schemas import DiversityConfig
from feedrank.data_model import Article
from feedrank.feedback.settings import UserAlgorithmSettings
from feedrank.ranker.models import ScoredArticle
from feedrank.ranker.phase import DiversityKey, FeedPhase
from feedrank.ranker.reranker import (
    DiversityReranker,
    balance_by_occupancy,
    balance_by_source_penalty,
    forced_rotation,
    rerank_for_diversity,
    sort_by_raw_score,
)
from tests.helpers.time import FIXED_NOW


def _make_scored(
    article_id: str,
    raw_score: float,
    category_id: str = "tech",
    source_id: str = "wire",
    minutes_old: int = 0,
) -> ScoredArticle:
    """Create a test ScoredArticle."""
    return ScoredArticle(
        article=Article(
            article_id=article_id,
            category_id=category_id,
            source_id=source_id,
            published_at=FIXED_NOW - timedelta(minutes=minutes_old),
        ),
        raw_score=raw_score,
    )


def _ids(items: list[ScoredArticle]) -> list[str]:
    return [s.article_id for s in items]


class TestSortByRawScore:
    """Tests for the deterministic input ordering."""

    @pytest.mark.unit
    def test_score_descending(self) -> None:
        """Higher raw score first."""
        items = [_make_scored("a", 1.0), _make_scored("b", 3.0), _make_scored("c", 2.0)]
        assert _ids(sort_by_raw_score(items)) == ["b", "c", "a"]

    @pytest.mark.unit
    def test_ties_newer_then_id(self) -> None:
        """Equal scores order newer first, then by id."""
        items = [
            _make_scored("z", 5.0, minutes_old=10),
            _make_scored("b", 5.0),
            _make_scored("a", 5.0),
        ]
        assert _ids(sort_by_raw_score(items)) == ["a", "b", "z"]


class TestForcedRotation:
    """Tests for the distinct-category rotation block."""

    @pytest.mark.unit
    def test_first_six_are_distinct_categories(self) -> None:
        """With 8 categories the rotation picks 6 distinct ones."""
        items = [
            _make_scored(f"hot{i}", 500.0 - i, category_id="c0") for i in range(10)
        ]
        items += [
            _make_scored(f"x{i}", 100.0 - i, category_id=f"c{i}") for i in range(1, 8)
        ]
        ranked = rerank_for_diversity(items, FeedPhase.ONBOARDING)

        first_six = {s.article.category_id for s in ranked[:6]}
        assert len(first_six) == 6
        assert ranked[0].article_id == "hot0"

    @pytest.mark.unit
    def test_fewer_categories_than_slots(self) -> None:
        """Rotation size is bounded by the distinct category count."""
        pool = sort_by_raw_score(
            [
                _make_scored("a1", 10.0, category_id="a"),
                _make_scored("a2", 9.0, category_id="a"),
                _make_scored("b1", 8.0, category_id="b"),
            ]
        )
        picked, remaining = forced_rotation(pool, slots=6)
        assert _ids(picked) == ["a1", "b1"]
        assert _ids(remaining) == ["a2"]


class TestOccupancyBalancing:
    """Tests for category occupancy balancing."""

    @pytest.mark.unit
    def test_keeps_occupancy_within_slack(self) -> None:
        """A group more than one ahead yields to the lagging group."""
        remaining = [
            _make_scored("a100", 100.0, category_id="A"),
            _make_scored("a99", 99.0, category_id="A"),
            _make_scored("a98", 98.0, category_id="A"),
            _make_scored("b50", 50.0, category_id="B"),
        ]
        output = balance_by_occupancy(
            [], remaining, key=DiversityKey.CATEGORY, slack=1, limit=100
        )
        assert _ids(output) == ["a100", "a99", "b50", "a98"]

    @pytest.mark.unit
    def test_respects_limit(self) -> None:
        """Output stops at the limit including prior picks."""
        picked = [_make_scored("p", 10.0)]
        remaining = [_make_scored(f"r{i}", 5.0 - i) for i in range(5)]
        output = balance_by_occupancy(
            picked, remaining, key=DiversityKey.CATEGORY, slack=1, limit=3
        )
        assert len(output) == 2


class TestSourcePenalty:
    """Tests for the adoption diminishing-returns penalty."""

    @pytest.mark.unit
    def test_repeated_source_yields(self) -> None:
        """A repeated source is penalized below a close competitor."""
        remaining = [
            _make_scored("s100", 100.0, source_id="S"),
            _make_scored("s99", 99.0, source_id="S"),
            _make_scored("s98", 98.0, source_id="S"),
            _make_scored("t97", 97.0, source_id="T"),
        ]
        output = balance_by_source_penalty(
            [], remaining, step=0.05, floor=0.7, lookahead=20, limit=100
        )
        assert _ids(output) == ["s100", "t97", "s99", "s98"]

    @pytest.mark.unit
    def test_lookahead_bounds_search(self) -> None:
        """Entries past the window are not considered."""
        remaining = [
            _make_scored("s100", 100.0, source_id="S"),
            _make_scored("s99", 99.0, source_id="S"),
            _make_scored("t97", 97.0, source_id="T"),
        ]
        output = balance_by_source_penalty(
            [], remaining, step=0.05, floor=0.7, lookahead=1, limit=100
        )
        assert _ids(output) == ["s100", "s99", "t97"]

    @pytest.mark.unit
    def test_zero_multiplier_disables_penalty(self) -> None:
        """A source diversity multiplier of 0 keeps pure score order."""
        items = [
            _make_scored("s100", 100.0, source_id="S"),
            _make_scored("s99", 99.0, source_id="S"),
            _make_scored("t97", 97.0, source_id="T"),
        ]
        settings = UserAlgorithmSettings(source_diversity_multiplier=0.0)
        config = DiversityConfig(forced_rotation_slots=0)
        ranked = rerank_for_diversity(
            items, FeedPhase.ADOPTION, settings=settings, config=config
        )
        assert _ids(ranked) == ["s100", "s99", "t97"]


class TestRerankForDiversity:
    """Tests for the full rerank."""

    @pytest.mark.unit
    def test_onboarding_two_categories_interleave(self) -> None:
        """Two equally scored categories both appear in the first two slots."""
        items = [
            _make_scored("a1", 200.0, category_id="A"),
            _make_scored("a2", 200.0, category_id="A"),
            _make_scored("b1", 200.0, category_id="B"),
        ]
        ranked = rerank_for_diversity(items, FeedPhase.ONBOARDING)
        assert {s.article.category_id for s in ranked[:2]} == {"A", "B"}

    @pytest.mark.unit
    def test_output_cap(self) -> None:
        """Output never exceeds max_results."""
        items = [
            _make_scored(f"a{i}", float(i), category_id=f"c{i % 3}") for i in range(10)
        ]
        ranked = rerank_for_diversity(
            items, FeedPhase.LOGGED_OUT, config=DiversityConfig(max_results=4)
        )
        assert len(ranked) == 4

    @pytest.mark.unit
    def test_is_permutation(self) -> None:
        """Reranking neither drops nor duplicates articles under the cap."""
        items = [
            _make_scored(
                f"a{i}",
                float(i % 7),
                category_id=f"c{i % 4}",
                source_id=f"s{i % 3}",
            )
            for i in range(30)
        ]
        for phase in FeedPhase:
            ranked = rerank_for_diversity(items, phase)
            assert sorted(_ids(ranked)) == sorted(_ids(items))

    @pytest.mark.unit
    def test_empty(self) -> None:
        """Empty input yields empty output."""
        assert rerank_for_diversity([], FeedPhase.ADOPTION) == []

    @pytest.mark.unit
    def test_reranker_class_delegates(self) -> None:
        """DiversityReranker produces the same order as the function."""
        items = [
            _make_scored(f"a{i}", float(i), category_id=f"c{i % 2}") for i in range(6)
        ]
        reranker = DiversityReranker(request_id="test")
        assert _ids(reranker.rerank(items, FeedPhase.ONBOARDING)) == _ids(
            rerank_for_diversity(items, FeedPhase.ONBOARDING)
        )
