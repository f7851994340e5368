"""Unit tests for the in-memory feedback, settings and article adapters."""

from datetime import timedelta

import pytest

from feedrank.data_model import Article
from feedrank.feedback.memory import (
    InMemoryArticleCatalog,
    InMemoryFeedbackStore,
    InMemorySettingsProvider,
)
from feedrank.feedback.models import Save, SourcePreference, Vote
from feedrank.feedback.protocols import ArticleCatalog, FeedbackStore, SettingsProvider
from feedrank.feedback.settings import AlgorithmProfile, UserAlgorithmSettings
from tests.helpers.time import FIXED_NOW, hours_ago


def _make_vote(article_id: str, value: int, hours: float = 1.0) -> Vote:
    """Create a test Vote."""
    return Vote(
        user_id="u1",
        article_id=article_id,
        value=value,  # type: ignore[arg-type]
        voted_at=hours_ago(hours),
    )


def _make_profile(name: str, decay: int, **flags: bool) -> AlgorithmProfile:
    """Create a test AlgorithmProfile."""
    return AlgorithmProfile(
        user_id="u1",
        name=name,
        settings=UserAlgorithmSettings(recency_decay_hours=decay),
        **flags,
    )


class TestInMemoryFeedbackStore:
    """Tests for InMemoryFeedbackStore."""

    @pytest.mark.unit
    def test_satisfies_protocol(self) -> None:
        """The store implements FeedbackStore."""
        assert isinstance(InMemoryFeedbackStore(), FeedbackStore)

    @pytest.mark.unit
    def test_latest_vote_wins(self) -> None:
        """A second vote on the same article replaces the first."""
        store = InMemoryFeedbackStore()
        store.put_vote(_make_vote("a1", 1, hours=3))
        store.put_vote(_make_vote("a1", -1, hours=1))

        votes = store.get_votes("u1")
        assert len(votes) == 1
        assert votes[0].value == -1

    @pytest.mark.unit
    def test_votes_are_chronological(self) -> None:
        """get_votes orders by voted_at."""
        store = InMemoryFeedbackStore()
        store.put_vote(_make_vote("late", 1, hours=1))
        store.put_vote(_make_vote("early", 1, hours=5))
        assert [v.article_id for v in store.get_votes("u1")] == ["early", "late"]

    @pytest.mark.unit
    def test_save_is_idempotent(self) -> None:
        """Saving twice keeps one row; unsaving removes it."""
        store = InMemoryFeedbackStore()
        save = Save(user_id="u1", article_id="a1", saved_at=FIXED_NOW)
        store.put_save(save)
        store.put_save(save)
        assert len(store.get_saves("u1")) == 1

        store.delete_save("u1", "a1")
        store.delete_save("u1", "a1")
        assert store.get_saves("u1") == []

    @pytest.mark.unit
    def test_impressions_increment(self) -> None:
        """Each impression bumps the count and last_seen_at."""
        store = InMemoryFeedbackStore()
        store.record_impression("u1", "a1", hours_ago(2))
        store.record_impression("u1", "a1", FIXED_NOW)

        (impression,) = store.get_impressions("u1")
        assert impression.impression_count == 2
        assert impression.first_seen_at == FIXED_NOW - timedelta(hours=2)
        assert impression.last_seen_at == FIXED_NOW

    @pytest.mark.unit
    def test_users_are_isolated(self) -> None:
        """One user's data never leaks into another's."""
        store = InMemoryFeedbackStore()
        store.put_vote(_make_vote("a1", 1))
        assert store.get_votes("u2") == []
        assert store.get_seed("u2") is None

    @pytest.mark.unit
    def test_source_preference_replaced(self) -> None:
        """A later preference for the same source replaces the earlier one."""
        store = InMemoryFeedbackStore()
        store.set_source_preference(
            SourcePreference(
                user_id="u1", source_id="wire", active=False, updated_at=hours_ago(2)
            )
        )
        store.set_source_preference(
            SourcePreference(
                user_id="u1", source_id="wire", active=True, updated_at=hours_ago(1)
            )
        )

        preferences = store.get_source_preferences("u1")

        assert [(p.source_id, p.active) for p in preferences] == [("wire", True)]
        assert store.get_source_preferences("u2") == []


class TestInMemorySettingsProvider:
    """Tests for InMemorySettingsProvider."""

    @pytest.mark.unit
    def test_satisfies_protocol(self) -> None:
        """The provider implements SettingsProvider."""
        assert isinstance(InMemorySettingsProvider(), SettingsProvider)

    @pytest.mark.unit
    def test_no_settings(self) -> None:
        """Unknown users resolve to None."""
        assert InMemorySettingsProvider().get_active_settings("u1") is None

    @pytest.mark.unit
    def test_legacy_fallback(self) -> None:
        """Without profiles the legacy row is used."""
        provider = InMemorySettingsProvider()
        provider.set_legacy_settings(
            "u1", UserAlgorithmSettings(recency_decay_hours=72)
        )
        settings = provider.get_active_settings("u1")
        assert settings is not None
        assert settings.recency_decay_hours == 72

    @pytest.mark.unit
    def test_first_profile_becomes_active(self) -> None:
        """A lone profile is activated automatically."""
        provider = InMemorySettingsProvider()
        provider.set_legacy_settings(
            "u1", UserAlgorithmSettings(recency_decay_hours=72)
        )
        provider.save_profile(_make_profile("work", 12))

        settings = provider.get_active_settings("u1")
        assert settings is not None
        assert settings.recency_decay_hours == 12

    @pytest.mark.unit
    def test_single_active_profile(self) -> None:
        """Activating one profile deactivates the rest."""
        provider = InMemorySettingsProvider()
        provider.save_profile(_make_profile("work", 12))
        provider.save_profile(_make_profile("discovery", 48))
        provider.activate_profile("u1", "discovery")

        active = [p.name for p in provider.get_profiles("u1") if p.is_active]
        assert active == ["discovery"]

    @pytest.mark.unit
    def test_activate_unknown_profile(self) -> None:
        """Activating a missing profile raises KeyError."""
        with pytest.raises(KeyError):
            InMemorySettingsProvider().activate_profile("u1", "missing")

    @pytest.mark.unit
    def test_delete_active_falls_back_to_default(self) -> None:
        """Deleting the active profile activates the default one."""
        provider = InMemorySettingsProvider()
        provider.save_profile(_make_profile("base", 24, is_default=True))
        provider.save_profile(_make_profile("work", 12, is_active=True))
        provider.delete_profile("u1", "work")

        active = [p.name for p in provider.get_profiles("u1") if p.is_active]
        assert active == ["base"]


class TestInMemoryArticleCatalog:
    """Tests for InMemoryArticleCatalog."""

    @pytest.mark.unit
    def test_lookup(self) -> None:
        """Known ids resolve; unknown ids are skipped."""
        article = Article(
            article_id="a1",
            category_id="tech",
            source_id="wire",
            published_at=FIXED_NOW,
        )
        catalog = InMemoryArticleCatalog([article])

        assert isinstance(catalog, ArticleCatalog)
        assert catalog.get_article("a1") == article
        assert catalog.get_article("zz") is None
        assert catalog.get_articles(["a1", "zz"]) == {"a1": article}
