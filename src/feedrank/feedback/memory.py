"""In-memory implementations of the feedback, settings and article protocols."""

import threading
from collections.abc import Iterable
from datetime import datetime

import structlog

from feedrank.data_model import Article
from feedrank.feedback.models import (
    Impression,
    InterestWeight,
    Save,
    SeedInteraction,
    SourcePreference,
    Vote,
    WeightDimension,
)
from feedrank.feedback.settings import AlgorithmProfile, UserAlgorithmSettings


logger = structlog.get_logger()


class InMemoryFeedbackStore:
    """Thread-safe, process-local FeedbackStore.

    Votes are kept in insertion order of their latest change so that
    ``get_votes`` returns a chronological history.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._lock = threading.Lock()
        self._votes: dict[str, dict[str, Vote]] = {}
        self._saves: dict[str, dict[str, Save]] = {}
        self._impressions: dict[str, dict[str, Impression]] = {}
        self._weights: dict[
            str, dict[tuple[WeightDimension, str], InterestWeight]
        ] = {}
        self._seeds: dict[str, SeedInteraction] = {}
        self._source_preferences: dict[str, dict[str, SourcePreference]] = {}

    def get_votes(self, user_id: str) -> list[Vote]:
        """Return the user's votes ordered by voted_at."""
        with self._lock:
            votes = list(self._votes.get(user_id, {}).values())
        return sorted(votes, key=lambda v: v.voted_at)

    def get_saves(self, user_id: str) -> list[Save]:
        """Return the user's saves."""
        with self._lock:
            return list(self._saves.get(user_id, {}).values())

    def get_impressions(self, user_id: str) -> list[Impression]:
        """Return the user's impression counters."""
        with self._lock:
            return list(self._impressions.get(user_id, {}).values())

    def get_weights(self, user_id: str) -> list[InterestWeight]:
        """Return the user's stored weights."""
        with self._lock:
            return list(self._weights.get(user_id, {}).values())

    def set_weight(
        self,
        user_id: str,
        dimension: WeightDimension,
        key_id: str,
        weight: float,
    ) -> None:
        """Insert or replace one interest weight."""
        row = InterestWeight(
            user_id=user_id, dimension=dimension, key_id=key_id, weight=weight
        )
        with self._lock:
            self._weights.setdefault(user_id, {})[(dimension, key_id)] = row

    def clear_weights(self, user_id: str) -> None:
        """Delete all weights of a user."""
        with self._lock:
            self._weights.pop(user_id, None)

    def put_vote(self, vote: Vote) -> None:
        """Insert or replace the vote for (user_id, article_id)."""
        with self._lock:
            user_votes = self._votes.setdefault(vote.user_id, {})
            user_votes.pop(vote.article_id, None)
            user_votes[vote.article_id] = vote

    def put_save(self, save: Save) -> None:
        """Insert a save unless one exists."""
        with self._lock:
            self._saves.setdefault(save.user_id, {}).setdefault(save.article_id, save)

    def delete_save(self, user_id: str, article_id: str) -> None:
        """Remove a save if present."""
        with self._lock:
            self._saves.get(user_id, {}).pop(article_id, None)

    def record_impression(
        self, user_id: str, article_id: str, seen_at: datetime
    ) -> None:
        """Increment the impression counter for (user_id, article_id)."""
        with self._lock:
            user_impressions = self._impressions.setdefault(user_id, {})
            current = user_impressions.get(article_id)
            if current is None:
                user_impressions[article_id] = Impression(
                    user_id=user_id,
                    article_id=article_id,
                    impression_count=1,
                    first_seen_at=seen_at,
                    last_seen_at=seen_at,
                )
            else:
                user_impressions[article_id] = current.model_copy(
                    update={
                        "impression_count": current.impression_count + 1,
                        "last_seen_at": seen_at,
                    }
                )

    def get_seed(self, user_id: str) -> SeedInteraction | None:
        """Return the user's seed interaction."""
        with self._lock:
            return self._seeds.get(user_id)

    def put_seed(self, seed: SeedInteraction) -> None:
        """Insert or replace the user's seed interaction."""
        with self._lock:
            self._seeds[seed.user_id] = seed

    def get_source_preferences(self, user_id: str) -> list[SourcePreference]:
        """Return the user's source preferences."""
        with self._lock:
            return list(self._source_preferences.get(user_id, {}).values())

    def set_source_preference(self, preference: SourcePreference) -> None:
        """Insert or replace the preference for (user_id, source_id)."""
        with self._lock:
            self._source_preferences.setdefault(preference.user_id, {})[
                preference.source_id
            ] = preference


class InMemorySettingsProvider:
    """SettingsProvider backed by named profiles with one active per user.

    Resolution order: active profile, then the legacy per-user settings
    row, then None (callers apply defaults).
    """

    def __init__(self) -> None:
        """Initialize an empty provider."""
        self._lock = threading.Lock()
        self._profiles: dict[str, dict[str, AlgorithmProfile]] = {}
        self._legacy: dict[str, UserAlgorithmSettings] = {}
        self._log = logger.bind(component="settings")

    def get_active_settings(self, user_id: str) -> UserAlgorithmSettings | None:
        """Return the settings of the user's active profile."""
        with self._lock:
            for profile in self._profiles.get(user_id, {}).values():
                if profile.is_active:
                    return profile.settings
            return self._legacy.get(user_id)

    def set_legacy_settings(
        self, user_id: str, settings: UserAlgorithmSettings
    ) -> None:
        """Store the pre-profile per-user settings row."""
        with self._lock:
            self._legacy[user_id] = settings

    def get_profiles(self, user_id: str) -> list[AlgorithmProfile]:
        """Return the user's profiles."""
        with self._lock:
            return list(self._profiles.get(user_id, {}).values())

    def save_profile(self, profile: AlgorithmProfile) -> None:
        """Create or replace a profile; activating it deactivates the others."""
        with self._lock:
            profiles = self._profiles.setdefault(profile.user_id, {})
            others_active = any(
                p.is_active for p in profiles.values() if p.name != profile.name
            )
            if profile.is_active:
                self._deactivate_all(profiles)
            elif not others_active:
                profile = profile.model_copy(update={"is_active": True})
            profiles[profile.name] = profile

    def activate_profile(self, user_id: str, name: str) -> None:
        """Make the named profile the single active one.

        Raises:
            KeyError: If the user has no profile with that name.
        """
        with self._lock:
            profiles = self._profiles.get(user_id, {})
            if name not in profiles:
                raise KeyError(name)
            self._deactivate_all(profiles)
            profiles[name] = profiles[name].model_copy(update={"is_active": True})
        self._log.info("profile_activated", user_id=user_id, profile=name)

    def delete_profile(self, user_id: str, name: str) -> None:
        """Delete a profile; the default profile takes over if it was active."""
        with self._lock:
            profiles = self._profiles.get(user_id, {})
            removed = profiles.pop(name, None)
            if removed is None or not removed.is_active or not profiles:
                return
            fallback = next(
                (p for p in profiles.values() if p.is_default),
                next(iter(profiles.values())),
            )
            profiles[fallback.name] = fallback.model_copy(update={"is_active": True})

    @staticmethod
    def _deactivate_all(profiles: dict[str, AlgorithmProfile]) -> None:
        for name, existing in list(profiles.items()):
            if existing.is_active:
                profiles[name] = existing.model_copy(update={"is_active": False})


class InMemoryArticleCatalog:
    """ArticleCatalog over a fixed collection of articles."""

    def __init__(self, articles: Iterable[Article] = ()) -> None:
        """Initialize the catalog.

        Args:
            articles: Initial articles.
        """
        self._articles: dict[str, Article] = {a.article_id: a for a in articles}

    def add(self, article: Article) -> None:
        """Add or replace an article."""
        self._articles[article.article_id] = article

    def get_article(self, article_id: str) -> Article | None:
        """Return one article, or None if unknown."""
        return self._articles.get(article_id)

    def get_articles(self, article_ids: Iterable[str]) -> dict[str, Article]:
        """Return the known articles among article_ids."""
        return {
            article_id: self._articles[article_id]
            for article_id in article_ids
            if article_id in self._articles
        }
