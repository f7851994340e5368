"""Protocol interfaces for feedback, settings and article collaborators."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, runtime_checkable

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
from feedrank.feedback.settings import UserAlgorithmSettings


@runtime_checkable
class FeedbackStore(Protocol):
    """Read/write view over a user's feedback and per-source preferences.

    Reads are request-scoped. Writes come only from the write paths of the
    feed service; ranking never writes.
    """

    def get_votes(self, user_id: str) -> list[Vote]:
        """Return the user's votes, including retracted (value 0) rows."""
        ...

    def get_saves(self, user_id: str) -> list[Save]:
        """Return the user's saved articles."""
        ...

    def get_impressions(self, user_id: str) -> list[Impression]:
        """Return the user's impression counters."""
        ...

    def get_weights(self, user_id: str) -> list[InterestWeight]:
        """Return the user's stored interest weights."""
        ...

    def set_weight(
        self,
        user_id: str,
        dimension: WeightDimension,
        key_id: str,
        weight: float,
    ) -> None:
        """Insert or replace one interest weight."""
        ...

    def clear_weights(self, user_id: str) -> None:
        """Delete all interest weights of a user."""
        ...

    def put_vote(self, vote: Vote) -> None:
        """Insert or replace the vote for (user_id, article_id)."""
        ...

    def put_save(self, save: Save) -> None:
        """Insert a save if not already present."""
        ...

    def delete_save(self, user_id: str, article_id: str) -> None:
        """Remove a save if present."""
        ...

    def record_impression(
        self, user_id: str, article_id: str, seen_at: datetime
    ) -> None:
        """Increment the impression counter for (user_id, article_id)."""
        ...

    def get_seed(self, user_id: str) -> SeedInteraction | None:
        """Return the user's seed interaction, if any."""
        ...

    def put_seed(self, seed: SeedInteraction) -> None:
        """Insert or replace the user's seed interaction."""
        ...

    def get_source_preferences(self, user_id: str) -> list[SourcePreference]:
        """Return the user's per-source show/mute choices."""
        ...

    def set_source_preference(self, preference: SourcePreference) -> None:
        """Insert or replace the preference for (user_id, source_id)."""
        ...


@runtime_checkable
class SettingsProvider(Protocol):
    """Resolves the settings that drive a user's ranking."""

    def get_active_settings(self, user_id: str) -> UserAlgorithmSettings | None:
        """Return the active settings, or None when the user has none."""
        ...


@runtime_checkable
class ArticleCatalog(Protocol):
    """Lookup of ingested articles by id."""

    def get_article(self, article_id: str) -> Article | None:
        """Return one article, or None if unknown."""
        ...

    def get_articles(self, article_ids: Iterable[str]) -> dict[str, Article]:
        """Return the known articles among article_ids."""
        ...
