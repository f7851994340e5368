"""Feed service: the ranking read path and the feedback write paths.

``rank_feed`` never writes. Votes, saves, impressions and seed
interactions are written through the feedback store; interest weights are
written only by the weight updater on the vote and backfill paths.
"""

import dataclasses
import uuid
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import cast

import structlog

from feedrank.config.loader import load_ranking_config
from feedrank.config.schemas import RankingConfig
from feedrank.data_model import Article
from feedrank.embeddings.fetcher import EmbeddingFetcher
from feedrank.embeddings.protocols import EmbeddingProvider
from feedrank.embeddings.similarity import Vector
from feedrank.errors import ArticleNotFoundError, InvalidVoteError
from feedrank.feedback.metrics import FeedbackMetrics
from feedrank.feedback.models import (
    Save,
    SeedInteraction,
    SeedInteractionType,
    SourcePreference,
    Vote,
    VoteValue,
)
from feedrank.feedback.protocols import ArticleCatalog, FeedbackStore, SettingsProvider
from feedrank.feedback.settings import sanitize_settings
from feedrank.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_from_settings,
)
from feedrank.ranker.filters import filter_candidates
from feedrank.ranker.models import RankedFeed, ScoredArticle, UserSignals
from feedrank.ranker.normalizer import normalize_scores_to_bell_curve
from feedrank.ranker.phase import policy_for, select_phase
from feedrank.ranker.ranker import FeedRanker, content_scores_for
from feedrank.ranker.scorer import ScoringContext, score_articles
from feedrank.settings.app import AppSettings, get_settings
from feedrank.weights.models import ScoringWeights
from feedrank.weights.updater import WeightUpdater, replay_votes


logger = structlog.get_logger()

_VALID_VOTES = (-1, 0, 1)


class FeedService:
    """Entry point for ranking feeds and recording feedback."""

    def __init__(
        self,
        store: FeedbackStore,
        embeddings: EmbeddingProvider,
        settings_provider: SettingsProvider,
        catalog: ArticleCatalog,
        config: RankingConfig | None = None,
        max_workers: int = 7,
    ) -> None:
        """Initialize the service.

        Args:
            store: Feedback store.
            embeddings: Embedding provider.
            settings_provider: Per-user settings lookup.
            catalog: Article lookup for the write paths.
            config: Ranking configuration.
            max_workers: Threads used to load a reader's signals.
        """
        self._store = store
        self._settings_provider = settings_provider
        self._catalog = catalog
        self._config = config or RankingConfig()
        self._max_workers = max_workers
        self._fetcher = EmbeddingFetcher(embeddings, self._config.embeddings)
        self._updater = WeightUpdater(store, self._config.weights)
        self._metrics = FeedbackMetrics.get_instance()
        self._log = logger.bind(component="service")

    @classmethod
    def from_settings(
        cls,
        store: FeedbackStore,
        embeddings: EmbeddingProvider,
        settings_provider: SettingsProvider,
        catalog: ArticleCatalog,
        app_settings: AppSettings | None = None,
    ) -> "FeedService":
        """Build a service from environment settings.

        Configures logging and loads the ranking configuration named by
        FEEDRANK_CONFIG_PATH (built-in defaults when unset).

        Raises:
            ConfigValidationError: If the configuration file is invalid.
        """
        app_settings = app_settings or get_settings()
        configure_from_settings(app_settings.log_level, app_settings.log_json)
        config = load_ranking_config(app_settings.config_path)
        return cls(store, embeddings, settings_provider, catalog, config=config)

    def close(self) -> None:
        """Release the embedding worker threads."""
        self._fetcher.close()

    def rank_feed(
        self,
        user_id: str | None,
        candidates: Sequence[Article],
        category_id: str | None = None,
        offset: int = 0,
        limit: int = 20,
        now: datetime | None = None,
    ) -> RankedFeed:
        """Rank candidates for a reader and return one page.

        Args:
            user_id: Reader, or None for an anonymous request.
            candidates: Articles already restricted to the recency window.
            category_id: Optional category restriction.
            offset: Page start.
            limit: Page size.
            now: Reference time.

        Returns:
            RankedFeed page; empty with has_more False for no candidates.
        """
        request_id = str(uuid.uuid4())
        now = now or datetime.now(UTC)
        bind_request_context(request_id, user_id)
        try:
            signals = self.load_signals(user_id)
            kept = filter_candidates(
                candidates,
                signals,
                now,
                config=self._config.suppression,
                category_id=category_id,
            ).kept
            embeddings = self._fetch_embeddings(signals, kept)
            ranker = FeedRanker(request_id, config=self._config, now=now)
            return ranker.rank_page(
                candidates,
                signals,
                embeddings=embeddings,
                category_id=category_id,
                offset=offset,
                limit=limit,
            )
        finally:
            clear_request_context()

    def load_signals(self, user_id: str | None) -> UserSignals:
        """Load everything the ranker needs about a reader.

        The store reads run concurrently and all complete before returning.
        """
        if user_id is None:
            return UserSignals()

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="feedback-load"
        ) as executor:
            votes_f = executor.submit(self._store.get_votes, user_id)
            saves_f = executor.submit(self._store.get_saves, user_id)
            impressions_f = executor.submit(self._store.get_impressions, user_id)
            weights_f = executor.submit(self._store.get_weights, user_id)
            settings_f = executor.submit(
                self._settings_provider.get_active_settings, user_id
            )
            seed_f = executor.submit(self._store.get_seed, user_id)
            preferences_f = executor.submit(
                self._store.get_source_preferences, user_id
            )

            signals = UserSignals.from_records(
                user_id,
                votes=votes_f.result(),
                saves=saves_f.result(),
                impressions=impressions_f.result(),
                weights=ScoringWeights.from_interest_weights(weights_f.result()),
                settings=sanitize_settings(settings_f.result()),
                seed=seed_f.result(),
                source_preferences=preferences_f.result(),
            )

        interacted = self._catalog.get_articles(sorted(signals.interacted_ids))
        return dataclasses.replace(
            signals,
            interacted_categories=frozenset(
                a.category_id for a in interacted.values()
            ),
        )

    def record_vote(
        self,
        user_id: str,
        article_id: str,
        value: int,
        now: datetime | None = None,
    ) -> ScoringWeights:
        """Store a vote and update the reader's interest weights.

        Args:
            user_id: Voting user.
            article_id: Target article.
            value: -1, 0 (retract) or 1.
            now: Vote time.

        Returns:
            The reader's weights after the update.

        Raises:
            InvalidVoteError: If value is not -1, 0 or 1.
            ArticleNotFoundError: If the article is unknown.
        """
        if isinstance(value, bool) or value not in _VALID_VOTES:
            self._metrics.record_vote_rejected()
            self._log.warning(
                "vote_rejected",
                user_id=user_id,
                article_id=article_id,
                value=value,
            )
            raise InvalidVoteError(user_id, article_id, value)

        article = self._require_article(article_id)
        self._store.put_vote(
            Vote(
                user_id=user_id,
                article_id=article_id,
                value=cast(VoteValue, value),
                voted_at=now or datetime.now(UTC),
            )
        )
        self._metrics.record_vote(value)
        self._log.info(
            "vote_recorded",
            user_id=user_id,
            article_id=article_id,
            value=value,
        )
        return self._updater.apply_vote(user_id, value, article)

    def save_article(
        self, user_id: str, article_id: str, now: datetime | None = None
    ) -> None:
        """Bookmark an article; it joins the reader's liked set.

        Raises:
            ArticleNotFoundError: If the article is unknown.
        """
        self._require_article(article_id)
        self._store.put_save(
            Save(
                user_id=user_id,
                article_id=article_id,
                saved_at=now or datetime.now(UTC),
            )
        )
        self._metrics.record_save()
        self._log.info("article_saved", user_id=user_id, article_id=article_id)

    def unsave_article(self, user_id: str, article_id: str) -> None:
        """Remove a bookmark; a missing bookmark is not an error."""
        self._store.delete_save(user_id, article_id)
        self._metrics.record_unsave()
        self._log.info("article_unsaved", user_id=user_id, article_id=article_id)

    def set_source_preferences(
        self,
        user_id: str,
        preferences: Mapping[str, bool],
        now: datetime | None = None,
    ) -> None:
        """Show or mute sources for a reader.

        Muted sources are dropped from the reader's feeds until switched
        back on.

        Args:
            user_id: Reader.
            preferences: source_id -> True to show, False to mute.
            now: Change time.
        """
        updated_at = now or datetime.now(UTC)
        for source_id, active in preferences.items():
            self._store.set_source_preference(
                SourcePreference(
                    user_id=user_id,
                    source_id=source_id,
                    active=active,
                    updated_at=updated_at,
                )
            )
        self._log.info(
            "source_preferences_saved",
            user_id=user_id,
            muted=sorted(s for s, active in preferences.items() if not active),
            count=len(preferences),
        )

    def record_impressions(
        self,
        user_id: str,
        article_ids: Iterable[str],
        now: datetime | None = None,
    ) -> int:
        """Count one view of each article shown to a reader.

        Args:
            user_id: Viewing user.
            article_ids: Articles shown; repeats within one call count once.
            now: View time.

        Returns:
            Number of impression counters incremented.
        """
        seen_at = now or datetime.now(UTC)
        unique_ids = list(dict.fromkeys(article_ids))
        for article_id in unique_ids:
            self._store.record_impression(user_id, article_id, seen_at)
        self._metrics.record_impressions(len(unique_ids))
        self._log.debug(
            "impressions_recorded", user_id=user_id, count=len(unique_ids)
        )
        return len(unique_ids)

    def seed_algorithm(
        self,
        user_id: str,
        article_id: str,
        interaction_type: SeedInteractionType,
        now: datetime | None = None,
    ) -> SeedInteraction:
        """Record a reader's first interaction and apply it.

        Upvotes and downvotes are cast through record_vote and saves through
        save_article; clicks only seed the onboarding boosts.

        Raises:
            ArticleNotFoundError: If the article is unknown.
        """
        article = self._require_article(article_id)
        created_at = now or datetime.now(UTC)
        seed = SeedInteraction(
            user_id=user_id,
            article_id=article_id,
            interaction_type=interaction_type,
            category_id=article.category_id,
            source_id=article.source_id,
            created_at=created_at,
        )
        self._store.put_seed(seed)
        self._metrics.record_seed()
        self._log.info(
            "seed_recorded",
            user_id=user_id,
            article_id=article_id,
            interaction_type=interaction_type.value,
        )

        if interaction_type == SeedInteractionType.UPVOTE:
            self.record_vote(user_id, article_id, 1, now=created_at)
        elif interaction_type == SeedInteractionType.DOWNVOTE:
            self.record_vote(user_id, article_id, -1, now=created_at)
        elif interaction_type == SeedInteractionType.SAVE:
            self.save_article(user_id, article_id, now=created_at)
        return seed

    def backfill_weights(self, user_id: str) -> ScoringWeights:
        """Rebuild a reader's weights from their stored votes.

        Votes are replayed from default weights in voted_at order and the
        result replaces the stored weights. Votes on articles missing from
        the catalog are skipped.

        Returns:
            The rebuilt weights.
        """
        votes = sorted(self._store.get_votes(user_id), key=lambda v: v.voted_at)
        articles = self._catalog.get_articles([v.article_id for v in votes])
        history = [
            (vote.value, articles[vote.article_id])
            for vote in votes
            if vote.article_id in articles
        ]
        skipped = len(votes) - len(history)
        if skipped:
            self._log.warning(
                "backfill_votes_skipped", user_id=user_id, skipped=skipped
            )

        weights = replay_votes(history, self._config.weights)
        self._updater.replace_all(user_id, weights)
        self._metrics.record_backfill()
        self._log.info(
            "weights_backfilled", user_id=user_id, votes_replayed=len(history)
        )
        return weights

    def recalculate_score(
        self,
        user_id: str | None,
        article_id: str,
        reference: Sequence[Article] = (),
        now: datetime | None = None,
    ) -> ScoredArticle:
        """Score one article for a reader outside a feed request.

        The adjusted score is computed against the reference batch scored
        the same way; without a reference it is the target mean.

        Raises:
            ArticleNotFoundError: If the article is unknown.
        """
        article = self._require_article(article_id)
        now = now or datetime.now(UTC)
        signals = self.load_signals(user_id)
        phase = select_phase(signals.is_authenticated, signals.vote_count)
        policy = policy_for(phase)

        batch = [article] + [a for a in reference if a.article_id != article_id]
        content_scores: dict[str, float] = {}
        if policy.uses_content:
            embeddings = self._fetch_embeddings(signals, batch)
            if embeddings:
                content_scores = content_scores_for(
                    signals,
                    [a.article_id for a in batch],
                    embeddings,
                    self._config.scoring,
                )

        ctx = ScoringContext(
            now=now,
            config=self._config.scoring,
            settings=signals.settings,
            weights=signals.weights,
            content_scores=content_scores,
            interacted_categories=signals.interacted_categories,
            seed=signals.seed,
        )
        scored = score_articles(phase, batch, ctx, votes=signals.votes)
        normalized = normalize_scores_to_bell_curve(
            scored, self._config.normalization
        )
        self._log.debug(
            "score_recalculated",
            user_id=user_id,
            article_id=article_id,
            phase=phase.value,
            raw_score=normalized[0].raw_score,
        )
        return normalized[0]

    def _require_article(self, article_id: str) -> Article:
        article = self._catalog.get_article(article_id)
        if article is None:
            self._log.warning("article_not_found", article_id=article_id)
            raise ArticleNotFoundError(article_id)
        return article

    def _fetch_embeddings(
        self, signals: UserSignals, candidates: Sequence[Article]
    ) -> dict[str, Vector]:
        """Fetch embeddings only when the reader has a content profile."""
        profile_ids = signals.liked_ids | signals.disliked_ids
        if not signals.is_authenticated or not profile_ids:
            return {}
        ids = sorted(profile_ids) + [a.article_id for a in candidates]
        return self._fetcher.fetch(ids)
