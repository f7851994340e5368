"""Feed ranking orchestrator."""

import time
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

import structlog

from feedrank.config.schemas import RankingConfig, ScoringConfig
from feedrank.data_model import Article
from feedrank.embeddings.similarity import ContentScorer, Vector
from feedrank.ranker.filters import filter_candidates
from feedrank.ranker.metrics import RankerMetrics
from feedrank.ranker.models import RankedFeed, ScoredArticle, UserSignals
from feedrank.ranker.normalizer import normalize_scores_to_bell_curve
from feedrank.ranker.phase import FeedPhase, policy_for, select_phase
from feedrank.ranker.reranker import DiversityReranker
from feedrank.ranker.scorer import ScoringContext, score_articles
from feedrank.ranker.state_machine import RankerState, RankerStateMachine


logger = structlog.get_logger()


def paginate(
    items: Sequence[ScoredArticle], offset: int, limit: int
) -> tuple[list[ScoredArticle], bool]:
    """Slice a ranked list.

    Returns:
        Tuple of (page, has_more).
    """
    offset = max(offset, 0)
    limit = max(limit, 0)
    page = list(items[offset : offset + limit])
    return page, offset + limit < len(items)


def content_scores_for(
    signals: UserSignals,
    article_ids: Sequence[str],
    embeddings: Mapping[str, Vector],
    config: ScoringConfig,
) -> dict[str, float]:
    """Content similarity terms for candidates against the reader's profile.

    Args:
        signals: Reader snapshot with liked and disliked ids.
        article_ids: Candidate ids.
        embeddings: Available embeddings.
        config: Scoring configuration.

    Returns:
        article_id -> non-zero content score.
    """
    liked = [embeddings[a] for a in sorted(signals.liked_ids) if a in embeddings]
    disliked = [
        embeddings[a] for a in sorted(signals.disliked_ids) if a in embeddings
    ]
    scorer = ContentScorer(
        liked,
        disliked,
        strength=signals.settings.dynamic_similarity_strength,
        config=config,
    )
    return scorer.score_all(article_ids, embeddings)


class FeedRanker:
    """Ranks one request's candidates for one reader.

    Implements a state machine flow:
        CANDIDATES_READY -> FILTERED -> SCORED -> RERANKED -> NORMALIZED

    Every stage is synchronous and pure; all I/O happens before the
    ranker is invoked.
    """

    def __init__(
        self,
        request_id: str,
        config: RankingConfig | None = None,
        metrics: RankerMetrics | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            request_id: Request identifier for logging and state.
            config: Ranking configuration.
            metrics: Optional metrics instance.
            now: Reference time for recency and suppression.
        """
        self._request_id = request_id
        self._config = config or RankingConfig()
        self._metrics = metrics or RankerMetrics.get_instance()
        self._now = now or datetime.now(UTC)
        self._state_machine = RankerStateMachine(request_id)
        self._reranker = DiversityReranker(request_id, self._config.diversity)
        self._log = logger.bind(component="ranker", request_id=request_id)

    @property
    def state(self) -> RankerState:
        """Get current ranker state."""
        return self._state_machine.state

    def rank(
        self,
        candidates: Sequence[Article],
        signals: UserSignals,
        embeddings: Mapping[str, Vector] | None = None,
        category_id: str | None = None,
    ) -> tuple[FeedPhase, list[ScoredArticle]]:
        """Rank candidates into a full, normalized feed.

        Args:
            candidates: Candidate articles from upstream.
            signals: Reader snapshot.
            embeddings: article_id -> embedding for candidates and for the
                reader's liked and disliked articles.
            category_id: Optional category restriction.

        Returns:
            Tuple of (phase, reranked articles with adjusted scores).
        """
        phase = select_phase(signals.is_authenticated, signals.vote_count)
        policy = policy_for(phase)
        self._metrics.record_request(phase.value)
        self._metrics.record_candidates_in(len(candidates))
        self._log.info(
            "ranking_started",
            phase=phase.value,
            candidates_in=len(candidates),
            vote_count=signals.vote_count,
            category_id=category_id,
        )

        start = time.perf_counter()
        filtered = filter_candidates(
            candidates,
            signals,
            self._now,
            config=self._config.suppression,
            category_id=category_id,
        )
        self._state_machine.to_filtered()
        self._metrics.record_suppressed(filtered.count_by_reason())
        filter_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        content_scores: dict[str, float] = {}
        if policy.uses_content and embeddings:
            content_scores = content_scores_for(
                signals,
                [a.article_id for a in filtered.kept],
                embeddings,
                self._config.scoring,
            )
        ctx = ScoringContext(
            now=self._now,
            config=self._config.scoring,
            settings=signals.settings,
            weights=signals.weights,
            content_scores=content_scores,
            interacted_categories=signals.interacted_categories,
            seed=signals.seed,
        )
        scored = score_articles(phase, filtered.kept, ctx, votes=signals.votes)
        self._state_machine.to_scored()
        scoring_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_content_scored(len(content_scores))
        for item in scored:
            self._metrics.record_score(item.raw_score)

        start = time.perf_counter()
        reranked = self._reranker.rerank(
            scored, phase, settings=signals.settings, policy=policy
        )
        self._state_machine.to_reranked()
        rerank_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        normalized = normalize_scores_to_bell_curve(
            reranked, self._config.normalization
        )
        self._state_machine.to_normalized()
        normalize_ms = (time.perf_counter() - start) * 1000

        self._metrics.record_durations(filter_ms, scoring_ms, rerank_ms, normalize_ms)
        self._metrics.record_candidates_out(len(normalized))
        self._log.info(
            "ranking_complete",
            phase=phase.value,
            candidates_in=len(candidates),
            suppressed=len(filtered.suppressed),
            duplicates=filtered.duplicates,
            content_scored=len(content_scores),
            feed_size=len(normalized),
        )
        return phase, normalized

    def rank_page(
        self,
        candidates: Sequence[Article],
        signals: UserSignals,
        embeddings: Mapping[str, Vector] | None = None,
        category_id: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> RankedFeed:
        """Rank candidates and return one page.

        Normalization runs over the whole reranked feed before slicing, so
        adjusted scores are comparable across pages.
        """
        phase, ranked = self.rank(
            candidates, signals, embeddings=embeddings, category_id=category_id
        )
        page, has_more = paginate(ranked, offset, limit)
        return RankedFeed(
            articles=page,
            total=len(ranked),
            has_more=has_more,
            phase=phase,
            offset=max(offset, 0),
            limit=max(limit, 0),
        )


def rank_feed_pure(
    candidates: Sequence[Article],
    signals: UserSignals | None = None,
    embeddings: Mapping[str, Vector] | None = None,
    category_id: str | None = None,
    offset: int = 0,
    limit: int = 20,
    config: RankingConfig | None = None,
    now: datetime | None = None,
    request_id: str = "pure",
) -> RankedFeed:
    """Pure function API for feed ranking.

    Args:
        candidates: Candidate articles.
        signals: Reader snapshot; anonymous when omitted.
        embeddings: Available embeddings.
        category_id: Optional category restriction.
        offset: Page start.
        limit: Page size.
        config: Ranking configuration.
        now: Reference time.
        request_id: Request identifier.

    Returns:
        RankedFeed page.
    """
    ranker = FeedRanker(request_id=request_id, config=config, now=now)
    return ranker.rank_page(
        candidates,
        signals or UserSignals(),
        embeddings=embeddings,
        category_id=category_id,
        offset=offset,
        limit=limit,
    )
