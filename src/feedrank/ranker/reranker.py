"""Greedy diversity reranking of a scored feed.

Two passes over a pool sorted by raw score:

    rotation:      the best article from each of up to N distinct
                   categories, best first
    continuation:  category occupancy balancing (logged out, onboarding)
                   or a diminishing per-source penalty inside a bounded
                   lookahead window (adoption)

Each pick is locally optimal only; the pool is at most a few hundred
articles per request.
"""

from collections import Counter
from collections.abc import Callable, Sequence

import structlog

from feedrank.config.schemas import DiversityConfig
from feedrank.feedback.settings import DEFAULT_SETTINGS, UserAlgorithmSettings
from feedrank.ranker.models import ScoredArticle
from feedrank.ranker.phase import DiversityKey, FeedPhase, PhasePolicy, policy_for


logger = structlog.get_logger()


def sort_by_raw_score(items: Sequence[ScoredArticle]) -> list[ScoredArticle]:
    """Sort by raw score desc, then newest first, then article_id asc."""
    return sorted(
        items,
        key=lambda s: (
            -s.raw_score,
            -s.article.published_at.timestamp(),
            s.article_id,
        ),
    )


def _key_function(key: DiversityKey) -> Callable[[ScoredArticle], str]:
    if key == DiversityKey.SOURCE:
        return lambda s: s.article.source_id
    return lambda s: s.article.category_id


def forced_rotation(
    pool: Sequence[ScoredArticle], slots: int
) -> tuple[list[ScoredArticle], list[ScoredArticle]]:
    """Pick the best article of each distinct category, up to slots.

    Args:
        pool: Candidates sorted by raw score.
        slots: Maximum rotation picks.

    Returns:
        Tuple of (rotation picks, remaining pool in original order).
    """
    distinct = {s.article.category_id for s in pool}
    target = min(slots, len(distinct))

    picked: list[ScoredArticle] = []
    used: set[str] = set()
    for item in pool:
        if len(picked) >= target:
            break
        if item.article.category_id not in used:
            picked.append(item)
            used.add(item.article.category_id)

    picked_ids = {s.article_id for s in picked}
    remaining = [s for s in pool if s.article_id not in picked_ids]
    return picked, remaining


def balance_by_occupancy(
    picked: Sequence[ScoredArticle],
    remaining: Sequence[ScoredArticle],
    key: DiversityKey,
    slack: int,
    limit: int,
) -> list[ScoredArticle]:
    """Continue the feed keeping group occupancy close to the minimum.

    Each step considers the groups still present in the pool, takes the
    lowest occupancy among them and picks the best article whose group is
    within slack of it, falling back to the best remaining article.

    Args:
        picked: Articles already placed (seed the counters).
        remaining: Pool sorted by raw score.
        key: Attribute to balance.
        slack: Allowed occupancy above the minimum.
        limit: Maximum total output length.

    Returns:
        Articles appended after picked, in order.
    """
    group_of = _key_function(key)
    occupancy = Counter(group_of(s) for s in picked)
    pool = list(remaining)
    output: list[ScoredArticle] = []

    while pool and len(picked) + len(output) < limit:
        lowest = min(occupancy[group_of(s)] for s in pool)
        index = next(
            (
                i
                for i, s in enumerate(pool)
                if occupancy[group_of(s)] <= lowest + slack
            ),
            0,
        )
        choice = pool.pop(index)
        occupancy[group_of(choice)] += 1
        output.append(choice)

    return output


def _penalized(raw_score: float, factor: float) -> float:
    # Penalty only shrinks positive scores.
    return raw_score * factor if raw_score > 0 else raw_score


def balance_by_source_penalty(
    picked: Sequence[ScoredArticle],
    remaining: Sequence[ScoredArticle],
    step: float,
    floor: float,
    lookahead: int,
    limit: int,
) -> list[ScoredArticle]:
    """Continue the feed with a diminishing penalty per repeated source.

    Each step scores the next lookahead pool entries as
    raw * max(floor, 1 - step * occupancy[source]) and takes the best,
    earliest entry winning ties.

    Args:
        picked: Articles already placed (seed the counters).
        remaining: Pool sorted by raw score.
        step: Penalty per prior occurrence of the same source.
        floor: Lowest penalty factor.
        lookahead: Pool entries examined per pick.
        limit: Maximum total output length.

    Returns:
        Articles appended after picked, in order.
    """
    occupancy = Counter(s.article.source_id for s in picked)
    pool = list(remaining)
    output: list[ScoredArticle] = []

    while pool and len(picked) + len(output) < limit:
        best_index = 0
        best_score = float("-inf")
        for i, item in enumerate(pool[:lookahead]):
            factor = max(floor, 1.0 - step * occupancy[item.article.source_id])
            adjusted = _penalized(item.raw_score, factor)
            if adjusted > best_score:
                best_index = i
                best_score = adjusted
        choice = pool.pop(best_index)
        occupancy[choice.article.source_id] += 1
        output.append(choice)

    return output


def rerank_for_diversity(
    items: Sequence[ScoredArticle],
    phase: FeedPhase,
    settings: UserAlgorithmSettings = DEFAULT_SETTINGS,
    config: DiversityConfig | None = None,
    policy: PhasePolicy | None = None,
) -> list[ScoredArticle]:
    """Rerank scored articles for diversity.

    Args:
        items: Scored articles in any order.
        phase: Phase of the request.
        settings: Sanitized user settings.
        config: Diversity configuration.
        policy: Phase policy; derived from phase when omitted.

    Returns:
        Reranked articles, at most config.max_results long.
    """
    config = config or DiversityConfig()
    policy = policy or policy_for(phase)
    pool = sort_by_raw_score(items)
    limit = config.max_results

    picked, remaining = forced_rotation(pool, config.forced_rotation_slots)
    picked = picked[:limit]

    if policy.applies_source_penalty:
        step = config.source_penalty_scale * settings.source_diversity_multiplier
        tail = balance_by_source_penalty(
            picked,
            remaining,
            step=step,
            floor=config.adoption_penalty_floor,
            lookahead=config.adoption_lookahead,
            limit=limit,
        )
    else:
        tail = balance_by_occupancy(
            picked,
            remaining,
            key=policy.diversity_key,
            slack=config.occupancy_slack,
            limit=limit,
        )

    return picked + tail


class DiversityReranker:
    """Applies diversity reranking with logging for one request."""

    def __init__(
        self,
        request_id: str,
        config: DiversityConfig | None = None,
    ) -> None:
        """Initialize the reranker.

        Args:
            request_id: Request identifier for logging.
            config: Diversity configuration.
        """
        self._config = config or DiversityConfig()
        self._log = logger.bind(
            component="ranker",
            subcomponent="reranker",
            request_id=request_id,
        )

    def rerank(
        self,
        items: Sequence[ScoredArticle],
        phase: FeedPhase,
        settings: UserAlgorithmSettings = DEFAULT_SETTINGS,
        policy: PhasePolicy | None = None,
    ) -> list[ScoredArticle]:
        """Rerank a scored batch; see rerank_for_diversity."""
        reranked = rerank_for_diversity(
            items, phase, settings=settings, config=self._config, policy=policy
        )
        self._log.debug(
            "rerank_complete",
            phase=phase.value,
            items_in=len(items),
            items_out=len(reranked),
            distinct_categories=len({s.article.category_id for s in reranked}),
            distinct_sources=len({s.article.source_id for s in reranked}),
        )
        return reranked
