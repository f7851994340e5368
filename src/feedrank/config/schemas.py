"""Ranking configuration schema."""

from typing import Annotated

from pydantic import Field, model_validator

from feedrank.config.constants import (
    DEFAULT_INTEREST_WEIGHT,
    EMBEDDING_BATCH_SIZE,
    MAX_INTEREST_WEIGHT,
    MIN_INTEREST_WEIGHT,
    TARGET_MEAN,
    TARGET_STDDEV,
)
from feedrank.data_model import StrictBaseModel


class ScoringConfig(StrictBaseModel):
    """Scoring engine multipliers and floors.

    Attributes:
        base_score: Starting score before multipliers.
        breaking_news_hours: Age below which the breaking-news boost applies.
        logged_out_breaking_multiplier: Breaking boost for anonymous feeds.
        adoption_breaking_multiplier: Breaking boost for established users.
        high_volume_breaking_multiplier: Breaking boost for high-volume sources.
        high_volume_source_ids: Sources that publish often enough to get the
            reduced breaking boost.
        logged_out_recency_floor: Minimum recency factor for anonymous feeds.
        onboarding_recency_floor: Minimum recency factor during onboarding.
        adoption_recency_floor: Minimum recency factor for established users.
        onboarding_full_score_hours: Age below which onboarding has no decay.
        onboarding_decay_hours: Linear decay horizon during onboarding.
        onboarding_new_category_multiplier: Boost for categories the user
            has not interacted with yet.
        seed_category_multiplier: Boost for the seed interaction's category.
        seed_source_multiplier: Boost for the seed interaction's source.
        tie_break_minute_amplitude: Max relative perturbation from publish minute.
        tie_break_id_amplitude: Max relative perturbation from the article id.
        content_min_scale: Content score range at similarity strength 0.
        content_scale_range: Extra range added at similarity strength 1.
    """

    base_score: Annotated[float, Field(gt=0.0)] = 100.0
    breaking_news_hours: Annotated[float, Field(ge=0.0)] = 2.0
    logged_out_breaking_multiplier: Annotated[float, Field(ge=1.0)] = 2.5
    adoption_breaking_multiplier: Annotated[float, Field(ge=1.0)] = 1.8
    high_volume_breaking_multiplier: Annotated[float, Field(ge=1.0)] = 1.4
    high_volume_source_ids: list[str] = Field(default_factory=list)
    logged_out_recency_floor: Annotated[float, Field(ge=0.1, le=0.3)] = 0.1
    onboarding_recency_floor: Annotated[float, Field(ge=0.1, le=0.3)] = 0.3
    adoption_recency_floor: Annotated[float, Field(ge=0.1, le=0.3)] = 0.1
    onboarding_full_score_hours: Annotated[float, Field(ge=0.0)] = 24.0
    onboarding_decay_hours: Annotated[float, Field(gt=0.0)] = 48.0
    onboarding_new_category_multiplier: Annotated[float, Field(ge=1.0)] = 2.0
    seed_category_multiplier: Annotated[float, Field(ge=1.0)] = 3.0
    seed_source_multiplier: Annotated[float, Field(ge=1.0)] = 2.0
    tie_break_minute_amplitude: Annotated[float, Field(ge=0.0, le=0.04)] = 0.04
    tie_break_id_amplitude: Annotated[float, Field(ge=0.0, le=0.02)] = 0.02
    content_min_scale: Annotated[float, Field(ge=0.0)] = 10.0
    content_scale_range: Annotated[float, Field(ge=0.0)] = 90.0


class DiversityConfig(StrictBaseModel):
    """Diversity reranker configuration.

    Attributes:
        forced_rotation_slots: Max slots in the distinct-category block.
        occupancy_slack: Occupancy above the minimum still considered fair.
        adoption_lookahead: Pool entries examined per adoption pick.
        adoption_penalty_floor: Lowest diminishing-returns factor.
        source_penalty_scale: Per-occurrence penalty per unit of the user's
            source diversity multiplier.
        max_results: Output cap for a reranked feed.
    """

    forced_rotation_slots: Annotated[int, Field(ge=0, le=50)] = 6
    occupancy_slack: Annotated[int, Field(ge=0)] = 1
    adoption_lookahead: Annotated[int, Field(ge=1)] = 20
    adoption_penalty_floor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    source_penalty_scale: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    max_results: Annotated[int, Field(ge=1)] = 100


class NormalizationConfig(StrictBaseModel):
    """Display distribution for adjusted scores.

    Attributes:
        target_mean: Mean of adjusted scores.
        target_stddev: Standard deviation of adjusted scores.
    """

    target_mean: Annotated[float, Field(ge=0.0)] = TARGET_MEAN
    target_stddev: Annotated[float, Field(gt=0.0)] = TARGET_STDDEV


class WeightsConfig(StrictBaseModel):
    """Interest weight learning configuration.

    Attributes:
        default_weight: Weight of a category/source with no history.
        min_weight: Lower clamp bound.
        max_weight: Upper clamp bound.
        vote_adjustment: Additive step per vote.
    """

    default_weight: Annotated[float, Field(gt=0.0)] = DEFAULT_INTEREST_WEIGHT
    min_weight: Annotated[float, Field(gt=0.0)] = MIN_INTEREST_WEIGHT
    max_weight: Annotated[float, Field(gt=0.0)] = MAX_INTEREST_WEIGHT
    vote_adjustment: Annotated[float, Field(gt=0.0, le=1.0)] = 0.1

    @model_validator(mode="after")
    def validate_bounds(self) -> "WeightsConfig":
        """Ensure the default weight sits inside the clamp range."""
        if not self.min_weight <= self.default_weight <= self.max_weight:
            msg = "default_weight must lie within [min_weight, max_weight]"
            raise ValueError(msg)
        return self


class SuppressionConfig(StrictBaseModel):
    """Candidate suppression configuration.

    Attributes:
        impression_threshold: Views without interaction that hide an article.
        impression_window_hours: Rolling window for counting views.
    """

    impression_threshold: Annotated[int, Field(ge=1)] = 2
    impression_window_hours: Annotated[float, Field(gt=0.0)] = 168.0


class EmbeddingConfig(StrictBaseModel):
    """Embedding provider access configuration.

    Attributes:
        batch_size: Article ids per provider request.
        timeout_seconds: Overall budget for one request's lookups.
        max_workers: Parallel provider requests.
    """

    batch_size: Annotated[int, Field(ge=1, le=1000)] = EMBEDDING_BATCH_SIZE
    timeout_seconds: Annotated[float, Field(gt=0.0, le=60.0)] = 2.0
    max_workers: Annotated[int, Field(ge=1, le=32)] = 4


class RankingConfig(StrictBaseModel):
    """Root configuration for ranking.yaml.

    Attributes:
        version: Schema version.
        scoring: Scoring engine configuration.
        diversity: Diversity reranker configuration.
        normalization: Adjusted score distribution.
        weights: Interest weight learning configuration.
        suppression: Candidate suppression configuration.
        embeddings: Embedding provider access configuration.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    suppression: SuppressionConfig = Field(default_factory=SuppressionConfig)
    embeddings: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
