"""Per-user algorithm settings and named profiles."""

import math
from typing import Annotated

from pydantic import Field, field_validator

from feedrank.config.constants import (
    ALLOWED_RECENCY_DECAY_HOURS,
    DEFAULT_RECENCY_DECAY_HOURS,
)
from feedrank.data_model import StrictBaseModel


class UserAlgorithmSettings(StrictBaseModel):
    """User-tunable ranking parameters.

    Attributes:
        recency_decay_hours: Hours until recency decays to its floor.
        source_diversity_multiplier: Strength of the per-source penalty.
        include_metadata_in_embeddings: Whether embedding text includes
            author/source metadata (consumed by the embedding collaborator).
        dynamic_similarity_strength: Scale of the content similarity term.
        exploration_factor: Share of the feed reserved for exploration.
    """

    recency_decay_hours: int = DEFAULT_RECENCY_DECAY_HOURS
    source_diversity_multiplier: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    include_metadata_in_embeddings: bool = True
    dynamic_similarity_strength: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    exploration_factor: Annotated[float, Field(ge=0.0, le=0.5)] = 0.1

    @field_validator("recency_decay_hours")
    @classmethod
    def validate_recency_decay_hours(cls, value: int) -> int:
        """Ensure the decay window is one of the supported choices."""
        if value not in ALLOWED_RECENCY_DECAY_HOURS:
            msg = f"recency_decay_hours must be one of {ALLOWED_RECENCY_DECAY_HOURS}"
            raise ValueError(msg)
        return value


DEFAULT_SETTINGS = UserAlgorithmSettings()


def _coerce_float(value: float, default: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; missing or non-numeric values give default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return min(max(number, low), high)


def sanitize_settings(
    settings: UserAlgorithmSettings | None,
) -> UserAlgorithmSettings:
    """Clamp settings into their valid ranges.

    Settings normally arrive validated, but instances built with
    ``model_construct`` or loaded from legacy rows skip validation. Values
    are pulled back into range; an unsupported decay window snaps to the
    nearest allowed choice. Missing, non-numeric and NaN values fall back
    to their defaults.

    Args:
        settings: Settings to sanitize, or None for defaults.

    Returns:
        Valid settings.
    """
    if settings is None:
        return DEFAULT_SETTINGS

    try:
        decay = float(settings.recency_decay_hours)
    except (TypeError, ValueError):
        decay = float(DEFAULT_RECENCY_DECAY_HOURS)
    if math.isnan(decay) or decay <= 0:
        decay = float(DEFAULT_RECENCY_DECAY_HOURS)
    nearest = min(ALLOWED_RECENCY_DECAY_HOURS, key=lambda h: (abs(h - decay), h))

    return UserAlgorithmSettings(
        recency_decay_hours=nearest,
        source_diversity_multiplier=_coerce_float(
            settings.source_diversity_multiplier,
            DEFAULT_SETTINGS.source_diversity_multiplier,
            0.0,
            1.0,
        ),
        include_metadata_in_embeddings=(
            settings.include_metadata_in_embeddings
            if isinstance(settings.include_metadata_in_embeddings, bool)
            else DEFAULT_SETTINGS.include_metadata_in_embeddings
        ),
        dynamic_similarity_strength=_coerce_float(
            settings.dynamic_similarity_strength,
            DEFAULT_SETTINGS.dynamic_similarity_strength,
            0.0,
            1.0,
        ),
        exploration_factor=_coerce_float(
            settings.exploration_factor,
            DEFAULT_SETTINGS.exploration_factor,
            0.0,
            0.5,
        ),
    )


class AlgorithmProfile(StrictBaseModel):
    """A named settings set, e.g. "Work Mode" or "Discovery Mode".

    Attributes:
        user_id: Owning user.
        name: Profile name, unique per user.
        description: Optional description.
        is_active: Whether this profile drives ranking.
        is_default: Whether this is the user's default profile.
        settings: Algorithm settings of the profile.
    """

    user_id: str
    name: Annotated[str, Field(min_length=1, max_length=100)]
    description: str | None = None
    is_active: bool = False
    is_default: bool = False
    settings: UserAlgorithmSettings = Field(default_factory=UserAlgorithmSettings)
