"""Immutable interest weight value used by scoring."""

from collections.abc import Iterable

from pydantic import Field

from feedrank.config.constants import DEFAULT_INTEREST_WEIGHT
from feedrank.data_model import StrictBaseModel
from feedrank.feedback.models import InterestWeight, WeightDimension


class ScoringWeights(StrictBaseModel):
    """Per-user category and source multipliers.

    Instances are never mutated; updates build a new value.

    Attributes:
        categories: category_id -> multiplier.
        sources: source_id -> multiplier.
    """

    categories: dict[str, float] = Field(default_factory=dict)
    sources: dict[str, float] = Field(default_factory=dict)

    def category_weight(
        self, category_id: str, default: float = DEFAULT_INTEREST_WEIGHT
    ) -> float:
        """Get the multiplier for a category."""
        return self.categories.get(category_id, default)

    def source_weight(
        self, source_id: str, default: float = DEFAULT_INTEREST_WEIGHT
    ) -> float:
        """Get the multiplier for a source."""
        return self.sources.get(source_id, default)

    @classmethod
    def from_interest_weights(cls, rows: Iterable[InterestWeight]) -> "ScoringWeights":
        """Build weights from stored rows.

        Args:
            rows: Stored interest weight rows.

        Returns:
            ScoringWeights with one entry per row.
        """
        categories: dict[str, float] = {}
        sources: dict[str, float] = {}
        for row in rows:
            if row.dimension == WeightDimension.CATEGORY:
                categories[row.key_id] = row.weight
            else:
                sources[row.key_id] = row.weight
        return cls(categories=categories, sources=sources)

    def to_interest_weights(self, user_id: str) -> list[InterestWeight]:
        """Convert to storable rows, categories first, keys sorted.

        Args:
            user_id: Owning user.

        Returns:
            List of InterestWeight rows.
        """
        rows = [
            InterestWeight(
                user_id=user_id,
                dimension=WeightDimension.CATEGORY,
                key_id=key,
                weight=weight,
            )
            for key, weight in sorted(self.categories.items())
        ]
        rows.extend(
            InterestWeight(
                user_id=user_id,
                dimension=WeightDimension.SOURCE,
                key_id=key,
                weight=weight,
            )
            for key, weight in sorted(self.sources.items())
        )
        return rows
