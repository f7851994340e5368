"""Article model shared by the ranking core."""

from datetime import datetime
from typing import Annotated

from pydantic import AwareDatetime, Field

from feedrank.data_model.base import StrictBaseModel


class Article(StrictBaseModel):
    """Ingested content item as seen by the ranking core.

    Attributes:
        article_id: Unique article identifier.
        category_id: Category the article belongs to.
        source_id: Source that published the article.
        published_at: Publication timestamp (timezone-aware).
        title: Display title.
        summary: Display summary.
        url: Canonical article URL.
    """

    article_id: Annotated[str, Field(min_length=1)]
    category_id: Annotated[str, Field(min_length=1)]
    source_id: Annotated[str, Field(min_length=1)]
    published_at: AwareDatetime
    title: str = ""
    summary: str | None = None
    url: str = ""

    def hours_old(self, now: datetime) -> float:
        """Age of the article in hours, never negative.

        Args:
            now: Reference time.

        Returns:
            Hours elapsed since publication.
        """
        return max(0.0, (now - self.published_at).total_seconds() / 3600)
