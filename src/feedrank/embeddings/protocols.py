"""Protocol interface for embedding providers."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Source of fixed-length article embeddings.

    Implementations may be slow or remote; callers bound each request
    with a timeout and treat missing vectors as "no embedding".
    """

    def get_embedding(self, article_id: str) -> Sequence[float] | None:
        """Return one article's embedding, or None if absent."""
        ...

    def get_embeddings_batch(
        self, article_ids: Sequence[str]
    ) -> dict[str, Sequence[float]]:
        """Return embeddings for the ids that have one.

        Missing ids are simply absent from the result.
        """
        ...
