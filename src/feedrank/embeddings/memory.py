"""In-memory embedding provider."""

from collections.abc import Mapping, Sequence


class InMemoryEmbeddingProvider:
    """EmbeddingProvider over a dict of precomputed vectors."""

    def __init__(self, vectors: Mapping[str, Sequence[float]] | None = None) -> None:
        """Initialize the provider.

        Args:
            vectors: article_id -> embedding.
        """
        self._vectors: dict[str, list[float]] = {
            article_id: list(values) for article_id, values in (vectors or {}).items()
        }

    def put(self, article_id: str, values: Sequence[float]) -> None:
        """Store or replace an embedding."""
        self._vectors[article_id] = list(values)

    def get_embedding(self, article_id: str) -> Sequence[float] | None:
        """Return one embedding, or None if absent."""
        return self._vectors.get(article_id)

    def get_embeddings_batch(
        self, article_ids: Sequence[str]
    ) -> dict[str, Sequence[float]]:
        """Return embeddings for the ids that have one."""
        return {
            article_id: self._vectors[article_id]
            for article_id in article_ids
            if article_id in self._vectors
        }
