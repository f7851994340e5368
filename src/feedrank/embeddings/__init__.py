"""Embedding access and content similarity scoring."""

from feedrank.embeddings.fetcher import EmbeddingFetcher, chunk_ids
from feedrank.embeddings.memory import InMemoryEmbeddingProvider
from feedrank.embeddings.metrics import EmbeddingMetrics
from feedrank.embeddings.protocols import EmbeddingProvider
from feedrank.embeddings.similarity import (
    ContentScorer,
    Vector,
    as_vector,
    content_scale,
    cosine_similarity,
)


__all__ = [
    "ContentScorer",
    "EmbeddingFetcher",
    "EmbeddingMetrics",
    "EmbeddingProvider",
    "InMemoryEmbeddingProvider",
    "Vector",
    "as_vector",
    "chunk_ids",
    "content_scale",
    "cosine_similarity",
]
