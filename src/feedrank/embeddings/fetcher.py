"""Batched, time-bounded embedding lookups."""

import time
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait

import structlog

from feedrank.config.schemas import EmbeddingConfig
from feedrank.embeddings.metrics import EmbeddingMetrics
from feedrank.embeddings.protocols import EmbeddingProvider
from feedrank.embeddings.similarity import Vector, as_vector


logger = structlog.get_logger()


def chunk_ids(article_ids: Sequence[str], size: int) -> list[list[str]]:
    """Split ids into consecutive batches of at most size."""
    return [list(article_ids[i : i + size]) for i in range(0, len(article_ids), size)]


class EmbeddingFetcher:
    """Fetches embeddings from a provider in parallel batches.

    The whole fetch shares one time budget. Batches that fail or do not
    finish in time are dropped and their articles are treated as having
    no embedding, so ranking never waits on the provider indefinitely.

    All fetches share one pool of at most ``max_workers`` threads. A
    provider call that hangs holds one of them until it returns; later
    batches queue behind it and time out instead of starting new threads.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        config: EmbeddingConfig | None = None,
        metrics: EmbeddingMetrics | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            provider: Embedding provider.
            config: Batch size, timeout and parallelism.
            metrics: Optional metrics instance.
        """
        self._provider = provider
        self._config = config or EmbeddingConfig()
        self._metrics = metrics or EmbeddingMetrics.get_instance()
        self._log = logger.bind(component="embeddings", subcomponent="fetcher")
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.max_workers,
            thread_name_prefix="embedding-fetch",
        )

    def close(self) -> None:
        """Stop accepting batches and drop queued ones."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def fetch(self, article_ids: Iterable[str]) -> dict[str, Vector]:
        """Fetch embeddings for the given ids.

        Args:
            article_ids: Ids to look up; duplicates are ignored.

        Returns:
            article_id -> vector for every id the provider answered in time.
        """
        unique_ids = list(dict.fromkeys(article_ids))
        if not unique_ids:
            return {}

        start = time.perf_counter()
        batches = chunk_ids(unique_ids, self._config.batch_size)
        result: dict[str, Vector] = {}

        futures = {
            self._executor.submit(self._provider.get_embeddings_batch, batch): batch
            for batch in batches
        }
        done, pending = wait(futures, timeout=self._config.timeout_seconds)
        for future in done:
            self._collect(future, futures[future], result)
        if pending:
            for future in pending:
                future.cancel()
            self._metrics.record_timeout()
            self._log.warning(
                "embedding_fetch_timeout",
                timeout_seconds=self._config.timeout_seconds,
                pending_batches=len(pending),
                completed_batches=len(done),
            )

        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_fetch(len(unique_ids), len(result), len(batches))
        self._metrics.record_duration(duration_ms)
        self._log.debug(
            "embedding_fetch_complete",
            requested=len(unique_ids),
            found=len(result),
            batches=len(batches),
            duration_ms=duration_ms,
        )
        return result

    def _collect(
        self,
        future: "Future[dict[str, Sequence[float]]]",
        batch: list[str],
        result: dict[str, Vector],
    ) -> None:
        """Merge one finished batch into the result."""
        try:
            vectors = future.result()
        except Exception as e:  # noqa: BLE001
            self._metrics.record_batch_error()
            self._log.warning(
                "embedding_batch_failed",
                batch_size=len(batch),
                error=str(e),
            )
            return

        requested = set(batch)
        for article_id, values in vectors.items():
            if article_id in requested and values is not None:
                result[article_id] = as_vector(values)
