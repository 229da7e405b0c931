# embeddings/runner.py
"""
Article embedding stage.

One embedding request per article body, fanned out over a bounded thread
pool and joined in input order. The batch is all-or-nothing.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Sequence

import tiktoken

from config import DEFAULT_EMBED_MAX_WORKERS
from exceptions import EmbeddingBatchFailure
from ingest.models import Article
from stages import DEFAULT_POLICIES, EMBED, FailurePolicy, run_stage
from .base import EmbeddedArticle, EmbeddingsProvider

logger = logging.getLogger(__name__)


def count_tokens(texts: List[str], model: str) -> int:
    """
    Count total tokens for a list of texts using tiktoken.
    """
    try:
        enc = tiktoken.encoding_for_model(model)
    except KeyError:
        # fallback to a default encoding if model not recognized
        enc = tiktoken.get_encoding("cl100k_base")
    return sum(len(enc.encode(t)) for t in texts)


class ArticleEmbedder:
    """Attaches an embedding vector to each article."""

    def __init__(
        self,
        provider: EmbeddingsProvider,
        max_workers: int = DEFAULT_EMBED_MAX_WORKERS,
        failure_policy: FailurePolicy = DEFAULT_POLICIES[EMBED]
    ):
        if max_workers <= 0:
            raise ValueError("max_workers must be a positive integer")
        self.provider = provider
        self.max_workers = max_workers
        self.failure_policy = failure_policy

    def embed(self, articles: Sequence[Article]) -> List[EmbeddedArticle]:
        """
        Embed every article body, preserving order and fields.

        Raises:
            EmbeddingBatchFailure: If any single embedding call fails
                (under the default ABORT policy)
        """
        embedded = run_stage(
            EMBED,
            self.failure_policy,
            self._embed_all,
            list(articles),
            fallback=[],
            error_cls=EmbeddingBatchFailure
        )
        logger.info(f"Created embeddings: {len(embedded)} items")
        return embedded

    def embed_query(self, text: str) -> Optional[List[float]]:
        """
        Embed a single text (the user's utterance).

        Returns None when the call fails under a DEGRADE policy.

        Raises:
            EmbeddingBatchFailure: If the embedding call fails
                (under the default ABORT policy)
        """
        return run_stage(
            EMBED,
            self.failure_policy,
            self.provider.embed_query,
            text,
            fallback=None,
            error_cls=EmbeddingBatchFailure
        )

    def _embed_all(self, articles: List[Article]) -> List[EmbeddedArticle]:
        if not articles:
            return []

        bodies = [a.article for a in articles]
        model = getattr(self.provider, "model", "")
        try:
            logger.info(f"🧮 Estimated tokens: {count_tokens(bodies, model)}")
        except Exception as e:
            logger.warning(f"⚠️ Token counting failed: {e}")

        workers = min(self.max_workers, len(articles))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as pool:
            futures: List[Future] = [pool.submit(self.provider.embed_query, body) for body in bodies]
            try:
                vectors = [f.result() for f in futures]
            except Exception:
                for f in futures:
                    f.cancel()
                raise

        return [EmbeddedArticle.from_article(a, v) for a, v in zip(articles, vectors)]
