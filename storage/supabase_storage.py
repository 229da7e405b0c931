# storage/supabase_storage.py
"""
Supabase vector storage for embedded news articles.
Bulk inserts into the news_embeddings table and similarity search through
the match_documents RPC (pgvector).
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client, ClientOptions, create_client

from config import DEFAULT_EMBEDDINGS_TABLE, DEFAULT_MATCH_FUNCTION
from embeddings.base import EmbeddedArticle
from exceptions import ConfigurationError, ProviderUnavailable, StorageWriteFailure
from stages import DEFAULT_POLICIES, STORE, FailurePolicy, run_stage

logger = logging.getLogger(__name__)


class SupabaseVectorStore:
    """Manages article embeddings in Supabase using pgvector."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: str = DEFAULT_EMBEDDINGS_TABLE,
        match_function: str = DEFAULT_MATCH_FUNCTION,
        client: Optional[Client] = None,
        failure_policy: FailurePolicy = DEFAULT_POLICIES[STORE]
    ):
        """Initialize Supabase client (or use an injected one)."""
        self.table = table
        self.match_function = match_function
        self.failure_policy = failure_policy

        if client is not None:
            self.client = client
            return

        self.url = url or os.getenv("SUPABASE_URL")
        self.key = key or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_KEY")

        if not self.url or not self.key:
            raise ConfigurationError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment.\n"
                "Add them to your .env file."
            )

        try:
            # Server-side service-role client: no session handling
            options = ClientOptions(auto_refresh_token=False, persist_session=False)
            self.client = create_client(self.url, self.key, options=options)
            logger.info(f"✅ Connected to Supabase: {self.url}")
        except Exception as e:
            raise ConfigurationError(f"Failed to connect to Supabase: {e}") from e

    def store_articles(self, articles: Sequence[EmbeddedArticle]) -> int:
        """
        Append embedded articles with a single bulk insert.

        Returns:
            Number of rows written

        Raises:
            StorageWriteFailure: If the insert fails (under the default ABORT policy)
        """
        return run_stage(
            STORE,
            self.failure_policy,
            self._insert,
            list(articles),
            fallback=0,
            error_cls=StorageWriteFailure
        )

    def _insert(self, articles: List[EmbeddedArticle]) -> int:
        if not articles:
            logger.info("Nothing to store: empty article batch")
            return 0

        records = [a.to_record() for a in articles]
        logger.info(f"☁️  Uploading {len(records)} records to '{self.table}'...")

        try:
            self.client.table(self.table).insert(records).execute()
        except Exception as e:
            raise StorageWriteFailure(f"Insert into '{self.table}' failed: {e}", stage=STORE) from e

        logger.info(f"✅ Stored {len(records)} embeddings")
        return len(records)

    def similarity_search(
        self,
        query_embedding: List[float],
        match_threshold: float,
        match_count: int
    ) -> List[Dict[str, Any]]:
        """
        Run the match RPC and return its rows as-is (ranked by similarity).

        Raises:
            ProviderUnavailable: If the RPC call fails
        """
        logger.info(f"🔍 Searching with threshold={match_threshold}, limit={match_count}")

        try:
            response = self.client.rpc(
                self.match_function,
                {
                    "query_embedding": query_embedding,
                    "match_threshold": match_threshold,
                    "match_count": match_count
                }
            ).execute()
        except Exception as e:
            raise ProviderUnavailable(f"Similarity search failed: {e}") from e

        if response is None or getattr(response, "data", None) is None:
            logger.info("No results found")
            return []

        results = response.data if isinstance(response.data, list) else []
        logger.info(f"✅ Found {len(results)} matching documents")
        return results
