# search_pipeline.py
"""
News search pipeline: keywords -> news search -> embeddings -> storage ->
similarity search. One run per webhook request, no state kept between runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ai_services.claude_service import ClaudeService
from ai_services.keyword_extractor import KeywordExtractor
from config import DEFAULT_MATCH_COUNT, DEFAULT_MATCH_THRESHOLD, Settings
from embeddings.registry import build_provider
from embeddings.runner import ArticleEmbedder
from exceptions import MalformedRequest
from ingest.news_fetcher import NewsFetcher
from stages import DEFAULT_POLICIES, EMBED, FETCH, KEYWORDS, SIMILARITY, STORE, FailurePolicy, run_stage
from storage.supabase_storage import SupabaseVectorStore

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Summary of one pipeline run."""
    utterance: str
    keywords: str
    fetched_count: int = 0
    stored_count: int = 0
    matches: List[Dict[str, Any]] = field(default_factory=list)


class NewsSearchPipeline:
    """
    Sequences the pipeline stages for a single utterance.

    Every collaborator is passed in, so tests can swap any of them for a stub.
    """

    def __init__(
        self,
        keyword_extractor: KeywordExtractor,
        news_fetcher: NewsFetcher,
        embedder: ArticleEmbedder,
        vector_store: SupabaseVectorStore,
        match_threshold: float = DEFAULT_MATCH_THRESHOLD,
        match_count: int = DEFAULT_MATCH_COUNT,
        similarity_policy: FailurePolicy = DEFAULT_POLICIES[SIMILARITY]
    ):
        self.keyword_extractor = keyword_extractor
        self.news_fetcher = news_fetcher
        self.embedder = embedder
        self.vector_store = vector_store
        self.match_threshold = match_threshold
        self.match_count = match_count
        self.similarity_policy = similarity_policy

    def run(self, utterance: str) -> PipelineResult:
        """
        Run every stage for one utterance.

        Raises:
            MalformedRequest: If the utterance is blank
            EmbeddingBatchFailure: If the embedding batch or the query embedding
                fails (ABORT policy)
            StorageWriteFailure: If the bulk insert fails (ABORT policy)
        """
        if not isinstance(utterance, str) or not utterance.strip():
            raise MalformedRequest("Utterance must be a non-empty string")

        keywords = self.keyword_extractor.extract(utterance)
        articles = self.news_fetcher.fetch(keywords)
        embedded = self.embedder.embed(articles)
        stored = self.vector_store.store_articles(embedded)
        matches = self.find_similar(utterance)

        return PipelineResult(
            utterance=utterance,
            keywords=keywords,
            fetched_count=len(articles),
            stored_count=stored,
            matches=matches
        )

    def find_similar(self, query: str, k: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Nearest stored articles for ``query`` above the similarity threshold.

        An empty list means "no matches". Under the default DEGRADE policy an
        RPC failure is logged and also yields an empty list.

        Raises:
            EmbeddingBatchFailure: If embedding the query fails
                (embed stage, default ABORT policy)
        """
        query_embedding = self.embedder.embed_query(query)
        if query_embedding is None:
            return []

        matches = run_stage(
            SIMILARITY,
            self.similarity_policy,
            self.vector_store.similarity_search,
            fallback=[],
            query_embedding=query_embedding,
            match_threshold=self.match_threshold,
            match_count=self.match_count if k is None else k
        )
        logger.info(f"Similar documents: {len(matches)}")
        return matches


def build_pipeline(settings: Settings) -> NewsSearchPipeline:
    """Construct the production pipeline from settings."""
    claude = ClaudeService(
        api_key=settings.anthropic_api_key,
        default_model=settings.keyword_model,
        api_url=settings.anthropic_api_url,
        api_version=settings.anthropic_version,
        timeout=settings.http_timeout
    )
    provider = build_provider(
        settings.embed_provider,
        model=settings.embed_model,
        api_key=settings.openai_api_key
    )
    vector_store = SupabaseVectorStore(
        url=settings.supabase_url,
        key=settings.supabase_key,
        table=settings.embeddings_table,
        match_function=settings.match_function,
        failure_policy=settings.policy_for(STORE)
    )

    return NewsSearchPipeline(
        keyword_extractor=KeywordExtractor(
            claude,
            max_tokens=settings.keyword_max_tokens,
            failure_policy=settings.policy_for(KEYWORDS)
        ),
        news_fetcher=NewsFetcher(
            search_url=settings.news_search_url,
            collection=settings.news_collection,
            link_template=settings.news_link_template,
            default_limit=settings.news_fetch_limit,
            timeout=settings.http_timeout,
            failure_policy=settings.policy_for(FETCH)
        ),
        embedder=ArticleEmbedder(
            provider,
            max_workers=settings.embed_max_workers,
            failure_policy=settings.policy_for(EMBED)
        ),
        vector_store=vector_store,
        match_threshold=settings.match_threshold,
        match_count=settings.match_count,
        similarity_policy=settings.policy_for(SIMILARITY)
    )
