# ingest/news_fetcher.py
"""
SBS news search client.

Queries the SBS search API with the extracted keywords and turns each raw
hit into a cleaned Article. Untitled hits are dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from config import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_NEWS_COLLECTION,
    DEFAULT_NEWS_FETCH_LIMIT,
    DEFAULT_NEWS_LINK_TEMPLATE,
    DEFAULT_NEWS_SEARCH_URL,
)
from exceptions import AIInvalidResponse, ProviderUnavailable
from stages import DEFAULT_POLICIES, FETCH, FailurePolicy, run_stage
from .models import Article
from .text_utils import clean_text

logger = logging.getLogger(__name__)


def build_article(raw: Dict[str, Any], link_template: str = DEFAULT_NEWS_LINK_TEMPLATE) -> Article:
    """Map one raw search hit (TITLE, REDUCE_CONTENTS, DATE, DOCID) to an Article."""
    return Article(
        title=clean_text(raw.get("TITLE")),
        article=clean_text(raw.get("REDUCE_CONTENTS")),
        date=clean_text(raw.get("DATE")),
        link=link_template.format(doc_id=raw.get("DOCID") or ""),
    )


class NewsFetcher:
    """Fetches and normalizes articles from the SBS news search API."""

    def __init__(
        self,
        search_url: str = DEFAULT_NEWS_SEARCH_URL,
        collection: str = DEFAULT_NEWS_COLLECTION,
        link_template: str = DEFAULT_NEWS_LINK_TEMPLATE,
        default_limit: int = DEFAULT_NEWS_FETCH_LIMIT,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
        failure_policy: FailurePolicy = DEFAULT_POLICIES[FETCH]
    ):
        self.search_url = search_url
        self.collection = collection
        self.link_template = link_template
        self.default_limit = default_limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self.failure_policy = failure_policy

    def fetch(self, query: str, limit: Optional[int] = None) -> List[Article]:
        """
        Search news for ``query`` and return titled, cleaned articles.

        Under the default DEGRADE policy a transport failure is logged and
        an empty list is returned.
        """
        articles = run_stage(
            FETCH,
            self.failure_policy,
            self._fetch,
            query,
            self.default_limit if limit is None else limit,
            fallback=[]
        )
        logger.info(f"Fetched news data: {len(articles)} items")
        return articles

    def _fetch(self, query: str, limit: int) -> List[Article]:
        params = {
            "query": query,
            "collection": self.collection,
            "offset": 0,
            "limit": limit,
        }
        logger.info(f"🔍 Searching news: query={query!r}, limit={limit}")

        try:
            response = self.session.get(self.search_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except ValueError as e:
            raise AIInvalidResponse(f"News search returned non-JSON body: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderUnavailable(f"News search failed: {e}") from e

        raw_articles = (payload or {}).get(self.collection) or []
        articles = [build_article(raw, self.link_template) for raw in raw_articles]
        return [a for a in articles if a.title]
