"""
News ingestion package: search the SBS news API and normalize hits.
"""

from .models import Article
from .text_utils import clean_text
from .news_fetcher import NewsFetcher, build_article

__all__ = ['Article', 'clean_text', 'NewsFetcher', 'build_article']
