# embeddings/__init__.py
"""
Embeddings package for generating vector embeddings from article text.
"""

from .base import EmbeddingsProvider, EmbeddedArticle
from .registry import build_provider
from .runner import ArticleEmbedder, count_tokens

__all__ = [
    'EmbeddingsProvider',
    'EmbeddedArticle',
    'build_provider',
    'ArticleEmbedder',
    'count_tokens'
]
