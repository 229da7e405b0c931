# embeddings/base.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Protocol

from ingest.models import Article


@dataclass(frozen=True)
class EmbeddedArticle:
    title: str
    article: str
    date: str
    link: str
    embedding: List[float]   # fixed length, set by the embedding model

    @classmethod
    def from_article(cls, article: Article, embedding: List[float]) -> "EmbeddedArticle":
        return cls(
            title=article.title,
            article=article.article,
            date=article.date,
            link=article.link,
            embedding=list(embedding),
        )

    def to_record(self) -> Dict[str, Any]:
        """Row shape of the news_embeddings table."""
        return asdict(self)


class EmbeddingsProvider(Protocol):
    """Minimal provider-agnostic interface."""
    model: str
    dimension: int

    def embed_query(self, text: str) -> List[float]:
        ...
