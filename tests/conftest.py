"""Shared fixtures: stub collaborators so no test touches the network."""

from typing import List
from unittest.mock import patch

import pytest

from ingest.models import Article


class StubEmbeddingsProvider:
    """Deterministic embeddings keyed on text length."""

    model = "text-embedding-3-small"
    dimension = 3

    def __init__(self, fail_on: str = None):
        self.fail_on = fail_on
        self.calls: List[str] = []

    def embed_query(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.fail_on is not None and text == self.fail_on:
            raise RuntimeError(f"embedding failed for {text!r}")
        return [float(len(text)), 0.5, 1.0]


def make_article(n: int, body: str = None) -> Article:
    return Article(
        title=f"제목 {n}",
        article=body if body is not None else f"본문 {n}",
        date="2024.05.01",
        link=f"https://news.sbs.co.kr/news/endPage.do?news_id=N{n}",
    )


@pytest.fixture(autouse=True)
def no_token_counting():
    """tiktoken would download encodings; token estimates are log-only."""
    with patch("embeddings.runner.count_tokens", return_value=0):
        yield


@pytest.fixture
def stub_provider():
    return StubEmbeddingsProvider()


@pytest.fixture
def articles():
    return [make_article(1), make_article(2), make_article(3)]
