"""Tests for the embeddings package (provider factory and article embedder)."""

import threading
import time
from unittest.mock import Mock, patch

import pytest

from conftest import StubEmbeddingsProvider, make_article
from embeddings.base import EmbeddedArticle
from embeddings.openai_embedder import OpenAIConfig, OpenAIProvider
from embeddings.registry import build_provider
from embeddings.runner import ArticleEmbedder, count_tokens
from exceptions import EmbeddingBatchFailure
from stages import FailurePolicy


class TestOpenAIProvider:
    @patch("embeddings.openai_embedder.OpenAIEmbeddings")
    def test_embed_query_delegates(self, mock_embeddings) -> None:
        mock_embeddings.return_value.embed_query.return_value = [0.1, 0.2]

        provider = OpenAIProvider(OpenAIConfig(api_key="sk-test"))

        assert provider.embed_query("뉴스") == [0.1, 0.2]
        mock_embeddings.assert_called_once_with(model="text-embedding-3-small", api_key="sk-test")
        assert provider.dimension == 1536

    def test_missing_key_raises(self, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(EnvironmentError):
            OpenAIProvider(OpenAIConfig())

    def test_unsupported_model_raises(self) -> None:
        with pytest.raises(ValueError):
            OpenAIProvider(OpenAIConfig(model="ada", api_key="sk-test"))

    @patch("embeddings.openai_embedder.OpenAIEmbeddings")
    def test_dimension_override(self, mock_embeddings) -> None:
        provider = OpenAIProvider(OpenAIConfig(api_key="sk-test", dimensions=512))

        assert provider.dimension == 512
        assert mock_embeddings.call_args.kwargs["dimensions"] == 512

    def test_dimension_override_too_large(self) -> None:
        with pytest.raises(ValueError):
            OpenAIProvider(OpenAIConfig(api_key="sk-test", dimensions=4096))


class TestBuildProvider:
    @patch("embeddings.openai_embedder.OpenAIEmbeddings")
    def test_builds_openai(self, mock_embeddings) -> None:
        provider = build_provider("OpenAI", model="text-embedding-3-large", api_key="sk-test")

        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "text-embedding-3-large"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            build_provider("voyage")


class TestArticleEmbedder:
    def test_preserves_order_and_fields(self, stub_provider, articles) -> None:
        embedded = ArticleEmbedder(stub_provider, max_workers=2).embed(articles)

        assert len(embedded) == len(articles)
        for source, result in zip(articles, embedded):
            assert isinstance(result, EmbeddedArticle)
            assert (result.title, result.article, result.date, result.link) == \
                (source.title, source.article, source.date, source.link)
            assert result.embedding == [float(len(source.article)), 0.5, 1.0]

    def test_one_request_per_article(self, stub_provider, articles) -> None:
        ArticleEmbedder(stub_provider).embed(articles)

        assert sorted(stub_provider.calls) == sorted(a.article for a in articles)

    def test_empty_batch(self, stub_provider) -> None:
        assert ArticleEmbedder(stub_provider).embed([]) == []
        assert stub_provider.calls == []

    def test_single_failure_fails_whole_batch(self, articles) -> None:
        provider = StubEmbeddingsProvider(fail_on=articles[1].article)

        with pytest.raises(EmbeddingBatchFailure) as exc_info:
            ArticleEmbedder(provider).embed(articles)
        assert exc_info.value.stage == "embed"

    def test_degrade_policy_returns_empty(self, articles) -> None:
        provider = StubEmbeddingsProvider(fail_on=articles[0].article)
        embedder = ArticleEmbedder(provider, failure_policy=FailurePolicy.DEGRADE)

        assert embedder.embed(articles) == []

    def test_concurrency_is_bounded(self) -> None:
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        class SlowProvider(StubEmbeddingsProvider):
            def embed_query(self, text):
                with lock:
                    state["active"] += 1
                    state["peak"] = max(state["peak"], state["active"])
                time.sleep(0.02)
                with lock:
                    state["active"] -= 1
                return [1.0]

        batch = [make_article(i) for i in range(10)]
        embedded = ArticleEmbedder(SlowProvider(), max_workers=3).embed(batch)

        assert len(embedded) == 10
        assert state["peak"] <= 3

    def test_invalid_worker_count(self, stub_provider) -> None:
        with pytest.raises(ValueError):
            ArticleEmbedder(stub_provider, max_workers=0)

    def test_embed_query(self, stub_provider) -> None:
        assert ArticleEmbedder(stub_provider).embed_query("오늘 뉴스") == [5.0, 0.5, 1.0]

    def test_embed_query_failure_raises(self) -> None:
        provider = StubEmbeddingsProvider(fail_on="오늘 뉴스")

        with pytest.raises(EmbeddingBatchFailure) as exc_info:
            ArticleEmbedder(provider).embed_query("오늘 뉴스")
        assert exc_info.value.stage == "embed"

    def test_embed_query_degrade_returns_none(self) -> None:
        provider = StubEmbeddingsProvider(fail_on="오늘 뉴스")
        embedder = ArticleEmbedder(provider, failure_policy=FailurePolicy.DEGRADE)

        assert embedder.embed_query("오늘 뉴스") is None

    def test_token_count_failure_does_not_fail_batch(self, stub_provider, articles) -> None:
        with patch("embeddings.runner.count_tokens", side_effect=RuntimeError("no encoding")):
            embedded = ArticleEmbedder(stub_provider).embed(articles)

        assert len(embedded) == len(articles)


class TestCountTokens:
    @staticmethod
    def _encoding() -> Mock:
        enc = Mock()
        enc.encode.side_effect = lambda text: text.split()
        return enc

    @patch("embeddings.runner.tiktoken")
    def test_sums_tokens_for_model(self, mock_tiktoken) -> None:
        mock_tiktoken.encoding_for_model.return_value = self._encoding()

        assert count_tokens(["삼성전자 주가 반등", "수출 증가"], "text-embedding-3-small") == 5
        mock_tiktoken.encoding_for_model.assert_called_once_with("text-embedding-3-small")
        mock_tiktoken.get_encoding.assert_not_called()

    @patch("embeddings.runner.tiktoken")
    def test_unknown_model_falls_back_to_cl100k(self, mock_tiktoken) -> None:
        mock_tiktoken.encoding_for_model.side_effect = KeyError("unknown-model")
        mock_tiktoken.get_encoding.return_value = self._encoding()

        assert count_tokens(["하나 둘"], "unknown-model") == 2
        mock_tiktoken.get_encoding.assert_called_once_with("cl100k_base")

    @patch("embeddings.runner.tiktoken")
    def test_empty_texts(self, mock_tiktoken) -> None:
        mock_tiktoken.encoding_for_model.return_value = self._encoding()

        assert count_tokens([], "text-embedding-3-small") == 0
