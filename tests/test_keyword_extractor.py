"""Tests for ai_services.keyword_extractor."""

from unittest.mock import Mock

import pytest

from ai_services.base import StandardResponse
from ai_services.keyword_extractor import (
    KeywordExtractor,
    build_keyword_prompt,
    format_keywords,
)
from exceptions import NewsSkillException, ProviderUnavailable
from stages import FailurePolicy


def _response(content: str) -> StandardResponse:
    return StandardResponse(
        content=content,
        provider="claude",
        model="claude-3-haiku-20240307",
    )


class TestFormatKeywords:
    def test_strips_commas(self) -> None:
        assert format_keywords("삼성, 전자") == "삼성 전자"

    def test_trims_surrounding_whitespace(self) -> None:
        assert format_keywords("   single   ") == "single"

    def test_keeps_at_most_two_tokens(self) -> None:
        assert format_keywords("하나 둘 셋 넷") == "하나 둘"

    def test_collapses_inner_whitespace_and_newlines(self) -> None:
        assert format_keywords("윤석열\n\t  대통령") == "윤석열 대통령"

    def test_empty_and_none(self) -> None:
        assert format_keywords("") == ""
        assert format_keywords(None) == ""
        assert format_keywords(" , , ") == ""

    @pytest.mark.parametrize("raw", ["a,b,c d e", "  x  ,  y  ", "삼성전자", "1, 2, 3"])
    def test_never_more_than_two_tokens(self, raw: str) -> None:
        result = format_keywords(raw)
        assert len(result.split()) <= 2
        assert "," not in result
        assert result == result.strip()


class TestBuildKeywordPrompt:
    def test_embeds_utterance_verbatim(self) -> None:
        prompt = build_keyword_prompt("오늘 삼성전자 주가 어때")
        assert "사용자 질문: 오늘 삼성전자 주가 어때" in prompt

    def test_braces_in_utterance_are_kept(self) -> None:
        assert "{x}" in build_keyword_prompt("{x} 뉴스")

    def test_describes_output_format(self) -> None:
        assert '"키워드1 키워드2"' in build_keyword_prompt("질문")


class TestKeywordExtractor:
    def test_returns_formatted_keywords(self) -> None:
        service = Mock()
        service.generate_text.return_value = _response("삼성전자, 주가, 실적")

        extractor = KeywordExtractor(service)

        assert extractor.extract("오늘 삼성전자 주가 어때") == "삼성전자 주가"

    def test_sends_deterministic_request(self) -> None:
        service = Mock()
        service.generate_text.return_value = _response("삼성전자")

        KeywordExtractor(service, model="claude-x", max_tokens=32).extract("질문")

        request = service.generate_text.call_args.args[0]
        assert request.parameters == {"temperature": 0, "max_tokens": 32, "model": "claude-x"}
        assert "사용자 질문: 질문" in request.prompt

    def test_provider_failure_degrades_to_empty(self) -> None:
        service = Mock()
        service.generate_text.side_effect = ProviderUnavailable("down")

        assert KeywordExtractor(service).extract("질문") == ""

    def test_unexpected_failure_degrades_to_empty(self) -> None:
        service = Mock()
        service.generate_text.side_effect = RuntimeError("boom")

        assert KeywordExtractor(service).extract("질문") == ""

    def test_abort_policy_raises(self) -> None:
        service = Mock()
        service.generate_text.side_effect = RuntimeError("boom")
        extractor = KeywordExtractor(service, failure_policy=FailurePolicy.ABORT)

        with pytest.raises(NewsSkillException) as exc_info:
            extractor.extract("질문")
        assert exc_info.value.stage == "keywords"
