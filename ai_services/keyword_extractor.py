# ai_services/keyword_extractor.py
"""
Search keyword extraction for SBS news queries.

The user's utterance is wrapped in a fixed Korean instruction prompt and sent
to the completion provider; the raw answer is trimmed to at most two keywords.
"""

import logging

from config import DEFAULT_KEYWORD_MAX_TOKENS
from stages import DEFAULT_POLICIES, KEYWORDS, FailurePolicy, run_stage
from .base import AIServiceInterface, StandardRequest

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 2

KEYWORD_PROMPT_TEMPLATE = """사용자 질문: {utterance}
위 질문을 바탕으로 SBS 뉴스 검색 키워드를 추출하세요:
1. 질문의 핵심 주제와 관련된 키워드 1개 또는 2개만 추출
2. 인명, 지명, 기관명 등 고유명사를 위주로 추출하고, 없을 경우 중요한 일반명사 사용
3. 질문에 실제로 나온 단어로만 키워드 구성
4. 불필요한 조사나 일반적인 단어는 제외
출력 형식: 키워드가 1개면 "키워드1", 2개면 "키워드1 키워드2\""""


def build_keyword_prompt(utterance: str) -> str:
    """Embed the utterance verbatim into the instruction prompt."""
    return KEYWORD_PROMPT_TEMPLATE.format(utterance=utterance)


def format_keywords(text: str) -> str:
    """
    Normalize raw model output into a search keyword string.

    Commas are dropped, whitespace collapsed, and only the first two
    tokens kept, e.g. "삼성, 전자" -> "삼성 전자".
    """
    words = (text or "").replace(",", "").split()
    return " ".join(words[:MAX_KEYWORDS])


class KeywordExtractor:
    """Turns a user utterance into a 0-2 word news search query."""

    def __init__(
        self,
        service: AIServiceInterface,
        model: str = None,
        max_tokens: int = DEFAULT_KEYWORD_MAX_TOKENS,
        failure_policy: FailurePolicy = DEFAULT_POLICIES[KEYWORDS]
    ):
        self.service = service
        self.model = model
        self.max_tokens = max_tokens
        self.failure_policy = failure_policy

    def extract(self, utterance: str) -> str:
        """
        Extract search keywords from an utterance.

        Under the default DEGRADE policy a provider failure is logged and
        an empty keyword string is returned.
        """
        keywords = run_stage(
            KEYWORDS,
            self.failure_policy,
            self._extract,
            utterance,
            fallback=""
        )
        logger.info(f"Extracted keywords: {keywords!r}")
        return keywords

    def _extract(self, utterance: str) -> str:
        parameters = {"temperature": 0, "max_tokens": self.max_tokens}
        if self.model:
            parameters["model"] = self.model

        request = StandardRequest(
            prompt=build_keyword_prompt(utterance),
            parameters=parameters
        )
        response = self.service.generate_text(request)
        return format_keywords(response.content)
