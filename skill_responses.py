# skill_responses.py
"""Reply envelopes for the Kakao i open builder skill webhook."""

from typing import Any, Dict, Iterable, Optional

SKILL_VERSION = "2.0"

RESULT_HEADER = "관련 뉴스 링크:"
NO_RESULTS_MESSAGE = "관련 뉴스를 찾을 수 없습니다."
ERROR_MESSAGE = "죄송합니다. 뉴스를 검색하는 중 오류가 발생했습니다."
BAD_REQUEST_MESSAGE = "죄송합니다. 요청 형식이 올바르지 않습니다."


def simple_text(text: str) -> Dict[str, Any]:
    """Wrap text in the skill response envelope."""
    return {
        "version": SKILL_VERSION,
        "template": {
            "outputs": [
                {"simpleText": {"text": text}}
            ]
        }
    }


def format_reply(results: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Turn similarity matches into a reply.

    One link per line under a fixed header, in result order; an empty
    or missing result set gives the "no results" message.
    """
    links = [r.get("link") for r in (results or []) if r.get("link")]
    if not links:
        return simple_text(NO_RESULTS_MESSAGE)
    return simple_text(RESULT_HEADER + "\n" + "\n".join(links))


def error_reply(message: str = ERROR_MESSAGE) -> Dict[str, Any]:
    return simple_text(message)
