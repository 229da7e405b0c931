"""AI Services Module - completion provider and keyword extraction."""

from .base import (
    StandardRequest,
    StandardResponse,
    AIServiceInterface
)
from .claude_service import ClaudeService
from .keyword_extractor import KeywordExtractor, build_keyword_prompt, format_keywords

__all__ = [
    'StandardRequest',
    'StandardResponse',
    'AIServiceInterface',
    'ClaudeService',
    'KeywordExtractor',
    'build_keyword_prompt',
    'format_keywords'
]
