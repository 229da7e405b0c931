# ai_services/claude_service.py
"""
Claude Service Implementation

Calls the Anthropic Messages API over plain HTTP:
- one user-role message per request
- deterministic sampling and a small output cap by default
- transport errors surface as ProviderUnavailable, bad payloads as AIInvalidResponse
"""

import os
import time
import logging
from typing import Any, Dict, Optional

import requests

from .base import AIServiceInterface, StandardRequest, StandardResponse
from config import (
    DEFAULT_ANTHROPIC_API_URL,
    DEFAULT_ANTHROPIC_VERSION,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_KEYWORD_MAX_TOKENS,
    DEFAULT_KEYWORD_MODEL,
)
from exceptions import AIAuthenticationError, AIInvalidResponse, ProviderUnavailable

logger = logging.getLogger(__name__)


class ClaudeService(AIServiceInterface):
    """Anthropic Messages API client used for keyword extraction."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = DEFAULT_KEYWORD_MODEL,
        api_url: str = DEFAULT_ANTHROPIC_API_URL,
        api_version: str = DEFAULT_ANTHROPIC_VERSION,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Claude service.

        Args:
            api_key: Anthropic API key (defaults to env var)
            default_model: Model id used when the request does not name one
            api_url: Messages endpoint
            api_version: Value of the anthropic-version header
            timeout: Request timeout in seconds
            session: Optional requests session (injected in tests)
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise AIAuthenticationError("Anthropic API key not found in environment")

        self.default_model = default_model
        self.api_url = api_url
        self.api_version = api_version
        self.timeout = timeout
        self.session = session or requests.Session()
        self.provider = "claude"

        logger.info(f"Claude service initialized: model={default_model}")

    def generate_text(self, request: StandardRequest) -> StandardResponse:
        """
        Send a single-message completion request.

        Args:
            request: Standardized request object

        Returns:
            StandardResponse with the first content block's text

        Raises:
            ProviderUnavailable: On transport or HTTP errors
            AIInvalidResponse: If the response body has no text content
        """
        start_time = time.time()
        payload = self._build_payload(request)

        logger.info(f"Claude API call: model={payload['model']}, "
                    f"temp={payload['temperature']}, max_tokens={payload['max_tokens']}")

        try:
            response = self.session.post(
                self.api_url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise AIAuthenticationError(f"Claude API rejected credentials: {e}") from e
            raise ProviderUnavailable(f"Claude API error (status={status}): {e}") from e
        except ValueError as e:
            # requests' JSONDecodeError is also a RequestException
            raise AIInvalidResponse(f"Claude API returned non-JSON body: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderUnavailable(f"Claude API unreachable: {e}") from e

        content = self._extract_text(data)
        usage = data.get("usage") or {}
        logger.info(f"✅ Claude response in {time.time() - start_time:.2f}s "
                    f"(input_tokens={usage.get('input_tokens', 0)}, "
                    f"output_tokens={usage.get('output_tokens', 0)})")

        return StandardResponse(
            content=content,
            provider=self.provider,
            model=data.get("model", payload["model"])
        )

    def _build_payload(self, request: StandardRequest) -> Dict[str, Any]:
        params = request.parameters or {}
        return {
            "model": params.get("model", self.default_model),
            "max_tokens": params.get("max_tokens", DEFAULT_KEYWORD_MAX_TOKENS),
            "temperature": params.get("temperature", 0),
            "messages": [{"role": "user", "content": request.prompt}]
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise AIInvalidResponse(f"Claude response has no text content: {e}") from e
        if not isinstance(text, str):
            raise AIInvalidResponse("Claude response text is not a string")
        return text

    def __repr__(self) -> str:
        return f"ClaudeService(model={self.default_model})"
