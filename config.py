# config.py
"""
Runtime configuration for the news search skill.

Defaults live here as module constants; every value can be overridden
from the environment (or a local .env file) through load_settings().
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from exceptions import ConfigurationError
from stages import DEFAULT_POLICIES, STAGES, FailurePolicy, parse_policy

# Keyword extraction (Claude Messages API)
DEFAULT_KEYWORD_MODEL = "claude-3-haiku-20240307"
DEFAULT_KEYWORD_MAX_TOKENS = 64
DEFAULT_ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_VERSION = "2023-06-01"

# Embedding provider + model defaults
DEFAULT_EMBED_PROVIDER = "openai"
DEFAULT_EMBED_MODEL = "text-embedding-3-small"
DEFAULT_EMBED_MAX_WORKERS = 8

# SBS news search
DEFAULT_NEWS_SEARCH_URL = "https://searchapi.news.sbs.co.kr/search/news"
DEFAULT_NEWS_COLLECTION = "news_sbs"
DEFAULT_NEWS_LINK_TEMPLATE = "https://news.sbs.co.kr/news/endPage.do?news_id={doc_id}"
# Both 20 and 40 have been used in production
DEFAULT_NEWS_FETCH_LIMIT = 20

# Supabase (pgvector)
DEFAULT_EMBEDDINGS_TABLE = "news_embeddings"
DEFAULT_MATCH_FUNCTION = "match_documents"
DEFAULT_MATCH_THRESHOLD = 0.78
DEFAULT_MATCH_COUNT = 5

# Outbound HTTP timeout in seconds
DEFAULT_HTTP_TIMEOUT = 10.0

# Webhook server
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class Settings:
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    keyword_model: str = DEFAULT_KEYWORD_MODEL
    keyword_max_tokens: int = DEFAULT_KEYWORD_MAX_TOKENS
    anthropic_api_url: str = DEFAULT_ANTHROPIC_API_URL
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION

    embed_provider: str = DEFAULT_EMBED_PROVIDER
    embed_model: str = DEFAULT_EMBED_MODEL
    embed_max_workers: int = DEFAULT_EMBED_MAX_WORKERS

    news_search_url: str = DEFAULT_NEWS_SEARCH_URL
    news_collection: str = DEFAULT_NEWS_COLLECTION
    news_link_template: str = DEFAULT_NEWS_LINK_TEMPLATE
    news_fetch_limit: int = DEFAULT_NEWS_FETCH_LIMIT

    embeddings_table: str = DEFAULT_EMBEDDINGS_TABLE
    match_function: str = DEFAULT_MATCH_FUNCTION
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    match_count: int = DEFAULT_MATCH_COUNT

    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    failure_policies: Dict[str, FailurePolicy] = field(
        default_factory=lambda: dict(DEFAULT_POLICIES)
    )

    def policy_for(self, stage: str) -> FailurePolicy:
        return self.failure_policies.get(stage, DEFAULT_POLICIES[stage])

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "Settings":
        """Build settings from environment variables (os.environ by default)."""
        env = os.environ if env is None else env

        policies = dict(DEFAULT_POLICIES)
        for stage in STAGES:
            raw = env.get(f"{stage.upper()}_FAILURE_POLICY")
            if raw:
                try:
                    policies[stage] = parse_policy(raw)
                except ValueError as e:
                    raise ConfigurationError(str(e))

        settings = cls(
            anthropic_api_key=env.get("ANTHROPIC_API_KEY"),
            openai_api_key=env.get("OPENAI_API_KEY"),
            supabase_url=env.get("SUPABASE_URL"),
            supabase_key=env.get("SUPABASE_SERVICE_ROLE_KEY") or env.get("SUPABASE_KEY"),
            keyword_model=env.get("KEYWORD_MODEL", DEFAULT_KEYWORD_MODEL),
            keyword_max_tokens=_int(env, "KEYWORD_MAX_TOKENS", DEFAULT_KEYWORD_MAX_TOKENS),
            anthropic_api_url=env.get("ANTHROPIC_API_URL", DEFAULT_ANTHROPIC_API_URL),
            anthropic_version=env.get("ANTHROPIC_VERSION", DEFAULT_ANTHROPIC_VERSION),
            embed_provider=env.get("EMBED_PROVIDER", DEFAULT_EMBED_PROVIDER),
            embed_model=env.get("EMBED_MODEL", DEFAULT_EMBED_MODEL),
            embed_max_workers=_int(env, "EMBED_MAX_WORKERS", DEFAULT_EMBED_MAX_WORKERS),
            news_search_url=env.get("NEWS_SEARCH_URL", DEFAULT_NEWS_SEARCH_URL),
            news_collection=env.get("NEWS_COLLECTION", DEFAULT_NEWS_COLLECTION),
            news_link_template=env.get("NEWS_LINK_TEMPLATE", DEFAULT_NEWS_LINK_TEMPLATE),
            news_fetch_limit=_int(env, "NEWS_FETCH_LIMIT", DEFAULT_NEWS_FETCH_LIMIT),
            embeddings_table=env.get("EMBEDDINGS_TABLE", DEFAULT_EMBEDDINGS_TABLE),
            match_function=env.get("MATCH_FUNCTION", DEFAULT_MATCH_FUNCTION),
            match_threshold=_float(env, "MATCH_THRESHOLD", DEFAULT_MATCH_THRESHOLD),
            match_count=_int(env, "MATCH_COUNT", DEFAULT_MATCH_COUNT),
            http_timeout=_float(env, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            host=env.get("HOST", DEFAULT_HOST),
            port=_int(env, "PORT", DEFAULT_PORT),
            log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
            failure_policies=policies,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.keyword_max_tokens <= 0:
            raise ConfigurationError("KEYWORD_MAX_TOKENS must be a positive integer")
        if self.embed_max_workers <= 0:
            raise ConfigurationError("EMBED_MAX_WORKERS must be a positive integer")
        if self.news_fetch_limit <= 0:
            raise ConfigurationError("NEWS_FETCH_LIMIT must be a positive integer")
        if self.match_count <= 0:
            raise ConfigurationError("MATCH_COUNT must be a positive integer")
        if not -1.0 <= self.match_threshold <= 1.0:
            raise ConfigurationError("MATCH_THRESHOLD must be between -1 and 1")
        if self.http_timeout <= 0:
            raise ConfigurationError("HTTP_TIMEOUT must be positive")
        if "{doc_id}" not in self.news_link_template:
            raise ConfigurationError("NEWS_LINK_TEMPLATE must contain a {doc_id} placeholder")


def load_settings() -> Settings:
    """Load .env (if present) and build Settings from the environment."""
    load_dotenv()
    return Settings.from_env()


def _int(env, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
