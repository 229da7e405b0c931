# stages.py
"""
Per-stage failure handling for the news search pipeline.

Each pipeline stage runs under a named FailurePolicy:
- DEGRADE: log the failure and hand back a neutral fallback value
- ABORT: log the failure and raise the stage's error class
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Type, TypeVar

from exceptions import NewsSkillException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailurePolicy(Enum):
    """What a stage does when its provider call fails."""
    DEGRADE = "degrade"  # Log and continue with an empty/neutral value
    ABORT = "abort"  # Log and fail the whole request


# Stage names, also used as config keys and log context
KEYWORDS = "keywords"
FETCH = "fetch"
EMBED = "embed"
STORE = "store"
SIMILARITY = "similarity"

STAGES = (KEYWORDS, FETCH, EMBED, STORE, SIMILARITY)

DEFAULT_POLICIES: Dict[str, FailurePolicy] = {
    KEYWORDS: FailurePolicy.DEGRADE,
    FETCH: FailurePolicy.DEGRADE,
    EMBED: FailurePolicy.ABORT,
    STORE: FailurePolicy.ABORT,
    SIMILARITY: FailurePolicy.DEGRADE,
}


def parse_policy(value: str) -> FailurePolicy:
    """Parse 'degrade' / 'abort' (case-insensitive) into a FailurePolicy."""
    try:
        return FailurePolicy((value or "").strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in FailurePolicy)
        raise ValueError(f"Unknown failure policy: {value!r} (expected one of: {valid})")


def run_stage(
    stage: str,
    policy: FailurePolicy,
    func: Callable[..., T],
    *args: Any,
    fallback: Any = None,
    error_cls: Type[NewsSkillException] = NewsSkillException,
    **kwargs: Any
) -> T:
    """
    Run one pipeline stage under its failure policy.

    Args:
        stage: Stage name (for logs and error context)
        policy: DEGRADE or ABORT
        func: The stage callable
        fallback: Value returned when a DEGRADE stage fails
        error_cls: Exception class raised when an ABORT stage fails

    Returns:
        The stage result, or ``fallback`` for a failed DEGRADE stage

    Raises:
        error_cls: If the stage fails under ABORT
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if policy is FailurePolicy.DEGRADE:
            logger.warning(f"⚠️  Stage '{stage}' failed, continuing with fallback: {e}",
                           exc_info=True)
            return fallback

        logger.error(f"❌ Stage '{stage}' failed: {e}")
        if isinstance(e, error_cls):
            if e.stage is None:
                e.stage = stage
            raise
        raise error_cls(f"{stage} stage failed: {e}", stage=stage) from e
