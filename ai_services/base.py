"""Base classes and interfaces for AI services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass
class StandardRequest:
    """Standardized completion request (a single user-role prompt)."""
    prompt: str
    parameters: Dict[str, Any] = field(default_factory=lambda: {
        "temperature": 0,
        "max_tokens": 64
    })


@dataclass
class StandardResponse:
    """Standardized completion response."""
    content: str
    provider: str
    model: str


class AIServiceInterface(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    def generate_text(self, request: StandardRequest) -> StandardResponse:
        """Generate text completion."""
        pass
