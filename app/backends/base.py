"""Base backend interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class LlmResponse:
    """Raw response from a text-generation backend."""

    text: str
    model: str
    tokens: int = 0
    finish_reason: str | None = None


class BackendInvoker(ABC):
    """Sends one prompt to one model.

    Implementations raise ``BackendInvocationError`` for every failure
    (network, timeout, unknown model, quota) and never retry on their own.
    """

    @abstractmethod
    async def invoke(self, model: str, prompt: str) -> LlmResponse:
        """Generate a completion for *prompt* with *model*."""
        ...
