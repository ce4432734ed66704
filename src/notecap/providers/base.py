"""Abstract base for LLM providers."""

from abc import ABC, abstractmethod
from typing import Optional


class BaseProvider(ABC):
    name: str = ""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        *,
        image_data_url: Optional[str] = None,
        max_tokens: int = 1000,
    ) -> str:
        """Send *prompt* (and optionally one image as a base64 data URL) and return the reply text.

        Implementations raise :class:`notecap.errors.ProviderError` for any
        failed request or unusable response.
        """
        ...
