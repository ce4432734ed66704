"""Anthropic Claude vision provider."""

from typing import Any, Optional

import anthropic

from notecap.errors import ProviderError
from notecap.imaging import split_data_url
from notecap.providers.base import BaseProvider


class AnthropicProvider(BaseProvider):
    name = "anthropic"

    def __init__(self, api_key: str, model: str) -> None:
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def complete(
        self,
        prompt: str,
        *,
        image_data_url: Optional[str] = None,
        max_tokens: int = 1000,
    ) -> str:
        content: list[Any] = [{"type": "text", "text": prompt}]

        if image_data_url is not None:
            media_type, b64 = split_data_url(image_data_url)
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": b64,
                },
            })

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIStatusError as e:
            raise ProviderError(f"Claude API error: {e.status_code}", status=e.status_code) from e
        except anthropic.APIError as e:
            raise ProviderError(f"Claude API error: {e}") from e

        for block in response.content or []:
            if getattr(block, "type", None) == "text":
                return block.text
        raise ProviderError("Claude API returned a malformed response: no text block")
