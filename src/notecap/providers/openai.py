"""OpenAI GPT-4o vision provider."""

from typing import Any, Optional

import openai
from openai import OpenAI

from notecap.errors import ProviderError
from notecap.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    name = "openai"

    def __init__(self, api_key: str, model: str) -> None:
        self.client = OpenAI(api_key=api_key)
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
            content.append({
                "type": "image_url",
                "image_url": {
                    "url": image_data_url,
                    "detail": "high",
                },
            })

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except openai.APIStatusError as e:
            raise ProviderError(f"OpenAI API error: {e.status_code}", status=e.status_code) from e
        except openai.APIError as e:
            raise ProviderError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise ProviderError("OpenAI API returned a malformed response: no choices")
        return response.choices[0].message.content or ""
