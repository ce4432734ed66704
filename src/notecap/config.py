"""Configuration loading from environment variables and CLI flags."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class Provider(str, Enum):
    NONE = "none"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULTS = {
    Provider.ANTHROPIC: "claude-sonnet-4-6",
    Provider.OPENAI: "gpt-4o",
}

ENV_KEYS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

MIN_MAX_TOKENS = 100
MAX_MAX_TOKENS = 4000

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Config:
    provider: Provider = Provider.NONE
    model: str = ""
    api_key: str = ""
    language: str = "eng"
    use_vision_for_ocr: bool = False
    enhance_with_llm: bool = False
    tag_suggestions: bool = True
    summarize_content: bool = False
    enable_auto_backlinks: bool = True
    # Declared for parity with the settings screen; nothing filters on it yet.
    minimum_tag_confidence: float = 0.7
    max_tokens: int = 1000
    output_dir: str = "."
    image_dir: str = "attachments"

    def __post_init__(self) -> None:
        if not 0.0 <= self.minimum_tag_confidence <= 1.0:
            raise ValueError(
                f"minimum_tag_confidence must be within [0, 1], got {self.minimum_tag_confidence}"
            )
        if not MIN_MAX_TOKENS <= self.max_tokens <= MAX_MAX_TOKENS:
            raise ValueError(
                f"max_tokens must be within [{MIN_MAX_TOKENS}, {MAX_MAX_TOKENS}], got {self.max_tokens}"
            )

    @property
    def has_llm(self) -> bool:
        return self.provider != Provider.NONE

    @classmethod
    def from_env(
        cls,
        provider: Optional[Provider] = None,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
        **overrides,
    ) -> "Config":
        """Build a config from ``NOTECAP_*`` variables, with keyword overrides winning.

        *overrides* takes any other field name; ``None`` values are ignored so
        unset CLI flags fall through to the environment.
        """
        if provider is None:
            provider = Provider(os.environ.get("NOTECAP_PROVIDER", Provider.NONE.value).strip().lower())

        model = ""
        api_key = ""
        if provider != Provider.NONE:
            model = model_override or os.environ.get("NOTECAP_MODEL") or DEFAULTS[provider]
            api_key = api_key_override or os.environ.get(ENV_KEYS[provider], "")
            if not api_key:
                raise RuntimeError(
                    f"No API key for {provider.value}. "
                    f"Set {ENV_KEYS[provider]} in your environment or .env file."
                )

        values = {
            "language": os.environ.get("NOTECAP_LANGUAGE") or "eng",
            "use_vision_for_ocr": _env_bool("NOTECAP_USE_VISION", False),
            "enhance_with_llm": _env_bool("NOTECAP_ENHANCE", False),
            "tag_suggestions": _env_bool("NOTECAP_TAG_SUGGESTIONS", True),
            "summarize_content": _env_bool("NOTECAP_SUMMARIZE", False),
            "enable_auto_backlinks": _env_bool("NOTECAP_AUTO_BACKLINKS", True),
            "minimum_tag_confidence": _env_number("NOTECAP_MIN_TAG_CONFIDENCE", 0.7, float),
            "max_tokens": _env_number("NOTECAP_MAX_TOKENS", 1000, int),
            "output_dir": os.environ.get("NOTECAP_OUTPUT_DIR") or ".",
            "image_dir": os.environ.get("NOTECAP_IMAGE_DIR") or "attachments",
        }
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"Unknown config field: {key}")
            if value is not None:
                values[key] = value

        return cls(provider=provider, model=model, api_key=api_key, **values)


def vault_path(directory: str, name: str) -> str:
    """Join a configured vault folder and a file name into a store path."""
    folder = Path(directory).as_posix().strip("/")
    if folder in ("", "."):
        return name
    return f"{folder}/{name}"
