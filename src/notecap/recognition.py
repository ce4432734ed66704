"""Recognition strategies: local multi-pass OCR, or one vision-LLM call.

Both strategies share the :class:`RecognitionStrategy` contract so the
synthesiser never branches on which engine or provider is behind it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from notecap.config import Config
from notecap.engine import CHAR_WHITELIST, OcrEngine, PageSegMode
from notecap.errors import EngineNotReadyError, ProcessingError, ProviderConfigError, ValidationError
from notecap.imaging import VISION_MEDIA_TYPES, split_data_url
from notecap.models import RecognitionResult
from notecap.postprocessing import normalize_ocr_text
from notecap.prompt import VISION_CONFIDENCE, build_vision_prompt, parse_structured_response
from notecap.providers.base import BaseProvider

logger = logging.getLogger(__name__)

# Tried in this order; later modes only win with strictly more words.
PAGE_SEG_MODES = (PageSegMode.SINGLE_BLOCK, PageSegMode.SINGLE_LINE, PageSegMode.SPARSE_TEXT)


class RecognitionStrategy(ABC):
    @abstractmethod
    def recognize(self, image: bytes, data_url: str) -> RecognitionResult:
        """Recover text (and optionally tags / summary) from one image.

        *image* holds the raw bytes, *data_url* the same image in transport
        encoding; each strategy uses whichever form its backend expects.
        """
        ...


class LocalOcrStrategy(RecognitionStrategy):
    """Best-of-three Tesseract passes, one per page-segmentation mode."""

    def __init__(self, engine: OcrEngine) -> None:
        self.engine = engine

    def recognize(self, image: bytes, data_url: str) -> RecognitionResult:
        return RecognitionResult(text=self.recognize_local(image))

    def recognize_local(self, image: bytes) -> str:
        best: Optional[str] = None
        max_words = 0
        last_error: Optional[Exception] = None

        for mode in PAGE_SEG_MODES:
            try:
                self.engine.set_parameters(CHAR_WHITELIST, mode, True)
                text = self.engine.recognize(image).strip()
            except EngineNotReadyError:
                raise
            except Exception as e:
                logger.warning("OCR attempt with PSM %d (%s) failed: %s", mode, mode.name, e)
                last_error = e
                continue

            word_count = len(text.split())
            logger.debug("PSM %d (%s): %d word(s)", mode, mode.name, word_count)
            if best is None or word_count > max_words:
                best = text
                max_words = word_count

        if best is None:
            raise ProcessingError(f"All OCR attempts failed: {last_error}", cause=last_error)
        return normalize_ocr_text(best)


class VisionStrategy(RecognitionStrategy):
    """Single vision-LLM request with a TEXT / TAGS / SUMMARY reply contract."""

    def __init__(self, provider: BaseProvider, config: Config) -> None:
        self.provider = provider
        self.config = config

    def recognize(self, image: bytes, data_url: str) -> RecognitionResult:
        return self.recognize_vision(data_url)

    def recognize_vision(self, data_url: str) -> RecognitionResult:
        media_type, _ = split_data_url(data_url)
        if media_type not in VISION_MEDIA_TYPES:
            raise ValidationError(
                f"{media_type} is not supported for vision recognition; convert the image to JPEG or PNG"
            )
        prompt = build_vision_prompt(
            tag_suggestions=self.config.tag_suggestions,
            summarize=self.config.summarize_content,
        )
        logger.debug("vision request via %s (max_tokens=%d)", self.provider.name, self.config.max_tokens)
        reply = self.provider.complete(
            prompt,
            image_data_url=data_url,
            max_tokens=self.config.max_tokens,
        )
        return parse_structured_response(reply)


def build_strategy(
    config: Config,
    engine: Optional[OcrEngine] = None,
    provider: Optional[BaseProvider] = None,
) -> RecognitionStrategy:
    """Pick the strategy the configuration asks for."""
    if config.use_vision_for_ocr:
        if provider is None or not config.has_llm:
            raise ProviderConfigError("Vision OCR selected but no LLM provider configured")
        return VisionStrategy(provider, config)
    if engine is None:
        raise EngineNotReadyError("OCR engine not initialized")
    return LocalOcrStrategy(engine)


def enhance_with_llm(text: str, provider: BaseProvider) -> RecognitionResult:
    """LLM clean-up of local OCR output.

    Currently a pass-through: the text comes back unchanged with no tags or
    summary.
    """
    logger.debug("enhancement pass via %s is a pass-through", provider.name)
    return RecognitionResult(text=text, confidence=VISION_CONFIDENCE)
