"""Turns one photographed page into a note in the vault.

Pipeline
--------
1. validate the image bytes
2. encode them as a base64 data URL
3. recognise: vision LLM (text + tags + summary in one call), or local OCR
   followed by either the LLM enhancement pass or lexical tag extraction
4. reject empty text
5. derive a title (LLM, falling back to the first words of the text)
6. format tags
7. find related notes (auto-backlinks)
8. store the source image under the image folder
9. render the note and write it to the output folder

Every failure surfaces as :class:`ProcessingError`; the source image is only
touched once everything that can fail before persistence has succeeded.
Title generation is the one step with a silent fallback.
"""

import logging
import re
import threading
from pathlib import PurePosixPath
from typing import Optional

from notecap.config import Config, vault_path
from notecap.engine import OcrEngine
from notecap.errors import NotecapError, ProcessingError, ProviderError, ValidationError
from notecap.imaging import SUFFIX_MEDIA_TYPES, to_data_url
from notecap.models import NoteContent
from notecap.prompt import TITLE_MAX_TOKENS, TITLE_PROMPT
from notecap.providers.base import BaseProvider
from notecap.recognition import build_strategy, enhance_with_llm
from notecap.similarity import find_related_notes
from notecap.store import NOTE_SUFFIX, DocumentStore
from notecap.tagging import extract_tags, format_tags

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Note"
FALLBACK_TITLE_WORDS = 4
FALLBACK_TITLE_LENGTH = 50

# Characters an Obsidian file name may not contain.
_ILLEGAL_NAME_CHARS = re.compile(r'[\\/:*?"<>|#^\[\]]')


def fallback_title(text: str) -> str:
    """First four words of *text*, cut to 50 characters."""
    title = " ".join(text.split()[:FALLBACK_TITLE_WORDS])[:FALLBACK_TITLE_LENGTH].strip()
    return title or UNTITLED


def note_file_name(title: str, default_stem: str) -> str:
    stem = _ILLEGAL_NAME_CHARS.sub("", title)
    stem = " ".join(stem.split()).lstrip(".")
    return f"{stem or default_stem}{NOTE_SUFFIX}"


class NoteSynthesizer:
    def __init__(
        self,
        config: Config,
        store: DocumentStore,
        engine: Optional[OcrEngine] = None,
        provider: Optional[BaseProvider] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.engine = engine
        self.provider = provider if config.has_llm else None
        self._lock = threading.Lock()

    def synthesize(self, image: bytes, source_name: str, source_id: Optional[str] = None) -> str:
        """Create a note from *image* and return the new document's id.

        *source_name* is the image's file name (``"IMG_0042.jpg"``); it names
        the stored copy.  When *source_id* is given the image already lives in
        the store and is moved rather than copied.
        """
        with self._lock:
            logger.debug("processing image %s (%d bytes)", source_name, len(image))
            try:
                return self._synthesize(image, source_name, source_id)
            except ProcessingError as e:
                logger.error("Image processing error: %s", e)
                raise
            except NotecapError as e:
                logger.error("Image processing error: %s", e)
                raise ProcessingError(f"Failed to process image: {e}", cause=e) from e

    def _synthesize(self, image: bytes, source_name: str, source_id: Optional[str]) -> str:
        if not image:
            raise ValidationError("Image file is empty or couldn't be read")

        suffix = PurePosixPath(source_name).suffix.lower()
        data_url = to_data_url(image, SUFFIX_MEDIA_TYPES.get(suffix))

        strategy = build_strategy(self.config, engine=self.engine, provider=self.provider)
        logger.debug("recognising with %s", type(strategy).__name__)
        result = strategy.recognize(image, data_url)
        text = result.text
        tags = list(result.tags)
        summary = result.summary

        if not self.config.use_vision_for_ocr:
            if self.config.enhance_with_llm and self.provider is not None:
                enhanced = enhance_with_llm(text, self.provider)
                text, tags, summary = enhanced.text, list(enhanced.tags), enhanced.summary
            else:
                tags = extract_tags(text)

        if not text.strip():
            raise ValidationError("No text was extracted from the image")
        logger.debug("extracted %d character(s)", len(text))

        title = self.derive_title(text)
        tags = format_tags(tags)

        related: list[str] = []
        if self.config.enable_auto_backlinks:
            related = find_related_notes(text, self.store)

        image_path = self._store_image(image, source_name, source_id)

        content = NoteContent(
            title=title,
            body=text,
            tags=tuple(tags),
            summary=summary if self.config.summarize_content else None,
            related=tuple(related),
            image_path=image_path,
        )

        note_path = vault_path(
            self.config.output_dir,
            note_file_name(title, PurePosixPath(source_name).stem),
        )
        logger.debug("creating note at %s", note_path)
        self.store.create_folder_if_missing(self.config.output_dir)
        self.store.delete_if_exists(note_path)
        return self.store.create_document(note_path, content.render())

    def derive_title(self, text: str) -> str:
        """Ask the provider for a 3-4 word title; without one, use the opening words."""
        if self.provider is None:
            return fallback_title(text)
        try:
            title = self.provider.complete(TITLE_PROMPT + text, max_tokens=TITLE_MAX_TOKENS)
        except ProviderError as e:
            logger.warning("title generation failed, using %r: %s", UNTITLED, e)
            return UNTITLED
        # only the first line; a newline would end the heading early
        lines = title.strip().splitlines()
        return lines[0].strip() if lines else UNTITLED

    def _store_image(self, image: bytes, source_name: str, source_id: Optional[str]) -> str:
        destination = vault_path(self.config.image_dir, PurePosixPath(source_name).name)
        if source_id == destination:
            return destination

        self.store.create_folder_if_missing(self.config.image_dir)
        self.store.delete_if_exists(destination)
        if source_id is not None:
            return self.store.rename_or_move(source_id, destination)
        return self.store.create_binary(destination, image)
