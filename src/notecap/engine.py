"""Local OCR engine backed by pytesseract.

One :class:`TesseractEngine` is created per process and reused for every
image.  Its lifecycle is an explicit state machine::

    UNINITIALIZED ──initialize()──▶ INITIALIZING ──▶ READY ──terminate()──▶ TERMINATED
                                          │
                                          └── failure ──▶ UNINITIALIZED

Recognition outside ``READY`` raises :class:`EngineNotReadyError`.  A shared
lock makes ``terminate()`` wait for an in-flight ``recognize()``.
"""

import io
import logging
import shlex
import threading
from enum import Enum, IntEnum
from typing import Protocol

import pytesseract
from PIL import Image, UnidentifiedImageError

from notecap.errors import EngineNotReadyError, ValidationError

logger = logging.getLogger(__name__)

# Characters a handwritten note is expected to contain; everything else is
# treated as noise by the engine.
CHAR_WHITELIST = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.,'\"-;:!? "
)


class PageSegMode(IntEnum):
    """The Tesseract ``--psm`` values notecap uses."""

    SINGLE_BLOCK = 6
    SINGLE_LINE = 7
    SPARSE_TEXT = 11


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    TERMINATED = "terminated"


class OcrEngine(Protocol):
    state: EngineState

    def initialize(self, language: str) -> None:
        ...

    def set_parameters(
        self,
        char_whitelist: str,
        page_seg_mode: PageSegMode,
        preserve_interword_spaces: bool,
    ) -> None:
        ...

    def recognize(self, image: bytes) -> str:
        ...

    def terminate(self) -> None:
        ...


class TesseractEngine:
    def __init__(self) -> None:
        self.state = EngineState.UNINITIALIZED
        self.language = ""
        self._config = ""
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.state == EngineState.READY

    def initialize(self, language: str) -> None:
        """Check the tesseract binary and language packs, then become ``READY``.

        Calling it again while ``READY`` switches the language.
        """
        with self._lock:
            if self.state == EngineState.TERMINATED:
                raise EngineNotReadyError("OCR engine has been terminated")
            self.state = EngineState.INITIALIZING
            try:
                version = pytesseract.get_tesseract_version()
                installed = set(pytesseract.get_languages(config=""))
            except pytesseract.TesseractNotFoundError as e:
                self.state = EngineState.UNINITIALIZED
                raise EngineNotReadyError(f"OCR initialization failed: {e}") from e

            missing = [code for code in language.split("+") if code not in installed]
            if missing:
                self.state = EngineState.UNINITIALIZED
                raise EngineNotReadyError(
                    f"OCR initialization failed: language pack(s) not installed: {', '.join(missing)}"
                )

            self.language = language
            self._config = _build_config(CHAR_WHITELIST, PageSegMode.SINGLE_BLOCK, True)
            self.state = EngineState.READY
            logger.info("tesseract %s ready (lang=%s)", version, language)

    def set_parameters(
        self,
        char_whitelist: str,
        page_seg_mode: PageSegMode,
        preserve_interword_spaces: bool,
    ) -> None:
        with self._lock:
            self._require_ready()
            self._config = _build_config(char_whitelist, page_seg_mode, preserve_interword_spaces)

    def recognize(self, image: bytes) -> str:
        with self._lock:
            self._require_ready()
            try:
                with Image.open(io.BytesIO(image)) as img:
                    return pytesseract.image_to_string(img, lang=self.language, config=self._config)
            except UnidentifiedImageError as e:
                raise ValidationError(f"Cannot decode image for OCR: {e}") from e

    def terminate(self) -> None:
        with self._lock:
            self.state = EngineState.TERMINATED
            logger.debug("tesseract engine terminated")

    def _require_ready(self) -> None:
        if self.state != EngineState.READY:
            raise EngineNotReadyError(f"OCR engine is not ready (state: {self.state.value})")


def _build_config(char_whitelist: str, page_seg_mode: PageSegMode, preserve_interword_spaces: bool) -> str:
    # pytesseract shlex-splits the config, so the whitelist (quotes, space) must be quoted.
    whitelist = shlex.quote(f"tessedit_char_whitelist={char_whitelist}")
    spaces = "1" if preserve_interword_spaces else "0"
    return f"--psm {int(page_seg_mode)} -c {whitelist} -c preserve_interword_spaces={spaces}"
