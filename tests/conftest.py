"""Shared fixtures for the test suite.

Images, PDFs and vaults are real files so tests exercise actual code paths.
The OCR engine and LLM provider are in-memory fakes: they are the only
collaborators that would otherwise need a tesseract binary or network access.
"""

import io
from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF
import pytest
from click.testing import CliRunner
from PIL import Image

from notecap.config import Config, Provider
from notecap.engine import EngineState
from notecap.errors import EngineNotReadyError
from notecap.imaging import to_data_url
from notecap.providers.base import BaseProvider
from notecap.store import VaultStore


# ── Fakes ──────────────────────────────────────────────────────────────────


class FakeEngine:
    """OCR engine returning scripted outputs, one per ``recognize`` call.

    An output that is an exception instance is raised instead of returned.
    """

    def __init__(self, outputs: list[Union[str, Exception]], ready: bool = True) -> None:
        self.outputs = list(outputs)
        self.state = EngineState.READY if ready else EngineState.UNINITIALIZED
        self.parameters: list[tuple] = []
        self.images: list[bytes] = []
        self.language: Optional[str] = None

    @classmethod
    def constant(cls, text: str, pages: int = 1) -> "FakeEngine":
        return cls([text] * 3 * pages)

    def initialize(self, language: str) -> None:
        self.language = language
        self.state = EngineState.READY

    def set_parameters(self, char_whitelist, page_seg_mode, preserve_interword_spaces) -> None:
        if self.state != EngineState.READY:
            raise EngineNotReadyError("not ready")
        self.parameters.append((char_whitelist, page_seg_mode, preserve_interword_spaces))

    def recognize(self, image: bytes) -> str:
        if self.state != EngineState.READY:
            raise EngineNotReadyError("not ready")
        self.images.append(image)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output

    def terminate(self) -> None:
        self.state = EngineState.TERMINATED


class FakeProvider(BaseProvider):
    """Provider that replays canned replies and records every request."""

    name = "fake"

    def __init__(self, *replies: Union[str, Exception]) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []

    def complete(self, prompt, *, image_data_url=None, max_tokens=1000) -> str:
        self.calls.append({
            "prompt": prompt,
            "image_data_url": image_data_url,
            "max_tokens": max_tokens,
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_config(**overrides) -> Config:
    values = {"provider": Provider.NONE}
    values.update(overrides)
    if values["provider"] != Provider.NONE:
        values.setdefault("model", "test-model")
        values.setdefault("api_key", "test-key")
    return Config(**values)


# ── CLI runner ─────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's NOTECAP_* / provider settings out of the tests."""
    for name in (
        "NOTECAP_PROVIDER", "NOTECAP_MODEL", "NOTECAP_LANGUAGE", "NOTECAP_USE_VISION",
        "NOTECAP_ENHANCE", "NOTECAP_TAG_SUGGESTIONS", "NOTECAP_SUMMARIZE",
        "NOTECAP_AUTO_BACKLINKS", "NOTECAP_MIN_TAG_CONFIDENCE", "NOTECAP_MAX_TOKENS",
        "NOTECAP_OUTPUT_DIR", "NOTECAP_IMAGE_DIR", "NOTECAP_VAULT",
        "ANTHROPIC_API_KEY", "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


# ── Image fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def png_bytes() -> bytes:
    """A real, valid 10×10 red PNG image as raw bytes."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(255, 255, 255)).save(buf, format="JPEG")
    return buf.getvalue()


@pytest.fixture
def mpo_bytes() -> bytes:
    """A two-frame multi-picture JPEG, the format many phone cameras write."""
    buf = io.BytesIO()
    first = Image.new("RGB", (10, 10), color=(0, 0, 255))
    second = Image.new("RGB", (10, 10), color=(0, 255, 0))
    first.save(buf, format="MPO", save_all=True, append_images=[second])
    return buf.getvalue()


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return to_data_url(png_bytes)


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """The PNG written to a temporary file outside the vault."""
    path = tmp_path / "IMG_0001.png"
    path.write_bytes(png_bytes)
    return path


# ── Vault fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def store(vault_dir: Path) -> VaultStore:
    return VaultStore(vault_dir)


# ── PDF fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def single_page_pdf(tmp_path: Path) -> Path:
    """A real single-page PDF containing a text line."""
    path = tmp_path / "single.pdf"
    doc = fitz.open()
    page = doc.new_page(width=595, height=842)  # A4
    page.insert_text((72, 100), "Hello, OCR world!")
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def multi_page_pdf(tmp_path: Path) -> Path:
    """A real 3-page PDF with distinct text on each page."""
    path = tmp_path / "notebook.pdf"
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 100), f"Page {i + 1} content")
    doc.save(str(path))
    doc.close()
    return path
