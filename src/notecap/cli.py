"""Main CLI entry point."""

import logging
import sys
from pathlib import Path
from typing import Iterator, Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from notecap.config import Config, Provider
from notecap.engine import TesseractEngine
from notecap.errors import EngineNotReadyError, ProcessingError
from notecap.pdf import pdf_to_images
from notecap.providers.anthropic import AnthropicProvider
from notecap.providers.openai import OpenAIProvider
from notecap.store import VaultStore
from notecap.synthesizer import NoteSynthesizer

console = Console(stderr=True)
load_dotenv()

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".heic", ".webp", ".gif"}


@click.command()
@click.argument(
    "input_paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--vault",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    envvar="NOTECAP_VAULT",
    show_default=True,
    help="Vault directory that receives notes and images.",
)
@click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in Provider], case_sensitive=False),
    default=Provider.NONE.value,
    envvar="NOTECAP_PROVIDER",
    show_default=True,
    help="LLM provider for vision OCR, titles and enhancement.",
)
@click.option(
    "--model", "-m",
    default=None,
    help="Model name override (defaults to best vision model for the provider).",
)
@click.option(
    "--api-key",
    default=None,
    help="API key (overrides environment variable).",
)
@click.option(
    "--language", "-l",
    default="eng",
    envvar="NOTECAP_LANGUAGE",
    show_default=True,
    help="Tesseract language code(s), e.g. eng or eng+deu.",
)
@click.option(
    "--vision/--no-vision",
    default=False,
    envvar="NOTECAP_USE_VISION",
    show_default=True,
    help="Use the LLM's vision capability instead of Tesseract.",
)
@click.option(
    "--enhance/--no-enhance",
    default=False,
    envvar="NOTECAP_ENHANCE",
    show_default=True,
    help="Pass Tesseract output through the LLM.",
)
@click.option(
    "--tags/--no-tags",
    default=True,
    envvar="NOTECAP_TAG_SUGGESTIONS",
    show_default=True,
    help="Ask the vision LLM for tag suggestions.",
)
@click.option(
    "--summary/--no-summary",
    default=False,
    envvar="NOTECAP_SUMMARIZE",
    show_default=True,
    help="Ask the vision LLM for a summary section.",
)
@click.option(
    "--backlinks/--no-backlinks",
    default=True,
    envvar="NOTECAP_AUTO_BACKLINKS",
    show_default=True,
    help="Link the new note to similar existing notes.",
)
@click.option(
    "--max-tokens",
    type=click.IntRange(100, 4000),
    default=1000,
    envvar="NOTECAP_MAX_TOKENS",
    show_default=True,
    help="Maximum tokens for LLM responses.",
)
@click.option(
    "--output-dir",
    default=".",
    envvar="NOTECAP_OUTPUT_DIR",
    show_default=True,
    help="Vault folder for new notes.",
)
@click.option(
    "--image-dir",
    default="attachments",
    envvar="NOTECAP_IMAGE_DIR",
    show_default=True,
    help="Vault folder for source images.",
)
@click.option(
    "--dpi",
    default=150,
    show_default=True,
    help="DPI for PDF rendering.",
)
@click.option(
    "--keep-source/--move-source",
    default=False,
    show_default=True,
    help="Copy images that already live in the vault instead of moving them.",
)
@click.option("--verbose", is_flag=True, help="Log every pipeline step.")
@click.version_option()
def main(
    input_paths, vault, provider, model, api_key, language, vision, enhance, tags,
    summary, backlinks, max_tokens, output_dir, image_dir, dpi, keep_source, verbose,
):
    """Turn photographed handwritten notes into vault notes.

    INPUT_PATH can be a .png, .jpg, .jpeg, .heic, .webp, .gif or .pdf file;
    every PDF page becomes its own note.
    """
    _configure_logging(verbose)

    try:
        config = Config.from_env(
            provider=Provider(provider.lower()),
            model_override=model,
            api_key_override=api_key,
            language=language,
            use_vision_for_ocr=vision,
            enhance_with_llm=enhance,
            tag_suggestions=tags,
            summarize_content=summary,
            enable_auto_backlinks=backlinks,
            max_tokens=max_tokens,
            output_dir=output_dir,
            image_dir=image_dir,
        )
    except (RuntimeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    for path in input_paths:
        suffix = path.suffix.lower()
        if suffix != ".pdf" and suffix not in IMAGE_EXTENSIONS:
            console.print(f"[red]Unsupported file type:[/red] {suffix}")
            sys.exit(1)

    if config.use_vision_for_ocr and not config.has_llm:
        console.print("[red]Error:[/red] Vision OCR requires an LLM provider. Pass --provider.")
        sys.exit(1)

    store = VaultStore(vault)
    provider_obj = _build_provider(config) if config.has_llm else None

    engine: Optional[TesseractEngine] = None
    if not config.use_vision_for_ocr:
        engine = TesseractEngine()
        try:
            with console.status("[cyan]Initializing OCR engine..."):
                engine.initialize(config.language)
        except EngineNotReadyError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        console.print("[dim]OCR engine ready[/dim]")

    synthesizer = NoteSynthesizer(config, store, engine=engine, provider=provider_obj)
    failures = 0

    try:
        for name, image, source_id in _iter_images(input_paths, store, dpi, keep_source):
            try:
                with console.status(f"[cyan]Processing {name}..."):
                    note_id = synthesizer.synthesize(image, name, source_id)
            except ProcessingError as e:
                console.print(f"[red]Failed to process {name}:[/red] {e}")
                failures += 1
                continue
            console.print(f"[green]Created {note_id}[/green]")
    finally:
        if engine is not None:
            engine.terminate()

    if failures:
        sys.exit(1)


def _iter_images(
    paths: tuple[Path, ...],
    store: VaultStore,
    dpi: int,
    keep_source: bool,
) -> Iterator[tuple[str, bytes, Optional[str]]]:
    """Yield ``(name, image_bytes, source_id)`` per page to process.

    ``source_id`` is set only for images inside the vault that should be moved.
    """
    for path in paths:
        if path.suffix.lower() == ".pdf":
            with console.status("[cyan]Converting PDF to images..."):
                pages = pdf_to_images(path, dpi=dpi)
            console.print(f"[dim]{len(pages)} page(s) extracted from {path.name}[/dim]")
            for i, page in enumerate(pages, start=1):
                yield f"{path.stem}-p{i}.png", page, None
            continue

        source_id = None
        if not keep_source and store.contains(path):
            source_id = store.id_for_path(path)
        yield path.name, path.read_bytes(), source_id


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _build_provider(config: Config):
    if config.provider == Provider.ANTHROPIC:
        return AnthropicProvider(api_key=config.api_key, model=config.model)
    elif config.provider == Provider.OPENAI:
        return OpenAIProvider(api_key=config.api_key, model=config.model)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")
