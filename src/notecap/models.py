"""Value objects passed between the pipeline stages."""

import re
from dataclasses import dataclass
from typing import Optional

# A "blank line" may carry stray spaces left over from OCR.
_BLANK_LINES = re.compile(r"\n[ \t]*\n\s*")


@dataclass(frozen=True)
class RecognitionResult:
    """What a recognition strategy recovered from one image.

    ``tags`` are raw suggestions (not yet in tag form); an empty tuple means
    the strategy had none and the caller may derive its own.
    """

    text: str
    tags: tuple[str, ...] = ()
    summary: Optional[str] = None
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class NoteContent:
    """The assembled note, rendered once and handed to the store."""

    title: str
    body: str
    tags: tuple[str, ...] = ()
    summary: Optional[str] = None
    related: tuple[str, ...] = ()
    image_path: Optional[str] = None

    def paragraphs(self) -> list[str]:
        """Body split on blank-line runs, each paragraph trimmed."""
        blocks = [block.strip() for block in _BLANK_LINES.split(self.body)]
        return [block for block in blocks if block]

    def render(self) -> str:
        sections = [f"# {self.title}", "\n\n".join(self.paragraphs())]

        if self.summary:
            sections.append(f"## Summary\n{self.summary.strip()}")

        if self.tags:
            sections.append("## Tags\n" + " ".join(f"#{tag}" for tag in self.tags))

        if self.related:
            sections.append("## Related Notes\n" + "\n".join(f"[[{name}]]" for name in self.related))

        if self.image_path:
            sections.append(f"![[{self.image_path}]]")

        return "\n\n".join(sections) + "\n"
