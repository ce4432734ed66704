"""Prompts shared by all providers, and the parser for their replies.

The vision prompt asks for a fixed, blank-line separated reply so that a
plain-text response can be split back into its parts without JSON mode::

    TEXT:
    <transcription>

    TAGS:
    <comma-separated tags>

    SUMMARY:
    <brief summary>

``TAGS`` and ``SUMMARY`` are only requested when the matching setting is on.
"""

import re

from notecap.models import RecognitionResult

TEXT_PREFIX = "TEXT:"
TAGS_PREFIX = "TAGS:"
SUMMARY_PREFIX = "SUMMARY:"

# Fixed until providers report something usable.
VISION_CONFIDENCE = 0.9

TITLE_PROMPT = """\
Generate a short title (3-4 words) for the following handwritten note. \
Reply with the title only: no quotes and no punctuation.

"""

TITLE_MAX_TOKENS = 20

_BLANK_LINE = re.compile(r"\n[ \t]*\n")


def build_vision_prompt(tag_suggestions: bool, summarize: bool) -> str:
    """Assemble the transcription prompt for the current settings."""
    prompt = "Please accurately transcribe the handwritten text in this image."

    if tag_suggestions:
        prompt += " Also suggest relevant tags for categorizing this content."

    if summarize:
        prompt += " Additionally, provide a brief summary of the content."

    prompt += f" Format your response as follows:\n\n{TEXT_PREFIX}\n[transcribed text]\n"

    if tag_suggestions:
        prompt += f"\n{TAGS_PREFIX}\n[comma-separated list of relevant tags]\n"

    if summarize:
        prompt += f"\n{SUMMARY_PREFIX}\n[brief summary of the content]\n"

    return prompt


def parse_structured_response(response: str) -> RecognitionResult:
    """Split a provider reply into text, tags and summary.

    Blocks are matched by prefix; the first block for each prefix wins and
    anything unmatched is ignored.  Tags are lowercased and trimmed, empty
    entries dropped.
    """
    text = None
    tags = None
    summary = None

    for block in _BLANK_LINE.split(response.replace("\r\n", "\n")):
        block = block.strip()
        if block.startswith(TEXT_PREFIX) and text is None:
            text = block[len(TEXT_PREFIX):].strip()
        elif block.startswith(TAGS_PREFIX) and tags is None:
            items = block[len(TAGS_PREFIX):].split(",")
            tags = tuple(item.strip().lower() for item in items if item.strip())
        elif block.startswith(SUMMARY_PREFIX) and summary is None:
            summary = block[len(SUMMARY_PREFIX):].strip()

    return RecognitionResult(
        text=text or "",
        tags=tags or (),
        summary=summary or None,
        confidence=VISION_CONFIDENCE,
    )
