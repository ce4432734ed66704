"""Lexical tag extraction and tag formatting.

Tags are derived without any NLP model: the normalised OCR text is cut into
candidate words, short and common words are dropped, and a sliding window of
one to three words produces phrase candidates.  Every candidate goes through
:func:`format_tag` so the result is a valid vault tag (``#some-topic``).
"""

import re
from typing import Iterable

MIN_TAG_LENGTH = 4
MAX_PHRASE_WORDS = 3

STOPWORDS = frozenset({
    "about", "after", "again", "all", "also", "and", "any", "are", "because",
    "been", "before", "being", "between", "both", "but", "can", "could",
    "did", "does", "doing", "down", "during", "each", "even", "every", "few",
    "for", "from", "further", "get", "had", "has", "have", "having", "her",
    "here", "him", "his", "how", "into", "its", "just", "know", "like",
    "make", "many", "more", "most", "much", "must", "not", "now", "one",
    "only", "other", "our", "out", "over", "own", "said", "same", "say",
    "she", "should", "some", "such", "take", "than", "that", "the", "their",
    "them", "then", "there", "these", "they", "this", "those", "through",
    "time", "under", "until", "very", "was", "were", "what", "when", "where",
    "which", "while", "who", "whom", "will", "with", "would", "you", "your",
})

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")
_NOT_TAG_CHAR = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-{2,}")


def format_tag(candidate: str) -> str:
    """Normalise *candidate* into tag form.

    ``"Machine  Learning!"`` becomes ``"machine-learning"``.  The result may be
    empty or shorter than :data:`MIN_TAG_LENGTH`; callers decide whether to
    keep it.
    """
    tag = _WHITESPACE.sub("-", candidate.strip().lower())
    tag = _NOT_TAG_CHAR.sub("", tag)
    tag = _HYPHEN_RUN.sub("-", tag)
    return tag.strip("-")


def format_tags(candidates: Iterable[str]) -> list[str]:
    """Format every candidate, dropping short ones and duplicates.

    First-seen order is kept so the rendered ``## Tags`` line is stable.
    """
    seen: dict[str, None] = {}
    for candidate in candidates:
        tag = format_tag(candidate)
        if len(tag) >= MIN_TAG_LENGTH:
            seen.setdefault(tag, None)
    return list(seen)


def candidate_words(text: str) -> list[str]:
    """Lowercase alphanumeric tokens longer than three characters."""
    words = (_NON_ALNUM.sub("", token) for token in text.lower().split())
    return [word for word in words if len(word) >= MIN_TAG_LENGTH]


def extract_tags(text: str) -> list[str]:
    """Derive tags from *text* with frequency-free n-gram heuristics.

    Produces, for every position in the candidate-word sequence, the word
    itself plus the two- and three-word phrases starting there.  Single-word
    stopwords are discarded; phrases may contain them.  Every non-stopword
    word is also a tag in its own right.  Never raises; empty text yields an
    empty list.
    """
    words = candidate_words(text)
    tags: dict[str, None] = {}

    for i in range(len(words)):
        for size in range(1, MAX_PHRASE_WORDS + 1):
            if i + size > len(words):
                break
            phrase = " ".join(words[i:i + size])
            tag = format_tag(phrase)
            if len(tag) < MIN_TAG_LENGTH:
                continue
            if size == 1 and tag in STOPWORDS:
                continue
            tags.setdefault(tag, None)

    for word in words:
        if word not in STOPWORDS:
            tags.setdefault(word, None)

    return list(tags)
