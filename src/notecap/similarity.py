"""Lexical similarity between notes, used for automatic backlinks."""

import logging

from notecap.store import DocumentStore

logger = logging.getLogger(__name__)

# A stored note is "related" when its score is strictly above this value.
BACKLINK_THRESHOLD = 0.3


def similarity(a: str, b: str) -> float:
    """Jaccard similarity of the lowercase whitespace-split word sets of *a* and *b*.

    Symmetric; 1.0 for identical non-empty texts; 0.0 when both are empty.
    """
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def find_related_notes(
    text: str,
    store: DocumentStore,
    threshold: float = BACKLINK_THRESHOLD,
) -> list[str]:
    """Return the base names of stored notes whose similarity to *text* exceeds *threshold*.

    Order follows the store's own enumeration order.  Store failures propagate.
    """
    related = []
    for document in store.list_documents():
        score = similarity(text, store.read_text(document.id))
        logger.debug("similarity %.3f against %s", score, document.id)
        if score > threshold:
            related.append(document.basename)
    return related
