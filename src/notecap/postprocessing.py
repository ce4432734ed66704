"""Clean-up of raw Tesseract output.

Handwriting OCR produces a predictable set of artefacts: stuttered
punctuation, vertical bars read in place of capital I, digits confused with
letters, stray control characters and ragged whitespace.  The passes below
repair these in a fixed order; later passes assume the earlier ones ran.

Pass order
----------
1. ``..`` / ``!!!`` / ``?!``   →  single mark (the last of the run)
2. ``|``                       →  ``I``
3. ``1`` / ``I`` / ``l``       →  ``l``
4. ``0`` / ``O``               →  ``o``
5. drop everything outside printable ASCII (newlines survive this pass)
6. whitespace runs             →  single space
7. trim

Passes 3 and 4 are lossy on purpose: a handwritten "1" and "l" are
indistinguishable to the engine often enough that conflating them gives
better tags and backlinks than trusting the engine's guess.
"""

import re

# ── Patterns ───────────────────────────────────────────────────────────────────

_PUNCTUATION_RUN = re.compile(r"([.,!?;:])+")
_VERTICAL_BAR = re.compile(r"\|")
_ONE_I_L = re.compile(r"[1Il]")
_ZERO_O = re.compile(r"[0O]")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
_WHITESPACE = re.compile(r"\s+")


# ── Public API ─────────────────────────────────────────────────────────────────


def normalize_ocr_text(raw: str) -> str:
    """Run the full clean-up pipeline over *raw* OCR output.

    The function is pure and idempotent: ``normalize_ocr_text`` applied to its
    own output returns the same string.
    """
    text = _PUNCTUATION_RUN.sub(r"\1", raw)
    text = _VERTICAL_BAR.sub("I", text)
    text = _ONE_I_L.sub("l", text)
    text = _ZERO_O.sub("o", text)
    text = _NON_PRINTABLE.sub("", text)
    # Dropping a control character can leave two marks side by side (".\x07.").
    text = _PUNCTUATION_RUN.sub(r"\1", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()
