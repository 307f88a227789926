"""Map canonical catalog titles to upstream search queries."""

from __future__ import annotations

import re

from unidecode import unidecode as _unidecode

# Bracketed qualifiers Kitsu appends ("(TV)", "[2019]") are not part of the
# upstream listing names.
_BRACKETED_RE = re.compile(r"\s*[\(\[][^\)\]]*[\)\]]")

# Anything that is not a word character, whitespace, hyphen or apostrophe.
_PUNCT_RE = re.compile(r"[^\w\s\-']")


def normalize_title(title: str) -> str:
    """Build a search query string from a catalog title.

    1. Drop bracketed qualifiers.
    2. Transliterate Unicode to ASCII (ū→u, é→e, ß→ss).
    3. Punctuation removal (keeps hyphens and apostrophes).
    4. Whitespace normalization.

    Case is preserved. Falls back to the whitespace-collapsed input when
    normalization would leave nothing (e.g. titles written only in
    punctuation).
    """
    text = _BRACKETED_RE.sub(" ", title)
    text = _unidecode(text)
    text = _PUNCT_RE.sub(" ", text)
    query = " ".join(text.split())
    return query or " ".join(title.split())
