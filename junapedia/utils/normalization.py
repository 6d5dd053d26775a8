"""
Centralized normalization utilities for merchant names and addresses.

Two grades of normalization are used by the pipeline:

- ``normalize_text``: loose comparison form (no accents, no punctuation,
  single spaces, lowercase). Used for search and name comparisons.
- ``normalize_for_key``: grouping-key form. Drops branch qualifiers such as
  "local" or "sucursal" and strips a trailing "s" from longer words, so
  "Tiendas Achoclonados" and "achoclonado" land on the same key. The
  singularization is naive and will merge a few unrelated words ("paris" and
  "pari"); the tests pin that behaviour.
"""

import re
import unicodedata
from typing import Optional

KEY_STOPWORDS = frozenset({'local', 'sucursal', 'tienda', 'store', 'branch', 'oficina', 'centro'})

# Words of this length or shorter keep their trailing "s" ("bus", "gas")
SINGULAR_MIN_LENGTH = 3


def normalize_text(value: Optional[str]) -> str:
    """
    Loose normalization for comparisons.

    Transformation pipeline:
    1. Lowercase
    2. Unicode-decompose (NFD) and drop nonspacing marks (accents)
    3. Replace anything that is not a letter, number or space with a space
    4. Collapse whitespace and trim
    """
    if not value:
        return ""

    text = unicodedata.normalize('NFD', str(value).lower())
    chars = []
    for ch in text:
        category = unicodedata.category(ch)
        if category == 'Mn':
            continue
        if category[0] in ('L', 'N') or ch.isspace():
            chars.append(ch)
        else:
            chars.append(' ')
    return ' '.join(''.join(chars).split())


def _singular(word: str) -> str:
    if len(word) > SINGULAR_MIN_LENGTH and word.endswith('s'):
        return word[:-1]
    return word


def normalize_for_key(value: Optional[str]) -> str:
    """
    Key-grade normalization used to derive grouping keys.

    Stopwords are dropped both in their written and their singularized form,
    so "Tiendas KFC" and "Tienda KFC" both reduce to "kfc".
    """
    text = normalize_text(value)
    if not text:
        return ""

    words = []
    for word in text.split(' '):
        if word in KEY_STOPWORDS:
            continue
        singular = _singular(word)
        if singular in KEY_STOPWORDS:
            continue
        words.append(singular)
    return ' '.join(words)


def compact(value: Optional[str]) -> str:
    """Removes all whitespace, for comparing concatenated spellings ("burgerking")."""
    if not value:
        return ""
    return re.sub(r'\s+', '', value).lower()


def token_form(token: str) -> str:
    """Key form of a franchise token; tokens use hyphens as word separators."""
    return normalize_for_key((token or '').replace('-', ' '))


def title_case(value: str) -> str:
    return ' '.join(w[0].upper() + w[1:].lower() for w in value.split(' ') if w)
