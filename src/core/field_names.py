"""Canonical field naming.

Every field name that crosses a boundary (CSV header, record attribute,
store item attribute) goes through ``canonical_field_name``.
"""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def canonical_field_name(raw_name: str) -> str:
    """Normalize a header or attribute name.

    ``"Food Name"``, ``" food  name "`` and ``"food_name"`` all map to
    ``"food_name"``. Applying the function twice gives the same result.

    Args:
        raw_name: Header text as it appeared in the source.

    Returns:
        Lowercase name with whitespace runs replaced by one underscore.
    """
    return _WHITESPACE_RUN.sub("_", raw_name.strip().lower())
