"""
Name and token rules.

A name token starts with a letter and continues with letters, marks, numbers
or connector punctuation (such as `_`). An ID token is any non-empty run of
those continuation characters. A name is a name token, an optional plural
marker, and an optional `#` followed by an ID.

Python's `re` module has no Unicode property classes, so the rules are
expressed over `unicodedata.category`.
"""

import unicodedata
from typing import Optional, Tuple

ID_DELIMITER = "#"
SEGMENT_DELIMITER = "-"
NAMESPACE_ALIAS_DELIMITER = "/"
PLURAL_MARKER = "+"


def is_name_token_begin(ch: str) -> bool:
    """Whether the character may start a name token."""
    return unicodedata.category(ch).startswith("L")


def is_name_token_char(ch: str) -> bool:
    """Whether the character may continue a name token."""
    category = unicodedata.category(ch)
    return category[0] in ("L", "M", "N") or category == "Pc"


def is_valid_name_token(text: str) -> bool:
    if not text or not is_name_token_begin(text[0]):
        return False
    return all(is_name_token_char(ch) for ch in text[1:])


def is_valid_id_token(text: str) -> bool:
    return bool(text) and all(is_name_token_char(ch) for ch in text)


def split_name(name: str) -> Tuple[str, Optional[str]]:
    """
    Split a name into its token part (with any plural marker) and its ID.

    Returns:
        Tuple of (token, id); id is None when the name has no ID delimiter
    """
    token, delimiter, suffix = name.partition(ID_DELIMITER)
    return token, (suffix if delimiter else None)


def is_valid_name(name: str) -> bool:
    """Whether the text is a name: token, optional `+`, optional `#id`."""
    token, suffix = split_name(name)
    if token.endswith(PLURAL_MARKER):
        token = token[:-1]
    if not is_valid_name_token(token):
        return False
    return suffix is None or len(suffix) > 0
