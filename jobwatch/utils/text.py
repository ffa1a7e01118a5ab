"""Text helpers used by adapters, config parsing and the digest."""

import html
import re
from typing import Iterable, List, Optional, Union

_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END = re.compile(r"</(p|div|li|h[1-6])>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")


def clean_html(value: Optional[str]) -> str:
    """Strip tags and entities from provider HTML, keeping paragraph breaks.

    Entities are decoded twice because several boards double-encode their
    content (``&amp;lt;p&amp;gt;``).
    """
    if not value:
        return ""

    text = html.unescape(html.unescape(value))
    text = _BREAK_TAG.sub("\n", text)
    text = _BLOCK_END.sub("\n\n", text)
    text = _ANY_TAG.sub(" ", text)
    text = re.sub(r"[ \t\xa0]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def truncate_text(value: Optional[str], max_length: int) -> str:
    """Cut ``value`` to at most ``max_length`` characters (no ellipsis).

    ``max_length`` <= 0 disables truncation.
    """
    if not value:
        return ""
    if max_length <= 0 or len(value) <= max_length:
        return value
    return value[:max_length]


def split_keywords(value: Union[str, Iterable[str], None]) -> List[str]:
    """Normalise a comma list or an iterable of strings into keywords.

    Entries are trimmed and lower-cased; blanks and repeats are dropped while
    first-seen order is kept.

    Example:
        >>> split_keywords(" Java , c2c,,JAVA")
        ['java', 'c2c']
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value

    keywords: List[str] = []
    for item in items:
        term = str(item).strip().lower()
        if term and term not in keywords:
            keywords.append(term)
    return keywords


def split_csv(value: Union[str, Iterable[str], None]) -> List[str]:
    """Like ``split_keywords`` but preserves case (recipient addresses, ids)."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value

    out: List[str] = []
    for item in items:
        entry = str(item).strip()
        if entry and entry not in out:
            out.append(entry)
    return out
