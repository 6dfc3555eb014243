"""Tokenizer - splits one template line into shorthand tokens."""

from __future__ import annotations

from typing import List, Optional

QUOTE = '"'


def _opening_mark(token: str) -> Optional[str]:
    """Return the mark that closes ``token`` if it opens a joined token."""
    if token.count(QUOTE) == 1:
        return QUOTE
    if token.startswith("[") and not token.endswith("]"):
        return "]"
    return None


def tokenize(line: str) -> List[str]:
    """Split ``line`` on single spaces, keeping quoted and bracketed runs whole.

    A fragment holding a lone double quote, or starting with ``[`` without
    ending with ``]``, starts a joined token which runs until a fragment ending
    with the matching mark. Reaching the end of the line while joining is not
    an error: the collected fragments are emitted as separate tokens.

    Args:
        line: A trimmed template line.

    Returns:
        The tokens in source order.

    Example:
        >>> tokenize('a href="/x y" [disabled] text')
        ['a', 'href="/x y"', '[disabled]', 'text']
    """
    tokens: List[str] = []
    pending: List[str] = []
    close_mark: Optional[str] = None

    for fragment in line.split(" "):
        if close_mark is not None:
            pending.append(fragment)
            if fragment.endswith(close_mark):
                tokens.append(" ".join(pending))
                pending = []
                close_mark = None
            continue

        close_mark = _opening_mark(fragment)
        if close_mark is None:
            tokens.append(fragment)
        else:
            pending = [fragment]

    # Unterminated quote/bracket: keep what we have, unjoined
    tokens.extend(pending)
    return tokens
