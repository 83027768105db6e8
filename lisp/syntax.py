"""
lisp/syntax.py

Lexical scanner and paren structure index for Lisp-family source text.

Only what docstring detection needs is modelled: string literals, comments,
character literals and balanced delimiters.  There is no reader here; atoms
are opaque runs of symbol constituents.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


OPEN_DELIMS = "([{"
CLOSE_DELIMS = ")]}"

# Characters that end an atom
_ATOM_TERMINATORS = set(OPEN_DELIMS + CLOSE_DELIMS + "\";'`,") | set(" \t\r\n\f\v")


class MalformedFormError(ValueError):
    """Structural navigation failed (unbalanced or non-existent form)."""


class TokenKind(Enum):
    OPEN = "open"
    CLOSE = "close"
    STRING = "string"
    COMMENT = "comment"
    CHAR = "char"
    PREFIX = "prefix"
    ATOM = "atom"


@dataclass(frozen=True)
class Token:
    """A lexical token covering ``text[start:end]``."""
    kind: TokenKind
    start: int
    end: int


def _scan_string(text: str, i: int) -> int:
    """Return the offset just past the string literal opening at ``i``."""
    n = len(text)
    j = i + 1
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == '"':
            return j + 1
        j += 1
    return n


def _scan_atom(text: str, j: int) -> int:
    """Consume symbol constituents from ``j``; backslash escapes one char."""
    n = len(text)
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch in _ATOM_TERMINATORS:
            break
        j += 1
    return min(j, n)


def _at_token_start(text: str, i: int) -> bool:
    return i == 0 or text[i - 1] in _ATOM_TERMINATORS


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into tokens.  Whitespace is dropped.

    Args:
        text: Lisp source.

    Returns:
        Tokens in document order.  Unterminated strings and block
        comments run to the end of the text.
    """
    tokens: List[Token] = []
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]

        if ch in " \t\r\n\f\v":
            i += 1
            continue

        if ch == ";":
            j = text.find("\n", i)
            j = n if j < 0 else j
            tokens.append(Token(TokenKind.COMMENT, i, j))
            i = j
            continue

        if ch == '"':
            j = _scan_string(text, i)
            tokens.append(Token(TokenKind.STRING, i, j))
            i = j
            continue

        if ch in OPEN_DELIMS:
            tokens.append(Token(TokenKind.OPEN, i, i + 1))
            i += 1
            continue

        if ch in CLOSE_DELIMS:
            tokens.append(Token(TokenKind.CLOSE, i, i + 1))
            i += 1
            continue

        if ch == "#" and i + 1 < n:
            nxt = text[i + 1]
            if nxt == "|":
                j = text.find("|#", i + 2)
                j = n if j < 0 else j + 2
                tokens.append(Token(TokenKind.COMMENT, i, j))
                i = j
                continue
            if nxt == "\\":
                # #\( #\" #\space
                j = _scan_atom(text, min(i + 3, n))
                tokens.append(Token(TokenKind.CHAR, i, j))
                i = j
                continue
            if nxt == "'":
                tokens.append(Token(TokenKind.PREFIX, i, i + 2))
                i += 2
                continue
            if nxt in OPEN_DELIMS or nxt == '"':
                tokens.append(Token(TokenKind.PREFIX, i, i + 1))
                i += 1
                continue

        if ch in "'`":
            tokens.append(Token(TokenKind.PREFIX, i, i + 1))
            i += 1
            continue

        if ch == ",":
            j = i + 2 if i + 1 < n and text[i + 1] == "@" else i + 1
            tokens.append(Token(TokenKind.PREFIX, i, j))
            i = j
            continue

        if ch == "?" and _at_token_start(text, i) and i + 1 < n:
            # Emacs Lisp character literal: ?a ?\( ?\"
            j = i + 3 if text[i + 1] == "\\" else i + 2
            j = min(j, n)
            tokens.append(Token(TokenKind.CHAR, i, j))
            i = j
            continue

        if ch == "\\" and _at_token_start(text, i):
            # Clojure character literal: \( \newline
            j = _scan_atom(text, min(i + 2, n))
            tokens.append(Token(TokenKind.CHAR, i, j))
            i = j
            continue

        j = _scan_atom(text, i)
        if j == i:
            j = i + 1
        tokens.append(Token(TokenKind.ATOM, i, j))
        i = j

    return tokens


class SyntaxIndex:
    """Paren structure of a text: depth queries and form navigation.

    Built once from the token stream; all queries are read-only.
    """

    def __init__(self, text: str, tokens: Optional[List[Token]] = None):
        self.text = text
        self.tokens = tokens if tokens is not None else tokenize(text)

        # open offset -> close offset (None when never closed)
        self._pairs: Dict[int, Optional[int]] = {}
        # (open offset, close offset or None) for forms at depth zero
        self._top_level: List[Tuple[int, Optional[int]]] = []
        self._top_starts: List[int] = []

        n = len(text)
        delta = [0] * (n + 2)
        stack: List[int] = []
        for tok in self.tokens:
            if tok.kind is TokenKind.OPEN:
                stack.append(tok.start)
                delta[tok.start + 1] += 1
            elif tok.kind is TokenKind.CLOSE:
                if not stack:
                    continue  # stray closer
                open_pos = stack.pop()
                self._pairs[open_pos] = tok.start
                delta[tok.start + 1] -= 1
                if not stack:
                    self._top_level.append((open_pos, tok.start))
        for open_pos in stack:
            self._pairs[open_pos] = None
        if stack:
            self._top_level.append((stack[0], None))
        self._top_level.sort()
        self._top_starts = [s for s, _ in self._top_level]

        depth = [0] * (n + 1)
        running = 0
        for pos in range(n + 1):
            running += delta[pos]
            depth[pos] = running
        self._depth = depth

    def depth_at(self, pos: int) -> int:
        """Nesting depth of the position just before ``text[pos]``."""
        if pos <= 0:
            return 0
        pos = min(pos, len(self.text))
        return self._depth[pos]

    def is_open_delimiter(self, pos: int) -> bool:
        return pos in self._pairs

    def form_end(self, start: int) -> int:
        """Offset just past the form opening at ``start``.

        Raises:
            MalformedFormError: ``start`` is not a real opening delimiter
                or the form is never closed.
        """
        if start not in self._pairs:
            raise MalformedFormError(f"no form opens at offset {start}")
        close = self._pairs[start]
        if close is None:
            raise MalformedFormError(f"form at offset {start} is not closed")
        return close + 1

    def top_level_form(self, pos: int) -> Optional[Tuple[int, int]]:
        """Bounds ``(start, end)`` of the depth-zero form enclosing ``pos``.

        Returns None when ``pos`` is not inside any form.

        Raises:
            MalformedFormError: the enclosing form is never closed.
        """
        if self.depth_at(pos) == 0:
            return None
        idx = bisect_right(self._top_starts, pos - 1) - 1
        if idx < 0:
            return None
        start, close = self._top_level[idx]
        if close is None:
            raise MalformedFormError(f"form at offset {start} is not closed")
        return start, close + 1
