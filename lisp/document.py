"""
lisp/document.py

Immutable, fontified snapshot of a Lisp document.
"""

from __future__ import annotations

from functools import cached_property
from typing import List, Optional, Tuple

from lisp.fontify import Dialect, Face, FaceMap, fontify
from lisp.syntax import SyntaxIndex, Token, tokenize


class LispDocument:
    """A text snapshot plus the metadata docstring detection reads.

    The snapshot never changes: offsets computed against one instance stay
    valid for that instance only.  Faces and paren structure are computed
    lazily, once.

    Args:
        text: Document text.
        dialect: Lisp dialect used for fontification.
    """

    def __init__(self, text: str, dialect: Dialect = Dialect.EMACS_LISP):
        self.text = text
        self.dialect = dialect

    def __len__(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return f"LispDocument(len={len(self.text)}, dialect={self.dialect.value})"

    @cached_property
    def tokens(self) -> List[Token]:
        return tokenize(self.text)

    @cached_property
    def syntax(self) -> SyntaxIndex:
        return SyntaxIndex(self.text, self.tokens)

    @cached_property
    def faces(self) -> FaceMap:
        return fontify(self.text, self.dialect, self.tokens)

    @property
    def is_fontified(self) -> bool:
        return "faces" in self.__dict__

    def ensure_fontified(self) -> "LispDocument":
        """Compute faces for the whole document now; returns ``self``."""
        self.faces
        return self

    # -- raw text ---------------------------------------------------------

    def char_at(self, pos: int) -> str:
        if 0 <= pos < len(self.text):
            return self.text[pos]
        return ""

    def substring(self, start: int, end: int) -> str:
        return self.text[max(start, 0):max(end, 0)]

    def line_start(self, pos: int) -> int:
        return self.text.rfind("\n", 0, max(pos, 0)) + 1

    def next_line_start(self, pos: int) -> int:
        """Offset of the line after the one containing ``pos`` (or the end)."""
        nl = self.text.find("\n", max(pos, 0))
        return len(self.text) if nl < 0 else nl + 1

    def is_line_start(self, pos: int) -> bool:
        return pos == 0 or (0 < pos <= len(self.text) and self.text[pos - 1] == "\n")

    # -- metadata ---------------------------------------------------------

    def face_at(self, pos: int) -> Face:
        return self.faces.face_at(pos)

    def depth_at(self, pos: int) -> int:
        return self.syntax.depth_at(pos)

    def top_level_form(self, pos: int) -> Optional[Tuple[int, int]]:
        return self.syntax.top_level_form(pos)

    def form_end(self, start: int) -> int:
        return self.syntax.form_end(start)

    def next_column_zero_form(self, pos: int = 0) -> Optional[int]:
        """Offset of the first ``(`` in column zero at or after ``pos``."""
        text = self.text
        if self.is_line_start(pos) and text.startswith("(", pos):
            return pos
        i = text.find("\n(", max(pos, 0))
        return None if i < 0 else i + 1
