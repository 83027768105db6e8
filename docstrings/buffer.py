"""
docstrings/buffer.py

In-memory document: text, cursor and annotation layer without any UI.
"""

from __future__ import annotations

from typing import Optional

from lisp.document import LispDocument
from lisp.fontify import Dialect

from docstrings.annotations import AnnotationLayer


class TextBuffer:
    """A plain editable document implementing ``DocumentHost``.

    Edits go through ``replace`` (or ``insert`` / ``delete``) so the
    annotation layer can follow them.

    Args:
        text: Initial text.
        dialect: Lisp dialect used for fontification.
        cursor: Initial cursor offset.
    """

    def __init__(self, text: str = "", dialect: Dialect = Dialect.EMACS_LISP, cursor: int = 0):
        self._text = text
        self.dialect = dialect
        self.annotations = AnnotationLayer()
        self._snapshot: Optional[LispDocument] = None
        self.cursor = 0
        self.goto(cursor)

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def goto(self, pos: int) -> None:
        self.cursor = max(0, min(pos, len(self._text)))

    def cursor_position(self) -> int:
        return self.cursor

    def refontify(self) -> LispDocument:
        """Snapshot of the current text with faces computed."""
        if self._snapshot is None or self._snapshot.text != self._text:
            self._snapshot = LispDocument(self._text, self.dialect)
        return self._snapshot.ensure_fontified()

    def replace(self, start: int, end: int, new_text: str) -> None:
        """Replace ``text[start:end]`` with ``new_text``."""
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"edit range {start}..{end} outside buffer of length {len(self._text)}")
        self._text = self._text[:start] + new_text + self._text[end:]
        self._snapshot = None
        self.annotations.apply_edit(start, end - start, len(new_text))
        if self.cursor >= end:
            self.cursor += len(new_text) - (end - start)
        elif self.cursor > start:
            self.cursor = start

    def insert(self, pos: int, new_text: str) -> None:
        self.replace(pos, pos, new_text)

    def delete(self, start: int, end: int) -> None:
        self.replace(start, end, "")
