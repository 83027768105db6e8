"""
editor/highlighter.py

Lisp syntax highlighter for the code editor.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from PyQt6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat

from lisp.fontify import Dialect, Face, FaceMap, fontify
from settings import get_settings


class LispHighlighter(QSyntaxHighlighter):
    """
    Syntax highlighter driven by the whole-document fontifier.

    Faces depend on context outside the current line (a docstring may span
    many lines), so the highlighter keeps one FaceMap for the whole
    document and recomputes it whenever the document revision changes.

    Highlights:
    - Docstrings (amber, italic)
    - Strings (green), comments (gray)
    - Definition keywords (purple, bold) and defined names (blue)
    - Keywords, character literals, `symbol' references
    Ranges returned by ``hidden_ranges`` are drawn collapsed.
    """

    def __init__(self, parent, dialect: Dialect = Dialect.EMACS_LISP):
        super().__init__(parent)

        self.dialect = dialect
        # Callable returning (start, end, reserve_px) for each collapsed range
        self.hidden_ranges: Optional[Callable[[], List[Tuple[int, int, int]]]] = None
        self._faces: Optional[FaceMap] = None
        self._revision = -1

        # Get syntax colors from settings
        syntax = get_settings().settings.editor.syntax

        def fmt(color_hex: str, bold: bool = False, italic: bool = False) -> QTextCharFormat:
            f = QTextCharFormat()
            f.setForeground(QColor(color_hex))
            if bold:
                f.setFontWeight(QFont.Weight.Bold)
            if italic:
                f.setFontItalic(True)
            return f

        self.formats: Dict[Face, QTextCharFormat] = {
            Face.COMMENT: fmt(syntax.comment_color, italic=True),
            Face.STRING: fmt(syntax.string_color),
            Face.DOC: fmt(syntax.doc_color, italic=syntax.doc_italic),
            Face.KEYWORD: fmt(syntax.keyword_color, bold=syntax.keyword_bold),
            Face.FUNCTION_NAME: fmt(syntax.function_color),
            Face.CONSTANT: fmt(syntax.constant_color),
            Face.BUILTIN: fmt(syntax.builtin_color),
            Face.PAREN: fmt(syntax.paren_color),
        }

        collapsed = QTextCharFormat()
        collapsed.setForeground(QColor(0, 0, 0, 0))
        collapsed.setFontPointSize(1)
        collapsed.setFontLetterSpacingType(QFont.SpacingType.AbsoluteSpacing)
        collapsed.setFontLetterSpacing(0)
        self.collapsed_format = collapsed

    def set_dialect(self, dialect: Dialect) -> None:
        if dialect is not self.dialect:
            self.dialect = dialect
            self._revision = -1
            self.rehighlight()

    def invalidate(self) -> None:
        """Forget the cached FaceMap; the next block recomputes it."""
        self._faces = None

    def face_map(self) -> FaceMap:
        """FaceMap of the current document text."""
        doc = self.document()
        if self._faces is None or doc.revision() != self._revision:
            self._faces = fontify(doc.toPlainText(), self.dialect)
            self._revision = doc.revision()
        return self._faces

    def highlightBlock(self, text: str) -> None:
        """Apply faces (and collapsed ranges) to a block of text."""
        block_start = self.currentBlock().position()
        block_end = block_start + len(text)

        for start, end, face in self.face_map().runs(block_start, block_end):
            f = self.formats.get(face)
            if f is not None:
                self.setFormat(start - block_start, end - start, f)

        if self.hidden_ranges is None:
            return
        for start, end, reserve in self.hidden_ranges():
            lo = max(start, block_start)
            hi = min(end, block_end)
            if lo >= hi:
                continue
            self.setFormat(lo - block_start, hi - lo, self.collapsed_format)
            if reserve and hi == end:
                # Leave room after the last hidden char for the marker
                last = QTextCharFormat(self.collapsed_format)
                last.setFontLetterSpacing(reserve)
                self.setFormat(hi - 1 - block_start, 1, last)
