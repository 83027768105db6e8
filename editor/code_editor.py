"""
editor/code_editor.py

Lisp code editor with line numbers, a docstring gutter, and reversible
docstring hiding.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import Qt, QSize, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QPainter, QPen, QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit, QWidget

from docstrings.annotations import AnnotationLayer
from docstrings.detector import collect_all_docstring_bounds
from docstrings.engine import DocstringHider, HideConfig
from docstrings.models import DocstringInfo, DocstringSpan, ToggleAllResult, ToggleOutcome
from lisp.document import LispDocument
from lisp.fontify import Dialect
from settings import get_settings
from editor.highlighter import LispHighlighter

log = logging.getLogger(__name__)


def _narrow_edit(old: str, new: str, position: int, removed: int, added: int) -> Tuple[int, int, int]:
    """Shrink a reported edit to the characters that really changed.

    Qt may report a whole block (or the whole document) as replaced when
    only formats changed around the edit.
    """
    start = min(position, len(old), len(new))
    old_end = min(position + removed, len(old))
    new_end = min(position + added, len(new))
    while start < old_end and start < new_end and old[start] == new[start]:
        start += 1
    while old_end > start and new_end > start and old[old_end - 1] == new[new_end - 1]:
        old_end -= 1
        new_end -= 1
    return start, old_end - start, new_end - start


# =============================================================================
# Cached editor settings - initialized once to avoid repeated lookups during paint
# =============================================================================

class _CachedEditorSettings:
    """Cache for editor settings values to avoid repeated lookups during paint."""

    _instance = None

    def __init__(self):
        self._initialized = False
        # Default values (used if settings unavailable)
        self.gutter_width = 14
        self.left_margin = 8
        self.right_margin = 4
        self.font_family = "Consolas"
        self.font_size = 10
        self.tab_width = 2

    def _ensure_initialized(self):
        """Load settings on first access."""
        if self._initialized:
            return
        s = get_settings().settings.editor
        self.gutter_width = s.gutter.width
        self.left_margin = s.line_numbers.left_margin
        self.right_margin = s.line_numbers.right_margin
        self.font_family = s.font.family
        self.font_size = s.font.size
        self.tab_width = s.font.tab_width
        self._initialized = True

    @classmethod
    def get(cls) -> "_CachedEditorSettings":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        cls._instance._ensure_initialized()
        return cls._instance


class LineNumberArea(QWidget):
    """Widget that displays line numbers alongside the code editor."""

    def __init__(self, editor: "LispCodeEditor"):
        super().__init__(editor)
        self.editor = editor

    def sizeHint(self):
        return self.editor.line_number_area_size_hint()

    def paintEvent(self, event):
        self.editor.line_number_area_paint_event(event)


class DocstringGutter(QWidget):
    """Widget that marks lines where a docstring starts; click to toggle it."""

    def __init__(self, editor: "LispCodeEditor"):
        super().__init__(editor)
        self.editor = editor
        self.setMouseTracking(True)
        self._hover_line = -1

    @property
    def gutter_width(self) -> int:
        """Get gutter width from settings. Default: 14 pixels."""
        return _CachedEditorSettings.get().gutter_width

    def sizeHint(self):
        return QSize(self.gutter_width, 0)

    def paintEvent(self, event):
        self.editor.gutter_paint_event(event)

    def mousePressEvent(self, event):
        self.editor.gutter_mouse_press(event)

    def mouseMoveEvent(self, event):
        block = self.editor.block_at_y(event.pos().y())
        line = block.blockNumber() if block is not None else -1
        if line != self._hover_line:
            self._hover_line = line
            self.update()

    def leaveEvent(self, event):
        self._hover_line = -1
        self.update()


class LispCodeEditor(QPlainTextEdit):
    """
    Lisp source editor with:
    - Line numbers
    - A docstring gutter (click a marker to hide/show that docstring)
    - Whole-document and at-point docstring hiding that never edits text

    The editor is the ``DocumentHost`` of its ``DocstringHider``.  Hidden
    docstrings live in ``annotations``; rendering follows the layer:
    lines entirely inside a hidden range become invisible blocks, partial
    lines are drawn collapsed, and the marker is painted where the hidden
    text ends.  A QPlainTextEdit cannot hide a line break, so the rest of
    the last hidden line stays on its own line.
    """

    # Emitted after the whole-document hidden state flips
    hidden_state_changed = pyqtSignal(bool)
    # Emitted when docstring annotations are added or removed
    docstrings_changed = pyqtSignal()

    DEFAULT_GUTTER_COLORS = {
        "background": "#f0f0f0",
        "text": "#a0a0a0",
        "text_active": "#363636",
        "current_line_bg": "#e8e8e8",
        "doc_marker": "#B9770E",
    }

    def __init__(self, parent=None, dialect: Dialect = Dialect.EMACS_LISP, config: Optional[HideConfig] = None):
        super().__init__(parent)

        self.dialect = dialect
        self.annotations = AnnotationLayer()
        self.hider = DocstringHider(self, config)

        self.line_number_area = LineNumberArea(self)
        self.gutter = DocstringGutter(self)

        self._highlighter = LispHighlighter(self.document(), dialect)
        self._highlighter.hidden_ranges = self._collapsed_ranges

        # Docstring spans of the current text, for the gutter
        self._spans: List[DocstringSpan] = []
        self._span_lines: Dict[int, DocstringSpan] = {}

        self._gutter_colors = dict(self.DEFAULT_GUTTER_COLORS)
        self._marker_color = QColor("#9a9a9a")
        self._last_revision = self.document().revision()
        self._last_text = ""
        self._refresh_pending = False
        self._refreshed_revision = -1

        self.blockCountChanged.connect(self._update_margins)
        self.updateRequest.connect(self._update_gutters)
        self.document().contentsChange.connect(self._on_contents_change)
        self.textChanged.connect(self._schedule_refresh)
        self.annotations.subscribe(self._on_annotations_changed)

        self._update_margins()

        # Set monospace font from settings. Defaults: "Consolas", 10pt
        cached = _CachedEditorSettings.get()
        font = QFont(cached.font_family, cached.font_size)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)

        # Tab width from settings. Default: 2 characters
        self.setTabStopDistance(self.fontMetrics().horizontalAdvance(' ') * cached.tab_width)

    # -- DocumentHost --------------------------------------------------------

    def cursor_position(self) -> int:
        return self.textCursor().position()

    def refontify(self) -> LispDocument:
        """Fontify the whole document and return the snapshot."""
        self._highlighter.rehighlight()
        return LispDocument(self.toPlainText(), self.dialect).ensure_fontified()

    # -- document lifecycle --------------------------------------------------

    def load_text(self, text: str, dialect: Optional[Dialect] = None) -> None:
        """Replace the document, releasing the previous one's annotations."""
        self.close_document()
        if dialect is not None:
            self.dialect = dialect
            self._highlighter.set_dialect(dialect)
        # setPlainText may restart revision numbering
        self._last_revision = -1
        self._refreshed_revision = -1
        self.setPlainText(text)

    def close_document(self) -> None:
        self.hider.on_document_close()
        self.hidden_state_changed.emit(False)

    def set_hide_config(self, config: HideConfig) -> None:
        self.hider.config = config

    def set_gutter_colors(self, colors: Dict[str, str], marker_color: Optional[str] = None):
        """Set the gutter colors.

        Args:
            colors: Dict with keys: background, text, text_active,
                   current_line_bg, doc_marker
            marker_color: Color of the hidden-text marker.
        """
        self._gutter_colors = dict(self.DEFAULT_GUTTER_COLORS)
        self._gutter_colors.update(colors)
        if marker_color:
            self._marker_color = QColor(marker_color)
        self.line_number_area.update()
        self.gutter.update()

    # -- docstring commands --------------------------------------------------

    def toggle_all_docstrings(self) -> ToggleAllResult:
        result = self.hider.toggle_all()
        self.hidden_state_changed.emit(result.hidden)
        return result

    def toggle_docstring_at_point(self) -> ToggleOutcome:
        return self.hider.toggle_at_point()

    def list_docstrings(self) -> List[DocstringInfo]:
        return self.hider.list_docstrings()

    def docstring_spans(self) -> List[DocstringSpan]:
        return list(self._spans)

    # -- change tracking -----------------------------------------------------

    def _on_contents_change(self, position: int, removed: int, added: int):
        # Highlighting marks contents dirty without a new revision
        revision = self.document().revision()
        if revision == self._last_revision:
            return
        self._last_revision = revision
        self._highlighter.invalidate()
        old, self._last_text = self._last_text, self.toPlainText()
        if removed or added:
            self.annotations.apply_edit(*_narrow_edit(old, self._last_text, position, removed, added))

    def _schedule_refresh(self):
        if self.document().revision() == self._refreshed_revision:
            return
        if not self._refresh_pending:
            self._refresh_pending = True
            QTimer.singleShot(0, self._refresh)

    def _refresh(self):
        """Recompute docstring spans and faces after the text changed."""
        self._refresh_pending = False
        self._refreshed_revision = self.document().revision()
        doc = LispDocument(self.toPlainText(), self.dialect)
        self._spans = collect_all_docstring_bounds(doc)
        block_of = self.document().findBlock
        self._span_lines = {block_of(span.start).blockNumber(): span for span in self._spans}
        self._highlighter.invalidate()
        self._highlighter.rehighlight()
        self.gutter.update()

    def _on_annotations_changed(self):
        self._apply_annotations()
        self.docstrings_changed.emit()

    def _collapsed_ranges(self) -> List[Tuple[int, int, int]]:
        marker_width = self.fontMetrics().horizontalAdvance
        return [
            (a.start, a.end, marker_width(a.after_string) if a.after_string else 0)
            for a in self.annotations.invisible_annotations()
        ]

    def _apply_annotations(self):
        """Sync block visibility and collapsed formats with the layer."""
        doc = self.document()
        hidden = [(a.start, a.end) for a in self.annotations.invisible_annotations()]

        block = doc.begin()
        while block.isValid():
            pos = block.position()
            text_end = pos + len(block.text())
            visible = not any(start < pos and text_end <= end for start, end in hidden)
            if block.isVisible() != visible:
                block.setVisible(visible)
            block = block.next()

        doc.markContentsDirty(0, doc.characterCount())
        self._highlighter.rehighlight()
        self.viewport().update()
        self.gutter.update()
        self._update_margins()

    # -- geometry ------------------------------------------------------------

    def line_number_area_width(self) -> int:
        """Calculate the width needed for line numbers."""
        digits = len(str(max(1, self.blockCount())))
        # Left margin from settings. Default: 8 pixels
        left_margin = _CachedEditorSettings.get().left_margin
        return left_margin + self.fontMetrics().horizontalAdvance('9') * digits

    def line_number_area_size_hint(self):
        return QSize(self.line_number_area_width(), 0)

    def _update_margins(self):
        """Update the viewport margins to make room for line numbers and the gutter."""
        self.setViewportMargins(self.line_number_area_width() + self.gutter.gutter_width, 0, 0, 0)

    def _update_gutters(self, rect, dy):
        """Update both gutters when scrolling or content changes."""
        if dy:
            self.line_number_area.scroll(0, dy)
            self.gutter.scroll(0, dy)
        else:
            self.line_number_area.update(0, rect.y(), self.line_number_area.width(), rect.height())
            self.gutter.update(0, rect.y(), self.gutter.width(), rect.height())

        if rect.contains(self.viewport().rect()):
            self._update_margins()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        ln_width = self.line_number_area_width()
        self.line_number_area.setGeometry(cr.left(), cr.top(), ln_width, cr.height())
        self.gutter.setGeometry(cr.left() + ln_width, cr.top(), self.gutter.gutter_width, cr.height())

    def block_at_y(self, y: int):
        """Visible block under viewport coordinate ``y``, or None."""
        block = self.firstVisibleBlock()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        while block.isValid():
            if block.isVisible():
                bottom = top + int(self.blockBoundingRect(block).height())
                if top <= y < bottom:
                    return block
                top = bottom
            block = block.next()
        return None

    # -- painting ------------------------------------------------------------

    def paintEvent(self, event):
        super().paintEvent(event)
        markers = [a for a in self.annotations.invisible_annotations() if a.after_string]
        if not markers:
            return

        painter = QPainter(self.viewport())
        painter.setPen(self._marker_color)
        metrics = self.fontMetrics()
        for ann in markers:
            cursor = QTextCursor(self.document())
            cursor.setPosition(min(ann.end, self.document().characterCount() - 1))
            if not cursor.block().isVisible():
                continue
            rect = self.cursorRect(cursor)
            if not rect.intersects(event.rect()):
                continue
            x = rect.left() - metrics.horizontalAdvance(ann.after_string)
            painter.drawText(x, rect.top() + metrics.ascent(), ann.after_string)
        painter.end()

    def line_number_area_paint_event(self, event):
        """Paint the line numbers."""
        painter = QPainter(self.line_number_area)
        colors = self._gutter_colors
        painter.fillRect(event.rect(), QColor(colors["background"]))

        block = self.firstVisibleBlock()
        block_number = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())

        current_block = self.textCursor().block().blockNumber()
        right_margin = _CachedEditorSettings.get().right_margin

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                block_height = int(self.blockBoundingRect(block).height())
                if block_number == current_block:
                    painter.fillRect(0, top, self.line_number_area.width(), block_height,
                                     QColor(colors["current_line_bg"]))
                    painter.setPen(QColor(colors["text_active"]))
                else:
                    painter.setPen(QColor(colors["text"]))

                painter.drawText(0, top, self.line_number_area.width() - right_margin, block_height,
                                 Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                                 str(block_number + 1))

            block = block.next()
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())
            block_number += 1

        painter.end()

    def gutter_paint_event(self, event):
        """Paint a marker on every line where a docstring starts.

        Hidden docstrings get a filled marker.
        """
        painter = QPainter(self.gutter)
        colors = self._gutter_colors
        painter.fillRect(event.rect(), QColor(colors["background"]))

        block = self.firstVisibleBlock()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())

        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible():
                block_number = block.blockNumber()
                block_height = int(self.blockBoundingRect(block).height())
                span = self._span_lines.get(block_number)

                if span is not None:
                    is_hidden = bool(self.annotations.annotations_in(span.start, span.end, self.hider.tag))
                    is_hover = self.gutter._hover_line == block_number

                    size = 9
                    x = (self.gutter.gutter_width - size) // 2
                    y = top + (block_height - size) // 2

                    if is_hover:
                        painter.fillRect(x - 1, y - 1, size + 2, size + 2, QColor(colors["current_line_bg"]))

                    marker = QColor(colors["doc_marker"])
                    painter.setPen(QPen(marker, 1))
                    if is_hidden:
                        painter.setBrush(marker)
                    else:
                        painter.setBrush(Qt.BrushStyle.NoBrush)
                    painter.drawEllipse(x, y, size, size)

                top += block_height
            block = block.next()

        painter.end()

    def gutter_mouse_press(self, event):
        """Toggle the docstring whose marker was clicked."""
        block = self.block_at_y(event.pos().y())
        if block is None:
            return
        span = self._span_lines.get(block.blockNumber())
        if span is None:
            return
        cursor = self.textCursor()
        cursor.setPosition(span.start)
        self.setTextCursor(cursor)
        outcome = self.toggle_docstring_at_point()
        log.debug("gutter toggle at line %d: %s", block.blockNumber() + 1, outcome.value)
