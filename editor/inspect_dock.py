"""
editor/inspect_dock.py

Dock widget listing every docstring of the current document.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDockWidget,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from docstrings.models import DocstringInfo

log = logging.getLogger(__name__)


def format_preview(info: DocstringInfo) -> str:
    """Multi-line preview: first lines, an ellipsis, last lines."""
    lines = list(info.first_lines)
    if info.last_lines:
        lines.append("    ...")
        lines.extend(info.last_lines)
    return "\n".join(lines)


class DocstringInspectDock(QDockWidget):
    """
    Debug view of the detected docstrings:
    - One row per docstring: line, span, length, hidden range, preview
    - Double-click a row to move the editor cursor there
    """

    # Emitted with the docstring start offset when a row is activated
    docstring_activated = pyqtSignal(int)

    COLUMNS = ["Line", "Span", "Chars", "Hides", "Preview"]

    def __init__(self, parent=None):
        super().__init__("Docstrings", parent)
        w = QWidget()
        self.setWidget(w)
        layout = QVBoxLayout(w)

        self.tree = QTreeWidget()
        self.tree.setColumnCount(len(self.COLUMNS))
        self.tree.setHeaderLabels(self.COLUMNS)
        self.tree.setRootIsDecorated(False)
        self.tree.itemDoubleClicked.connect(self._on_item_double_clicked)
        layout.addWidget(self.tree)

        bar = QHBoxLayout()
        self.refresh_btn = QPushButton("Refresh")
        bar.addWidget(self.refresh_btn)
        bar.addStretch()
        layout.addLayout(bar)

        self.status = QLabel("")
        layout.addWidget(self.status)

        self._infos: List[DocstringInfo] = []

    def set_docstrings(self, infos: List[DocstringInfo], text: Optional[str] = None):
        """Replace the listing.

        Args:
            infos: Rows from ``DocstringHider.list_docstrings``.
            text: Document text, used to turn offsets into line numbers.
        """
        self._infos = list(infos)
        self.tree.clear()
        for info in self._infos:
            line = text.count("\n", 0, info.span.start) + 1 if text is not None else ""
            hides = f"{info.hide_range[0]}-{info.hide_range[1]}" if info.hide_range else "-"
            item = QTreeWidgetItem([
                str(line),
                f"{info.span.start}-{info.span.end}",
                str(info.char_count),
                hides,
                format_preview(info),
            ])
            item.setData(0, Qt.ItemDataRole.UserRole, info.span.start)
            self.tree.addTopLevelItem(item)
        self.status.setText(f"{len(self._infos)} docstring(s)")
        log.debug("inspect dock listing %d docstring(s)", len(self._infos))

    def docstrings(self) -> List[DocstringInfo]:
        return list(self._infos)

    def _on_item_double_clicked(self, item: QTreeWidgetItem, column: int):
        start = item.data(0, Qt.ItemDataRole.UserRole)
        if start is not None:
            self.docstring_activated.emit(int(start))
