"""
main.py

docfold - Lisp source viewer with reversible docstring hiding.

PyQt6 application for reading Lisp-family source with:
- Syntax highlighting with a dedicated docstring face
- Whole-document docstring hiding/showing (complete, partial, first-line)
- Hiding/showing the docstring of the form at the cursor
- A docstring inspection dock

Hiding never edits the text: saving a file writes exactly what was loaded
plus your own edits.

Usage:
    python main.py [FILE]

Dependencies:
    pip install PyQt6 platformdirs tomli-w
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
)
from PyQt6.QtCore import Qt

from docstrings.engine import HideConfig
from docstrings.models import ToggleOutcome
from editor import DocstringInspectDock, LispCodeEditor
from lisp.fontify import Dialect
from settings import SettingsManager, get_settings
from settings_dialog import SettingsDialog
from styles import DEFAULT_THEME, THEMES, editor_stylesheet

log = logging.getLogger(__name__)

LISP_FILE_FILTER = (
    "Lisp sources (*.el *.lisp *.lsp *.cl *.asd *.scm *.ss *.sld *.rkt *.clj *.cljs *.cljc *.edn);;"
    "All files (*)"
)

_OUTCOME_MESSAGES = {
    ToggleOutcome.HIDDEN: "Docstring hidden.",
    ToggleOutcome.SHOWN: "Docstring shown.",
    ToggleOutcome.NOT_FOUND: "No docstring at point.",
}


class MainWindow(QMainWindow):
    """Main window: one editor, one inspection dock, docstring commands."""

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        self.current_path: Optional[Path] = None

        self.setWindowTitle("docfold")
        self.resize(1000, 760)

        self.editor = LispCodeEditor(self, self._default_dialect(), HideConfig.from_settings(settings_manager.settings.docstrings))
        self.setCentralWidget(self.editor)

        self.inspect_dock = DocstringInspectDock(self)
        self.inspect_dock.refresh_btn.clicked.connect(self.refresh_inspect_dock)
        self.inspect_dock.docstring_activated.connect(self._goto_offset)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.inspect_dock)
        self.inspect_dock.hide()

        self.editor.docstrings_changed.connect(self._on_docstrings_changed)

        self._build_menus()
        self._apply_theme(settings_manager.settings.theme)

        self.statusBar().showMessage("Open a Lisp file. Ctrl+Shift+D hides all docstrings, Ctrl+D the one at point.")

    def _default_dialect(self) -> Dialect:
        return Dialect.from_name(self.settings_manager.settings.docstrings.dialect)

    def _build_menus(self):
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        open_act = QAction("Open...", self)
        open_act.setShortcut(QKeySequence.StandardKey.Open)
        open_act.triggered.connect(self.open_file_dialog)
        file_menu.addAction(open_act)

        save_act = QAction("Save", self)
        save_act.setShortcut(QKeySequence.StandardKey.Save)
        save_act.triggered.connect(self.save_file)
        file_menu.addAction(save_act)

        save_as_act = QAction("Save As...", self)
        save_as_act.triggered.connect(self.save_file_as_dialog)
        file_menu.addAction(save_as_act)

        file_menu.addSeparator()

        exit_act = QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        settings_act = QAction("Settings...", self)
        settings_act.triggered.connect(self.show_settings_dialog)
        edit_menu.addAction(settings_act)

        # Docstrings menu
        doc_menu = menubar.addMenu("&Docstrings")

        toggle_all_act = QAction("Toggle All Docstrings", self)
        toggle_all_act.setShortcut(QKeySequence("Ctrl+Shift+D"))
        toggle_all_act.triggered.connect(self.toggle_all_docstrings)
        doc_menu.addAction(toggle_all_act)

        toggle_point_act = QAction("Toggle Docstring at Point", self)
        toggle_point_act.setShortcut(QKeySequence("Ctrl+D"))
        toggle_point_act.triggered.connect(self.toggle_docstring_at_point)
        doc_menu.addAction(toggle_point_act)

        doc_menu.addSeparator()

        inspect_act = QAction("Inspect Docstrings", self)
        inspect_act.setShortcut(QKeySequence("Ctrl+Shift+I"))
        inspect_act.triggered.connect(self.show_inspect_dock)
        doc_menu.addAction(inspect_act)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_act = QAction("About docfold", self)
        about_act.triggered.connect(self._show_about)
        help_menu.addAction(about_act)

    def _apply_theme(self, theme_name: str):
        theme = THEMES.get(theme_name, THEMES[DEFAULT_THEME])
        self.editor.setStyleSheet(editor_stylesheet(theme_name))
        self.editor.set_gutter_colors(theme["gutter"], theme["marker"])

    # -- docstring commands --------------------------------------------------

    def toggle_all_docstrings(self):
        result = self.editor.toggle_all_docstrings()
        if result.hidden:
            self.statusBar().showMessage(f"{result.found} docstring(s) hidden.")
        else:
            self.statusBar().showMessage("Docstrings shown.")

    def toggle_docstring_at_point(self):
        outcome = self.editor.toggle_docstring_at_point()
        self.statusBar().showMessage(_OUTCOME_MESSAGES[outcome])

    def show_inspect_dock(self):
        self.refresh_inspect_dock()
        self.inspect_dock.show()
        self.inspect_dock.raise_()

    def refresh_inspect_dock(self):
        self.inspect_dock.set_docstrings(self.editor.list_docstrings(), self.editor.toPlainText())

    def _on_docstrings_changed(self):
        if self.inspect_dock.isVisible():
            self.refresh_inspect_dock()

    def _goto_offset(self, offset: int):
        cursor = self.editor.textCursor()
        cursor.setPosition(min(offset, len(self.editor.toPlainText())))
        self.editor.setTextCursor(cursor)
        self.editor.setFocus()

    # -- files ---------------------------------------------------------------

    def open_file_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Lisp File", "", LISP_FILE_FILTER)
        if path:
            self.load_file(path)

    def load_file(self, path: str):
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.error("could not open %s: %s", path, e)
            QMessageBox.critical(self, "Open failed", f"Could not open {path}:\n{e}")
            return
        self.current_path = Path(path)
        dialect = Dialect.from_path(path, self._default_dialect())
        self.editor.load_text(text, dialect)
        self.setWindowTitle(f"docfold - {self.current_path.name}")
        self.statusBar().showMessage(f"Opened {os.path.basename(path)} ({dialect.value})")

    def save_file(self):
        if self.current_path is None:
            self.save_file_as_dialog()
            return
        self._write(self.current_path)

    def save_file_as_dialog(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save Lisp File", "", LISP_FILE_FILTER)
        if path:
            self.current_path = Path(path)
            self._write(self.current_path)

    def _write(self, path: Path):
        try:
            path.write_text(self.editor.toPlainText(), encoding="utf-8")
        except OSError as e:
            log.error("could not save %s: %s", path, e)
            QMessageBox.critical(self, "Save failed", f"Could not save {path}:\n{e}")
            return
        self.statusBar().showMessage(f"Saved {path}")

    # -- settings ------------------------------------------------------------

    def show_settings_dialog(self):
        dlg = SettingsDialog(self.settings_manager, self)
        if dlg.exec():
            s = self.settings_manager.settings
            self.editor.set_hide_config(HideConfig.from_settings(s.docstrings))
            self._apply_theme(s.theme)
            logging.getLogger().setLevel(s.log_level)
            self.statusBar().showMessage("Settings saved.")

    def _show_about(self):
        QMessageBox.about(
            self,
            "About docfold",
            "docfold\n\nCollapse Lisp docstrings to read the code around them.\n"
            "Hiding is visual only; the file text is never changed.",
        )

    def closeEvent(self, event):
        self.editor.close_document()
        super().closeEvent(event)


def main():
    sm = get_settings()
    logging.basicConfig(
        level=sm.settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sm.ensure_file_complete()

    app = QApplication(sys.argv)
    mw = MainWindow(sm)
    if len(sys.argv) > 1:
        mw.load_file(sys.argv[1])
    mw.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
