"""Tests for the Qt surface: LispCodeEditor, DocstringInspectDock, MainWindow.

Runs on the offscreen platform plugin unless QT_QPA_PLATFORM is set.
"""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtGui import QTextCursor
from PyQt6.QtWidgets import QApplication

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from docstrings.engine import HideConfig
from docstrings.models import ANNOTATION_TAG, HideStyle, ToggleOutcome
from editor import DocstringInspectDock, LispCodeEditor
from editor.code_editor import _narrow_edit
from editor.inspect_dock import format_preview
from lisp.fontify import Dialect
from settings import SettingsManager


SOURCE = (
    '(defun alpha ()\n'
    '  "Alpha docs."\n'
    '  1)\n'
    '\n'
    '(defvar beta 2\n'
    '  "Line one.\n'
    'Line two.\n'
    'Line three.")\n'
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture()
def editor(qapp):
    ed = LispCodeEditor(None, Dialect.EMACS_LISP, HideConfig(style=HideStyle.complete(), marker="..."))
    ed.load_text(SOURCE)
    qapp.processEvents()
    yield ed
    ed.close_document()
    ed.deleteLater()


def _block_visible(ed: LispCodeEditor, line: int) -> bool:
    return ed.document().findBlockByNumber(line).isVisible()


# ---------------------------------------------------------------------------
# Edit normalization
# ---------------------------------------------------------------------------

class TestNarrowEdit:
    def test_exact_report_unchanged(self):
        assert _narrow_edit("abcdef", "abXcdef", 2, 0, 1) == (2, 0, 1)

    def test_whole_document_report(self):
        old = "(a \"doc\")"
        new = "(a \"dxoc\")"
        assert _narrow_edit(old, new, 0, len(old) + 1, len(new) + 1) == (5, 0, 1)

    def test_deletion(self):
        assert _narrow_edit("abcdef", "abef", 0, 6, 4) == (2, 2, 0)


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

class TestLispCodeEditor:
    def test_toggle_all_keeps_text(self, editor):
        result = editor.toggle_all_docstrings()
        assert (result.hidden, result.found, result.annotated) == (True, 2, 2)
        assert editor.toPlainText() == SOURCE
        assert len(editor.annotations.with_tag(ANNOTATION_TAG)) == 2

        result = editor.toggle_all_docstrings()
        assert result.hidden is False
        assert len(editor.annotations) == 0
        assert editor.toPlainText() == SOURCE

    def test_hidden_state_signal(self, editor):
        states = []
        editor.hidden_state_changed.connect(states.append)
        editor.toggle_all_docstrings()
        editor.toggle_all_docstrings()
        assert states == [True, False]

    def test_fully_hidden_lines_become_invisible(self, editor):
        editor.toggle_all_docstrings()
        assert _block_visible(editor, 5)   # '  "Line one.'
        assert not _block_visible(editor, 6)  # 'Line two.'
        assert _block_visible(editor, 7)   # 'Line three.")'
        editor.toggle_all_docstrings()
        assert _block_visible(editor, 6)

    def test_toggle_at_point(self, editor):
        cursor = editor.textCursor()
        cursor.setPosition(SOURCE.index("alpha"))
        editor.setTextCursor(cursor)
        assert editor.toggle_docstring_at_point() is ToggleOutcome.HIDDEN
        assert len(editor.annotations) == 1
        assert editor.toggle_docstring_at_point() is ToggleOutcome.SHOWN
        assert len(editor.annotations) == 0

    def test_toggle_at_point_outside_form(self, editor):
        cursor = editor.textCursor()
        cursor.setPosition(SOURCE.index("\n\n") + 1)
        editor.setTextCursor(cursor)
        assert editor.toggle_docstring_at_point() is ToggleOutcome.NOT_FOUND

    def test_edit_inside_hidden_docstring_evaporates(self, editor, qapp):
        editor.toggle_all_docstrings()
        cursor = QTextCursor(editor.document())
        cursor.setPosition(SOURCE.index("docs"))
        cursor.insertText("x")
        qapp.processEvents()
        assert len(editor.annotations) == 1

    def test_edit_before_shifts_annotations(self, editor, qapp):
        editor.toggle_all_docstrings()
        before = sorted(editor.hider.hidden_spans())
        cursor = QTextCursor(editor.document())
        cursor.setPosition(0)
        cursor.insertText(";; x\n")
        qapp.processEvents()
        assert sorted(editor.hider.hidden_spans()) == [(s + 5, e + 5) for s, e in before]

    def test_docstring_spans_refresh(self, editor, qapp):
        spans = editor.docstring_spans()
        assert [SOURCE[s.start:s.end] for s in spans] == [
            '"Alpha docs."',
            '"Line one.\nLine two.\nLine three."',
        ]

    def test_load_text_releases_annotations(self, editor, qapp):
        editor.toggle_all_docstrings()
        editor.load_text('(defun g () "G." nil)\n')
        qapp.processEvents()
        assert len(editor.annotations) == 0
        assert editor.hider.state.hidden is False
        assert len(editor.docstring_spans()) == 1

    def test_list_docstrings(self, editor):
        infos = editor.list_docstrings()
        assert len(infos) == 2
        assert infos[1].first_lines == ['"Line one.', "Line two."]
        assert infos[1].last_lines == ['Line three."']


# ---------------------------------------------------------------------------
# Inspect dock
# ---------------------------------------------------------------------------

class TestInspectDock:
    def test_rows_and_activation(self, editor):
        dock = DocstringInspectDock()
        infos = editor.list_docstrings()
        dock.set_docstrings(infos, SOURCE)
        assert dock.docstrings() == infos
        assert dock.tree.topLevelItemCount() == 2
        assert dock.tree.topLevelItem(0).text(0) == "2"
        assert dock.tree.topLevelItem(1).text(0) == "6"
        assert dock.status.text() == "2 docstring(s)"

        activated = []
        dock.docstring_activated.connect(activated.append)
        dock.tree.itemDoubleClicked.emit(dock.tree.topLevelItem(1), 0)
        assert activated == [infos[1].span.start]

    def test_format_preview(self, editor):
        info = editor.list_docstrings()[1]
        assert format_preview(info) == '"Line one.\nLine two.\n    ...\nLine three."'


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

class TestMainWindow:
    def test_open_toggle_save(self, qapp, tmp_path):
        from main import MainWindow

        src = tmp_path / "sample.el"
        src.write_text(SOURCE, encoding="utf-8")

        mw = MainWindow(SettingsManager(settings_dir=tmp_path / "config"))
        mw.show()
        mw.load_file(str(src))
        qapp.processEvents()
        assert mw.editor.dialect is Dialect.EMACS_LISP

        mw.toggle_all_docstrings()
        assert mw.statusBar().currentMessage() == "2 docstring(s) hidden."

        mw.save_file()
        assert src.read_text(encoding="utf-8") == SOURCE

        mw.close()
        assert len(mw.editor.annotations) == 0

    def test_dialect_from_extension(self, qapp, tmp_path):
        from main import MainWindow

        src = tmp_path / "core.clj"
        src.write_text('(defn f\n  "Doc."\n  [x]\n  x)\n', encoding="utf-8")
        mw = MainWindow(SettingsManager(settings_dir=tmp_path / "config"))
        mw.show()
        mw.load_file(str(src))
        assert mw.editor.dialect is Dialect.CLOJURE
        assert mw.editor.toggle_all_docstrings().found == 1
        mw.close()
