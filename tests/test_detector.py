"""Tests for docstrings/detector.py: docstring boundary detection."""
from __future__ import annotations

import pytest

from docstrings.detector import (
    collect_all_docstring_bounds,
    find_docstring_bounds_in_form,
    is_escaped,
)
from lisp.document import LispDocument
from lisp.fontify import Dialect, Face
from lisp.syntax import MalformedFormError


def _doc(text: str, dialect: Dialect = Dialect.EMACS_LISP) -> LispDocument:
    return LispDocument(text, dialect).ensure_fontified()


def _literals(text: str, spans) -> list:
    return [text[s.start:s.end] for s in spans]


TWO_FORMS = (
    '(defun alpha ()\n'
    '  "Alpha docs."\n'
    '  1)\n'
    '\n'
    '(defvar beta 2\n'
    '  "Beta docs.\n'
    'Second line.")\n'
)


# ─────────────────────────────────────────────────────────
# is_escaped
# ─────────────────────────────────────────────────────────


class TestIsEscaped:
    @pytest.mark.parametrize("text,pos,expected", [
        ('"', 0, False),
        ('\\"', 1, True),
        ('\\\\"', 2, False),
        ('\\\\\\"', 3, True),
        ('a"', 1, False),
    ])
    def test_backslash_parity(self, text, pos, expected):
        assert is_escaped(text, pos) is expected

    def test_bound_limits_count(self):
        assert is_escaped('\\\\"', 2, bound=1) is True


# ─────────────────────────────────────────────────────────
# find_docstring_bounds_in_form
# ─────────────────────────────────────────────────────────


class TestFindInForm:
    def test_point_inside_form(self):
        doc = _doc(TWO_FORMS)
        span = find_docstring_bounds_in_form(doc, TWO_FORMS.index("alpha"))
        assert TWO_FORMS[span.start:span.end] == '"Alpha docs."'

    def test_point_on_column_zero_paren(self):
        doc = _doc(TWO_FORMS)
        second = TWO_FORMS.index("(defvar")
        span = find_docstring_bounds_in_form(doc, second)
        assert TWO_FORMS[span.start:span.end] == '"Beta docs.\nSecond line."'

    def test_point_inside_docstring(self):
        doc = _doc(TWO_FORMS)
        span = find_docstring_bounds_in_form(doc, TWO_FORMS.index("Second"))
        assert TWO_FORMS[span.start:span.end].startswith('"Beta')

    def test_point_between_forms(self):
        doc = _doc(TWO_FORMS)
        assert find_docstring_bounds_in_form(doc, TWO_FORMS.index("\n\n") + 1) is None

    def test_form_without_docstring(self):
        text = '(setq x "not a docstring")'
        assert find_docstring_bounds_in_form(_doc(text), 3) is None

    def test_escaped_quotes_inside(self):
        text = '(defun f ()\n  "Say \\"hi\\" loudly."\n  nil)'
        span = find_docstring_bounds_in_form(_doc(text), 2)
        assert text[span.start:span.end] == '"Say \\"hi\\" loudly."'

    def test_escaped_quotes_around_word(self):
        text = '(defun f ()\n  "He said \\"hi\\" to me"\n  nil)'
        span = find_docstring_bounds_in_form(_doc(text), 2)
        assert text[span.start:span.end] == '"He said \\"hi\\" to me"'
        assert text[span.end:] == "\n  nil)"

    def test_escaped_backslash_before_closing_quote(self):
        text = '(defun f ()\n  "Ends with backslash \\\\"\n  nil)'
        span = find_docstring_bounds_in_form(_doc(text), 2)
        assert text[span.start:span.end] == '"Ends with backslash \\\\"'
        assert text[span.end:].startswith("\n  nil)")

    def test_symbol_reference_does_not_split_span(self):
        text = '(defun f ()\n  "See `g\' for more."\n  nil)'
        doc = _doc(text)
        assert doc.face_at(text.index("g\'")) is Face.CONSTANT
        span = find_docstring_bounds_in_form(doc, 2)
        assert text[span.start:span.end] == '"See `g\' for more."'

    def test_unbalanced_form_raises(self):
        text = '(defun f ()\n  "Doc."\n  (car x)'
        with pytest.raises(MalformedFormError):
            find_docstring_bounds_in_form(_doc(text), 2)

    def test_first_doc_char_decides(self):
        # A DOC char with no quote before it ends the search, even though a
        # real docstring follows later in the form.
        text = '(defun f ()\n  "Doc."\n  nil)'
        doc = _doc(text)
        anchor = text.index('"')
        doc.faces.paint(anchor, anchor + 1, Face.DEFAULT)
        doc.faces.paint(1, 2, Face.DOC)
        assert find_docstring_bounds_in_form(doc, 2) is None

    def test_clojure(self):
        text = '(defn greet\n  "Say hi."\n  [name]\n  (str "hi " name))'
        span = find_docstring_bounds_in_form(_doc(text, Dialect.CLOJURE), 3)
        assert text[span.start:span.end] == '"Say hi."'


# ─────────────────────────────────────────────────────────
# collect_all_docstring_bounds
# ─────────────────────────────────────────────────────────


class TestCollectAll:
    def test_two_forms(self):
        spans = collect_all_docstring_bounds(_doc(TWO_FORMS))
        assert _literals(TWO_FORMS, spans) == ['"Alpha docs."', '"Beta docs.\nSecond line."']
        assert spans == sorted(spans, key=lambda s: s.start)

    def test_empty_document(self):
        assert collect_all_docstring_bounds(_doc("")) == []

    def test_indented_forms_skipped(self):
        text = '  (defun hidden ()\n    "Indented."\n    nil)\n(defun shown ()\n  "Visible."\n  nil)\n'
        spans = collect_all_docstring_bounds(_doc(text))
        assert _literals(text, spans) == ['"Visible."']

    def test_malformed_form_skipped(self):
        text = (
            '(defun good ()\n  "Good."\n  nil)\n'
            '(defun broken ()\n  "Broken."\n  (car x)\n'
        )
        spans = collect_all_docstring_bounds(_doc(text))
        assert _literals(text, spans) == ['"Good."']

    def test_paren_in_docstring_at_column_zero(self):
        text = '(defun f ()\n  "Doc with\n(parens) at column zero."\n  nil)\n(defun g () "G." nil)\n'
        spans = collect_all_docstring_bounds(_doc(text))
        assert _literals(text, spans) == ['"Doc with\n(parens) at column zero."', '"G."']

    def test_comment_lines_between_forms(self):
        text = ';;; header\n(defun f () "F." nil)\n;; (defun commented () "No." nil)\n(defun g () "G." nil)\n'
        spans = collect_all_docstring_bounds(_doc(text))
        assert _literals(text, spans) == ['"F."', '"G."']

    def test_column_zero_parens_inside_indented_form_docstring(self):
        text = '  (defun foo ()\n    "Doc\n(a)\n(b)"\n    nil)\n'
        assert collect_all_docstring_bounds(_doc(text)) == []

    def test_column_zero_forms_nested_in_indented_form(self):
        text = '  (progn\n(defun a () "A." 1)\n(defun b () "B." 2))\n'
        assert collect_all_docstring_bounds(_doc(text)) == []

    def test_one_span_per_form(self):
        text = '(defun f ()\n  "First\n(x)\n(y)\nlast."\n  nil)\n'
        spans = collect_all_docstring_bounds(_doc(text))
        assert _literals(text, spans) == ['"First\n(x)\n(y)\nlast."']
