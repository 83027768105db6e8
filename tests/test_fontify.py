"""Tests for lisp/fontify.py and lisp/document.py."""
from __future__ import annotations

import pytest

from lisp.document import LispDocument
from lisp.fontify import Dialect, Face, FaceMap, fontify


def _doc_text(text: str, dialect: Dialect = Dialect.EMACS_LISP) -> str:
    """Characters painted with the DOC face, concatenated."""
    faces = fontify(text, dialect)
    return "".join(ch for i, ch in enumerate(text) if faces.face_at(i) is Face.DOC)


# ─────────────────────────────────────────────────────────
# FaceMap
# ─────────────────────────────────────────────────────────


class TestFaceMap:
    def test_default_and_out_of_range(self):
        fm = FaceMap(3)
        assert fm.face_at(0) is Face.DEFAULT
        assert fm.face_at(-1) is Face.DEFAULT
        assert fm.face_at(10) is Face.DEFAULT

    def test_runs(self):
        fm = FaceMap(6)
        fm.paint(1, 3, Face.STRING)
        fm.paint(4, 10, Face.DOC)
        assert list(fm.runs()) == [
            (0, 1, Face.DEFAULT),
            (1, 3, Face.STRING),
            (3, 4, Face.DEFAULT),
            (4, 6, Face.DOC),
        ]
        assert list(fm.runs(2, 5)) == [
            (2, 3, Face.STRING),
            (3, 4, Face.DEFAULT),
            (4, 5, Face.DOC),
        ]


# ─────────────────────────────────────────────────────────
# Docstring face placement
# ─────────────────────────────────────────────────────────


class TestDocFace:
    def test_elisp_defun(self):
        text = '(defun foo (x)\n  "Return X."\n  x)'
        assert _doc_text(text) == '"Return X."'

    def test_elisp_defvar(self):
        text = '(defvar foo 1 "The foo.")'
        assert _doc_text(text) == '"The foo."'

    def test_plain_string_argument_is_not_doc(self):
        text = '(message "hello" 1 "two")'
        assert _doc_text(text) == ""
        assert fontify(text).face_at(9) is Face.STRING

    def test_nested_definition(self):
        text = '(progn\n  (defun foo ()\n    "Inner."\n    1))'
        assert _doc_text(text) == '"Inner."'

    def test_scheme_define_needs_body(self):
        assert _doc_text('(define x "value")', Dialect.SCHEME) == ""
        text = '(define (f x) "Doc." x)'
        assert _doc_text(text, Dialect.SCHEME) == '"Doc."'

    def test_clojure_defn(self):
        text = '(defn greet\n  "Say hi."\n  [name]\n  (str "hi " name))'
        assert _doc_text(text, Dialect.CLOJURE) == '"Say hi."'

    def test_common_lisp_defun_string_only_body(self):
        assert _doc_text('(defun f () "result")', Dialect.COMMON_LISP) == ""

    def test_symbol_reference_splits_doc_runs(self):
        text = '(defun foo ()\n  "Like `bar\' but louder."\n  nil)'
        faces = fontify(text)
        bar = text.index("bar")
        assert faces.face_at(bar) is Face.CONSTANT
        assert faces.face_at(bar - 1) is Face.DOC
        doc_runs = [r for r in faces.runs() if r[2] is Face.DOC]
        assert len(doc_runs) == 2

    def test_definition_name_face(self):
        text = "(defun foo () nil)"
        faces = fontify(text)
        assert faces.face_at(1) is Face.KEYWORD
        assert faces.face_at(7) is Face.FUNCTION_NAME

    def test_comment_face(self):
        text = '; "not doc"\n(defun f () "Doc." nil)'
        faces = fontify(text)
        assert faces.face_at(3) is Face.COMMENT
        assert _doc_text(text) == '"Doc."'


# ─────────────────────────────────────────────────────────
# Dialect lookup
# ─────────────────────────────────────────────────────────


class TestDialect:
    @pytest.mark.parametrize("path,dialect", [
        ("init.el", Dialect.EMACS_LISP),
        ("pkg.lisp", Dialect.COMMON_LISP),
        ("lib.scm", Dialect.SCHEME),
        ("core.CLJ", Dialect.CLOJURE),
    ])
    def test_from_path(self, path, dialect):
        assert Dialect.from_path(path) is dialect

    def test_from_path_fallback(self):
        assert Dialect.from_path("notes.txt", Dialect.SCHEME) is Dialect.SCHEME
        assert Dialect.from_path(None) is Dialect.EMACS_LISP

    def test_from_name(self):
        assert Dialect.from_name("clojure") is Dialect.CLOJURE
        with pytest.raises(ValueError):
            Dialect.from_name("fortran")


# ─────────────────────────────────────────────────────────
# LispDocument
# ─────────────────────────────────────────────────────────


class TestLispDocument:
    def test_lazy_fontification(self):
        doc = LispDocument("(defun f () \"D.\" nil)")
        assert not doc.is_fontified
        assert doc.ensure_fontified() is doc
        assert doc.is_fontified

    def test_line_helpers(self):
        doc = LispDocument("ab\ncd\n")
        assert doc.line_start(4) == 3
        assert doc.next_line_start(0) == 3
        assert doc.next_line_start(4) == 6
        assert doc.is_line_start(3)
        assert not doc.is_line_start(4)
        assert doc.char_at(99) == ""

    def test_next_column_zero_form(self):
        doc = LispDocument("(a)\n  (b)\n(c)")
        assert doc.next_column_zero_form(0) == 0
        assert doc.next_column_zero_form(1) == 10
        assert doc.next_column_zero_form(11) is None
