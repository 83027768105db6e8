"""
lisp/fontify.py

Semantic fontification for Lisp-family source.

Every character gets one ``Face``.  The one that matters for docstring
hiding is ``Face.DOC``: it marks a string literal sitting in the
documentation position of a definition form.  Symbol references inside
documentation text (`like-this') get ``Face.CONSTANT``, so a docstring is
usually covered by several disjoint DOC runs rather than one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from lisp.syntax import Token, TokenKind, tokenize


class Face(Enum):
    DEFAULT = "default"
    COMMENT = "comment"
    STRING = "string"
    DOC = "doc"
    KEYWORD = "keyword"
    FUNCTION_NAME = "function-name"
    CONSTANT = "constant"
    BUILTIN = "builtin"
    PAREN = "paren"


class Dialect(Enum):
    EMACS_LISP = "emacs-lisp"
    COMMON_LISP = "common-lisp"
    SCHEME = "scheme"
    CLOJURE = "clojure"

    @classmethod
    def from_path(cls, path: Union[str, Path, None], default: "Dialect" = None) -> "Dialect":
        """Guess the dialect from a file extension."""
        fallback = default or cls.EMACS_LISP
        if not path:
            return fallback
        return _EXTENSIONS.get(Path(path).suffix.lower(), fallback)

    @classmethod
    def from_name(cls, name: str) -> "Dialect":
        """Look up a dialect by its settings name (e.g. ``"clojure"``).

        Raises:
            ValueError: Unknown dialect name.
        """
        for dialect in cls:
            if dialect.value == name:
                return dialect
        raise ValueError(f"unknown Lisp dialect: {name!r}")


_EXTENSIONS: Dict[str, Dialect] = {
    ".el": Dialect.EMACS_LISP,
    ".lisp": Dialect.COMMON_LISP,
    ".lsp": Dialect.COMMON_LISP,
    ".cl": Dialect.COMMON_LISP,
    ".asd": Dialect.COMMON_LISP,
    ".scm": Dialect.SCHEME,
    ".ss": Dialect.SCHEME,
    ".sld": Dialect.SCHEME,
    ".rkt": Dialect.SCHEME,
    ".clj": Dialect.CLOJURE,
    ".cljs": Dialect.CLOJURE,
    ".cljc": Dialect.CLOJURE,
    ".edn": Dialect.CLOJURE,
}


@dataclass(frozen=True)
class DocPosition:
    """Where a definition form keeps its docstring.

    Attributes:
        index: Element index inside the form (the head symbol is 0).
        needs_body: Only a docstring when another element follows it,
            e.g. ``(define x "value")`` has no docstring.
    """
    index: int
    needs_body: bool = False


_ELISP_DOCS: Dict[str, DocPosition] = {
    "defun": DocPosition(3),
    "defmacro": DocPosition(3),
    "defsubst": DocPosition(3),
    "define-inline": DocPosition(3),
    "cl-defun": DocPosition(3),
    "cl-defmacro": DocPosition(3),
    "cl-defsubst": DocPosition(3),
    "cl-defgeneric": DocPosition(3),
    "defvar": DocPosition(3),
    "defvar-local": DocPosition(3),
    "defconst": DocPosition(3),
    "defcustom": DocPosition(3),
    "defface": DocPosition(3),
    "defgroup": DocPosition(3),
    "defalias": DocPosition(3),
    "ert-deftest": DocPosition(3),
    "define-minor-mode": DocPosition(2),
    "define-globalized-minor-mode": DocPosition(4),
    "define-derived-mode": DocPosition(4),
    "cl-defstruct": DocPosition(2),
    "lambda": DocPosition(2, needs_body=True),
}

_COMMON_LISP_DOCS: Dict[str, DocPosition] = {
    "defun": DocPosition(3, needs_body=True),
    "defmacro": DocPosition(3, needs_body=True),
    "defgeneric": DocPosition(3),
    "defvar": DocPosition(3),
    "defparameter": DocPosition(3),
    "defconstant": DocPosition(3),
    "deftype": DocPosition(3, needs_body=True),
    "define-condition": DocPosition(4),
    "defstruct": DocPosition(2),
    "lambda": DocPosition(2, needs_body=True),
}

_SCHEME_DOCS: Dict[str, DocPosition] = {
    "define": DocPosition(2, needs_body=True),
    "define*": DocPosition(2, needs_body=True),
    "define-public": DocPosition(2, needs_body=True),
    "define-syntax-rule": DocPosition(2, needs_body=True),
    "lambda": DocPosition(2, needs_body=True),
}

_CLOJURE_DOCS: Dict[str, DocPosition] = {
    "defn": DocPosition(2),
    "defn-": DocPosition(2),
    "defmacro": DocPosition(2),
    "defmulti": DocPosition(2),
    "defprotocol": DocPosition(2),
    "definterface": DocPosition(2),
    "ns": DocPosition(2),
    "def": DocPosition(2, needs_body=True),
}

DOC_POSITIONS: Dict[Dialect, Dict[str, DocPosition]] = {
    Dialect.EMACS_LISP: _ELISP_DOCS,
    Dialect.COMMON_LISP: _COMMON_LISP_DOCS,
    Dialect.SCHEME: _SCHEME_DOCS,
    Dialect.CLOJURE: _CLOJURE_DOCS,
}

# `symbol' (Emacs) and `symbol` (Markdown-style, Clojure) inside docs
_DOC_SYMBOL_REF = re.compile(r"`([^`'\s\"\\]+)['`]")


class FaceMap:
    """Face per character offset of one text snapshot."""

    def __init__(self, length: int):
        self._faces: List[Face] = [Face.DEFAULT] * length

    def __len__(self) -> int:
        return len(self._faces)

    def face_at(self, offset: int) -> Face:
        """Face at ``offset``; out-of-range offsets are DEFAULT."""
        if 0 <= offset < len(self._faces):
            return self._faces[offset]
        return Face.DEFAULT

    def paint(self, start: int, end: int, face: Face) -> None:
        end = min(end, len(self._faces))
        for i in range(max(start, 0), end):
            self._faces[i] = face

    def runs(self, start: int = 0, end: Optional[int] = None) -> Iterator[Tuple[int, int, Face]]:
        """Yield maximal ``(start, end, face)`` runs inside ``[start, end)``."""
        end = len(self._faces) if end is None else min(end, len(self._faces))
        i = max(start, 0)
        while i < end:
            face = self._faces[i]
            j = i + 1
            while j < end and self._faces[j] is face:
                j += 1
            yield i, j, face
            i = j


@dataclass
class _ListFrame:
    head: Optional[str] = None
    index: int = 0
    pending_doc: Optional[Token] = field(default=None)


def _is_definition(head: Optional[str]) -> bool:
    if not head:
        return False
    name = head.rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return name.startswith("def") or name.startswith("cl-def") or name == "ns"


def fontify(text: str, dialect: Dialect = Dialect.EMACS_LISP, tokens: Optional[List[Token]] = None) -> FaceMap:
    """Compute faces for every character of ``text``.

    Args:
        text: Lisp source.
        dialect: Selects the docstring position table.
        tokens: Pre-computed ``tokenize(text)`` result, if available.

    Returns:
        A FaceMap covering the whole text.
    """
    faces = FaceMap(len(text))
    doc_positions = DOC_POSITIONS[dialect]
    tokens = tokens if tokens is not None else tokenize(text)

    stack: List[_ListFrame] = []

    def paint_doc(tok: Token) -> None:
        faces.paint(tok.start, tok.end, Face.DOC)
        for m in _DOC_SYMBOL_REF.finditer(text, tok.start + 1, max(tok.end - 1, tok.start + 1)):
            faces.paint(m.start(1), m.end(1), Face.CONSTANT)

    def settle_pending(frame: _ListFrame) -> None:
        # Another element follows the candidate: it is documentation.
        if frame.pending_doc is not None:
            paint_doc(frame.pending_doc)
            frame.pending_doc = None

    for tok in tokens:
        frame = stack[-1] if stack else None

        if tok.kind is TokenKind.COMMENT:
            faces.paint(tok.start, tok.end, Face.COMMENT)
            continue

        if tok.kind is TokenKind.PREFIX:
            continue

        if tok.kind is TokenKind.CLOSE:
            faces.paint(tok.start, tok.end, Face.PAREN)
            if stack:
                stack.pop()
            continue

        # Everything below starts a new element of the enclosing list.
        if frame is not None:
            settle_pending(frame)

        if tok.kind is TokenKind.OPEN:
            faces.paint(tok.start, tok.end, Face.PAREN)
            if frame is not None:
                frame.index += 1
            stack.append(_ListFrame())
            continue

        if tok.kind is TokenKind.STRING:
            faces.paint(tok.start, tok.end, Face.STRING)
            if frame is not None:
                pos = doc_positions.get(frame.head or "")
                if pos is not None and frame.index == pos.index:
                    if pos.needs_body:
                        frame.pending_doc = tok
                    else:
                        paint_doc(tok)
                frame.index += 1
            continue

        if tok.kind is TokenKind.CHAR:
            faces.paint(tok.start, tok.end, Face.CONSTANT)
            if frame is not None:
                frame.index += 1
            continue

        # ATOM
        atom = text[tok.start:tok.end]
        if frame is not None:
            if frame.index == 0:
                frame.head = atom
                if atom in doc_positions or _is_definition(atom):
                    faces.paint(tok.start, tok.end, Face.KEYWORD)
            elif frame.index == 1 and _is_definition(frame.head):
                faces.paint(tok.start, tok.end, Face.FUNCTION_NAME)
            elif atom.startswith(":") and len(atom) > 1:
                faces.paint(tok.start, tok.end, Face.BUILTIN)
            frame.index += 1
        elif atom.startswith(":") and len(atom) > 1:
            faces.paint(tok.start, tok.end, Face.BUILTIN)

    return faces
