"""
lisp package

Lexing, paren structure and fontification for Lisp-family source text.
"""

from lisp.syntax import MalformedFormError, SyntaxIndex, Token, TokenKind, tokenize
from lisp.fontify import Dialect, DocPosition, Face, FaceMap, fontify
from lisp.document import LispDocument

__all__ = [
    "MalformedFormError",
    "SyntaxIndex",
    "Token",
    "TokenKind",
    "tokenize",
    "Dialect",
    "DocPosition",
    "Face",
    "FaceMap",
    "fontify",
    "LispDocument",
]
