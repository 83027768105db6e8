"""
editor package

Lisp code editor with syntax highlighting, line numbers, a docstring
gutter, reversible docstring hiding, and a docstring inspection dock.
"""

from editor.highlighter import LispHighlighter
from editor.code_editor import LineNumberArea, DocstringGutter, LispCodeEditor
from editor.inspect_dock import DocstringInspectDock

__all__ = [
    "LispHighlighter",
    "LineNumberArea",
    "DocstringGutter",
    "LispCodeEditor",
    "DocstringInspectDock",
]
