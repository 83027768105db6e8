"""
docstrings package

Docstring boundary detection and reversible, non-destructive hiding.
"""

from docstrings.models import (
    ANNOTATION_TAG,
    BufferHiddenState,
    DocstringInfo,
    DocstringSpan,
    HideStyle,
    HideStyleKind,
    ToggleAllResult,
    ToggleOutcome,
)
from docstrings.annotations import Annotation, AnnotationLayer
from docstrings.detector import collect_all_docstring_bounds, find_docstring_bounds_in_form, is_escaped
from docstrings.engine import DocstringHider, DocumentHost, HideConfig, compute_hide_range, describe_span
from docstrings.buffer import TextBuffer
from docstrings.render import render_text

__all__ = [
    "ANNOTATION_TAG",
    "BufferHiddenState",
    "DocstringInfo",
    "DocstringSpan",
    "HideStyle",
    "HideStyleKind",
    "ToggleAllResult",
    "ToggleOutcome",
    "Annotation",
    "AnnotationLayer",
    "collect_all_docstring_bounds",
    "find_docstring_bounds_in_form",
    "is_escaped",
    "DocstringHider",
    "DocumentHost",
    "HideConfig",
    "compute_hide_range",
    "describe_span",
    "TextBuffer",
    "render_text",
]
