"""
docstrings/detector.py

Docstring boundary detection.

Detection is driven by fontification: the first character of a top-level
form carrying ``Face.DOC`` anchors the search, and the literal's quotes
are then located in the raw text.  Both functions are pure: they read a
``LispDocument`` snapshot and an offset, and return values.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lisp.document import LispDocument
from lisp.fontify import Face
from lisp.syntax import MalformedFormError

from docstrings.models import DocstringSpan

log = logging.getLogger(__name__)


def is_escaped(text: str, pos: int, bound: int = 0) -> bool:
    """True if ``text[pos]`` is preceded by an odd number of backslashes.

    Backslashes before ``bound`` are not counted.
    """
    count = 0
    i = pos - 1
    while i >= bound and text[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def _quote_backward(text: str, pos: int, bound: int) -> Optional[int]:
    """Nearest unescaped ``"`` at or before ``pos``, not before ``bound``."""
    i = pos
    while i >= bound:
        if text[i] == '"' and not is_escaped(text, i, bound):
            return i
        i -= 1
    return None


def _quote_forward(text: str, pos: int, bound: int) -> Optional[int]:
    """Next unescaped ``"`` in ``[pos, bound)``."""
    i = pos
    while i < bound:
        if text[i] == '"' and not is_escaped(text, i):
            return i
        i += 1
    return None


def find_docstring_bounds_in_form(doc: LispDocument, pos: int) -> Optional[DocstringSpan]:
    """Find the docstring of the top-level form around ``pos``.

    The first DOC-faced character in the form decides the outcome: if its
    quotes cannot be located, the form is reported as having no docstring
    even when a later literal would qualify.

    Args:
        doc: Fontified document snapshot.
        pos: Offset of interest.  A ``(`` at the start of a line counts as
            inside the form it opens.

    Returns:
        The docstring span, or None.

    Raises:
        MalformedFormError: The enclosing form is unbalanced.
    """
    text = doc.text
    if doc.char_at(pos) == "(" and doc.is_line_start(pos):
        pos += 1

    if doc.depth_at(pos) == 0:
        return None

    bounds = doc.top_level_form(pos)
    if bounds is None:
        return None
    form_start, form_end = bounds
    if not form_start <= pos <= form_end:
        log.debug("form %d..%d does not contain offset %d", form_start, form_end, pos)
        return None

    anchor = None
    for i in range(form_start, form_end):
        if doc.face_at(i) is Face.DOC:
            anchor = i
            break
    if anchor is None:
        return None

    start = _quote_backward(text, anchor, form_start)
    if start is None:
        return None

    close = _quote_forward(text, start + 1, form_end)
    if close is None:
        return None
    return DocstringSpan(start, close + 1)


def collect_all_docstring_bounds(doc: LispDocument) -> List[DocstringSpan]:
    """Find the docstring of every top-level form starting in column zero.

    Indented top-level forms are not visited, and neither are column-zero
    parens nested inside them or inside string literals, so each form
    yields at most one span.  A malformed form is skipped and scanning
    resumes on the next line.

    Returns:
        Spans in ascending document order.
    """
    doc.ensure_fontified()
    spans: List[DocstringSpan] = []
    pos = 0
    while True:
        candidate = doc.next_column_zero_form(pos)
        if candidate is None:
            break
        # A column-zero paren inside a string, comment or another form
        # does not start a top-level form.
        if not doc.syntax.is_open_delimiter(candidate) or doc.depth_at(candidate) != 0:
            log.debug("column-zero paren at offset %d is not a top-level form", candidate)
            pos = doc.next_line_start(candidate)
            continue
        try:
            span = find_docstring_bounds_in_form(doc, candidate)
            if span is not None:
                spans.append(span)
            pos = doc.form_end(candidate)
        except MalformedFormError as exc:
            log.debug("skipping form at offset %d: %s", candidate, exc)
            pos = doc.next_line_start(candidate)
        if pos <= candidate:
            pos = doc.next_line_start(candidate)
    return spans
