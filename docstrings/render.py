"""
docstrings/render.py

Displayed text of a document under its annotation layer.
"""

from __future__ import annotations

from typing import List

from docstrings.annotations import AnnotationLayer


def render_text(text: str, layer: AnnotationLayer) -> str:
    """Return ``text`` as a reader would see it.

    Ranges of invisible annotations are dropped and each one's
    ``after_string`` is shown where the hidden text ends.  Overlapping
    invisible ranges are merged.
    """
    parts: List[str] = []
    pos = 0
    for ann in layer.invisible_annotations():
        start = max(ann.start, pos)
        if start > pos:
            parts.append(text[pos:start])
        if ann.end > pos:
            pos = ann.end
        if ann.after_string:
            parts.append(ann.after_string)
    parts.append(text[pos:])
    return "".join(parts)
