"""
docstrings/engine.py

Docstring hiding engine.

Turns detected docstring spans into annotations on a document's
``AnnotationLayer``.  The engine owns the per-document hidden/shown state;
the document itself (cursor, text, fontification) is reached through the
``DocumentHost`` protocol so the same engine drives the Qt editor and the
in-memory ``TextBuffer``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from lisp.document import LispDocument
from lisp.syntax import MalformedFormError
from settings import get_settings

from docstrings.annotations import AnnotationLayer
from docstrings.detector import collect_all_docstring_bounds, find_docstring_bounds_in_form
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

log = logging.getLogger(__name__)

# Lines shown at each end of a docstring in the inspection feed
PREVIEW_LINES = 2


class DocumentHost(Protocol):
    """What the engine needs from an editable document."""

    annotations: AnnotationLayer

    def cursor_position(self) -> int:
        ...

    def refontify(self) -> LispDocument:
        """Return a fully fontified snapshot of the current text."""
        ...


@dataclass(frozen=True)
class HideConfig:
    """Hiding style plus the marker shown after hidden text.

    An empty or None marker disables it.
    """
    style: HideStyle = HideStyle.complete()
    marker: Optional[str] = "..."

    @classmethod
    def from_settings(cls, settings=None) -> "HideConfig":
        """Build from the persisted ``[docstrings]`` settings section."""
        if settings is None:
            settings = get_settings().settings.docstrings
        try:
            style = HideStyle.from_name(settings.hide_style, settings.partial_chars)
        except ValueError:
            log.warning(
                "invalid docstring style %r / %r, using complete",
                settings.hide_style, settings.partial_chars,
            )
            style = HideStyle.complete()
        return cls(style=style, marker=settings.marker or None)


def compute_hide_range(span: DocstringSpan, style: HideStyle, text: str) -> Optional[Tuple[int, int]]:
    """The part of ``span`` to hide under ``style``.

    Quotes always stay visible.

    Args:
        span: Docstring literal including quotes.
        style: Hiding style.
        text: Text the span was computed against.

    Returns:
        ``(hide_start, hide_end)`` or None when nothing would be hidden.
    """
    content_start = span.start + 1
    content_end = span.end - 1

    if style.kind is HideStyleKind.COMPLETE:
        hide_start = content_start
    elif style.kind is HideStyleKind.PARTIAL:
        visible = min(style.visible_chars, span.content_length)
        if visible <= 0:
            return None
        hide_start = content_start + visible
    else:
        newline = text.find("\n", content_start, content_end)
        if newline < 0:
            return None
        hide_start = newline

    if hide_start >= content_end:
        return None
    return hide_start, content_end


def describe_span(doc: LispDocument, span: DocstringSpan, style: Optional[HideStyle] = None) -> DocstringInfo:
    """Inspection row for one docstring."""
    lines = doc.substring(span.start, span.end).split("\n")
    head = lines[:PREVIEW_LINES]
    tail = lines[PREVIEW_LINES:][-PREVIEW_LINES:]
    hide_range = compute_hide_range(span, style, doc.text) if style is not None else None
    return DocstringInfo(
        span=span,
        char_count=len(span),
        first_lines=head,
        last_lines=tail,
        hide_range=hide_range,
    )


class DocstringHider:
    """Hides and shows the docstrings of one document.

    Args:
        host: The document.
        config: Hiding style and marker; read from settings when omitted.
    """

    tag = ANNOTATION_TAG

    def __init__(self, host: DocumentHost, config: Optional[HideConfig] = None):
        self.host = host
        self.config = config or HideConfig.from_settings()
        self.state = BufferHiddenState()

    @property
    def layer(self) -> AnnotationLayer:
        return self.host.annotations

    def _annotate(self, doc: LispDocument, span: DocstringSpan, style: HideStyle) -> bool:
        hide = compute_hide_range(span, style, doc.text)
        if hide is None:
            return False
        self.layer.add(hide[0], hide[1], self.tag, after_string=self.config.marker, evaporate=True)
        return True

    def hide_all(self, style: Optional[HideStyle] = None) -> ToggleAllResult:
        """Hide every docstring in the document.

        Existing docstring annotations are removed first, so repeated calls
        leave one annotation per docstring.
        """
        style = style or self.config.style
        self.layer.remove_all(self.tag)
        self.layer.hide_tag(self.tag)
        doc = self.host.refontify()
        spans = collect_all_docstring_bounds(doc)
        annotated = sum(1 for span in spans if self._annotate(doc, span, style))
        self.state.hidden = True
        log.info("hid %d of %d docstring(s) (%s)", annotated, len(spans), style.describe())
        return ToggleAllResult(hidden=True, found=len(spans), annotated=annotated)

    def show_all(self) -> ToggleAllResult:
        """Remove every docstring annotation.  Safe when nothing is hidden."""
        removed = self.layer.remove_all(self.tag)
        self.layer.show_tag(self.tag)
        self.state.hidden = False
        log.info("showed docstrings (%d annotation(s) removed)", removed)
        return ToggleAllResult(hidden=False)

    def toggle_all(self, style: Optional[HideStyle] = None) -> ToggleAllResult:
        if self.state.hidden:
            return self.show_all()
        return self.hide_all(style)

    def span_at_point(self, doc: Optional[LispDocument] = None) -> Optional[DocstringSpan]:
        if doc is None:
            doc = self.host.refontify()
        try:
            return find_docstring_bounds_in_form(doc, self.host.cursor_position())
        except MalformedFormError as exc:
            log.debug("no docstring at point: %s", exc)
            return None

    def toggle_at_point(self, style: Optional[HideStyle] = None) -> ToggleOutcome:
        """Hide or show the docstring of the form at the cursor.

        Leaves annotations of other docstrings and ``state.hidden`` alone.
        """
        style = style or self.config.style
        doc = self.host.refontify()
        span = self.span_at_point(doc)
        if span is None:
            return ToggleOutcome.NOT_FOUND

        existing = self.layer.annotations_in(span.start, span.end, self.tag)
        if existing:
            for ann in existing:
                self.layer.remove(ann)
            return ToggleOutcome.SHOWN

        if not self._annotate(doc, span, style):
            log.info("docstring at %d..%d has nothing to hide (%s)", span.start, span.end, style.describe())
            return ToggleOutcome.SHOWN
        self.layer.hide_tag(self.tag)
        return ToggleOutcome.HIDDEN

    def list_docstrings(self) -> List[DocstringInfo]:
        """Inspection feed: every docstring with a short preview."""
        doc = self.host.refontify()
        return [describe_span(doc, span, self.config.style) for span in collect_all_docstring_bounds(doc)]

    def hidden_spans(self) -> List[Tuple[int, int]]:
        return [(a.start, a.end) for a in self.layer.with_tag(self.tag)]

    def cleanup(self) -> int:
        """Remove every docstring annotation of the document."""
        return self.layer.remove_all(self.tag)

    def on_document_close(self) -> None:
        removed = self.cleanup()
        self.layer.show_tag(self.tag)
        self.state.hidden = False
        log.debug("document closed, %d annotation(s) released", removed)
