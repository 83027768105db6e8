"""
docstrings/annotations.py

Range-scoped visual annotations over a document.

An annotation never touches the text.  It marks ``[start, end)`` with a tag;
when the layer's invisibility flag for that tag is on, renderers drop the
range from display and show the optional ``after_string`` in its place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Set

log = logging.getLogger(__name__)


@dataclass(eq=False)
class Annotation:
    """A tagged range.  Compared by identity: two hides of the same range
    are two annotations.  Offsets move with edits (see ``apply_edit``)."""
    start: int
    end: int
    tag: str
    after_string: Optional[str] = None
    evaporate: bool = True

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end


class AnnotationLayer:
    """All annotations of one document, plus its invisibility flags.

    Listeners registered with ``subscribe`` are called with no arguments
    after every change.
    """

    def __init__(self):
        self._annotations: List[Annotation] = []
        self._hidden_tags: Set[str] = set()
        self._listeners: List[Callable[[], None]] = []

    def __iter__(self) -> Iterator[Annotation]:
        return iter(sorted(self._annotations, key=lambda a: (a.start, a.end)))

    def __len__(self) -> int:
        return len(self._annotations)

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    # -- annotations ------------------------------------------------------

    def add(
        self,
        start: int,
        end: int,
        tag: str,
        after_string: Optional[str] = None,
        evaporate: bool = True,
    ) -> Annotation:
        """Create an annotation over ``[start, end)``.

        Raises:
            ValueError: The range is empty or inverted.
        """
        if start >= end:
            raise ValueError(f"cannot annotate empty range {start}..{end}")
        ann = Annotation(start, end, tag, after_string or None, evaporate)
        self._annotations.append(ann)
        self._changed()
        return ann

    def annotations_in(self, start: int, end: int, tag: Optional[str] = None) -> List[Annotation]:
        """Annotations overlapping ``[start, end)``, optionally of one tag."""
        return [
            a for a in self
            if a.overlaps(start, end) and (tag is None or a.tag == tag)
        ]

    def with_tag(self, tag: str) -> List[Annotation]:
        return [a for a in self if a.tag == tag]

    def remove(self, annotation: Annotation) -> None:
        self._annotations = [a for a in self._annotations if a is not annotation]
        self._changed()

    def remove_all(self, tag: str) -> int:
        """Remove every annotation carrying ``tag``; returns how many."""
        kept = [a for a in self._annotations if a.tag != tag]
        removed = len(self._annotations) - len(kept)
        if removed:
            self._annotations = kept
            self._changed()
        return removed

    def apply_edit(self, pos: int, removed: int, inserted: int) -> int:
        """Follow a text edit replacing ``removed`` chars at ``pos`` with
        ``inserted`` new ones.

        Evaporating annotations touched by the edit are discarded; a pure
        insertion touches annotations strictly containing ``pos``.  The
        rest are shifted.  Returns the number of annotations discarded.
        """
        edit_end = pos + removed
        delta = inserted - removed

        def touched(a: Annotation) -> bool:
            if removed == 0:
                return a.start < pos < a.end
            return a.overlaps(pos, edit_end)

        def moved(x: int) -> int:
            if x <= pos:
                return x
            if x < edit_end:
                return pos + inserted
            return x + delta

        kept: List[Annotation] = []
        discarded = 0
        for a in self._annotations:
            if a.evaporate and touched(a):
                discarded += 1
                continue
            a.start, a.end = moved(a.start), moved(a.end)
            if a.start >= a.end:
                discarded += 1
                continue
            kept.append(a)

        if discarded:
            log.debug("edit at %d (-%d +%d) discarded %d annotation(s)", pos, removed, inserted, discarded)
        self._annotations = kept
        if discarded or removed or inserted:
            self._changed()
        return discarded

    # -- invisibility -----------------------------------------------------

    def hide_tag(self, tag: str) -> None:
        """Make annotations carrying ``tag`` invisible."""
        if tag not in self._hidden_tags:
            self._hidden_tags.add(tag)
            self._changed()

    def show_tag(self, tag: str) -> None:
        if tag in self._hidden_tags:
            self._hidden_tags.discard(tag)
            self._changed()

    def is_hidden_tag(self, tag: str) -> bool:
        return tag in self._hidden_tags

    def invisible_annotations(self) -> List[Annotation]:
        """Annotations that are currently excluded from display."""
        return [a for a in self if a.tag in self._hidden_tags]
