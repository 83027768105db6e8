"""
docstrings/models.py

Value types shared by the detector and the hiding engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


ANNOTATION_TAG = "docfold-docstring"


@dataclass(frozen=True)
class DocstringSpan:
    """A docstring literal ``[start, end)`` including both quotes."""
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"empty docstring span: {self.start}..{self.end}")

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def content_length(self) -> int:
        """Characters between the quotes."""
        return self.end - self.start - 2


class HideStyleKind(Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FIRST_LINE = "first-line"


@dataclass(frozen=True)
class HideStyle:
    """How much of a docstring stays visible when it is hidden.

    Use the constructors ``complete()``, ``partial(n)`` and ``first_line()``.
    ``visible_chars`` only matters for PARTIAL.
    """
    kind: HideStyleKind = HideStyleKind.COMPLETE
    visible_chars: int = 0

    def __post_init__(self):
        if self.visible_chars < 0:
            raise ValueError("visible_chars must be non-negative")

    @classmethod
    def complete(cls) -> "HideStyle":
        return cls(HideStyleKind.COMPLETE)

    @classmethod
    def partial(cls, visible_chars: int) -> "HideStyle":
        return cls(HideStyleKind.PARTIAL, visible_chars)

    @classmethod
    def first_line(cls) -> "HideStyle":
        return cls(HideStyleKind.FIRST_LINE)

    @classmethod
    def from_name(cls, name: str, partial_chars: int = 0) -> "HideStyle":
        """Build a style from its settings name.

        Raises:
            ValueError: Unknown style name or negative character count.
        """
        kind = HideStyleKind(name)
        if kind is HideStyleKind.PARTIAL:
            return cls.partial(partial_chars)
        return cls(kind)

    def describe(self) -> str:
        if self.kind is HideStyleKind.PARTIAL:
            return f"partial ({self.visible_chars} chars)"
        return self.kind.value


@dataclass
class BufferHiddenState:
    """Whether the last whole-document operation hid or showed docstrings."""
    hidden: bool = False


class ToggleOutcome(Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"
    NOT_FOUND = "not-found"


@dataclass(frozen=True)
class ToggleAllResult:
    """Result of a whole-document toggle.

    Attributes:
        hidden: State after the toggle.
        found: Docstrings found when hiding; 0 when showing.
        annotated: Annotations created (a span may have nothing to hide).
    """
    hidden: bool
    found: int = 0
    annotated: int = 0


@dataclass(frozen=True)
class DocstringInfo:
    """One row of the docstring inspection feed."""
    span: DocstringSpan
    char_count: int
    first_lines: List[str] = field(default_factory=list)
    last_lines: List[str] = field(default_factory=list)
    hide_range: Optional[Tuple[int, int]] = None
