"""
Anchors: resolvable, in-memory forms of selectors.

Each anchor kind converts between a live Range and one selector variant
within a CoordinateSpace. Anchors are immutable and hold no document state
beyond what their selector describes (RangeAnchor wraps its range).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Self

from lxml import etree

from anchoring.config import CONTEXT_LENGTH, MIN_QUOTE_LENGTH, validate_offsets
from anchoring.dom import CoordinateSpace, Range, TextNode, closest, element_at, find_by_id, path_to
from anchoring.errors import DomLookupError, MissingParameterError, NoMatchFoundError, OutOfRangeError
from anchoring.logging_config import logger
from anchoring.matcher import DifflibMatcher
from anchoring.matching import MatchOptions, MatchPort
from anchoring.selectors import (
    FragmentSelector,
    RangeSelector,
    Selector,
    TextPositionSelector,
    TextQuoteSelector,
)
from anchoring.walker import TextOffsetWalker, Whence


class Anchor(ABC):
    """
    Common interface of all anchor kinds.

    Subclasses must implement all four conversions; a kind that misses one
    cannot be instantiated.
    """

    @classmethod
    @abstractmethod
    def from_range(cls, range_: Range, space: CoordinateSpace) -> Self:
        """Describe a live range."""

    @classmethod
    @abstractmethod
    def from_selector(cls, selector: Selector, space: CoordinateSpace) -> Self:
        """Rebuild an anchor from its persisted selector."""

    @abstractmethod
    def to_range(self, space: CoordinateSpace) -> Range:
        """Resolve the anchor to a live range."""

    @abstractmethod
    def to_selector(self, space: CoordinateSpace) -> Selector:
        """Serialize the anchor."""


@dataclass(frozen=True)
class FragmentAnchor(Anchor):
    """Anchor addressing a whole element by its id attribute."""

    id: str

    def __post_init__(self) -> None:
        if not self.id:
            raise MissingParameterError("id", "FragmentAnchor")

    @classmethod
    def from_range(cls, range_: Range, space: CoordinateSpace) -> Self:
        element = closest(range_.common_ancestor(), lambda elem: bool(elem.get("id")))
        if element is None:
            raise MissingParameterError("id", "FragmentAnchor: no ancestor carries an id")
        return cls(element.get("id"))

    @classmethod
    def from_selector(cls, selector: FragmentSelector, space: CoordinateSpace) -> Self:
        return cls(selector.value)

    def to_range(self, space: CoordinateSpace) -> Range:
        element = find_by_id(space.root, self.id)
        if element is None:
            raise DomLookupError(f"No element with id '{self.id}'")
        return Range.select(element)

    def to_selector(self, space: CoordinateSpace) -> FragmentSelector:
        return FragmentSelector(value=self.id)


def _boundary_to_path(
    node: TextNode,
    offset: int,
    root: etree._Element,
    ignored: set[etree._Element],
) -> tuple[str, int]:
    """Express a boundary as (container path, offset in container text)."""
    container = closest(node.parent, lambda elem: elem is root or elem not in ignored)
    walker = TextOffsetWalker(CoordinateSpace(container))
    return path_to(container, root, ignored), walker.seek_node(node) + offset


def _boundary_from_path(
    path: str,
    offset: int,
    root: etree._Element,
    ignored: set[etree._Element],
) -> tuple[TextNode, int]:
    container = element_at(path, root, ignored)
    walker = TextOffsetWalker(CoordinateSpace(container))
    base = walker.seek(offset)
    return walker.node, offset - base


@dataclass(frozen=True)
class RangeAnchor(Anchor):
    """Anchor wrapping a live range, persisted as tree paths and offsets."""

    range: Range

    @classmethod
    def from_range(cls, range_: Range, space: CoordinateSpace) -> Self:
        return cls(range_)

    @classmethod
    def from_selector(cls, selector: RangeSelector, space: CoordinateSpace) -> Self:
        """
        Rebuild the range from container paths and offsets.

        Raises:
            DomLookupError: If a container path names no element
            OutOfRangeError: If an offset exceeds its container's text
        """
        ignored = space.ignored_elements()
        start_node, start_offset = _boundary_from_path(
            selector.start_container, selector.start_offset, space.root, ignored
        )
        end_node, end_offset = _boundary_from_path(
            selector.end_container, selector.end_offset, space.root, ignored
        )
        return cls(Range(start_node, start_offset, end_node, end_offset).normalize(space))

    def to_range(self, space: CoordinateSpace) -> Range:
        return self.range.normalize(space)

    def to_selector(self, space: CoordinateSpace) -> RangeSelector:
        """Serialize the range; wrapper elements named by ignore_selector are skipped."""
        ignored = space.ignored_elements()
        range_ = self.range.normalize(space)
        start_container, start_offset = _boundary_to_path(
            range_.start_node, range_.start_offset, space.root, ignored
        )
        end_container, end_offset = _boundary_to_path(
            range_.end_node, range_.end_offset, space.root, ignored
        )
        return RangeSelector(
            start_container=start_container,
            start_offset=start_offset,
            end_container=end_container,
            end_offset=end_offset,
        )


@dataclass(frozen=True)
class TextPositionAnchor(Anchor):
    """Anchor addressing text by corpus offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            if getattr(self, name) is None:
                raise MissingParameterError(name, "TextPositionAnchor")
        try:
            validate_offsets(self.start, self.end)
        except ValueError as e:
            raise OutOfRangeError(str(e)) from e

    @classmethod
    def from_range(cls, range_: Range, space: CoordinateSpace) -> Self:
        range_ = range_.normalize(space)
        walker = TextOffsetWalker(space)
        start = walker.seek_node(range_.start_node) + range_.start_offset
        end = walker.seek_node(range_.end_node) + range_.end_offset
        return cls(start, end)

    @classmethod
    def from_selector(cls, selector: TextPositionSelector, space: CoordinateSpace) -> Self:
        return cls(selector.start, selector.end)

    def to_range(self, space: CoordinateSpace) -> Range:
        """
        Locate the offsets in the space.

        Raises:
            OutOfRangeError: If the offsets lie beyond the corpus
        """
        walker = TextOffsetWalker(space)
        base = walker.seek(self.start)
        start_node, start_offset = walker.node, self.start - base
        if start_node is None:
            raise OutOfRangeError("Coordinate space holds no text")
        if self.end == self.start:
            return Range(start_node, start_offset, start_node, start_offset)

        # Land on the node holding the last character, not at offset 0 of the next
        base = walker.seek(self.end - self.start - 1, Whence.RELATIVE)
        return Range(start_node, start_offset, walker.node, self.end - base)

    def to_selector(self, space: CoordinateSpace) -> TextPositionSelector:
        return TextPositionSelector(start=self.start, end=self.end)


@dataclass(frozen=True)
class TextQuoteAnchor(Anchor):
    """
    Anchor addressing text by its quote and surrounding context.

    start/end record where the quote was when the anchor was created. They
    steer the search but are not trusted and never persisted.
    """

    quote: str
    prefix: str | None = None
    suffix: str | None = None
    start: int | None = None
    end: int | None = None

    def __post_init__(self) -> None:
        if not self.quote:
            raise MissingParameterError("quote", "TextQuoteAnchor")

    @classmethod
    def from_range(cls, range_: Range, space: CoordinateSpace) -> Self:
        position = TextPositionAnchor.from_range(range_, space)
        corpus = space.text()
        return cls(
            quote=corpus[position.start : position.end],
            prefix=corpus[max(0, position.start - CONTEXT_LENGTH) : position.start],
            suffix=corpus[position.end : position.end + CONTEXT_LENGTH],
            start=position.start,
            end=position.end,
        )

    @classmethod
    def from_selector(
        cls,
        selector: TextQuoteSelector,
        space: CoordinateSpace,
        position: TextPositionSelector | None = None,
    ) -> Self:
        """Rebuild from a quote selector, optionally hinted by a position selector."""
        return cls(
            quote=selector.exact,
            prefix=selector.prefix,
            suffix=selector.suffix,
            start=position.start if position else None,
            end=position.end if position else None,
        )

    def to_range(self, space: CoordinateSpace, matcher: MatchPort | None = None) -> Range:
        """
        Find the quote in the space's corpus.

        With both prefix and suffix the search uses context; a quote alone is
        only searched when at least MIN_QUOTE_LENGTH characters long, since
        short strings match too many places.

        Args:
            space: Coordinate space to search
            matcher: Match port to use (default: DifflibMatcher)

        Raises:
            NoMatchFoundError: If no search applies or the search finds nothing
        """
        matcher = matcher or DifflibMatcher()
        corpus = space.text()
        options = MatchOptions.for_corpus(corpus)

        if self.prefix and self.suffix:
            logger.debug(f"Searching '{self.quote}' with context near {self.start}")
            result = matcher.search_fuzzy_with_context(
                text=corpus,
                prefix=self.prefix,
                suffix=self.suffix,
                pattern=self.quote,
                expected_start=self.start,
                expected_end=self.end,
                bias_to_hint=True,
                options=options,
            )
        elif len(self.quote) >= MIN_QUOTE_LENGTH:
            logger.debug(f"Searching '{self.quote}' without context near {self.start}")
            result = matcher.search_fuzzy(
                text=corpus,
                pattern=self.quote,
                expected_start=self.start,
                bias_to_hint=True,
                options=options,
            )
        else:
            raise NoMatchFoundError(
                f"Quote '{self.quote}' is shorter than {MIN_QUOTE_LENGTH} characters "
                "and has no prefix and suffix to search with"
            )

        if not result.matches:
            raise NoMatchFoundError(f"No match found for quote '{self.quote}'")

        best = result.matches[0]
        return TextPositionAnchor(best.start, best.end).to_range(space)

    def to_selector(self, space: CoordinateSpace) -> TextQuoteSelector:
        return TextQuoteSelector(exact=self.quote, prefix=self.prefix, suffix=self.suffix)
