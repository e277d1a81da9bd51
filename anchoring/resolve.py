"""
Describe ranges with every selector kind and anchor them again.

anchor() tries the most precise selector first and falls back to the quote,
which alone survives edits to the document.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from anchoring.anchors import FragmentAnchor, RangeAnchor, TextPositionAnchor, TextQuoteAnchor
from anchoring.dom import CoordinateSpace, Range
from anchoring.errors import AnchorError, MissingParameterError, NoMatchFoundError
from anchoring.logging_config import logger
from anchoring.matching import MatchPort
from anchoring.selectors import (
    FragmentSelector,
    RangeSelector,
    Selector,
    TextPositionSelector,
    TextQuoteSelector,
)


def describe(range_: Range, space: CoordinateSpace) -> list[Selector]:
    """
    Build all selectors for a live range.

    Returns a RangeSelector, TextPositionSelector and TextQuoteSelector, plus
    a FragmentSelector when an ancestor of the range carries an id.
    """
    selectors: list[Selector] = [
        RangeAnchor.from_range(range_, space).to_selector(space),
        TextPositionAnchor.from_range(range_, space).to_selector(space),
        TextQuoteAnchor.from_range(range_, space).to_selector(space),
    ]
    try:
        selectors.append(FragmentAnchor.from_range(range_, space).to_selector(space))
    except MissingParameterError:
        logger.debug("No id-carrying ancestor; skipping FragmentSelector")
    return selectors


def _check_quote(range_: Range, quote: TextQuoteSelector, space: CoordinateSpace) -> None:
    text = range_.text(space.text_filter)
    if text != quote.exact:
        raise NoMatchFoundError(f"Resolved text '{text}' does not match quote '{quote.exact}'")


def _first(selectors: Iterable[Selector], kind: type) -> Selector | None:
    return next((s for s in selectors if isinstance(s, kind)), None)


def anchor(
    selectors: Iterable[Selector],
    space: CoordinateSpace,
    matcher: MatchPort | None = None,
) -> Range:
    """
    Resolve selectors to a live range.

    Order: RangeSelector, TextPositionSelector, then TextQuoteSelector with
    the position as a hint. When a quote is known, results of the precise
    kinds must reproduce it exactly. A FragmentSelector is only used when no
    text selector is given.

    Args:
        selectors: Selectors of one annotation target
        space: Coordinate space to resolve in
        matcher: Match port for the quote (default: DifflibMatcher)

    Returns:
        The resolved range

    Raises:
        NoMatchFoundError: If every applicable selector fails
    """
    selectors = list(selectors)
    range_selector = _first(selectors, RangeSelector)
    position = _first(selectors, TextPositionSelector)
    quote = _first(selectors, TextQuoteSelector)
    fragment = _first(selectors, FragmentSelector)

    attempts: list[tuple[str, Callable[[], Range]]] = []
    if range_selector is not None:
        attempts.append(
            ("RangeSelector", lambda: RangeAnchor.from_selector(range_selector, space).to_range(space))
        )
    if position is not None:
        attempts.append(
            (
                "TextPositionSelector",
                lambda: TextPositionAnchor.from_selector(position, space).to_range(space),
            )
        )
    if quote is not None:
        attempts.append(
            (
                "TextQuoteSelector",
                lambda: TextQuoteAnchor.from_selector(quote, space, position).to_range(
                    space, matcher
                ),
            )
        )
    if fragment is not None and not attempts:
        attempts.append(
            ("FragmentSelector", lambda: FragmentAnchor.from_selector(fragment, space).to_range(space))
        )

    failures: list[str] = []
    for name, attempt in attempts:
        with logger.indent_block(f"Trying {name}"):
            try:
                resolved = attempt()
                if quote is not None and name != "TextQuoteSelector":
                    _check_quote(resolved, quote, space)
            except AnchorError as e:
                logger.debug(f"{name} failed: {e}")
                failures.append(f"{name}: {e}")
                continue
            logger.debug(f"{name} resolved")
            return resolved

    if not failures:
        raise NoMatchFoundError("No usable selector given")
    raise NoMatchFoundError("Could not anchor selectors (" + "; ".join(failures) + ")")
