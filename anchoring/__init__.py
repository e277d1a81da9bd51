"""
anchoring - Resilient anchors for annotations on XML/HTML documents.

This library provides:
- W3C Web Annotation selectors (Fragment, Range, TextPosition, TextQuote)
- Anchors converting between live ranges and those selectors
- A text offset walker mapping corpus offsets to lxml text nodes
- Fuzzy quote matching for anchoring text after the document changed

Import patterns:

    # Primary API (recommended)
    from anchoring import CoordinateSpace, anchor, describe

    # Full submodule imports (for individual anchor kinds)
    from anchoring.anchors import TextPositionAnchor, TextQuoteAnchor
    from anchoring.walker import TextOffsetWalker, Whence

Example usage:

    from anchoring import CoordinateSpace, TextPositionAnchor, anchor, describe, parse_document

    space = CoordinateSpace(parse_document("<p>The quick brown fox</p>"))
    range_ = TextPositionAnchor(10, 19).to_range(space)
    selectors = describe(range_, space)

    # Later, possibly after the document was edited
    found = anchor(selectors, space)
    print(found.text())
"""

from anchoring.anchors import (
    Anchor,
    FragmentAnchor,
    RangeAnchor,
    TextPositionAnchor,
    TextQuoteAnchor,
)
from anchoring.dom import CoordinateSpace, Range, TextNode, exclude_elements, parse_document
from anchoring.errors import (
    AnchorError,
    DomLookupError,
    MissingParameterError,
    NoMatchFoundError,
    OutOfRangeError,
)
from anchoring.resolve import anchor, describe
from anchoring.selectors import (
    FragmentSelector,
    RangeSelector,
    TextPositionSelector,
    TextQuoteSelector,
    parse_selector,
    parse_selectors,
    selectors_from_annotation,
)

# Primary public API
__all__ = [
    "Anchor",
    "AnchorError",
    "CoordinateSpace",
    "DomLookupError",
    "FragmentAnchor",
    "FragmentSelector",
    "MissingParameterError",
    "NoMatchFoundError",
    "OutOfRangeError",
    "Range",
    "RangeAnchor",
    "RangeSelector",
    "TextNode",
    "TextPositionAnchor",
    "TextPositionSelector",
    "TextQuoteAnchor",
    "TextQuoteSelector",
    "anchor",
    "describe",
    "exclude_elements",
    "parse_document",
    "parse_selector",
    "parse_selectors",
    "selectors_from_annotation",
]
