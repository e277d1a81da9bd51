"""Shared configuration for anchor creation and resolution."""

# Characters of context captured before and after a quote
CONTEXT_LENGTH = 32

# Quotes shorter than this are only searched when prefix and suffix exist
MIN_QUOTE_LENGTH = 32

# Match distances are this many times the corpus length
MATCH_DISTANCE_FACTOR = 2

# Minimum similarity (0.0 - 1.0) for context and pattern matches
CONTEXT_MATCH_THRESHOLD = 0.5
PATTERN_MATCH_THRESHOLD = 0.5


def validate_offsets(start: int, end: int) -> None:
    """Validate a pair of text offsets.

    Args:
        start: Offset where the span begins
        end: Offset where the span ends

    Raises:
        ValueError: If the offsets are negative or inverted
    """
    if start < 0 or end < 0:
        raise ValueError(
            f"Invalid offsets: ({start}, {end}). Offsets must be non-negative"
        )
    if start > end:
        raise ValueError(
            f"Invalid offsets: ({start}, {end}). Start must not exceed end"
        )
