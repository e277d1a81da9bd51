"""
Approximate match port.

The quote anchor re-finds moved or altered text through this interface. Any
fuzzy matcher can serve as long as it returns ranked start/end candidates;
DifflibMatcher in anchoring.matcher is the default.
"""

from __future__ import annotations

from typing import Protocol, Self

from pydantic import BaseModel, Field

from anchoring.config import (
    CONTEXT_MATCH_THRESHOLD,
    MATCH_DISTANCE_FACTOR,
    PATTERN_MATCH_THRESHOLD,
)


class MatchOptions(BaseModel):
    """
    Tolerances for a fuzzy search.

    Attributes:
        match_distance: Maximum distance of a match from the expected start
        context_match_distance: Same limit for context-aware searches
        context_match_threshold: Minimum similarity of prefix/suffix context
        pattern_match_threshold: Minimum similarity of the quote itself
        flex_context: Also compare context with whitespace normalized
        with_fuzzy_comparison: Consider inexact candidates, not only exact ones
    """

    match_distance: int = Field(ge=0)
    context_match_distance: int = Field(ge=0)
    context_match_threshold: float = Field(default=CONTEXT_MATCH_THRESHOLD, ge=0.0, le=1.0)
    pattern_match_threshold: float = Field(default=PATTERN_MATCH_THRESHOLD, ge=0.0, le=1.0)
    flex_context: bool = True
    with_fuzzy_comparison: bool = True

    @classmethod
    def for_corpus(cls, text: str) -> Self:
        """Default options with distances scaled to the corpus length."""
        distance = MATCH_DISTANCE_FACTOR * len(text)
        return cls(match_distance=distance, context_match_distance=distance)


class Match(BaseModel):
    """
    A single match location in text.

    Attributes:
        start: Character offset where the match begins
        end: Character offset where the match ends
        confidence: Match confidence (1.0 for exact, <1.0 for fuzzy)
        matched_text: The actual text that was matched
    """

    start: int
    end: int
    confidence: float
    matched_text: str = ""


class MatchResult(BaseModel):
    """Matches of a search, best first."""

    matches: list[Match] = []

    @property
    def found(self) -> bool:
        return bool(self.matches)

    @property
    def match(self) -> Match | None:
        """The best match, if any."""
        return self.matches[0] if self.matches else None


class MatchPort(Protocol):
    """Capability for approximate text search over a corpus."""

    def search_fuzzy_with_context(
        self,
        text: str,
        prefix: str,
        suffix: str,
        pattern: str,
        expected_start: int | None,
        expected_end: int | None,
        bias_to_hint: bool,
        options: MatchOptions,
    ) -> MatchResult:
        """Find pattern in text where it is surrounded by prefix and suffix."""
        ...

    def search_fuzzy(
        self,
        text: str,
        pattern: str,
        expected_start: int | None,
        bias_to_hint: bool,
        options: MatchOptions,
    ) -> MatchResult:
        """Find pattern in text without context."""
        ...
