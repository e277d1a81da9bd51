"""
Step definitions for re-anchoring scenarios.
"""

from behave import given, then, when  # type: ignore[import-untyped]

from anchoring import errors
from anchoring.anchors import FragmentAnchor, TextPositionAnchor, TextQuoteAnchor
from anchoring.dom import CoordinateSpace, parse_document
from anchoring.resolve import anchor, describe
from anchoring.selectors import selectors_from_annotation


# === Document Setup ===


@given("the document:")  # type: ignore[misc]
def step_given_document(context):
    """Parse the document under test."""
    context.space = CoordinateSpace(parse_document(context.text.strip()))


@given("the document is replaced by:")  # type: ignore[misc]
def step_given_document_replaced(context):
    """Swap in an edited version of the document."""
    context.space = CoordinateSpace(parse_document(context.text.strip()))


# === Annotation Setup ===


@given("an annotation describing offsets {start:d} to {end:d}")  # type: ignore[misc]
def step_given_described(context, start, end):
    """Describe a span of the current document with all selector kinds."""
    range_ = TextPositionAnchor(start, end).to_range(context.space)
    context.selectors = describe(range_, context.space)


@given("annotation:")  # type: ignore[misc]
def step_given_annotation(context):
    """Load selectors from Web Annotation YAML."""
    context.selectors = selectors_from_annotation(context.text)


@given('a quote anchor for "{quote}" without context')  # type: ignore[misc]
def step_given_quote_anchor(context, quote):
    context.anchor = TextQuoteAnchor(quote)


@given('a fragment anchor for "{fragment_id}"')  # type: ignore[misc]
def step_given_fragment_anchor(context, fragment_id):
    context.anchor = FragmentAnchor(fragment_id)


# === Resolution Actions ===


@when("I anchor the annotation")  # type: ignore[misc]
def step_when_anchor(context):
    context.range = anchor(context.selectors, context.space)


@when("I resolve the position {start:d} to {end:d}")  # type: ignore[misc]
def step_when_resolve_position(context, start, end):
    context.range = TextPositionAnchor(start, end).to_range(context.space)


@when("I resolve the quote anchor")  # type: ignore[misc]
@when("I resolve the fragment anchor")  # type: ignore[misc]
def step_when_resolve_anchor(context):
    """Resolve the anchor, keeping the error for later assertions."""
    try:
        context.range = context.anchor.to_range(context.space)
    except errors.AnchorError as e:
        context.error = e


# === Assertions ===


@then('the anchored text is "{expected_text}"')  # type: ignore[misc]
def step_then_text(context, expected_text):
    actual = context.range.text()
    assert actual == expected_text, f"Expected '{expected_text}' but got '{actual}'"


@then("the anchored offsets are {start:d} to {end:d}")  # type: ignore[misc]
def step_then_offsets(context, start, end):
    position = TextPositionAnchor.from_range(context.range, context.space)
    assert (position.start, position.end) == (start, end), (
        f"Expected {start}-{end} but got {position.start}-{position.end}"
    )


@then("anchoring fails with {error_name}")  # type: ignore[misc]
def step_then_fails(context, error_name):
    assert hasattr(context, "error"), "Expected an error but resolution succeeded"
    expected = getattr(errors, error_name)
    assert isinstance(context.error, expected), (
        f"Expected {error_name} but got {type(context.error).__name__}"
    )
