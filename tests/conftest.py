"""
Pytest configuration and fixtures for anchoring tests
"""

import pytest

from anchoring.dom import CoordinateSpace, parse_document
from anchoring.logging_config import ThreadIndent

# Corpus: "The quick brown fox jumps over the lazy dog"
ARTICLE_XML = (
    '<article><p id="intro">The quick <b>brown</b> fox</p> '
    "<p>jumps over the lazy dog</p></article>"
)

# Same article after "red " was inserted at offset 4
EDITED_ARTICLE_XML = (
    '<article><p id="intro">The red quick <b>brown</b> fox</p> '
    "<p>jumps over the lazy dog</p></article>"
)


@pytest.fixture(autouse=True)
def reset_indent():
    """Start every test with flat log indentation"""
    ThreadIndent.reset()
    yield
    ThreadIndent.reset()


@pytest.fixture
def article():
    """Root element of the sample article"""
    return parse_document(ARTICLE_XML)


@pytest.fixture
def space(article):
    """Coordinate space over the whole sample article"""
    return CoordinateSpace(article)


@pytest.fixture
def edited_space():
    """Coordinate space over the edited article"""
    return CoordinateSpace(parse_document(EDITED_ARTICLE_XML))


@pytest.fixture
def make_space():
    """Factory fixture building a coordinate space from markup.

    Usage:
        def test_example(make_space):
            space = make_space("<p>text</p>")
    """

    def _make(markup: str, **kwargs) -> CoordinateSpace:
        return CoordinateSpace(parse_document(markup), **kwargs)

    return _make


@pytest.fixture
def article_xml() -> str:
    return ARTICLE_XML


@pytest.fixture
def edited_article_xml() -> str:
    return EDITED_ARTICLE_XML
