"""Tree access for anchoring: text nodes, live ranges and coordinate spaces.

lxml keeps character data on elements instead of in separate nodes: an
element's ``text`` comes before its first child and its ``tail`` follows its
end tag. A TextNode names one of those slots so that it can be addressed the
way a DOM text node is.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Self

from lxml import etree
from lxml import html as lxml_html

from anchoring.errors import DomLookupError, OutOfRangeError

TEXT = "text"
TAIL = "tail"

# One path step, e.g. "p[2]" or "span"
_STEP_PATTERN = re.compile(r"([^\[\]/]+)(?:\[(\d+)\])?")


def get_tag_name(elem: etree._Element) -> str:
    """Get tag name without namespace prefix.

    Args:
        elem: XML element

    Returns:
        Tag name without namespace (e.g., "p" not "{ns}p")
    """
    tag = elem.tag
    if isinstance(tag, str) and "}" in tag:
        return tag.split("}")[-1]
    return tag if isinstance(tag, str) else ""


@dataclass(frozen=True)
class TextNode:
    """A text-bearing slot of an element: its ``text`` or its ``tail``."""

    element: etree._Element
    slot: Literal["text", "tail"] = TEXT

    @property
    def value(self) -> str:
        if self.slot == TAIL:
            return self.element.tail or ""
        if not isinstance(self.element.tag, str):
            return ""
        return self.element.text or ""

    @property
    def length(self) -> int:
        return len(self.value)

    @property
    def parent(self) -> etree._Element | None:
        """The element that contains this text."""
        if self.slot == TEXT:
            return self.element
        return self.element.getparent()


TextFilter = Callable[[TextNode], bool]


def _walk(elem: etree._Element, include_tail: bool) -> Iterator[TextNode]:
    # Comments and processing instructions only contribute their tail
    if isinstance(elem.tag, str):
        yield TextNode(elem, TEXT)
        for child in elem:
            yield from _walk(child, True)
    if include_tail:
        yield TextNode(elem, TAIL)


def iter_text_nodes(
    root: etree._Element,
    text_filter: TextFilter | None = None,
) -> Iterator[TextNode]:
    """Yield the text nodes under root in document order.

    The root's own tail lies outside the root and is not included.

    Args:
        root: Element whose text nodes to walk
        text_filter: Optional predicate; nodes failing it are skipped

    Yields:
        TextNode objects, including empty ones
    """
    for node in _walk(root, include_tail=False):
        if text_filter is None or text_filter(node):
            yield node


def tree_root(elem: etree._Element) -> etree._Element:
    """Return the topmost ancestor of an element."""
    top = elem
    parent = top.getparent()
    while parent is not None:
        top = parent
        parent = top.getparent()
    return top


def closest(
    elem: etree._Element | None,
    predicate: Callable[[etree._Element], bool],
) -> etree._Element | None:
    """Find the nearest ancestor-or-self of elem satisfying predicate."""
    while elem is not None:
        if isinstance(elem.tag, str) and predicate(elem):
            return elem
        elem = elem.getparent()
    return None


def find_by_id(root: etree._Element, element_id: str) -> etree._Element | None:
    """Find the element under root (root included) whose id attribute matches."""
    found = root.xpath("descendant-or-self::*[@id=$element_id]", element_id=element_id)
    return found[0] if found else None


def exclude_elements(xpath: str, root: etree._Element) -> TextFilter:
    """Build a text filter rejecting text inside elements matching xpath.

    The tail of a matching element follows its end tag and is kept.

    Args:
        xpath: Expression evaluated relative to root (e.g. ".//mark")
        root: Element the expression is evaluated against

    Returns:
        Predicate for use as a CoordinateSpace text filter
    """
    excluded = set(root.xpath(xpath))

    def text_filter(node: TextNode) -> bool:
        elem = node.parent
        while elem is not None:
            if elem in excluded:
                return False
            if elem is root:
                break
            elem = elem.getparent()
        return True

    return text_filter


@dataclass(frozen=True)
class CoordinateSpace:
    """The (root, filter) pair that defines what offsets 0..N mean.

    Attributes:
        root: Element whose text forms the corpus
        text_filter: Optional predicate excluding text nodes from the corpus
        ignore_selector: Optional XPath (relative to root) of wrapper elements
            that must not appear in serialized tree paths
    """

    root: etree._Element
    text_filter: TextFilter | None = None
    ignore_selector: str | None = None

    def text_nodes(self) -> list[TextNode]:
        return list(iter_text_nodes(self.root, self.text_filter))

    def text(self) -> str:
        """The corpus: concatenated text of all nodes in the space."""
        return "".join(node.value for node in iter_text_nodes(self.root, self.text_filter))

    def ignored_elements(self) -> set[etree._Element]:
        if not self.ignore_selector:
            return set()
        return set(self.root.xpath(self.ignore_selector))


@dataclass(frozen=True)
class Range:
    """A live selection between two (text node, offset) boundaries."""

    start_node: TextNode
    start_offset: int
    end_node: TextNode
    end_offset: int

    @classmethod
    def select(cls, elem: etree._Element) -> Self:
        """Create a range spanning all text of an element."""
        nodes = list(iter_text_nodes(elem))
        if not nodes:
            raise DomLookupError(f"Element <{get_tag_name(elem)}> holds no text")
        return cls(nodes[0], 0, nodes[-1], nodes[-1].length)

    @property
    def collapsed(self) -> bool:
        return self.start_node == self.end_node and self.start_offset == self.end_offset

    def text(self, text_filter: TextFilter | None = None) -> str:
        """Return the text between the boundaries.

        Args:
            text_filter: Optional predicate; text of nodes failing it is left out

        Returns:
            The selected text
        """
        parts: list[str] = []
        inside = False
        for node in iter_text_nodes(tree_root(self.start_node.element)):
            if node == self.start_node:
                inside = True
            if inside and (text_filter is None or text_filter(node)):
                value = node.value
                begin = self.start_offset if node == self.start_node else 0
                stop = self.end_offset if node == self.end_node else len(value)
                parts.append(value[begin:stop])
            if node == self.end_node:
                break
        return "".join(parts)

    def common_ancestor(self) -> etree._Element:
        """Return the deepest element containing both boundaries."""
        start_chain = []
        elem = self.start_node.parent
        while elem is not None:
            start_chain.append(elem)
            elem = elem.getparent()

        elem = self.end_node.parent
        while elem is not None:
            if any(candidate is elem for candidate in start_chain):
                return elem
            elem = elem.getparent()
        raise DomLookupError("Range boundaries are in different documents")

    def normalize(self, space: CoordinateSpace) -> Range:
        """Clamp the range to text nodes of the coordinate space.

        A boundary in a node outside the space moves inward: the start to the
        beginning of the next node in the space, the end to the end of the
        previous one.

        Raises:
            OutOfRangeError: If no text of the space lies within the range
        """
        nodes = list(iter_text_nodes(tree_root(space.root)))
        position = {node: index for index, node in enumerate(nodes)}
        if self.start_node not in position or self.end_node not in position:
            raise OutOfRangeError("Range boundary is not part of the document")
        start_index = position[self.start_node]
        end_index = position[self.end_node]

        accepted = [position[node] for node in space.text_nodes()]
        first = next((i for i in accepted if i >= start_index), None)
        last = next((i for i in reversed(accepted) if i <= end_index), None)
        if first is None or last is None or first > last:
            raise OutOfRangeError("Range does not overlap the text of the coordinate space")

        start_node, end_node = nodes[first], nodes[last]
        start_offset = min(self.start_offset, start_node.length) if first == start_index else 0
        end_offset = min(self.end_offset, end_node.length) if last == end_index else end_node.length
        if first == last and start_offset > end_offset:
            raise OutOfRangeError("Range start lies after its end")
        return Range(start_node, start_offset, end_node, end_offset)


def _logical_children(
    elem: etree._Element,
    ignored: set[etree._Element],
) -> Iterator[etree._Element]:
    # Children of ignored wrappers count as children of the wrapper's parent
    for child in elem:
        if not isinstance(child.tag, str):
            continue
        if child in ignored:
            yield from _logical_children(child, ignored)
        else:
            yield child


def path_to(
    elem: etree._Element,
    root: etree._Element,
    ignored: set[etree._Element] | None = None,
) -> str:
    """Build the path of elem relative to root, skipping ignored elements.

    Args:
        elem: Element to address (must not itself be ignored)
        root: Element the path is relative to
        ignored: Wrapper elements that are transparent for the path

    Returns:
        Path such as "/div[1]/p[2]"; "/" addresses root itself

    Raises:
        DomLookupError: If elem is not inside root
    """
    ignored = ignored or set()
    steps: list[str] = []
    node = elem
    while node is not root:
        parent = node.getparent()
        while parent is not None and parent is not root and parent in ignored:
            parent = parent.getparent()
        if parent is None:
            raise DomLookupError(f"Element <{get_tag_name(elem)}> is not inside the root")

        tag = get_tag_name(node)
        index = 0
        for sibling in _logical_children(parent, ignored):
            if get_tag_name(sibling) == tag:
                index += 1
            if sibling is node:
                break
        steps.append(f"{tag}[{index}]")
        node = parent
    return "/" + "/".join(reversed(steps))


def element_at(
    path: str,
    root: etree._Element,
    ignored: set[etree._Element] | None = None,
) -> etree._Element:
    """Resolve a path produced by path_to.

    Raises:
        DomLookupError: If a step is malformed or names no element
    """
    ignored = ignored or set()
    node = root
    for step in filter(None, path.strip().strip("/").split("/")):
        match = _STEP_PATTERN.fullmatch(step)
        if match is None:
            raise DomLookupError(f"Malformed path step '{step}' in '{path}'")
        tag = match.group(1)
        index = int(match.group(2) or 1)
        candidates = [
            child for child in _logical_children(node, ignored) if get_tag_name(child) == tag
        ]
        if not 1 <= index <= len(candidates):
            raise DomLookupError(f"No element at '{path}' (step '{step}')")
        node = candidates[index - 1]
    return node


def parse_document(
    source: str | bytes | Path,
    html: bool | None = None,
) -> etree._Element:
    """Parse XML or HTML into an element tree and return its root.

    Args:
        source: Markup text, or a Path to a file
        html: Parse as HTML; when None, decided from the file suffix
            (.html/.htm) and False for markup strings

    Returns:
        Root element of the parsed document
    """
    if isinstance(source, Path):
        if html is None:
            html = source.suffix.lower() in {".html", ".htm"}
        parser = lxml_html.HTMLParser() if html else etree.XMLParser()
        return etree.parse(str(source), parser).getroot()

    if html:
        return lxml_html.document_fromstring(source)
    if isinstance(source, str):
        source = source.encode("utf-8")
    return etree.fromstring(source)
