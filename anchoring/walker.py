"""
Text offset walker.

Maps between character offsets in the corpus of a coordinate space and
positions on its text nodes. Offsets count characters of the concatenated
text of the nodes passing the space's filter, in document order.
"""

from __future__ import annotations

from enum import Enum, auto
from itertools import accumulate

from anchoring.dom import CoordinateSpace, TextNode
from anchoring.errors import OutOfRangeError


class Whence(Enum):
    """Reference point for TextOffsetWalker.seek."""

    ABSOLUTE = auto()  # From the start of the corpus
    RELATIVE = auto()  # From the current position


class TextOffsetWalker:
    """
    Cursor over the text nodes of one coordinate space.

    The cursor holds a character position. The node under the cursor for
    position k is the first node whose text ends after k, or the last node
    when k is the corpus length. That choice depends only on k, so walkers
    over the same space always agree on node and base offset.

    Example:
        walker = TextOffsetWalker(CoordinateSpace(root))
        base = walker.seek(12)
        node, offset = walker.node, 12 - base
    """

    def __init__(self, space: CoordinateSpace) -> None:
        self._nodes: list[TextNode] = space.text_nodes()
        self._ends: list[int] = list(accumulate(node.length for node in self._nodes))
        self._index = 0
        self._position = 0
        self._settle(0)

    @property
    def length(self) -> int:
        """Total number of characters in the space."""
        return self._ends[-1] if self._ends else 0

    @property
    def node(self) -> TextNode | None:
        """Text node under the cursor, None when the space has no text nodes."""
        return self._nodes[self._index] if self._nodes else None

    def tell(self) -> int:
        """Return the current character position."""
        return self._position

    def seek(self, amount: int, whence: Whence = Whence.ABSOLUTE) -> int:
        """
        Move the cursor to a character position.

        Args:
            amount: Target offset (ABSOLUTE) or distance to move (RELATIVE)
            whence: Reference point for amount

        Returns:
            Offset at the start of the node now under the cursor; the
            position within that node is target - return value

        Raises:
            OutOfRangeError: If the target lies outside [0, length]
        """
        target = amount if whence is Whence.ABSOLUTE else self._position + amount
        if not 0 <= target <= self.length:
            raise OutOfRangeError(
                f"Cannot seek to offset {target}; text length is {self.length}"
            )
        self._settle(target)
        return self._base()

    def seek_node(self, node: TextNode) -> int:
        """
        Move the cursor to the start of a text node.

        Returns:
            Offset at the start of the node

        Raises:
            OutOfRangeError: If the node is not part of the space
        """
        try:
            index = self._nodes.index(node)
        except ValueError as e:
            raise OutOfRangeError("Text node is not part of the coordinate space") from e
        return self.seek(self._ends[index] - self._nodes[index].length)

    def _base(self) -> int:
        if not self._nodes:
            return 0
        return self._ends[self._index] - self._nodes[self._index].length

    def _settle(self, target: int) -> None:
        # Walk from the current node in whichever direction the target lies
        if self._nodes:
            last = len(self._nodes) - 1
            index = self._index
            while index < last and target >= self._ends[index]:
                index += 1
            while index > 0 and target < self._ends[index - 1]:
                index -= 1
            self._index = index
        self._position = target
