"""Tidy-tree layout of the primary-parent forest."""

import logging

from ..config import LayoutConfig
from ..errors import CyclicParentReferenceError, NoRootError
from .models import Forest, Positions

logger = logging.getLogger(__name__)


class LayoutEngine:
    """Two-pass tidy-tree layout.

    Pass 1 computes the horizontal span reserved for every subtree, pass 2
    centres each node over its span and stacks depths vertically. The result
    is translated so the top-left node sits at the configured margins.
    """

    def __init__(self, forest: Forest, config: LayoutConfig | None = None):
        self.forest = forest
        self.config = config or LayoutConfig()
        self._subtree_widths: dict[str, float] = {}

    def calculate(self) -> Positions:
        """Compute positions for every node in the forest.

        Raises:
            NoRootError: The forest has no root.
            CyclicParentReferenceError: Some nodes are unreachable from every root.
        """
        roots = self.forest.roots
        if not roots:
            raise NoRootError(len(self.forest.children))

        for root in roots:
            self.subtree_width(root)

        positions: Positions = {}
        current_x = 0.0
        for root in roots:
            self._assign(root, current_x, 0.0, positions)
            current_x += self._subtree_widths[root] + self.config.gap_x

        unplaced = sorted(node_id for node_id in self.forest.children if node_id not in positions)
        cyclic = [node_id for node_id in unplaced if self.forest.in_cycle(node_id)]
        if cyclic:
            raise CyclicParentReferenceError(cyclic)
        if unplaced:
            # Parent chain ends at an ID outside the node set
            logger.warning(f"{len(unplaced)} node(s) have no path to a root and were not laid out: {unplaced}")

        self._apply_margins(positions)
        logger.debug(f"Laid out {len(positions)} nodes under {len(roots)} roots")
        return positions

    def subtree_width(self, node_id: str) -> float:
        """Width reserved for the subtree rooted at ``node_id`` (memoized).

        Walks the subtree in post-order with an explicit stack so deep
        chains do not hit the interpreter's recursion limit.

        Raises:
            CyclicParentReferenceError: The subtree loops back on itself.
        """
        if node_id in self._subtree_widths:
            return self._subtree_widths[node_id]

        in_progress: set[str] = set()
        stack = [(node_id, False)]
        while stack:
            current, expanded = stack.pop()
            if current in self._subtree_widths:
                continue

            children = self.forest.children_of(current)
            if not expanded and children:
                in_progress.add(current)
                stack.append((current, True))
                for child in reversed(children):
                    if child in in_progress:
                        raise CyclicParentReferenceError(sorted(in_progress))
                    if child not in self._subtree_widths:
                        stack.append((child, False))
                continue

            if not children:
                width = self.config.node_width
            else:
                total = sum(self._subtree_widths[child] for child in children)
                total += self.config.gap_x * (len(children) - 1)
                width = max(self.config.node_width, total)

            self._subtree_widths[current] = width
            in_progress.discard(current)

        return self._subtree_widths[node_id]

    def _assign(self, node_id: str, x_left: float, y: float, positions: Positions) -> None:
        # Pre-order walk; each entry carries the left edge of its reserved span
        stack = [(node_id, x_left, y)]
        while stack:
            current, left, top = stack.pop()
            width = self._subtree_widths[current]
            positions[current] = (left + (width - self.config.node_width) / 2, top)

            child_y = top + self.config.node_height + self.config.gap_y
            child_left = left
            for child in self.forest.children_of(current):
                stack.append((child, child_left, child_y))
                child_left += self._subtree_widths[child] + self.config.gap_x

    def _apply_margins(self, positions: Positions) -> None:
        if not positions:
            return

        shift_x = self.config.margin_x - min(x for x, _ in positions.values())
        shift_y = self.config.margin_y - min(y for _, y in positions.values())

        for node_id, (x, y) in positions.items():
            positions[node_id] = (x + shift_x, y + shift_y)


def calculate_layout(forest: Forest, config: LayoutConfig | None = None) -> Positions:
    """Lay out ``forest`` and return the position table."""
    return LayoutEngine(forest, config).calculate()
