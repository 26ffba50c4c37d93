"""Graph data models shared by the layout stages."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..models import NetworkNode

# Node ID -> (x, y) of the node's top-left corner.
Positions = dict[str, tuple[float, float]]


@dataclass
class Forest:
    """Primary-parent forest derived from the node set.

    Only the first parent of each node participates; the remaining parent
    references are drawn as extra edges and do not affect geometry.
    """
    primary_parent: dict[str, str] = field(default_factory=dict)
    children: dict[str, list[str]] = field(default_factory=dict)
    roots: list[str] = field(default_factory=list)

    def children_of(self, node_id: str) -> list[str]:
        return self.children.get(node_id, [])

    def is_leaf(self, node_id: str) -> bool:
        return not self.children_of(node_id)

    def in_cycle(self, node_id: str) -> bool:
        """True when following primary parents from ``node_id`` loops."""
        seen = {node_id}
        current = node_id
        while current in self.primary_parent:
            current = self.primary_parent[current]
            if current in seen:
                return True
            seen.add(current)
        return False


@dataclass
class Bounds:
    """Axis-aligned rectangle, used for VLAN frames."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def overlaps_vertically(self, other: "Bounds") -> bool:
        """True when the y-ranges intersect; touching edges count."""
        return not (self.max_y < other.min_y or other.max_y < self.min_y)

    def horizontal_gap(self, other: "Bounds") -> float:
        """Distance from this frame's right edge to ``other``'s left edge."""
        return other.min_x - self.max_x


@dataclass
class LayoutResult:
    """Output of the layout stages, input of the renderers."""
    nodes: Mapping[str, NetworkNode]
    forest: Forest
    positions: Positions
    groups: dict[int, list[str]] = field(default_factory=dict)
    resolver_rounds: int = 0
