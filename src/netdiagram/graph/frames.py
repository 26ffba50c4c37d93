"""VLAN frame bounds and greedy frame de-overlapping."""

import logging
from collections.abc import Mapping, Sequence

from ..config import FrameConfig, LayoutConfig
from ..models import NetworkNode
from .models import Bounds, Positions

logger = logging.getLogger(__name__)


def group_by_vlan(nodes: Mapping[str, NetworkNode]) -> dict[int, list[str]]:
    """Partition node IDs by VLAN tag, members in node-set order."""
    groups: dict[int, list[str]] = {}
    for node_id, node in nodes.items():
        if node.vlan is not None:
            groups.setdefault(node.vlan, []).append(node_id)
    return groups


class FrameCollisionResolver:
    """Push VLAN frames apart horizontally.

    Each round sorts the frames by horizontal centre and, for every adjacent
    pair that shares vertical extent, shifts the right-hand group by exactly
    the amount needed to restore the minimum gap. This is a local, greedy
    pass: a push may create a new overlap further right, which a later round
    picks up if the iteration budget allows.
    """

    def __init__(self, config: FrameConfig | None = None, layout: LayoutConfig | None = None):
        self.config = config or FrameConfig()
        self.layout = layout or LayoutConfig()

    def frame_bounds(self, node_ids: Sequence[str], positions: Positions) -> Bounds | None:
        """Bounding frame of the members that have a position, or None."""
        points = [positions[node_id] for node_id in node_ids if node_id in positions]
        if not points:
            return None

        xs = [x for x, _ in points]
        ys = [y for _, y in points]
        return Bounds(
            min_x=min(xs) - self.config.pad_x,
            min_y=min(ys) - self.config.pad_top,
            max_x=max(xs) + self.layout.node_width + self.config.pad_x,
            max_y=max(ys) + self.layout.node_height + self.config.pad_bottom,
        )

    def all_bounds(self, groups: Mapping[int, Sequence[str]], positions: Positions) -> dict[int, Bounds]:
        """Frame bounds per VLAN in ascending VLAN order, skipping empty frames."""
        result: dict[int, Bounds] = {}
        for vlan in sorted(groups):
            bounds = self.frame_bounds(groups[vlan], positions)
            if bounds is not None:
                result[vlan] = bounds
        return result

    def resolve(
        self,
        groups: Mapping[int, Sequence[str]],
        positions: Positions,
        max_iterations: int | None = None,
    ) -> int:
        """Shift x-coordinates in ``positions`` in place until frames stop colliding.

        Returns:
            Number of rounds executed (0 when there is nothing to resolve).
        """
        if max_iterations is None:
            max_iterations = self.config.max_iterations
        if len(groups) <= 1:
            return 0

        rounds = 0
        for _ in range(max_iterations):
            rounds += 1
            moved = False

            # sorted() is stable: equal centres keep ascending VLAN order
            ordered = sorted(self.all_bounds(groups, positions).items(), key=lambda item: item[1].center_x)

            for (_, left), (right_vlan, right) in zip(ordered, ordered[1:]):
                if not left.overlaps_vertically(right):
                    continue

                overlap = (left.max_x + self.config.frame_gap) - right.min_x
                if overlap > 0:
                    self._shift_group(groups[right_vlan], positions, overlap)
                    logger.debug(f"Shifted VLAN{right_vlan} right by {overlap:.1f}")
                    moved = True

            if not moved:
                break
        else:
            logger.debug(f"Frame resolution stopped after {max_iterations} rounds")

        return rounds

    @staticmethod
    def _shift_group(node_ids: Sequence[str], positions: Positions, dx: float) -> None:
        for node_id in node_ids:
            if node_id in positions:
                x, y = positions[node_id]
                positions[node_id] = (x + dx, y)
