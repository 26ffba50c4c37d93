"""Primary-parent forest construction."""

import logging
from collections.abc import Mapping

from ..models import NetworkNode
from .models import Forest

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Derive the layout forest from a node set.

    Parent references are assumed to be validated upstream; an unknown
    primary parent is recorded but contributes no child entry.
    """

    def __init__(self, nodes: Mapping[str, NetworkNode]):
        self.nodes = nodes

    def build(self) -> Forest:
        forest = Forest(children={node_id: [] for node_id in self.nodes})

        for child_id, node in self.nodes.items():
            if not node.parents:
                continue
            primary = node.parents[0]
            forest.primary_parent[child_id] = primary
            if primary in forest.children:
                forest.children[primary].append(child_id)
            else:
                logger.debug(f"Primary parent '{primary}' of '{child_id}' is not a known node")

        for node_id in forest.children:
            forest.children[node_id].sort()

        forest.roots = self._find_roots(forest)
        logger.debug(f"Built forest with {len(forest.roots)} roots from {len(self.nodes)} nodes")
        return forest

    def _find_roots(self, forest: Forest) -> list[str]:
        roots = [node_id for node_id in self.nodes if node_id not in forest.primary_parent]

        # ONU devices first, each half in ID order
        onu_roots = sorted(r for r in roots if self.nodes[r].is_onu)
        other_roots = sorted(r for r in roots if not self.nodes[r].is_onu)
        return onu_roots + other_roots


def build_forest(nodes: Mapping[str, NetworkNode]) -> Forest:
    """Build the primary-parent forest for ``nodes``."""
    return TreeBuilder(nodes).build()
