"""Graph layout and diagram rendering for netdiagram.

Stages run strictly forward: node set -> primary-parent forest -> tidy-tree
positions -> VLAN frame resolution -> draw.io document.
"""

from .drawio import Cell, DiagramDocument, DrawioRenderer, Geometry
from .frames import FrameCollisionResolver, group_by_vlan
from .framework import DiagramGenerator, GraphRenderer
from .layout import LayoutEngine, calculate_layout
from .models import Bounds, Forest, LayoutResult, Positions
from .reader import parse_style, read_document
from .tree import TreeBuilder, build_forest

__all__ = [
    "DiagramGenerator",
    "GraphRenderer",
    "DrawioRenderer",
    "DiagramDocument",
    "Cell",
    "Geometry",
    "TreeBuilder",
    "build_forest",
    "LayoutEngine",
    "calculate_layout",
    "FrameCollisionResolver",
    "group_by_vlan",
    "Forest",
    "Bounds",
    "LayoutResult",
    "Positions",
    "read_document",
    "parse_style",
]
