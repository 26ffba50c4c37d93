"""netdiagram - Network cabling sheet to draw.io diagram generator.

netdiagram turns a table of network devices and their upstream connections
into a tidy-tree laid out draw.io document with VLAN frames and a notes box.
"""

__version__ = "0.1.0"
__author__ = "netdiagram maintainers"
__description__ = "Generate draw.io network diagrams from device connection tables"

from netdiagram.config import NetDiagramConfig, load_config
from netdiagram.graph import DiagramGenerator, DrawioRenderer
from netdiagram.models import NetworkNode, NodeCategory

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "NetDiagramConfig",
    "load_config",
    "DiagramGenerator",
    "DrawioRenderer",
    "NetworkNode",
    "NodeCategory",
]
