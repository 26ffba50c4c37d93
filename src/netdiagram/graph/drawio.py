"""draw.io (mxGraph XML) renderer.

The document body holds four groups of cells, in order: VLAN frames, device
shapes, cabling edges and a single notes box. All cells hang off the default
layer cell ``1``.
"""

import html
import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from .. import __version__
from ..config import NetDiagramConfig
from ..diagnostics import ErrorCollector, ErrorContext
from ..errors import MissingPositionError
from ..models import NetworkNode
from .frames import FrameCollisionResolver, group_by_vlan
from .framework import GraphRenderer
from .models import LayoutResult, Positions

logger = logging.getLogger(__name__)

VLAN_COLORS = (
    "#dae8fc", "#d5e8d4", "#fff2cc", "#f8cecc",
    "#e1d5e7", "#d0e0e3", "#fce5cd",
)

DEFAULT_POSITION = (60.0, 40.0)
LINE_BREAK = "<br>"
NOTE_BOX_ID = "note_box_1"
FRAME_ID_PREFIX = "frame_"

FRAME_STYLE = (
    "rounded=0;html=1;whiteSpace=wrap;fillColor={color};fillOpacity=15;"
    "strokeColor=#666666;strokeOpacity=80;align=right;verticalAlign=top;"
    "spacingRight=6;spacingTop=6;"
)
NODE_BASE_STYLE = "rounded=1;html=1;whiteSpace=wrap;align=center;verticalAlign=middle;"
ONU_NODE_STYLE = NODE_BASE_STYLE + "fillColor=#cfe2f3;strokeColor=#1c4587;"
DEVICE_NODE_STYLE = NODE_BASE_STYLE + "fillColor=#f5f5f5;strokeColor=#666666;"
EDGE_STYLE = (
    "edgeStyle=orthogonalEdgeStyle;rounded=0;orthogonalLoop=1;"
    "jettySize=auto;html=1;endArrow=none;"
    "exitX={exit_x};exitY=1;exitDx=0;exitDy=0;"
    "entryX={entry_x};entryY=0;entryDx=0;entryDy=0;"
)
NOTE_STYLE = (
    "rounded=0;html=1;whiteSpace=wrap;align=left;verticalAlign=top;"
    "fillColor=#ffffcc;strokeColor=#666666;"
    "spacingTop=10;spacingLeft=10;spacingRight=10;spacingBottom=10;fontSize=11;"
)

_UNSAFE_ID_CHARS = re.compile(r"[\s<>\"'&]")
_UNDERSCORE_RUNS = re.compile(r"_+")


@dataclass
class Geometry:
    """Cell geometry; edges use a relative geometry without coordinates."""
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    relative: bool = False


@dataclass
class Cell:
    """A single mxCell."""
    id: str
    value: str = ""
    style: str = ""
    vertex: bool = False
    edge: bool = False
    source: str | None = None
    target: str | None = None
    geometry: Geometry = field(default_factory=Geometry)


@dataclass
class DiagramDocument:
    """In-memory form of a generated diagram."""
    frames: list[Cell] = field(default_factory=list)
    shapes: list[Cell] = field(default_factory=list)
    edges: list[Cell] = field(default_factory=list)
    note: Cell | None = None
    name: str = "Network"

    def cells(self) -> Iterator[Cell]:
        """All content cells in document order."""
        yield from self.frames
        yield from self.shapes
        yield from self.edges
        if self.note is not None:
            yield self.note

    def find(self, cell_id: str) -> Cell | None:
        for cell in self.cells():
            if cell.id == cell_id:
                return cell
        return None

    def to_xml(self) -> str:
        """Serialize to draw.io XML text."""
        mxfile = ET.Element("mxfile", {
            "host": "app.diagrams.net",
            "agent": f"netdiagram {__version__}",
            "type": "device",
        })
        diagram = ET.SubElement(mxfile, "diagram", {"name": self.name, "id": "network-diagram"})
        model = ET.SubElement(diagram, "mxGraphModel", {
            "dx": "1000", "dy": "1000", "grid": "1", "gridSize": "10", "guides": "1",
            "tooltips": "1", "connect": "1", "arrows": "1", "fold": "1", "page": "1",
            "pageScale": "1", "pageWidth": "827", "pageHeight": "1169",
            "math": "0", "shadow": "0",
        })
        root = ET.SubElement(model, "root")
        ET.SubElement(root, "mxCell", {"id": "0"})
        ET.SubElement(root, "mxCell", {"id": "1", "parent": "0"})

        for cell in self.cells():
            _append_cell(root, cell)

        ET.indent(mxfile, space="  ")
        body = ET.tostring(mxfile, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"


def _append_cell(root: ET.Element, cell: Cell) -> None:
    attrs = {"id": cell.id}
    if cell.value:
        attrs["value"] = cell.value
    attrs["style"] = cell.style
    if cell.vertex:
        attrs["vertex"] = "1"
    if cell.edge:
        attrs["edge"] = "1"
    attrs["parent"] = "1"
    if cell.source is not None:
        attrs["source"] = cell.source
    if cell.target is not None:
        attrs["target"] = cell.target

    element = ET.SubElement(root, "mxCell", attrs)
    geometry = cell.geometry
    if geometry.relative:
        ET.SubElement(element, "mxGeometry", {"relative": "1", "as": "geometry"})
    else:
        ET.SubElement(element, "mxGeometry", {
            "x": str(int(geometry.x)),
            "y": str(int(geometry.y)),
            "width": str(int(geometry.width)),
            "height": str(int(geometry.height)),
            "as": "geometry",
        })


def to_safe_id(raw_id: str, used_ids: set[str]) -> str:
    """Derive a unique, XML-friendly cell ID from a raw node ID.

    Whitespace, angle brackets, quotes and ampersands become underscores,
    underscore runs collapse, and a numeric suffix is appended when the
    result is already in ``used_ids``. The result is added to ``used_ids``.
    """
    s = _UNSAFE_ID_CHARS.sub("_", raw_id.strip())
    s = _UNDERSCORE_RUNS.sub("_", s).strip("_")
    if not s:
        s = "node"

    base_id = f"n_{s}"
    result = base_id
    counter = 1
    while result in used_ids:
        result = f"{base_id}_{counter}"
        counter += 1

    used_ids.add(result)
    return result


def build_id_map(node_ids: Iterable[str]) -> dict[str, str]:
    """Map raw node IDs to safe cell IDs, assigned in iteration order."""
    used: set[str] = set()
    return {node_id: to_safe_id(node_id, used) for node_id in node_ids}


def entry_fraction(index: int, parent_count: int) -> float:
    """Horizontal entry point on the child's top edge for its ``index``-th parent (0-based)."""
    if parent_count == 1:
        return 0.5
    return (index + 1.0) / (parent_count + 1.0)


def text_to_html(text: str) -> str:
    """Escape text for an html=1 cell value, turning newlines into <br>."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return html.escape(normalized).replace("\n", LINE_BREAK)


def make_node_label(node: NetworkNode) -> str:
    parts = [node.id, node.name]
    if node.ip:
        parts.append(node.ip)
    return LINE_BREAK.join(html.escape(part) for part in parts)


def node_style(node: NetworkNode) -> str:
    return ONU_NODE_STYLE if node.is_onu else DEVICE_NODE_STYLE


def frame_color(vlan: int) -> str:
    return VLAN_COLORS[(vlan - 1) % len(VLAN_COLORS)]


class DrawioRenderer(GraphRenderer):
    """Renders a layout result as a draw.io document."""

    def __init__(self, config: NetDiagramConfig | None = None, collector: ErrorCollector | None = None):
        self.config = config or NetDiagramConfig()
        self.collector = collector

    @property
    def format_name(self) -> str:
        return "drawio"

    def get_file_extension(self) -> str:
        return ".drawio"

    def render(self, result: LayoutResult) -> str:
        return self.build(result.nodes, result.positions, result.groups).to_xml()

    def build(
        self,
        nodes: Mapping[str, NetworkNode],
        positions: Positions,
        groups: Mapping[int, list[str]] | None = None,
    ) -> DiagramDocument:
        """Assemble the document model for ``nodes`` at ``positions``."""
        if groups is None:
            groups = group_by_vlan(nodes)
        id_map = build_id_map(nodes)

        document = DiagramDocument(name=self.config.output.diagram_name)
        document.frames = self._build_frames(groups, positions)
        placed = self._resolve_positions(nodes, positions)
        document.shapes = self._build_shapes(nodes, placed, id_map)
        document.edges = self._build_edges(nodes, id_map)
        document.note = self._build_note(nodes, placed)

        logger.debug(
            f"Document has {len(document.frames)} frames, {len(document.shapes)} shapes, "
            f"{len(document.edges)} edges"
        )
        return document

    def _build_frames(self, groups: Mapping[int, list[str]], positions: Positions) -> list[Cell]:
        resolver = FrameCollisionResolver(self.config.frames, self.config.layout)
        frames = []
        for vlan, bounds in resolver.all_bounds(groups, positions).items():
            frames.append(Cell(
                id=f"{FRAME_ID_PREFIX}{vlan}",
                value=f"VLAN{vlan}",
                style=FRAME_STYLE.format(color=frame_color(vlan)),
                vertex=True,
                geometry=Geometry(bounds.min_x, bounds.min_y, bounds.width, bounds.height),
            ))
        return frames

    def _resolve_positions(self, nodes: Mapping[str, NetworkNode], positions: Positions) -> Positions:
        placed: Positions = {}
        for node_id in nodes:
            if node_id in positions:
                placed[node_id] = positions[node_id]
                continue
            warning = MissingPositionError(node_id, DEFAULT_POSITION)
            logger.warning(str(warning))
            if self.collector is not None:
                self.collector.collect_warning(
                    str(warning),
                    ErrorContext(operation="serialize", component="DrawioRenderer", node_id=node_id),
                )
            placed[node_id] = DEFAULT_POSITION
        return placed

    def _build_shapes(self, nodes: Mapping[str, NetworkNode], placed: Positions, id_map: dict[str, str]) -> list[Cell]:
        layout = self.config.layout
        shapes = []
        for node_id, node in nodes.items():
            x, y = placed[node_id]
            shapes.append(Cell(
                id=id_map[node_id],
                value=make_node_label(node),
                style=node_style(node),
                vertex=True,
                geometry=Geometry(x, y, layout.node_width, layout.node_height),
            ))
        return shapes

    def _build_edges(self, nodes: Mapping[str, NetworkNode], id_map: dict[str, str]) -> list[Cell]:
        edges = []
        for child_id, node in nodes.items():
            parent_count = len(node.parents)
            for index, parent_id in enumerate(node.parents):
                if parent_id not in id_map:
                    logger.warning(f"Skipping edge from unknown parent '{parent_id}' to '{child_id}'")
                    continue
                style = EDGE_STYLE.format(exit_x=0.5, entry_x=entry_fraction(index, parent_count))
                edges.append(Cell(
                    id=f"e{len(edges) + 1}",
                    style=style,
                    edge=True,
                    source=id_map[parent_id],
                    target=id_map[child_id],
                    geometry=Geometry(relative=True),
                ))
        return edges

    def _build_note(self, nodes: Mapping[str, NetworkNode], placed: Positions) -> Cell | None:
        noted = sorted((n for n in nodes.values() if n.has_note), key=lambda n: n.source_order)
        if not noted:
            return None

        lines: list[str] = []
        for i, node in enumerate(noted):
            if i > 0:
                lines.append("")
            lines.append(f"■ {node.name}")
            lines.append(node.note)

        value = text_to_html("\n".join(lines))
        line_count = len(value.split(LINE_BREAK))

        notes = self.config.notes
        height = max(notes.min_height, line_count * notes.line_height + 20)

        max_x = max(x for x, _ in placed.values()) + self.config.layout.node_width
        min_y = min(y for _, y in placed.values())

        return Cell(
            id=NOTE_BOX_ID,
            value=value,
            style=NOTE_STYLE,
            vertex=True,
            geometry=Geometry(max_x + notes.offset_x, min_y, notes.width, height),
        )
