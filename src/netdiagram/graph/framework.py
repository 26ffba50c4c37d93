"""Diagram generation pipeline: forest, layout, frame resolution, rendering."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from ..config import NetDiagramConfig
from ..diagnostics import ErrorCollector
from ..errors import SerializationIOError
from ..models import NetworkNode
from .frames import FrameCollisionResolver, group_by_vlan
from .layout import LayoutEngine
from .models import LayoutResult
from .tree import TreeBuilder

logger = logging.getLogger(__name__)


class GraphRenderer(ABC):
    """Abstract base class for diagram renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, result: LayoutResult) -> str:
        """Render a laid-out node set to string format."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass

    def write(self, result: LayoutResult, output_path: Path) -> Path:
        """Render and write to ``output_path`` as UTF-8 without BOM.

        Raises:
            SerializationIOError: The file could not be written.
        """
        content = self.render(result)
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
        except OSError as e:
            raise SerializationIOError(output_path, e) from e
        return output_path


class DiagramGenerator:
    """Runs the layout stages and hands the result to a renderer."""

    def __init__(self, config: NetDiagramConfig | None = None, collector: ErrorCollector | None = None):
        self.config = config or NetDiagramConfig()
        self.collector = collector
        self.renderers: dict[str, GraphRenderer] = {}

    def add_renderer(self, renderer: GraphRenderer) -> None:
        """Add a diagram renderer."""
        self.renderers[renderer.format_name] = renderer

    def generate(self, nodes: Mapping[str, NetworkNode]) -> LayoutResult:
        """Build the forest, lay it out and de-overlap the VLAN frames.

        Raises:
            NoRootError: No node is free of parents.
            CyclicParentReferenceError: Parent references loop.
        """
        logger.info(f"Building tree from {len(nodes)} nodes")
        forest = TreeBuilder(nodes).build()
        logger.info(f"Root nodes: {len(forest.roots)}")

        logger.info("Calculating layout")
        positions = LayoutEngine(forest, self.config.layout).calculate()

        groups = group_by_vlan(nodes)
        rounds = 0
        if groups:
            logger.info(f"Adjusting VLAN frames ({len(groups)} VLANs)")
            resolver = FrameCollisionResolver(self.config.frames, self.config.layout)
            rounds = resolver.resolve(groups, positions)
            logger.debug(f"Frame resolution finished after {rounds} round(s)")

        return LayoutResult(
            nodes=nodes,
            forest=forest,
            positions=positions,
            groups=groups,
            resolver_rounds=rounds,
        )

    def render_graph(self, result: LayoutResult, format_name: str = "drawio") -> str:
        """Render a layout result with the named renderer."""
        renderer = self._get_renderer(format_name)
        logger.info(f"Rendering diagram with {renderer.format_name} renderer")
        return renderer.render(result)

    def write(self, result: LayoutResult, output_path: Path, format_name: str = "drawio") -> Path:
        """Render a layout result and write it to ``output_path``."""
        renderer = self._get_renderer(format_name)
        logger.info(f"Writing {renderer.format_name} document to {output_path}")
        return renderer.write(result, output_path)

    def _get_renderer(self, format_name: str) -> GraphRenderer:
        if format_name not in self.renderers:
            available = list(self.renderers.keys())
            raise ValueError(f"Unknown format '{format_name}'. Available: {available}")
        return self.renderers[format_name]
