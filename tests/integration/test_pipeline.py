"""Integration tests for the table-to-document pipeline."""

from netdiagram.config import NetDiagramConfig
from netdiagram.diagnostics import ErrorCollector, ErrorSeverity
from netdiagram.graph import DiagramGenerator, DrawioRenderer, FrameCollisionResolver, parse_style, read_document
from netdiagram.repository import load_nodes


def _run(nodes, tmp_path, config=None, collector=None):
    config = config or NetDiagramConfig()
    generator = DiagramGenerator(config, collector)
    generator.add_renderer(DrawioRenderer(config, collector))
    result = generator.generate(nodes)
    path = generator.write(result, tmp_path / "network.drawio")
    return result, read_document(path)


class TestPipeline:
    """End-to-end checks from connection table to draw.io document."""

    def test_sample_table(self, sample_csv, tmp_path):
        nodes = load_nodes(sample_csv)

        result, document = _run(nodes, tmp_path)

        assert [cell.value for cell in document.frames] == ["VLAN10", "VLAN20"]
        assert len(document.shapes) == len(nodes)
        assert len(document.edges) == 5

        targets = [e for e in document.edges if e.target == "n_AP1"]
        assert [float(parse_style(e.style)["entryX"]) for e in targets] == [1 / 3, 2 / 3]

        shapes = {cell.id: cell for cell in document.shapes}
        for node_id, (x, y) in result.positions.items():
            assert shapes[f"n_{node_id}"].geometry.x == int(x)
            assert shapes[f"n_{node_id}"].geometry.y == int(y)

        assert document.note.value.startswith("■ Router<br>main router")

    def test_frames_do_not_collide(self, node, nodes_of, tmp_path):
        """A VLAN split across siblings pushes its neighbours apart until every gap holds."""
        nodes = nodes_of(
            node("CORE"),
            node("SW1", parents=["CORE"], vlan=10),
            node("SW2", parents=["CORE"], vlan=20),
            node("SW3", parents=["CORE"], vlan=30),
            node("SW4", parents=["CORE"], vlan=10),
        )

        result, document = _run(nodes, tmp_path)

        assert result.resolver_rounds == 3
        assert {n: x for n, (x, _) in result.positions.items() if n != "CORE"} == {
            "SW1": 420, "SW2": 210, "SW3": 1080, "SW4": 870,
        }

        resolver = FrameCollisionResolver()
        ordered = sorted(
            resolver.all_bounds(result.groups, result.positions).values(),
            key=lambda b: b.center_x,
        )
        assert len(ordered) == 3
        for left, right in zip(ordered, ordered[1:]):
            assert left.overlaps_vertically(right)
            assert left.horizontal_gap(right) >= 40

        frames = {cell.id: cell for cell in document.frames}
        assert frames["frame_10"].geometry.x == 395
        assert frames["frame_30"].geometry.x == 1055

    def test_orphan_drawn_at_fallback(self, node, nodes_of, tmp_path):
        collector = ErrorCollector("generate")
        nodes = nodes_of(node("R"), node("O", parents=["GHOST"]))

        _, document = _run(nodes, tmp_path, collector=collector)

        orphan = document.find("n_O")
        assert (orphan.geometry.x, orphan.geometry.y) == (60, 40)
        assert collector.get_error_counts()[ErrorSeverity.WARNING.value] == 1
        assert [(e.source, e.target) for e in document.edges] == []

    def test_multiple_roots_and_onu(self, node, nodes_of, tmp_path):
        nodes = nodes_of(
            node("NAS"),
            node("ONU"),
            node("RT", parents=["ONU"]),
        )

        result, document = _run(nodes, tmp_path)

        assert result.forest.roots == ["ONU", "NAS"]
        assert result.positions["ONU"][0] < result.positions["NAS"][0]
        onu = document.find("n_ONU")
        assert parse_style(onu.style)["fillColor"] == "#cfe2f3"
