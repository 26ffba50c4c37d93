"""Unit tests for the diagram generation pipeline."""

import pytest

from netdiagram.config import FrameConfig, NetDiagramConfig
from netdiagram.errors import NoRootError, SerializationIOError
from netdiagram.graph import DiagramGenerator, DrawioRenderer, GraphRenderer, read_document


class TestDiagramGenerator:
    """Test DiagramGenerator orchestration."""

    def test_generate(self, node, nodes_of):
        nodes = nodes_of(
            node("ONU"),
            node("SW1", parents=["ONU"], vlan=10),
            node("SW2", parents=["ONU"], vlan=20),
        )

        result = DiagramGenerator().generate(nodes)

        assert result.forest.roots == ["ONU"]
        assert set(result.positions) == {"ONU", "SW1", "SW2"}
        assert result.groups == {10: ["SW1"], 20: ["SW2"]}
        assert result.resolver_rounds >= 1

    def test_frames_separated_after_generate(self, node, nodes_of):
        """Adjacent single-member VLANs end up at least the frame gap apart."""
        nodes = nodes_of(
            node("R"),
            node("A", parents=["R"], vlan=1),
            node("B", parents=["R"], vlan=2),
        )

        result = DiagramGenerator().generate(nodes)

        gap = result.positions["B"][0] - (result.positions["A"][0] + 120)
        assert gap >= 2 * 25 + 40

    def test_no_frames_without_vlans(self, node, nodes_of):
        result = DiagramGenerator().generate(nodes_of(node("R"), node("C", parents=["R"])))
        assert result.groups == {}
        assert result.resolver_rounds == 0

    def test_iteration_budget_from_config(self, node, nodes_of):
        config = NetDiagramConfig(frames=FrameConfig(max_iterations=1))
        nodes = nodes_of(
            node("R"),
            node("A", parents=["R"], vlan=1),
            node("B", parents=["R"], vlan=2),
            node("C", parents=["R"], vlan=3),
        )

        result = DiagramGenerator(config).generate(nodes)

        assert result.resolver_rounds == 1

    def test_deep_chain(self, node, nodes_of):
        nodes = nodes_of(node("N0"), *(node(f"N{i}", parents=[f"N{i - 1}"]) for i in range(1, 1500)))

        result = DiagramGenerator().generate(nodes)

        assert len(result.positions) == 1500

    def test_no_root(self, node, nodes_of):
        with pytest.raises(NoRootError):
            DiagramGenerator().generate(nodes_of(node("A", parents=["B"]), node("B", parents=["A"])))

    def test_render_graph(self, node, nodes_of):
        generator = DiagramGenerator()
        generator.add_renderer(DrawioRenderer())
        result = generator.generate(nodes_of(node("R")))

        text = generator.render_graph(result)

        assert "<mxfile" in text
        assert isinstance(generator.renderers["drawio"], GraphRenderer)

    def test_unknown_format(self, node, nodes_of):
        generator = DiagramGenerator()
        result = generator.generate(nodes_of(node("R")))

        with pytest.raises(ValueError, match="Unknown format"):
            generator.render_graph(result, "svg")

    def test_write(self, node, nodes_of, tmp_path):
        generator = DiagramGenerator()
        generator.add_renderer(DrawioRenderer())
        result = generator.generate(nodes_of(node("R"), node("C", parents=["R"])))

        path = generator.write(result, tmp_path / "out" / "network.drawio")

        raw = path.read_bytes()
        assert not raw.startswith(b"\xef\xbb\xbf")
        assert b"\r\n" not in raw
        assert len(read_document(path).shapes) == 2

    def test_write_failure(self, node, nodes_of, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        generator = DiagramGenerator()
        generator.add_renderer(DrawioRenderer())
        result = generator.generate(nodes_of(node("R")))

        with pytest.raises(SerializationIOError):
            generator.write(result, blocker / "network.drawio")
