"""Unit tests for the tidy-tree layout engine."""

import pytest

from netdiagram.config import LayoutConfig
from netdiagram.errors import CyclicParentReferenceError, NoRootError
from netdiagram.graph import LayoutEngine, build_forest, calculate_layout


class TestSubtreeWidth:
    """Test pass 1 of the layout."""

    def test_leaf_width_is_node_width(self, node, nodes_of):
        engine = LayoutEngine(build_forest(nodes_of(node("A"))))
        assert engine.subtree_width("A") == 120

    def test_parent_width_spans_children(self, node, nodes_of):
        """Two leaves: 120 + 30 + 120."""
        engine = LayoutEngine(build_forest(nodes_of(
            node("A"),
            node("B", parents=["A"]),
            node("C", parents=["A"]),
        )))

        assert engine.subtree_width("B") == 120
        assert engine.subtree_width("C") == 120
        assert engine.subtree_width("A") == 270

    def test_single_child_keeps_node_width(self, node, nodes_of):
        engine = LayoutEngine(build_forest(nodes_of(node("A"), node("B", parents=["A"]))))
        assert engine.subtree_width("A") == 120

    def test_width_never_below_children_sum(self, node, nodes_of):
        """Width covers every child span plus the gaps between them."""
        nodes = nodes_of(
            node("R"),
            node("A", parents=["R"]),
            node("B", parents=["R"]),
            node("A1", parents=["A"]),
            node("A2", parents=["A"]),
            node("A3", parents=["A"]),
        )
        forest = build_forest(nodes)
        engine = LayoutEngine(forest)

        for node_id in nodes:
            children = forest.children_of(node_id)
            if children:
                expected = sum(engine.subtree_width(c) for c in children) + 30 * (len(children) - 1)
                assert engine.subtree_width(node_id) >= expected


class TestLayoutEngine:
    """Test position assignment."""

    def test_parent_centered_over_children(self, node, nodes_of):
        """Worked example: A over B and C with default geometry."""
        positions = calculate_layout(build_forest(nodes_of(
            node("A"),
            node("B", parents=["A"]),
            node("C", parents=["A"]),
        )))

        assert positions["A"] == (135, 40)
        assert positions["B"] == (60, 190)
        assert positions["C"] == (210, 190)
        assert positions["A"][0] == (positions["B"][0] + positions["C"][0]) / 2

    def test_margins_applied(self, node, nodes_of):
        """The top-left node sits at the configured margins."""
        positions = calculate_layout(build_forest(nodes_of(node("A"), node("B", parents=["A"]))))

        assert min(x for x, _ in positions.values()) == 60
        assert min(y for _, y in positions.values()) == 40

    def test_roots_side_by_side(self, node, nodes_of):
        """Roots are placed left to right in root order."""
        positions = calculate_layout(build_forest(nodes_of(
            node("R1"),
            node("R2"),
            node("C1", parents=["R2"]),
            node("C2", parents=["R2"]),
        )))

        assert positions["R1"] == (60, 40)
        assert positions["R2"] == (285, 40)
        assert positions["C1"] == (210, 190)
        assert positions["C2"] == (360, 190)

    def test_onu_root_placed_first(self, node, nodes_of):
        positions = calculate_layout(build_forest(nodes_of(node("A"), node("ONU"))))
        assert positions["ONU"][0] < positions["A"][0]

    def test_custom_geometry(self, node, nodes_of):
        config = LayoutConfig(node_width=100, node_height=50, gap_x=10, gap_y=20, margin_x=0, margin_y=0)
        positions = calculate_layout(build_forest(nodes_of(
            node("A"),
            node("B", parents=["A"]),
            node("C", parents=["A"]),
        )), config)

        assert positions["B"] == (0, 70)
        assert positions["C"] == (110, 70)
        assert positions["A"] == (55, 0)

    def test_positions_distinct_and_sibling_spans_disjoint(self, node, nodes_of):
        """No two nodes share a position and sibling subtrees do not overlap."""
        nodes = nodes_of(
            node("ONU"),
            node("RT", parents=["ONU"]),
            node("SW1", parents=["RT"]),
            node("SW2", parents=["RT"]),
            node("SW3", parents=["RT"]),
            node("AP1", parents=["SW1"]),
            node("AP2", parents=["SW1"]),
            node("PC1", parents=["SW3"]),
            node("PC2", parents=["SW3", "SW2"]),
            node("PC3", parents=["SW3"]),
            node("NAS"),
        )
        forest = build_forest(nodes)
        engine = LayoutEngine(forest)
        positions = engine.calculate()

        assert set(positions) == set(nodes)
        assert len(set(positions.values())) == len(nodes)

        for parent_id in nodes:
            children = forest.children_of(parent_id)
            spans = []
            for child in children:
                width = engine.subtree_width(child)
                left = positions[child][0] - (width - 120) / 2
                spans.append((left, left + width))
            for (_, prev_right), (next_left, _) in zip(spans, spans[1:]):
                assert next_left >= prev_right + 30

    def test_depth_determines_y(self, node, nodes_of):
        positions = calculate_layout(build_forest(nodes_of(
            node("A"),
            node("B", parents=["A"]),
            node("C", parents=["B"]),
        )))

        assert [positions[n][1] for n in ("A", "B", "C")] == [40, 190, 340]

    def test_deep_chain(self, node, nodes_of):
        """A chain deeper than the interpreter's recursion limit lays out."""
        depth = 1500
        nodes = nodes_of(node("N0"), *(node(f"N{i}", parents=[f"N{i - 1}"]) for i in range(1, depth)))
        engine = LayoutEngine(build_forest(nodes))

        positions = engine.calculate()

        assert len(positions) == depth
        assert engine.subtree_width("N0") == 120
        assert positions["N0"] == (60, 40)
        assert positions[f"N{depth - 1}"] == (60, 40 + (depth - 1) * 150)

    def test_subtree_width_of_cycle_raises(self, node, nodes_of):
        """Asking for the width of a looping subtree fails instead of spinning."""
        forest = build_forest(nodes_of(node("X", parents=["Y"]), node("Y", parents=["X"])))

        with pytest.raises(CyclicParentReferenceError):
            LayoutEngine(forest).subtree_width("X")

    def test_no_root_raises(self, node, nodes_of):
        """Every node has a parent."""
        forest = build_forest(nodes_of(node("A", parents=["B"]), node("B", parents=["A"])))

        with pytest.raises(NoRootError):
            LayoutEngine(forest).calculate()

    def test_cycle_unreachable_from_root_raises(self, node, nodes_of):
        forest = build_forest(nodes_of(
            node("R"),
            node("X", parents=["Y"]),
            node("Y", parents=["X"]),
        ))

        with pytest.raises(CyclicParentReferenceError) as exc_info:
            LayoutEngine(forest).calculate()

        assert exc_info.value.node_ids == ["X", "Y"]

    def test_orphan_left_unplaced(self, node, nodes_of):
        """A node whose parent is unknown is skipped, not an error."""
        positions = calculate_layout(build_forest(nodes_of(node("R"), node("O", parents=["GHOST"]))))

        assert "O" not in positions
        assert positions["R"] == (60, 40)
