"""Exception hierarchy for netdiagram."""


class NetDiagramError(Exception):
    """Base class for all netdiagram errors."""


class NoRootError(NetDiagramError):
    """Raised when the forest has no root node, so no layout can be computed."""

    def __init__(self, node_count: int):
        self.node_count = node_count
        super().__init__(
            f"No root node found among {node_count} nodes: every node declares a parent"
        )


class CyclicParentReferenceError(NetDiagramError):
    """Raised when nodes cannot be reached from any root because their parents form a cycle."""

    def __init__(self, node_ids: list[str]):
        self.node_ids = list(node_ids)
        shown = ", ".join(self.node_ids[:10])
        suffix = "..." if len(self.node_ids) > 10 else ""
        super().__init__(
            f"Parent references form a cycle; {len(self.node_ids)} node(s) unreachable "
            f"from any root: {shown}{suffix}"
        )


class MissingPositionError(NetDiagramError):
    """A node had no computed position and was placed at the fallback position.

    Never raised by the serializer; recorded as a warning instead.
    """

    def __init__(self, node_id: str, fallback: tuple[float, float]):
        self.node_id = node_id
        self.fallback = fallback
        super().__init__(f"No position for node '{node_id}', using fallback {fallback}")


class SerializationIOError(NetDiagramError):
    """Raised when the diagram document cannot be written."""

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write diagram document {path}: {cause}")


class DocumentFormatError(NetDiagramError):
    """Raised when a diagram document cannot be parsed."""


class NodeRepositoryError(NetDiagramError):
    """Raised when the connection table cannot be turned into a node set."""


class UndefinedParentReferenceError(NodeRepositoryError):
    """Raised when a parent reference matches no node ID, even fuzzily."""

    def __init__(self, parent_id: str, child_id: str, available_ids: list[str]):
        self.parent_id = parent_id
        self.child_id = child_id
        self.available_ids = list(available_ids)
        listed = ", ".join(self.available_ids[:10])
        super().__init__(
            f"Undefined parent ID '{parent_id}' referenced by '{child_id}'. "
            f"Available IDs: {listed}..."
        )


class DuplicateNodeIdError(NodeRepositoryError):
    """Raised when the same node ID appears on more than one row."""

    def __init__(self, node_id: str, row: int):
        self.node_id = node_id
        self.row = row
        super().__init__(f"Row {row}: duplicate ID '{node_id}'")


class EmptyNodeSetError(NodeRepositoryError):
    """Raised when the connection table contains no data rows."""
