"""Read generated draw.io documents back into the document model."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError
from defusedxml.ElementTree import fromstring as defused_fromstring

from ..errors import DocumentFormatError
from .drawio import FRAME_ID_PREFIX, NOTE_BOX_ID, Cell, DiagramDocument, Geometry

logger = logging.getLogger(__name__)

_STRUCTURAL_IDS = {"0", "1"}


def parse_style(style: str) -> dict[str, str]:
    """Split an mxGraph style string into a key/value mapping.

    Bare tokens without ``=`` map to an empty string.
    """
    result: dict[str, str] = {}
    for token in style.split(";"):
        if not token:
            continue
        key, _, value = token.partition("=")
        result[key] = value
    return result


def read_document(source: str | Path) -> DiagramDocument:
    """Parse a draw.io document from a path or from XML text.

    A ``Path`` is read from disk as UTF-8; a ``str`` is always taken as the
    XML text itself, never as a file name.

    Raises:
        FileNotFoundError: ``source`` is a path that does not exist.
        OSError: ``source`` is a path that cannot be read.
        DocumentFormatError: The content is not a draw.io document.
    """
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DocumentFormatError(f"{source} is not UTF-8 encoded: {e}") from e
    else:
        text = source
        if not text.lstrip().startswith("<"):
            raise DocumentFormatError(
                "Expected diagram XML text; pass a pathlib.Path to read a document from disk"
            )

    try:
        root = defused_fromstring(text)
    except ParseError as e:
        raise DocumentFormatError(f"Malformed diagram XML: {e}") from e
    except DefusedXmlException as e:
        raise DocumentFormatError(f"Refusing unsafe diagram XML: {e}") from e

    diagram = root.find("diagram")
    if root.tag != "mxfile" or diagram is None:
        raise DocumentFormatError(f"Expected <mxfile><diagram>, found <{root.tag}>")

    cell_root = diagram.find("mxGraphModel/root")
    if cell_root is None:
        raise DocumentFormatError("Diagram has no mxGraphModel/root element")

    document = DiagramDocument(name=diagram.get("name", ""))
    for element in cell_root.findall("mxCell"):
        cell_id = element.get("id", "")
        if cell_id in _STRUCTURAL_IDS:
            continue
        cell = _read_cell(element)
        if cell.edge:
            document.edges.append(cell)
        elif cell_id == NOTE_BOX_ID:
            document.note = cell
        elif cell_id.startswith(FRAME_ID_PREFIX):
            document.frames.append(cell)
        else:
            document.shapes.append(cell)

    logger.debug(f"Read {len(document.shapes)} shapes and {len(document.edges)} edges")
    return document


def _read_cell(element: ET.Element) -> Cell:
    geometry_element = element.find("mxGeometry")
    geometry = Geometry()
    if geometry_element is not None:
        try:
            geometry = Geometry(
                x=float(geometry_element.get("x", "0")),
                y=float(geometry_element.get("y", "0")),
                width=float(geometry_element.get("width", "0")),
                height=float(geometry_element.get("height", "0")),
                relative=geometry_element.get("relative") == "1",
            )
        except ValueError as e:
            raise DocumentFormatError(f"Invalid geometry on cell '{element.get('id')}': {e}") from e

    return Cell(
        id=element.get("id", ""),
        value=element.get("value", ""),
        style=element.get("style", ""),
        vertex=element.get("vertex") == "1",
        edge=element.get("edge") == "1",
        source=element.get("source"),
        target=element.get("target"),
        geometry=geometry,
    )
