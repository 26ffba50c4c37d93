"""Connection table loading.

Reads the CSV export of the connection sheet and produces the validated,
immutable node set the layout stages consume. Column layout follows the
input template:

    A  parent IDs, comma separated
    B  device ID
    C  device ID picker (ignored)
    D  device name
    E  IP address
    F  VLAN (first number in the cell)
    G  note
"""

import csv
import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from .diagnostics import ErrorCollector, ErrorContext
from .errors import (
    DuplicateNodeIdError,
    EmptyNodeSetError,
    NodeRepositoryError,
    UndefinedParentReferenceError,
)
from .models import NetworkNode

logger = logging.getLogger(__name__)

COL_PARENTS = 0
COL_ID = 1
COL_NAME = 3
COL_IP = 4
COL_VLAN = 5
COL_NOTE = 6

END_MARKER = "ここまで"
HEADER_ID_KEYWORDS = ("ID", "id", "機器", "名", "アドレス", "VLAN", "備考", "接続")
HEADER_PARENT_KEYWORDS = ("接続", "ID")
HEADER_NAME_KEYWORDS = ("機器", "名", "Name", "name")

_VLAN_NUMBER = re.compile(r"(\d+)")
_LETTERS_THEN_NUMBER = re.compile(r"^([A-Za-z\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF]+)(\d+)$")


def _cell(row: Sequence[str], index: int) -> str | None:
    if index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    return value.strip()


def is_header_row(id_value: str, parents_value: str | None, name_value: str | None = None) -> bool:
    """Heuristic header detection.

    A row is a header when at least two of the ID, parent and name cells
    contain header keywords, so a single device ID such as 'VLAN-GW' is not
    mistaken for one.
    """
    hits = 0
    if any(keyword in id_value for keyword in HEADER_ID_KEYWORDS):
        hits += 1
    if parents_value and any(keyword in parents_value for keyword in HEADER_PARENT_KEYWORDS):
        hits += 1
    if name_value and any(keyword in name_value for keyword in HEADER_NAME_KEYWORDS):
        hits += 1
    return hits >= 2


def extract_vlan(value: str | None) -> int | None:
    """First run of digits in the VLAN cell, e.g. 'VLAN10' -> 10."""
    if not value or not value.strip():
        return None
    match = _VLAN_NUMBER.search(value)
    return int(match.group(1)) if match else None


def split_parents(value: str | None) -> list[str]:
    if not value or not value.strip():
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


def find_similar_id(target: str, available_ids: Iterable[str]) -> str | None:
    """Best-effort match for a parent ID that does not exist verbatim.

    Tries a case-insensitive comparison ignoring '_' and '-', then the
    '<letters><digits>' pattern against '<letters>_<digits>'.
    """
    available = list(available_ids)

    target_normalized = target.replace("_", "").replace("-", "").casefold()
    for candidate in available:
        if candidate.replace("_", "").replace("-", "").casefold() == target_normalized:
            return candidate

    # e.g. "UTM2" -> "UTM_2"
    match = _LETTERS_THEN_NUMBER.match(target)
    if match:
        base, number = match.groups()
        for candidate in available:
            if candidate in (f"{base}_{number}", f"{base}{number}"):
                return candidate

    return None


class NodeRepository:
    """Builds the node set from connection table rows."""

    def __init__(self, fuzzy_match: bool = True, collector: ErrorCollector | None = None):
        self.fuzzy_match = fuzzy_match
        self.collector = collector

    def load(self, path: str | Path, encoding: str = "utf-8-sig", delimiter: str = ",") -> dict[str, NetworkNode]:
        """Load nodes from a CSV file.

        Raises:
            FileNotFoundError: The file does not exist.
            NodeRepositoryError: The file cannot be read or holds invalid data.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Connection table not found: {path}")

        logger.info(f"Reading connection table {path}")
        try:
            with open(path, encoding=encoding, newline="") as f:
                rows = list(csv.reader(f, delimiter=delimiter))
        except UnicodeDecodeError as e:
            raise NodeRepositoryError(f"Cannot decode {path} as {encoding}: {e}") from e
        except OSError as e:
            raise NodeRepositoryError(
                f"Cannot open {path}. Close it in other applications and try again. ({e})"
            ) from e
        except csv.Error as e:
            raise NodeRepositoryError(f"Malformed CSV in {path}: {e}") from e

        return self.from_rows(rows)

    def from_rows(self, rows: Iterable[Sequence[str]]) -> dict[str, NetworkNode]:
        """Build nodes from already-split rows (1-based row numbers follow iteration order)."""
        records: dict[str, dict] = {}
        data_started = False

        for row_number, row in enumerate(rows, start=1):
            id_value = _cell(row, COL_ID)

            if not id_value:
                if data_started:
                    logger.debug(f"End of data at row {row_number} (blank ID)")
                    break
                continue

            if id_value == END_MARKER:
                logger.debug(f"End marker found at row {row_number}")
                break

            parents_value = _cell(row, COL_PARENTS)
            # Header rows only precede the data
            if not records and is_header_row(id_value, parents_value, _cell(row, COL_NAME)):
                logger.info(f"Skipping header row {row_number} (ID cell {id_value!r})")
                data_started = True
                continue

            data_started = True

            if id_value in records:
                raise DuplicateNodeIdError(id_value, row_number)

            records[id_value] = {
                "id": id_value,
                "name": _cell(row, COL_NAME) or id_value,
                "ip": _cell(row, COL_IP) or "",
                "vlan": extract_vlan(_cell(row, COL_VLAN)),
                "note": _cell(row, COL_NOTE) or "",
                "parents": split_parents(parents_value),
                "source_order": row_number,
            }

        if not records:
            raise EmptyNodeSetError(
                "No device rows found. Check that column B holds the IDs, that the header "
                "row contains 'ID', and that no blank rows precede the data."
            )

        self._resolve_parent_references(records)
        nodes = {node_id: NetworkNode(**record) for node_id, record in records.items()}
        logger.info(f"Loaded {len(nodes)} nodes")
        return nodes

    def _resolve_parent_references(self, records: Mapping[str, dict]) -> None:
        for record in records.values():
            parents = record["parents"]
            for i, parent_id in enumerate(parents):
                if parent_id in records:
                    continue

                similar = find_similar_id(parent_id, records) if self.fuzzy_match else None
                if similar is None:
                    raise UndefinedParentReferenceError(parent_id, record["id"], list(records))

                message = f"Parent ID '{parent_id}' interpreted as '{similar}' (row {record['source_order']})"
                logger.warning(message)
                if self.collector is not None:
                    self.collector.collect_warning(
                        message,
                        ErrorContext(
                            operation="load_nodes",
                            component="NodeRepository",
                            node_id=record["id"],
                            row=record["source_order"],
                        ),
                    )
                parents[i] = similar


def load_nodes(
    path: str | Path,
    *,
    fuzzy_match: bool = True,
    encoding: str = "utf-8-sig",
    delimiter: str = ",",
    collector: ErrorCollector | None = None,
) -> dict[str, NetworkNode]:
    """Load and validate the node set from a CSV connection table."""
    return NodeRepository(fuzzy_match, collector).load(path, encoding=encoding, delimiter=delimiter)


def nodes_from_rows(
    rows: Iterable[Sequence[str]],
    *,
    fuzzy_match: bool = True,
    collector: ErrorCollector | None = None,
) -> dict[str, NetworkNode]:
    """Build and validate the node set from in-memory rows."""
    return NodeRepository(fuzzy_match, collector).from_rows(rows)
