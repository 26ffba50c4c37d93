"""Network device model as produced by the node repository."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

ONU_MARKER = "ONU"


class NodeCategory(str, Enum):
    """Device categories that affect root ordering and shape styling."""
    ONU = "onu"
    DEVICE = "device"

    @classmethod
    def classify(cls, node_id: str, name: str) -> "NodeCategory":
        """Classify a device by exact, case-insensitive match against 'ONU'."""
        for value in (node_id, name):
            if (value or "").strip().upper() == ONU_MARKER:
                return cls.ONU
        return cls.DEVICE


class NetworkNode(BaseModel):
    """One row of the connection table.

    The category is derived from ``id`` and ``name`` when the node is built;
    a category passed by the caller is ignored.
    """
    id: str = Field(alias="ID")
    name: str = Field(alias="Name")
    ip: str = Field(alias="IP", default="")
    vlan: int | None = Field(alias="VLAN", default=None)
    note: str = Field(alias="Note", default="")
    parents: tuple[str, ...] = Field(alias="Parents", default=())
    source_order: int = Field(alias="SourceOrder", default=0)
    category: NodeCategory = NodeCategory.DEVICE

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def derive_category(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        node_id = data.get("id", data.get("ID", ""))
        name = data.get("name", data.get("Name", ""))
        data.pop("category", None)
        data["category"] = NodeCategory.classify(str(node_id or ""), str(name or ""))
        return data

    @property
    def is_onu(self) -> bool:
        return self.category == NodeCategory.ONU

    @property
    def primary_parent(self) -> str | None:
        """First parent reference, the only one used for tree placement."""
        return self.parents[0] if self.parents else None

    @property
    def has_note(self) -> bool:
        return bool(self.note and self.note.strip())
