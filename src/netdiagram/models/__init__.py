"""Pydantic data models for netdiagram input entities."""

from netdiagram.models.node import NetworkNode, NodeCategory

__all__ = [
    "NetworkNode",
    "NodeCategory",
]
