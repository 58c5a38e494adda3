"""Exceptions raised by the mesh graph and the operations built on it."""

from __future__ import annotations


class MeshGraphError(Exception):
    """Base exception for mesh graph errors."""


class InvalidArgumentError(MeshGraphError, ValueError):
    """A facet with fewer than three vertices, a self-loop edge, or an
    endpoint that is not part of the graph."""


class SlotOccupiedError(MeshGraphError):
    """A facet tried to claim an edge orientation already owned by another
    facet.  This signals a non-manifold or duplicate facet."""

    def __init__(self, edge, positive: bool):
        self.edge = edge
        self.positive = positive
        side = "positive" if positive else "negative"
        super().__init__(
            f"{side} facet slot of edge {edge.index} "
            f"({edge.v1.index} -> {edge.v2.index}) is occupied")


class AmbiguousBoundaryError(MeshGraphError):
    """The boundary of a facet set is not a single traversable loop."""


class StaleReferenceError(MeshGraphError):
    """An entity that was already removed from its graph was used."""


class InternalConsistencyError(MeshGraphError):
    """The adjacency structure contradicts itself."""


class ObjFormatError(InvalidArgumentError):
    """Malformed Wavefront OBJ input."""

    def __init__(self, message: str, lineno: int):
        self.lineno = lineno
        super().__init__(f"line {lineno}: {message}")


__all__ = [
    'MeshGraphError',
    'InvalidArgumentError',
    'SlotOccupiedError',
    'AmbiguousBoundaryError',
    'StaleReferenceError',
    'InternalConsistencyError',
    'ObjFormatError',
]
