"""Translate object-map pixels back into graph entities.

The renderer writes ``(kind, index + 1)`` for every covered pixel into an
off-screen target; zero in either channel means nothing was hit.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Tuple

from cubemesh.entities import Edge, Facet, Vertex
from cubemesh.errors import InvalidArgumentError, StaleReferenceError
from cubemesh.graph import Entity, MeshGraph


class PickKind(IntEnum):
    NONE = 0
    FACET = 1
    EDGE = 2
    VERTEX = 3


def kind_of(entity: Entity) -> PickKind:
    if isinstance(entity, Vertex):
        return PickKind.VERTEX
    if isinstance(entity, Edge):
        return PickKind.EDGE
    if isinstance(entity, Facet):
        return PickKind.FACET
    raise InvalidArgumentError(f"not a mesh entity: {entity!r}")


def encode(graph: MeshGraph, entity: Entity) -> Tuple[float, float]:
    """Return the ``(kind, index + 1)`` pair the object map stores."""

    if not graph.contains(entity):
        raise StaleReferenceError(f"cannot encode removed {entity!r}")
    return float(kind_of(entity)), float(entity.index + 1)


def resolve(graph: MeshGraph, kind: float, encoded_index: float) -> Optional[Entity]:
    """Return the entity a decoded pixel refers to, or ``None``."""

    try:
        k = PickKind(int(round(kind)))
    except ValueError:
        return None
    i = int(round(encoded_index)) - 1
    if k is PickKind.NONE or i < 0:
        return None

    if k is PickKind.VERTEX:
        collection = graph.vertices
    elif k is PickKind.EDGE:
        collection = graph.edges
    else:
        collection = graph.facets
    if i >= len(collection):
        return None
    return collection[i]


__all__ = ['PickKind', 'kind_of', 'encode', 'resolve']
