# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

from cubemesh.entities import Edge, Facet, Vertex
from cubemesh.errors import (
    AmbiguousBoundaryError,
    InternalConsistencyError,
    InvalidArgumentError,
    MeshGraphError,
    SlotOccupiedError,
    StaleReferenceError,
)
from cubemesh.graph import MeshGraph

try:
    __version__ = version("cubemesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    'MeshGraph',
    'Vertex',
    'Edge',
    'Facet',
    'MeshGraphError',
    'InvalidArgumentError',
    'SlotOccupiedError',
    'AmbiguousBoundaryError',
    'StaleReferenceError',
    'InternalConsistencyError',
]
