"""Editing commands offered to the UI and the CLI.

The command panel is driven by the static :data:`COMMANDS` table of
``(group, name, handler)`` entries.  Handlers act on an
:class:`EditorSession` and read their operands from the graph's
selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from cubemesh.buffers import MeshBuffers
from cubemesh.config import EditorConfig
from cubemesh.errors import InvalidArgumentError
from cubemesh.graph import MeshGraph
from cubemesh.selection import select_all, select_neighbours
from cubemesh.topology import add_triangle, extrude, join, split_edges_at_midpoints

logger = logging.getLogger(__name__)


class EditorSession:
    """A graph, its configuration and the GPU buffers derived from it."""

    def __init__(self, graph: Optional[MeshGraph] = None, config: Optional[EditorConfig] = None):
        self.graph = graph if graph is not None else MeshGraph()
        self.config = config if config is not None else EditorConfig()
        self.buffers = MeshBuffers()
        self.update_all()

    def update_all(self) -> None:
        self.buffers.update_all(self.graph)

    def run(self, key: str, atomic: Optional[bool] = None) -> None:
        """Run the command registered as ``"Group/Name"``.

        In atomic mode the graph is cloned first and the clone is put back
        when the command fails; the error is re-raised either way.
        """

        command = find_command(key)
        if atomic is None:
            atomic = self.config.atomic_commands
        snapshot = self.graph.clone() if atomic else None
        logger.info("running %s", command.key)
        try:
            command.handler(self)
        except Exception as exc:
            logger.error("%s failed: %s", command.key, exc)
            if snapshot is not None:
                self.graph = snapshot
            raise
        finally:
            self.update_all()


@dataclass(frozen=True)
class Command:
    group: str
    name: str
    handler: Callable[[EditorSession], None]

    @property
    def key(self) -> str:
        return f"{self.group}/{self.name}"


def delete_vertices(session: EditorSession) -> None:
    for v in list(session.graph.selected_vertices):
        session.graph.remove_vertex(v)


def delete_edges(session: EditorSession) -> None:
    for e in list(session.graph.selected_edges):
        session.graph.remove_edge(e)


def delete_facets(session: EditorSession) -> None:
    for f in list(session.graph.selected_facets):
        session.graph.remove_facet(f)


def connect(session: EditorSession) -> None:
    """Two selected vertices get an edge (splitting a facet they share),
    three get a triangle."""

    graph = session.graph
    selected = list(graph.selected_vertices)
    if len(selected) == 2:
        graph.add_edge(selected[0], selected[1], check_facet=True)
    elif len(selected) == 3:
        add_triangle(graph, session.config.view_direction, *selected)
    else:
        raise InvalidArgumentError(
            f"connect needs 2 or 3 selected vertices, got {len(selected)}")


def join_selected(session: EditorSession) -> None:
    join(session.graph, list(session.graph.selected_facets))


def extrude_selected(session: EditorSession) -> None:
    extrude(session.graph, list(session.graph.selected_facets))


def split_selected_edges(session: EditorSession) -> None:
    split_edges_at_midpoints(session.graph, list(session.graph.selected_edges))


def _select_all(session: EditorSession) -> None:
    select_all(session.graph)


def _select_neighbours(session: EditorSession) -> None:
    select_neighbours(session.graph)


def _deselect_all(session: EditorSession) -> None:
    session.graph.deselect_all()


def create_vertex(session: EditorSession) -> None:
    session.graph.deselect_all()
    v = session.graph.add_vertex(0.0, 0.0, 0.0)
    session.graph.set_selected(v, True)


def _creator(kind: str) -> Callable[[EditorSession], None]:
    def create(session: EditorSession) -> None:
        session.graph.deselect_all()
        session.config.factory(kind).add_to(session.graph, selected=True)
    create.__name__ = f"create_{kind}"
    return create


COMMANDS: Tuple[Command, ...] = (
    Command("Edit", "Delete Vertices", delete_vertices),
    Command("Edit", "Delete Edges", delete_edges),
    Command("Edit", "Delete Facets", delete_facets),
    Command("Edit", "Connect", connect),
    Command("Edit", "Join", join_selected),
    Command("Edit", "Extrude", extrude_selected),
    Command("Edit", "Split Edges", split_selected_edges),
    Command("Selection", "Select All", _select_all),
    Command("Selection", "Select Neighbours", _select_neighbours),
    Command("Selection", "Deselect All", _deselect_all),
    Command("Create", "Vertex", create_vertex),
    Command("Create", "Plane", _creator("plane")),
    Command("Create", "Cube", _creator("cube")),
    Command("Create", "Sphere", _creator("sphere")),
    Command("Create", "Cylinder", _creator("cylinder")),
    Command("Create", "Arrow", _creator("arrow")),
)

_BY_KEY: Dict[str, Command] = {c.key.lower(): c for c in COMMANDS}


def find_command(key: str) -> Command:
    try:
        return _BY_KEY[key.strip().lower()]
    except KeyError:
        raise KeyError(f"unknown command {key!r}") from None


def groups() -> Dict[str, List[Command]]:
    """Commands by group, in table order."""

    result: Dict[str, List[Command]] = {}
    for c in COMMANDS:
        result.setdefault(c.group, []).append(c)
    return result


__all__ = ['Command', 'COMMANDS', 'EditorSession', 'find_command', 'groups']
