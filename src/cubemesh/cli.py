"""
Command line front-end for cubemesh.

Usage:
    cubemesh info FILE
    cubemesh check FILE
    cubemesh create KIND --output FILE
    cubemesh run FILE COMMAND [COMMAND ...] --output FILE
    cubemesh commands

FILE may be ``.obj`` or ``.stl``.  Commands are given as ``Group/Name``
exactly as listed by ``cubemesh commands``.

Examples:
    # Make a plane and extrude all of it
    cubemesh create plane --output plane.obj
    cubemesh run plane.obj "Selection/Select All" "Edit/Extrude" --output out.obj

    # Verify the adjacency invariants of an imported mesh
    cubemesh check out.obj
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cubemesh.commands import EditorSession, groups
from cubemesh.config import EditorConfig, load_config
from cubemesh.errors import MeshGraphError
from cubemesh.factory import FACTORIES
from cubemesh.graph import MeshGraph
from cubemesh.io.obj import read_obj, write_obj
from cubemesh.io.stl import read_stl, write_stl
from cubemesh.validation import boundary_edge_list, check_invariants, is_closed

logger = logging.getLogger(__name__)


def load_mesh(path: Path, cfg: EditorConfig) -> MeshGraph:
    suffix = path.suffix.lower()
    if suffix == '.obj':
        return read_obj(path, strict=cfg.obj_strict)
    if suffix == '.stl':
        return read_stl(path)
    raise ValueError(f"unsupported mesh format: {path.suffix or path.name}")


def save_mesh(graph: MeshGraph, path: Path) -> None:
    suffix = path.suffix.lower()
    if suffix == '.obj':
        write_obj(graph, path)
    elif suffix == '.stl':
        write_stl(graph, path)
    else:
        raise ValueError(f"unsupported mesh format: {path.suffix or path.name}")
    logger.info("wrote %s", path)


def cmd_info(args: argparse.Namespace, cfg: EditorConfig) -> int:
    graph = load_mesh(args.file, cfg)
    print(f"File: {args.file}")
    print(f"  Vertices:       {len(graph.vertices)}")
    print(f"  Edges:          {len(graph.edges)}")
    print(f"  Facets:         {len(graph.facets)}")
    print(f"  Triangles:      {graph.triangles_count}")
    print(f"  Boundary edges: {len(boundary_edge_list(graph))}")
    print(f"  Closed:         {'yes' if is_closed(graph) else 'no'}")
    return 0


def cmd_check(args: argparse.Namespace, cfg: EditorConfig) -> int:
    graph = load_mesh(args.file, cfg)
    result = check_invariants(graph)
    for warning in result.warnings:
        print(f"  {warning}")
    if result:
        print(f"OK: {args.file} ({len(graph.facets)} facets)")
        return 0
    print(f"FAILED: {args.file} ({len(result.warnings)} problems)")
    return 1


def cmd_create(args: argparse.Namespace, cfg: EditorConfig) -> int:
    graph = cfg.factory(args.kind).generate()
    save_mesh(graph, args.output)
    print(f"Created {args.kind}: {len(graph.vertices)} vertices, {len(graph.facets)} facets")
    return 0


def cmd_run(args: argparse.Namespace, cfg: EditorConfig) -> int:
    session = EditorSession(load_mesh(args.file, cfg), cfg)
    for key in args.commands:
        session.run(key)
    save_mesh(session.graph, args.output)
    graph = session.graph
    print(f"Result: {len(graph.vertices)} vertices, {len(graph.edges)} edges, "
          f"{len(graph.facets)} facets")
    return 0


def cmd_commands(args: argparse.Namespace, cfg: EditorConfig) -> int:
    for group, commands in groups().items():
        print(f"{group}:")
        for c in commands:
            print(f"  {c.key}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cubemesh',
        description='Polygon mesh graph editing tools.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', type=Path, help='YAML editor configuration')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('info', help='print mesh statistics')
    p.add_argument('file', type=Path)
    p.set_defaults(func=cmd_info)

    p = sub.add_parser('check', help='verify adjacency invariants')
    p.add_argument('file', type=Path)
    p.set_defaults(func=cmd_check)

    p = sub.add_parser('create', help='write a primitive mesh')
    p.add_argument('kind', choices=sorted(FACTORIES))
    p.add_argument('-o', '--output', type=Path, required=True)
    p.set_defaults(func=cmd_create)

    p = sub.add_parser('run', help='apply editor commands to a mesh')
    p.add_argument('file', type=Path)
    p.add_argument('commands', nargs='+', metavar='COMMAND')
    p.add_argument('-o', '--output', type=Path, required=True)
    p.set_defaults(func=cmd_run)

    p = sub.add_parser('commands', help='list editor commands')
    p.set_defaults(func=cmd_commands)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, 'func', None):
        parser.print_help()
        return 1

    try:
        cfg = load_config(args.config) if args.config else EditorConfig()
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, cfg.log_level),
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        return args.func(args, cfg)
    except (MeshGraphError, OSError, ValueError, KeyError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
