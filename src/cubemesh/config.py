"""Editor configuration loaded from YAML.

Example::

    view_direction: [0, 0, 1]
    obj_strict: false
    log_level: INFO
    atomic_commands: true
    factories:
      cube: {length: 4, width: 4, height: 4}
      sphere: {radius: 1.5, u_subdivision: 24, v_subdivision: 12}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from cubemesh.factory import FACTORIES, MeshFactory, make_factory
from cubemesh.vecmath import Vec3, to_vec3

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class EditorConfig:
    """Settings shared by the command table and the CLI."""

    view_direction: Vec3 = (0.0, 0.0, 1.0)
    obj_strict: bool = True
    log_level: str = 'WARNING'
    atomic_commands: bool = True
    factories: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def factory(self, kind: str) -> MeshFactory:
        """Return a factory for ``kind`` with the configured parameters."""

        return make_factory(kind, **self.factories.get(kind.lower(), {}))


_KNOWN_KEYS = {'view_direction', 'obj_strict', 'log_level', 'atomic_commands', 'factories'}


def config_from_mapping(data: Dict[str, Any]) -> EditorConfig:
    if not isinstance(data, dict):
        raise ValueError(f"configuration must be a mapping, got {type(data)!r}")

    cfg = EditorConfig()
    if 'view_direction' in data:
        cfg.view_direction = to_vec3(data['view_direction'])
    if 'obj_strict' in data:
        cfg.obj_strict = bool(data['obj_strict'])
    if 'atomic_commands' in data:
        cfg.atomic_commands = bool(data['atomic_commands'])
    if 'log_level' in data:
        level = str(data['log_level']).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {data['log_level']!r}")
        cfg.log_level = level

    factories = data.get('factories', {}) or {}
    if not isinstance(factories, dict):
        raise ValueError("'factories' must be a mapping of primitive name to parameters")
    for kind, params in factories.items():
        if kind.lower() not in FACTORIES:
            raise ValueError(f"unknown primitive {kind!r} in 'factories'")
        if not isinstance(params, dict):
            raise ValueError(f"parameters for {kind!r} must be a mapping")
        try:
            make_factory(kind, **params)
        except TypeError as exc:
            raise ValueError(f"bad parameters for {kind!r}: {exc}") from None
        cfg.factories[kind.lower()] = dict(params)

    cfg.extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}
    return cfg


def load_config(path: Path | str) -> EditorConfig:
    """Load a YAML configuration file and return the ``EditorConfig``."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    return config_from_mapping(data)


def dump_config(cfg: EditorConfig) -> str:
    doc: Dict[str, Any] = {
        'view_direction': list(cfg.view_direction),
        'obj_strict': cfg.obj_strict,
        'log_level': cfg.log_level,
        'atomic_commands': cfg.atomic_commands,
        'factories': cfg.factories,
    }
    doc.update(cfg.extra)
    return yaml.safe_dump(doc, sort_keys=False)


__all__ = ['EditorConfig', 'config_from_mapping', 'load_config', 'dump_config']
