"""I/O utilities for cubemesh graphs."""

from .obj import read_obj, write_obj
from .stl import read_stl, write_stl

__all__ = ['read_obj', 'write_obj', 'read_stl', 'write_stl']
