"""Module system: specifier classification and path resolution."""

from .path_resolver import resolve_module_path, is_relative, is_scoped, has_extension

__all__ = [
    'resolve_module_path',
    'is_relative',
    'is_scoped',
    'has_extension',
]
