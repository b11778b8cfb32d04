"""
Module Path Resolution

Pure path resolution for relative CommonJS specifiers.
Follows Node's file-then-directory lookup: `./util` may name `./util.js`,
`./util.json` or `./util/index.js`.

Stateless; every call probes the filesystem again (no caching).
"""

import logging
import posixpath
from pathlib import Path
from typing import Union

from ...utils.config import (
    INDEX_BASENAME, JSON_FILE_EXTENSION, RELATIVE_PREFIX, SCOPED_PACKAGE_PREFIX,
    SOURCE_FILE_EXTENSION,
)
from ...utils.io_utils import path_exists

logger = logging.getLogger(__name__)

# Probe order: <spec>.js, <spec>.json, <spec>/index.js
RESOLUTION_SUFFIXES = (
    SOURCE_FILE_EXTENSION,
    JSON_FILE_EXTENSION,
    f"/{INDEX_BASENAME}{SOURCE_FILE_EXTENSION}",
)


def is_relative(specifier: str) -> bool:
    """`./x`, `../x` (and `.`-prefixed forms in general)."""
    return specifier.startswith(RELATIVE_PREFIX)


def is_scoped(specifier: str) -> bool:
    """`@scope/name` package form."""
    return specifier.startswith(SCOPED_PACKAGE_PREFIX) and "/" in specifier


def has_extension(specifier: str) -> bool:
    return posixpath.splitext(posixpath.basename(specifier))[1] != ""


def resolve_module_path(specifier: str, file_path: Union[str, Path]) -> str:
    """
    Resolve a specifier against the file that requires it.

    Args:
        specifier: module specifier as written in require()
        file_path: absolute path of the containing file

    Returns:
        The specifier with the first existing suffix appended, or the
        specifier unchanged (not relative, already has an extension, or
        nothing found on disk). Never raises.

    Examples:
        resolve_module_path('./util', '/src/app.js')  # '/src/util.js' exists
        -> './util.js'
        resolve_module_path('./lib', '/src/app.js')   # '/src/lib/index.js' exists
        -> './lib/index.js'
        resolve_module_path('lodash', '/src/app.js')
        -> 'lodash'
    """
    if not is_relative(specifier) or has_extension(specifier):
        return specifier
    base_dir = Path(file_path).parent
    try:
        absolute = (base_dir / specifier).resolve()
    except (OSError, RuntimeError) as e:
        logger.debug(f"cannot resolve {specifier!r} from {file_path}: {e}")
        return specifier
    for suffix in RESOLUTION_SUFFIXES:
        if path_exists(f"{absolute}{suffix}"):
            resolved = specifier.rstrip("/") + suffix
            logger.debug(f"resolved {specifier!r} -> {resolved!r}")
            return resolved
    logger.debug(f"{specifier!r} left unresolved (nothing found next to {file_path})")
    return specifier
