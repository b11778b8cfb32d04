"""
Import naming and collision policy

Synthesized import bindings are derived from the specifier:

    './string-utils'     -> stringUtils
    './lib/index.js'     -> lib        (index uses the parent directory)
    '@babel/core'        -> core, or babelCore when `core` is taken

IdentifierAllocator keeps the Used-Identifier Map (name -> specifier) for one
file. A name is taken when another specifier already holds it or when the
original file declares it at top level.
"""

import posixpath
import re
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple
import logging

from ..analysis.module_system.path_resolver import is_scoped
from ..utils.config import (
    FALLBACK_MODULE_NAME, INDEX_BASENAME, SCOPED_PACKAGE_PREFIX, SOURCE_FILE_EXTENSION,
    TEMP_NAME_PREFIX,
)

logger = logging.getLogger(__name__)

_WORD_SEPARATOR = re.compile(r"[^A-Za-z0-9$]+")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

RESERVED_WORDS = frozenset({
    "await", "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "implements", "import", "in", "instanceof",
    "interface", "let", "new", "null", "package", "private", "protected", "public",
    "return", "static", "super", "switch", "this", "throw", "true", "try", "typeof",
    "var", "void", "while", "with", "yield", "arguments", "eval",
})


def is_valid_identifier(name: str) -> bool:
    """ASCII JavaScript identifier that is not a reserved word."""
    return bool(_IDENTIFIER.match(name)) and name not in RESERVED_WORDS


def camel_case(text: str) -> str:
    """
    'string-utils' -> 'stringUtils', 'my_module' -> 'myModule', '2d' -> '_2d'.

    Empty input (or input with no usable characters) gives FALLBACK_MODULE_NAME.
    """
    parts = [p for p in _WORD_SEPARATOR.split(text) if p]
    if not parts:
        return FALLBACK_MODULE_NAME
    head = parts[0][0].lower() + parts[0][1:]
    name = head + "".join(p[0].upper() + p[1:] for p in parts[1:])
    if name[0].isdigit():
        name = TEMP_NAME_PREFIX + name
    if name in RESERVED_WORDS:
        name = TEMP_NAME_PREFIX + name
    return name


def base_name(specifier: str) -> str:
    """Base name with `.js` dropped; `index` is replaced by its directory name."""
    name = posixpath.basename(specifier.rstrip("/"))
    if name.endswith(SOURCE_FILE_EXTENSION):
        name = name[: -len(SOURCE_FILE_EXTENSION)]
    if name == INDEX_BASENAME:
        name = posixpath.basename(posixpath.dirname(specifier.rstrip("/")))
    return name


def module_identifier(specifier: str) -> str:
    """Camel-cased identifier for a specifier's base name."""
    return camel_case(base_name(specifier))


def scoped_identifier(specifier: str) -> Optional[str]:
    """'@babel/core' -> 'babelCore'; None when the specifier is not scoped."""
    if not is_scoped(specifier):
        return None
    scope, _, rest = specifier[len(SCOPED_PACKAGE_PREFIX):].partition("/")
    package = rest.split("/")[0]
    return camel_case(f"{scope}-{package}")


def expression_identifier(specifier: str) -> str:
    """
    Binding name for `require('<specifier>').method()` rewrites.

    The specifier itself when it is a usable identifier (`require('debug')`
    -> `debug`), otherwise the camel-cased base name.
    """
    if is_valid_identifier(specifier):
        return specifier
    return module_identifier(specifier)


class IdentifierAllocator:
    """
    Used-Identifier Map for one file.

    allocate() applies the collision policy in order:
    (a) taken and the specifier is scoped -> scope + package compound name
    (b) the destructuring pattern itself names it -> prefix `_`
    (c) while still taken -> prefix `_` again
    """

    def __init__(self, declared: Iterable[str], used: Optional[Mapping[str, str]] = None):
        self.declared: FrozenSet[str] = frozenset(declared)
        self.used: Dict[str, str] = dict(used or {})

    def is_taken(self, name: str, specifier: str) -> bool:
        owner = self.used.get(name)
        if owner is not None:
            return owner != specifier
        return name in self.declared

    def allocate(self, preferred: str, specifier: str,
                 reserved: FrozenSet[str] = frozenset()) -> Tuple[str, bool]:
        """
        Pick the binding name for an import of specifier.

        Returns (name, is_new). is_new is False when the same specifier was
        already imported under that name, so the existing import is reused.
        """
        name = preferred
        if self.is_taken(name, specifier):
            compound = scoped_identifier(specifier)
            if compound is not None:
                name = compound
        if name in reserved:
            name = TEMP_NAME_PREFIX + name
        while self.is_taken(name, specifier) or name in reserved:
            name = TEMP_NAME_PREFIX + name

        if self.used.get(name) == specifier:
            logger.debug(f"reusing import {name!r} for {specifier!r}")
            return name, False
        self.used[name] = specifier
        if name != preferred:
            logger.debug(f"{preferred!r} renamed to {name!r} for {specifier!r}")
        return name, True
