"""
Error Reporting

Pattern: rustc-style diagnostics (header, location arrow, source snippet, carets)
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional, List, Dict

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV, NO_COLOR_ENV


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or not a TTY)
# ---------------------------------------------------------------------------

def use_color(stream=None) -> bool:
    if os.environ.get(NO_COLOR_ENV):
        return False
    explicit = os.environ.get(COLOR_ENV, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    if explicit in ("1", "true", "yes", "always"):
        return True
    stream = stream if stream is not None else sys.stderr
    return bool(getattr(stream, "isatty", lambda: False)())

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_GREEN  = "\033[32m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_YELLOW = "\033[33m"
_RESET  = "\033[0m"

def style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


def red(text: str, color: bool = True) -> str:
    return style(text, _RED, color=color)


def green(text: str, color: bool = True) -> str:
    return style(text, _GREEN, color=color)


def yellow(text: str, color: bool = True) -> str:
    return style(text, _YELLOW, color=color)


# ---------------------------------------------------------------------------
# Diagnostic dataclass
# ---------------------------------------------------------------------------

ERROR = "error"
WARNING = "warning"


@dataclass
class Error:
    """
    Diagnostic attached to one file.

    severity is "error" or "warning"; only errors make a run fail.
    """
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None
    severity: str = ERROR


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        warning[W0001]: `require()` left in place
         --> src/app.js:5:17
          |
        5 | const mod = require(name);
          |             ^^^^^^^^^^^^^ specifier is not a string literal
    """
    out: List[str] = []
    tint = _YELLOW if error.severity == WARNING else _RED

    # ---- header -----------------------------------------------------------
    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        style(f"{error.severity}{code_str}", _BOLD, tint, color=color)
        + style(f": {error.message}", _BOLD, color=color)
    )

    # ---- location arrow ---------------------------------------------------
    if error.location is None:
        out.append(style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    loc = error.location

    # ---- source snippet ---------------------------------------------------
    source = source_files.get(loc.file)
    if source is None:
        out.append(
            style(" --> ", _BOLD, _BLUE, color=color)
            + f"{loc.file}:{loc.line}:{loc.column}"
        )
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")

    err_line = loc.line
    err_col = max(loc.column, 1)
    # Only the first line of a multi-line span is underlined.
    if loc.end_line == err_line and loc.end_column > err_col:
        span_len = loc.end_column - err_col
    else:
        span_len = 0

    gw = max(len(str(err_line)), 1)

    out.append(
        style(" " * gw + "--> ", _BOLD, _BLUE, color=color)
        + f"{loc.file}:{loc.line}:{loc.column}"
    )
    out.append(style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    idx = err_line - 1
    code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
    out.append(style(str(err_line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)

    col_start = err_col - 1
    if span_len <= 0:
        span_len = _guess_span(code_line, col_start)
    carets = " " * col_start + "^" * max(1, span_len)
    label_suffix = f" {error.label}" if error.label else ""
    out.append(
        style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
        + style(carets + label_suffix, _BOLD, tint, color=color)
    )

    _append_annotations(out, error, gw, color)

    return "\n".join(out)


def _guess_span(code_line: str, col_start: int) -> int:
    """Guess token length when end_column is unavailable."""
    if col_start >= len(code_line):
        return 1
    rest = code_line[col_start:]
    length = 0
    for ch in rest:
        if ch in (" ", "\t", ";", ",", ")", "]", "}"):
            break
        length += 1
    return max(1, length)


def _append_annotations(
    out: List[str],
    error: Error,
    gw: int,
    color: bool,
) -> None:
    if not (error.help or error.note):
        return
    out.append(style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if error.help:
        out.append(
            style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + style("help: ", _BOLD, color=color)
            + error.help
        )
    if error.note:
        out.append(
            style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + style("note: ", _BOLD, color=color)
            + error.note
        )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """
    Per-file diagnostic collector with rustc-style formatting.

    A fresh reporter is created for every file; nothing is shared between files.
    """

    def __init__(self, source_files: Dict[str, str]):
        self.source_files = source_files
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            note=note,
            label=label,
        ))

    def report_warning(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            label=label,
            severity=WARNING,
        ))

    @property
    def warnings(self) -> List[Error]:
        return [e for e in self.errors if e.severity == WARNING]

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use = color if color is not None else use_color()
        return _format_diagnostic(error, self.source_files, color=use)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        parts = [self.format_error(e, color=color) for e in self.errors]
        count = sum(1 for e in self.errors if e.severity == ERROR)
        if count:
            use = color if color is not None else use_color()
            summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
            parts.append(
                style("error", _BOLD, _RED, color=use)
                + style(f": {summary}", _BOLD, color=use)
            )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return any(e.severity == ERROR for e in self.errors)

    def has_diagnostics(self) -> bool:
        return len(self.errors) > 0


# ============================================================================
# Exception Classes
# ============================================================================

class EsmifyError(Exception):
    """Base exception for all esmify errors"""
    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class EsmifySourceError(EsmifyError):
    """
    Error in the JavaScript being transformed, rendered with a source snippet.

    Use this for problems caused by the input file (syntax errors, shapes
    the engine refuses to rewrite), never for bugs in esmify itself.
    """
    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 error_code: str = "E0001",
                 source_code: Optional[str] = None,
                 help: Optional[str] = None,
                 label: Optional[str] = None):
        super().__init__(message, location)
        self.error_code = error_code
        self.source_code = source_code
        self.help_text = help
        self.label_text = label

    def to_error(self) -> Error:
        return Error(
            message=self.message,
            location=self.location,
            code=self.error_code,
            help=self.help_text,
            label=self.label_text,
        )

    def __str__(self):
        source_files: Dict[str, str] = {}
        if self.source_code and self.location:
            source_files[self.location.file] = self.source_code
        return _format_diagnostic(self.to_error(), source_files, color=False)


class EsmifyImplementationError(Exception):
    """
    Error in esmify itself (broken invariant, unsupported node in the printer).

    Never use this for problems in the user's JavaScript; use
    EsmifySourceError instead.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
