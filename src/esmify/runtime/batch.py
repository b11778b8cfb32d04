"""
Batch host

Discovers files, runs the driver on each and reports a status per file:

- ok: rewritten (and written back unless dry_run)
- unmodified: CommonJS detected but no rewrite applied
- skipped: not CommonJS
- error: parsing or transforming raised; the rest of the batch carries on

With jobs > 1 files are spread over worker processes; each worker builds its
own driver.
"""

import fnmatch
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from ..compiler.driver import TransformDriver
from ..shared.errors import Error, ErrorReporter, EsmifySourceError, WARNING
from ..shared.serialization import serialize_tree
from ..utils.config import DEFAULT_EXTENSIONS, IGNORED_DIRECTORIES
from ..utils.io_utils import read_source_file, write_source_file

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    OK = "ok"
    UNMODIFIED = "unmodified"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class FileReport:
    """Result for one file; plain data so it can cross process boundaries."""
    path: str
    status: FileStatus
    source: str = ""
    output: Optional[str] = None
    diagnostics: List[Error] = field(default_factory=list)
    error: Optional[str] = None
    dump: Optional[str] = None

    def format_diagnostics(self, color: bool = False) -> str:
        reporter = ErrorReporter({self.path: self.source})
        reporter.errors = list(self.diagnostics)
        return reporter.format_all_errors(color=color)


@dataclass
class BatchOptions:
    dry_run: bool = False
    dump_tree: bool = False
    jobs: int = 1
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    ignore_patterns: Tuple[str, ...] = ()


@dataclass
class BatchSummary:
    reports: List[FileReport] = field(default_factory=list)

    def count(self, status: FileStatus) -> int:
        return sum(1 for r in self.reports if r.status is status)

    @property
    def has_errors(self) -> bool:
        return self.count(FileStatus.ERROR) > 0

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.reports for d in r.diagnostics if d.severity == WARNING)

    def format(self) -> str:
        counts: Dict[FileStatus, int] = {status: self.count(status) for status in FileStatus}
        parts = [f"{counts[status]} {status.value}" for status in FileStatus]
        line = f"{len(self.reports)} file{'s' if len(self.reports) != 1 else ''}: " + ", ".join(parts)
        if self.warning_count:
            line += f" ({self.warning_count} warning{'s' if self.warning_count != 1 else ''})"
        return line


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def _normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    return tuple("." + ext.strip().lstrip(".") for ext in extensions if ext.strip())


def is_ignored(path: Path, patterns: Sequence[str]) -> bool:
    text = path.as_posix()
    return any(fnmatch.fnmatch(text, p) or fnmatch.fnmatch(path.name, p) for p in patterns)


def discover_files(paths: Iterable[Path], extensions: Iterable[str] = DEFAULT_EXTENSIONS,
                   ignore_patterns: Sequence[str] = ()) -> List[Path]:
    """
    Absolute paths of every file to transform, in sorted order per argument.

    Files named directly are taken whatever their extension. Directories are
    walked recursively, skipping node_modules and hidden directories.
    """
    suffixes = _normalize_extensions(extensions)
    found: List[Path] = []
    seen = set()

    def add(candidate: Path) -> None:
        if candidate not in seen and not is_ignored(candidate, ignore_patterns):
            seen.add(candidate)
            found.append(candidate)

    for raw in paths:
        path = Path(raw).resolve()
        if path.is_file():
            add(path)
            continue
        if not path.is_dir():
            logger.warning(f"{path}: no such file or directory")
            continue
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in IGNORED_DIRECTORIES and not d.startswith(".")
            )
            for name in sorted(filenames):
                if name.endswith(suffixes):
                    add(Path(dirpath) / name)
    return found


# ---------------------------------------------------------------------------
# Per-file work (module level so worker processes can import it)
# ---------------------------------------------------------------------------

@lru_cache(maxsize=None)
def _worker_driver() -> TransformDriver:
    return TransformDriver()


def process_file(path: str, dry_run: bool = False, dump_tree: bool = False) -> FileReport:
    """Transform one file and, unless dry_run, write the result back."""
    try:
        source = read_source_file(path)
        result = _worker_driver().run(source, path)
    except EsmifySourceError as e:
        logger.debug(f"{path}: {e.message}")
        return FileReport(path, FileStatus.ERROR, error=str(e))
    except Exception as e:
        logger.exception(f"{path}: transform failed")
        return FileReport(path, FileStatus.ERROR, error=f"{type(e).__name__}: {e}")

    if not result.detected:
        return FileReport(path, FileStatus.SKIPPED, source=source)

    report = FileReport(
        path,
        FileStatus.OK if result.changed else FileStatus.UNMODIFIED,
        source=source,
        output=result.output,
        diagnostics=result.diagnostics,
        dump=serialize_tree(result.tree) if dump_tree and result.tree is not None else None,
    )
    if report.status is FileStatus.OK and not dry_run:
        write_source_file(path, result.output)
        logger.debug(f"{path}: written")
    return report


class BatchRunner:
    """Runs process_file over a set of paths, in-process or on a worker pool."""

    def __init__(self, options: Optional[BatchOptions] = None):
        self.options = options if options is not None else BatchOptions()

    def run(self, paths: Iterable[Path]) -> BatchSummary:
        files = discover_files(paths, self.options.extensions, self.options.ignore_patterns)
        logger.debug(f"{len(files)} file(s) to process with {self.options.jobs} job(s)")
        if self.options.jobs > 1 and len(files) > 1:
            reports = self._run_parallel(files)
        else:
            reports = [self._process(f) for f in files]
        return BatchSummary(reports)

    def _process(self, path: Path) -> FileReport:
        return process_file(str(path), self.options.dry_run, self.options.dump_tree)

    def _run_parallel(self, files: List[Path]) -> List[FileReport]:
        by_path: Dict[str, FileReport] = {}
        with ProcessPoolExecutor(max_workers=self.options.jobs) as executor:
            futures = {
                executor.submit(process_file, str(f), self.options.dry_run, self.options.dump_tree): str(f)
                for f in files
            }
            for future in as_completed(futures):
                path = futures[future]
                try:
                    by_path[path] = future.result()
                except Exception as e:
                    logger.exception(f"{path}: worker failed")
                    by_path[path] = FileReport(path, FileStatus.ERROR, error=f"{type(e).__name__}: {e}")
        return [by_path[str(f)] for f in files]
