"""CLI entry point: run `esmify src/` or `python -m esmify src/`."""

import logging
import sys
from pathlib import Path


def main(argv=None) -> int:
    import argparse
    from .runtime.batch import BatchOptions, BatchRunner, FileStatus
    from .shared.errors import green, red, use_color, yellow
    from .utils.config import DEFAULT_EXTENSIONS

    parser = argparse.ArgumentParser(prog="esmify", description="Rewrite CommonJS modules as ES modules.")
    parser.add_argument("paths", nargs="+", type=Path, help="Files or directories to transform")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every rewrite")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Do not write any file")
    parser.add_argument("-p", "--print", dest="print_output", action="store_true",
                        help="Write transformed text to stdout")
    parser.add_argument("-j", "--jobs", type=int, default=1, help="Worker processes (default: 1)")
    parser.add_argument("--extensions", default=",".join(DEFAULT_EXTENSIONS),
                        help="Comma-separated file extensions to pick up in directories (default: js)")
    parser.add_argument("--ignore-pattern", dest="ignore_patterns", action="append", default=[],
                        metavar="GLOB", help="Skip paths matching GLOB (repeatable)")
    parser.add_argument("--dump-tree", action="store_true",
                        help="Print the s-expression dump of each transformed tree")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.jobs < 1:
        sys.stderr.write("esmify: error: --jobs must be at least 1\n")
        return 2

    options = BatchOptions(
        dry_run=args.dry_run,
        dump_tree=args.dump_tree,
        jobs=args.jobs,
        extensions=tuple(args.extensions.split(",")),
        ignore_patterns=tuple(args.ignore_patterns),
    )
    summary = BatchRunner(options).run(args.paths)

    color = use_color(sys.stderr)
    tint = {FileStatus.OK: green, FileStatus.ERROR: red, FileStatus.UNMODIFIED: yellow}
    for report in summary.reports:
        paint = tint.get(report.status)
        label = paint(report.status.value, color=color) if paint else report.status.value
        sys.stderr.write(f"{label} {report.path}\n")
        if report.error:
            sys.stderr.write(report.error + "\n")
        if report.diagnostics:
            sys.stderr.write(report.format_diagnostics(color=color) + "\n")
        if args.print_output and report.status is FileStatus.OK:
            sys.stdout.write(report.output)
        if report.dump is not None:
            sys.stdout.write(report.dump + "\n")

    sys.stderr.write(summary.format() + "\n")
    if summary.has_errors:
        return 1
    sys.stderr.write("Transformation complete!\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
