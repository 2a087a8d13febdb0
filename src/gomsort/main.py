#!/usr/bin/env python3
"""
gomsort
-------
Sorts the methods of every Go type so a file reads top-down:

  1. methods are grouped by receiver type,
  2. exported methods come first,
  3. entry points (low call depth) come before what they call,
  4. helpers called from many places sink to the end.

Comments stay with the declarations they document; everything that is not a
method keeps its place.

USAGE EXAMPLES
--------------
# Sort every .go file under the current directory (like `go fmt ./...`):
gomsort

# Show what would change without touching anything:
gomsort -n ./pkg

# Explain the order chosen for a file:
gomsort -n --report text server.go
"""

import argparse
import logging
import signal
import sys
import threading

from gomsort import __version__
from gomsort.config import default_config, load_config
from gomsort.errors import ConfigError
from gomsort.outputs.output import print_summary, to_json
from gomsort.runner import LOG_DATEFMT, LOG_FORMAT, RunOptions, run

logger = logging.getLogger(__name__)

DESCRIPTION = """\
gomsort sorts Go methods within types for better readability.
Recursively processes directories like 'go fmt'.
Methods are sorted by:
  1. Receiver type (grouped together)
  2. Exported methods first
  3. Entry points (low call depth) first
  4. Helper methods (high in-degree) last
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gomsort",
        usage="%(prog)s [options] [files/directories...]",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="*", default=["."], help="Files or directories (default: .)")
    parser.add_argument(
        "-n", "--dry-run", action="store_true",
        help="dry run - show what would be changed without modifying files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose output")
    parser.add_argument("-c", "--config", help="path to a JSON config file (default: search .msort.json)")
    parser.add_argument("-j", "--jobs", type=int, help="number of worker processes (default: CPU count)")
    parser.add_argument(
        "--no-recursive", dest="recursive", action="store_false",
        help="do not descend into subdirectories",
    )
    parser.add_argument(
        "--report", choices=("text", "json"),
        help="print the call depth / in-degree analysis behind each file's order",
    )
    parser.add_argument("--init-config", metavar="PATH", help="write the default config to PATH and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
    )


def _interrupt_handler(cancel: threading.Event):
    """
    First Ctrl-C: stop picking up new files, let the ones in progress finish.
    Second Ctrl-C: abort right away.
    """
    def handler(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        logger.warning("Interrupt received; finishing files in progress")
        cancel.set()
    return handler


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.init_config:
        default_config().save(args.init_config)
        print(f"Wrote default config to {args.init_config}")
        return 0

    if args.jobs is not None and args.jobs < 1:
        logger.error("--jobs must be at least 1")
        return 2

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    options = RunOptions(
        paths=args.paths,
        dry_run=args.dry_run,
        recursive=args.recursive,
        jobs=args.jobs,
        report=args.report is not None,
        config=config,
    )

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, _interrupt_handler(cancel))
    try:
        results = run(options, cancel)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    finally:
        signal.signal(signal.SIGINT, previous)

    failed = 0
    for result in results:
        if result.error:
            failed += 1
            logger.error("%s", result.error)
        elif result.changed and args.dry_run:
            print(f"Would sort methods in: {result.path}")

    if args.report == "text":
        print_summary(results)
    elif args.report == "json":
        print(to_json(results))

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
