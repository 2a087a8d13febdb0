# --- File discovery ----------------------------------------------------------
import fnmatch
import logging
import os
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

# Directories the go tool itself ignores when walking packages.
SKIPPED_DIRS = {"vendor", "testdata"}


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def is_go_source(name: str) -> bool:
    """Go source files, minus tests: reordering test files only adds diff noise."""
    return name.endswith(".go") and not name.endswith("_test.go")


def matches(path: str, patterns: Iterable[str]) -> bool:
    """A glob matches either the bare file name or the whole path."""
    name = os.path.basename(path)
    normalized = path.replace(os.sep, "/")
    return any(
        fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(normalized, pattern)
        for pattern in patterns
    )


def iter_go_files(paths: Iterable[str], include: Iterable[str] = ("*.go",),
                  exclude: Iterable[str] = (), recursive: bool = True) -> Iterator[str]:
    """
    Yields the Go files to process, in a stable order. Directories are walked
    like `go fmt` does: hidden directories, vendor/ and testdata/ are skipped.
    A file named explicitly is processed as long as it is Go source and not
    excluded.
    """
    include = list(include)
    exclude = list(exclude)
    seen = set()

    def accept(path: str) -> bool:
        return (
            is_go_source(os.path.basename(path))
            and matches(path, include)
            and not matches(path, exclude)
            and path not in seen
        )

    for root_path in paths:
        if os.path.isfile(root_path):
            if accept(root_path):
                seen.add(root_path)
                yield root_path
            else:
                logger.debug("Skipping %s", root_path)
            continue

        if not os.path.isdir(root_path):
            raise FileNotFoundError(root_path)

        for dirpath, dirnames, filenames in os.walk(root_path):
            if recursive:
                # Prune in place so os.walk never descends into them
                dirnames[:] = sorted(
                    d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
                )
            else:
                dirnames[:] = []
            for fn in sorted(filenames):
                full = os.path.join(dirpath, fn)
                if accept(full):
                    seen.add(full)
                    yield full
