"""
Batch processing: finds Go files, runs one sorting pipeline per file and
writes the results back.

Files are independent of each other, so with more than one job they are
spread over a process pool. Failures are reported per file and never stop
the rest of the batch.
"""

import logging
import os
import signal
import sys
import tempfile
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional

from gomsort.config import Config
from gomsort.errors import GomsortError
from gomsort.inputs.directory_scanning import iter_go_files, read_text
from gomsort.outputs.output import summarize_methods
from gomsort.sorter import MethodSorter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass
class RunOptions:
    paths: list[str] = field(default_factory=lambda: ["."])
    dry_run: bool = False
    recursive: bool = True
    jobs: Optional[int] = None  # None: one worker per CPU
    report: bool = False  # keep the per-method analysis in the results
    config: Config = field(default_factory=Config)


@dataclass
class FileResult:
    path: str
    changed: bool = False
    written: bool = False
    error: Optional[str] = None
    methods: list[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


# --- Single file ---------------------------------------------------------------

_worker_sorter: Optional[MethodSorter] = None


def _sorter_for(config: Config) -> MethodSorter:
    """Reuses one sorter (and its tree-sitter parser) per process."""
    global _worker_sorter
    if _worker_sorter is None or _worker_sorter.config != config:
        _worker_sorter = MethodSorter(config)
    return _worker_sorter


def process_file(path: str, options: RunOptions) -> FileResult:
    """
    Sorts one file. Never raises for problems with the file itself; they end
    up in `FileResult.error` instead.
    """
    logger.info("Processing: %s", path)
    result = FileResult(path=path)
    try:
        source = read_text(path)
        sorted_ = _sorter_for(options.config).sort_source(source, path)
    except (GomsortError, OSError, UnicodeDecodeError) as e:
        result.error = str(e)
        return result

    result.changed = sorted_.changed
    if options.report:
        result.methods = summarize_methods(sorted_.methods)

    if not sorted_.changed:
        logger.info("  No changes needed")
        return result

    if options.dry_run:
        return result

    try:
        write_file(path, sorted_.source)
    except OSError as e:
        result.error = f"writing sorted file {path}: {e}"
        return result

    result.written = True
    logger.info("  Methods sorted")
    return result


def write_file(path: str, content: str):
    """
    Replaces `path` atomically: the new content goes to a temporary file in the
    same directory first, so a failure never leaves a half-written source file.
    Symlinks are resolved first so the link survives and its target is updated.
    A file with several hard links is rewritten in place instead, since
    replacing it would detach this name from the others.
    """
    path = os.path.realpath(path)
    st = os.stat(path)
    if st.st_nlink > 1:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        return

    directory = os.path.dirname(path)
    mode = st.st_mode & 0o7777
    fd, tmp_path = tempfile.mkstemp(prefix=".gomsort-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Batches -------------------------------------------------------------------

def collect_files(options: RunOptions) -> tuple[list[str], list[FileResult]]:
    """Expands the requested paths. Paths that do not exist become error results."""
    files: list[str] = []
    missing: list[FileResult] = []
    config = options.config
    for path in options.paths:
        try:
            for found in iter_go_files([path], config.include, config.exclude, options.recursive):
                if found not in files:
                    files.append(found)
        except FileNotFoundError:
            missing.append(FileResult(path=path, error=f"{path}: no such file or directory"))
    return files, missing


def run(options: RunOptions, cancel_event: Optional[threading.Event] = None) -> list[FileResult]:
    """
    Processes every file and returns one result per file, in discovery order.
    `cancel_event` is checked between files; files not yet started when it is
    set are left untouched and do not appear in the results.
    """
    files, results = collect_files(options)
    jobs = options.jobs or os.cpu_count() or 1

    if jobs == 1 or len(files) <= 1:
        for path in files:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Cancelled; remaining files skipped")
                break
            results.append(_process_inline(path, options))
        return results

    by_path: dict[str, FileResult] = {}
    pending: dict[Future, str] = {}
    with ProcessPoolExecutor(
        max_workers=min(jobs, len(files)),
        initializer=_init_worker,
        initargs=(logging.getLogger().getEffectiveLevel(),),
    ) as pool:
        pending = {pool.submit(process_file, path, options): path for path in files}
        try:
            while pending:
                done, _ = wait(pending, timeout=0.2, return_when=FIRST_COMPLETED)
                for future in done:
                    path = pending.pop(future)
                    by_path[path] = _result_of(future, path)
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning("Cancelled; remaining files skipped")
                    break
        finally:
            for future in pending:
                future.cancel()

    # Files that were already running when we stopped still finished (and may
    # have been written), so their results are reported too.
    for future, path in pending.items():
        if future.done() and not future.cancelled():
            by_path[path] = _result_of(future, path)

    results.extend(by_path[path] for path in files if path in by_path)
    return results


def _init_worker(level: int):
    # The parent decides when to stop; workers finish the file they are on.
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, stream=sys.stderr)


def _process_inline(path: str, options: RunOptions) -> FileResult:
    try:
        return process_file(path, options)
    except Exception as e:  # same contract as a crashed worker: only this file fails
        logger.error("Failed on %s: %s", path, e)
        return FileResult(path=path, error=str(e))


def _result_of(future: Future, path: str) -> FileResult:
    try:
        return future.result()
    except Exception as e:  # a crashed worker still only fails its own file
        logger.error("Worker failed on %s: %s", path, e)
        return FileResult(path=path, error=str(e))
