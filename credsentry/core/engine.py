"""
CredSentry Scan Engine

Walks a directory tree and scans every file on a thread pool.

- The walk is sequential. Ignored names and (optionally) test directories
  prune whole subtrees.
- At most twice the pool size of files are in flight at once.
- Workers push findings onto a bounded queue; a single aggregator thread
  owns the result list.
- scan() returns once the walk is done, every file has been scanned and the
  aggregator has drained the queue.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterator, List, Optional

from credsentry.core.classifier import Classifier
from credsentry.core.config import CredentialConfig
from credsentry.core.dispatcher import FormatDispatcher
from credsentry.core.finding import Finding, ScanResult, Statistics
from credsentry.core.scanner import PathLike

logger = logging.getLogger(__name__)

# marks the end of the result stream
_DONE = object()


class ScanEngine:
    """
    Concurrent scanner for a file or directory tree.
    One engine can run any number of scans; each scan starts from scratch.
    """

    def __init__(
        self,
        config: CredentialConfig,
        workers: Optional[int] = None,
        classifier: Optional[Classifier] = None,
    ):
        self.config = config
        self.workers = workers or os.cpu_count() or 1
        # compiles every pattern, raising PatternError before anything is scanned
        self.dispatcher = FormatDispatcher(config, classifier)

    def scan(self, path: PathLike) -> ScanResult:
        root = str(path)
        findings: List[Finding] = []
        results: "queue.Queue[object]" = queue.Queue(maxsize=self.workers * 2)

        aggregator = threading.Thread(
            target=_aggregate,
            args=(results, findings),
            name="credsentry-aggregator",
            daemon=True,
        )
        aggregator.start()

        intake = threading.BoundedSemaphore(self.workers * 2)
        futures: List[Future] = []
        error: Optional[Exception] = None

        try:
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="credsentry") as pool:
                try:
                    for file_path in self.walk(root):
                        intake.acquire()
                        future = pool.submit(self._scan_file, file_path, results.put)
                        future.add_done_callback(lambda _: intake.release())
                        futures.append(future)
                except OSError as exc:
                    logger.debug("walk of %s failed: %s", root, exc)
                    error = exc
        finally:
            results.put(_DONE)
            aggregator.join()

        statistics = Statistics(
            files_found=len(futures),
            files_scanned=sum(1 for f in futures if f.result()),
            results_found=len(findings),
        )
        return ScanResult(findings=findings, statistics=statistics, error=error)

    def walk(self, root: str) -> Iterator[str]:
        """Yield every regular file under ``root`` that is not excluded.

        The exclusion rules apply to entries below the root, never to the
        root itself. Raises OSError when the tree cannot be read.
        """
        if os.path.isfile(root):
            yield root
            return

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if not self._skip_directory(d))
            for name in sorted(filenames):
                if self.config.is_ignore_file(name):
                    continue
                file_path = os.path.join(dirpath, name)
                if os.path.isfile(file_path):
                    yield file_path

    def _skip_directory(self, name: str) -> bool:
        if self.config.is_ignore_file(name):
            return True
        return self.config.exclude_tests and self.config.is_test_directory(name)

    def _scan_file(self, file_path: str, emit) -> bool:
        try:
            return self.dispatcher.parse_file(file_path, emit)
        except Exception as exc:
            logger.warning("error scanning %s: %s", file_path, exc)
            return False


def _aggregate(results: "queue.Queue[object]", findings: List[Finding]) -> None:
    while True:
        item = results.get()
        if item is _DONE:
            return
        findings.append(item)


def _raise(exc: OSError) -> None:
    raise exc
