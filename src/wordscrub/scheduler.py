"""Bounded-concurrency scan runs with cooperative pause/resume/cancel.

One run looks like this:

    enumerator thread --queue--> dispatcher thread --queue--> worker threads
                                    |                             |
                          admission slot + Gate             ContentScanner.scan
                                                                  |
                                                          ResultAggregator

Workers are daemon threads: a scan stuck on a hung drive never keeps the
process alive once its run has been abandoned.

Everything a run mutates lives on its RunHandle; nothing is process-global.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Protocol

from wordscrub.aggregator import ResultAggregator
from wordscrub.config import ScanRequest
from wordscrub.enumerator import PathEnumerator
from wordscrub.errors import E_SCAN_FAILED, ok
from wordscrub.gate import Gate
from wordscrub.models import Diagnostic, FileScanResult, RunAggregate, RunControlState
from wordscrub.scanner import ContentScanner
from wordscrub.win_paths import list_drive_roots

logger = logging.getLogger(__name__)

_DONE = object()  # end-of-enumeration sentinel


class Scanner(Protocol):
    def scan(self, path: str, request: ScanRequest) -> FileScanResult | None: ...


class ProgressListener:
    """Progress callbacks. Override what you need; the rest are no-ops.

    Called from enumerator and worker threads, one at a time (delivery is
    serialized per run). Keep them short; a listener that must run on a UI
    thread should use EventPump instead of touching the UI directly.
    """

    def total_files_known(self, total: int) -> None:
        pass

    def files_processed(self, count: int) -> None:
        pass

    def file_matched(self, result: FileScanResult) -> None:
        pass

    def status_message(self, message: str) -> None:
        pass

    def diagnostic(self, diag: Diagnostic) -> None:
        """A recoverable per-file problem. Defaults to the status channel."""
        self.status_message(str(diag))


class EventPump(ProgressListener):
    """Queue events from any thread; replay them on the thread that calls drain()."""

    def __init__(self, target: ProgressListener) -> None:
        self.target = target
        self._events: queue.SimpleQueue[tuple[str, Any]] = queue.SimpleQueue()

    def total_files_known(self, total: int) -> None:
        self._events.put(("total_files_known", total))

    def files_processed(self, count: int) -> None:
        self._events.put(("files_processed", count))

    def file_matched(self, result: FileScanResult) -> None:
        self._events.put(("file_matched", result))

    def status_message(self, message: str) -> None:
        self._events.put(("status_message", message))

    def diagnostic(self, diag: Diagnostic) -> None:
        self._events.put(("diagnostic", diag))

    def drain(self, timeout: float | None = None) -> int:
        """Deliver queued events to the target. Returns how many were delivered.

        With a timeout, waits up to that long for the first event.
        """
        delivered = 0
        block = timeout is not None
        while True:
            try:
                name, arg = self._events.get(block=block, timeout=timeout)
            except queue.Empty:
                return delivered
            getattr(self.target, name)(arg)
            delivered += 1
            block = False


class RunHandle:
    """A single scan run: control surface, progress counters and results."""

    def __init__(
        self,
        request: ScanRequest,
        scanner: Scanner | None,
        listener: ProgressListener | None,
    ) -> None:
        self.request = request
        self.gate = Gate()
        self.abandoned = False

        self._listener = listener or ProgressListener()
        self._scanner: Scanner = scanner or ContentScanner(on_diagnostic=self._add_diagnostic)
        self._aggregator = ResultAggregator()
        self._slots = threading.BoundedSemaphore(request.max_concurrency)
        self._paths: queue.Queue[Any] = queue.Queue()
        self._work: queue.Queue[Any] = queue.Queue()
        self._workers = [
            threading.Thread(target=self._work_loop, name=f"wordscrub-scan-{i}", daemon=True)
            for i in range(request.max_concurrency)
        ]

        self._emit_lock = threading.RLock()  # listeners may read counters
        self._diag_lock = threading.Lock()
        self._processed = 0
        self._total_known = 0
        self._diagnostics: list[Diagnostic] = []
        self._done = threading.Event()

        self._enum_thread = threading.Thread(
            target=self._enumerate, name="wordscrub-enumerate", daemon=True
        )
        self._dispatch_thread = threading.Thread(
            target=self._dispatch, name="wordscrub-dispatch", daemon=True
        )

    # --- control ---

    def start(self) -> None:
        self._emit("status_message", "Searching for files...")
        for worker in self._workers:
            worker.start()
        self._enum_thread.start()
        self._dispatch_thread.start()

    def pause(self) -> None:
        self.gate.pause()

    def resume(self) -> None:
        self.gate.resume()

    def cancel(self) -> None:
        self.gate.cancel()

    @property
    def state(self) -> RunControlState:
        return self.gate.state

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the run completes. False if the timeout expired first."""
        return self._done.wait(timeout)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel_and_drain(self, timeout: float | None = None) -> bool:
        """Cancel, then wait at most the drain timeout for in-flight scans.

        If they do not finish in time the remaining workers are abandoned:
        the handle stops waiting for them and marks itself abandoned. The
        workers are daemon threads, so they do not hold up interpreter exit.
        """
        self.cancel()
        if timeout is None:
            timeout = self.request.drain_timeout
        if self.wait(timeout):
            return True
        self.abandoned = True
        logger.warning("Drain timeout of %.1fs exceeded; abandoning in-flight scans", timeout)
        return False

    # --- observation ---

    @property
    def files_processed(self) -> int:
        with self._emit_lock:
            return self._processed

    @property
    def total_files_known(self) -> int:
        with self._emit_lock:
            return self._total_known

    def results(self) -> list[FileScanResult]:
        return self._aggregator.results()

    def aggregate(self) -> RunAggregate:
        return self._aggregator.snapshot()

    def diagnostics(self) -> list[Diagnostic]:
        with self._diag_lock:
            return list(self._diagnostics)

    def summary(self) -> dict[str, Any]:
        return ok({
            "state": self.state.value,
            "completed": self.done,
            "abandoned": self.abandoned,
            "totalFilesKnown": self.total_files_known,
            "filesProcessed": self.files_processed,
            "aggregate": self.aggregate().to_dict(),
            "diagnostics": len(self.diagnostics()),
        })

    # --- internals ---

    def _emit(self, name: str, arg: Any) -> None:
        """Deliver one event, serialized with every other event of this run."""
        with self._emit_lock:
            self._emit_locked(name, arg)

    def _emit_locked(self, name: str, arg: Any) -> None:
        try:
            getattr(self._listener, name)(arg)
        except Exception:
            logger.exception("Progress listener failed in %s", name)

    def _add_diagnostic(self, diag: Diagnostic) -> None:
        with self._diag_lock:
            self._diagnostics.append(diag)
        self._emit("diagnostic", diag)

    def _enumerate(self) -> None:
        request = self.request
        enumerator = PathEnumerator(
            request.extensions,
            exclude=(request.output_dir,),
            is_cancelled=self.gate.is_cancelled,
        )
        roots = list(request.roots) or list_drive_roots()
        found = 0
        try:
            for root in roots:
                if self.gate.is_cancelled():
                    break
                logger.info("Enumerating %s", root)
                for path in enumerator.iter_paths(root):
                    self._paths.put(path)
                    found += 1
                with self._emit_lock:
                    self._total_known = found
                    self._emit_locked("total_files_known", found)
        except Exception as e:
            logger.exception("Enumeration failed")
            self._add_diagnostic(Diagnostic(E_SCAN_FAILED, f"Error while searching for files: {e}"))
        finally:
            self._emit("status_message", f"Files found: {found}")
            self._paths.put(_DONE)

    def _dispatch(self) -> None:
        try:
            while True:
                path = self._paths.get()
                if path is _DONE:
                    break
                if self.gate.is_cancelled():
                    continue  # discarded without dispatch
                self._slots.acquire()
                if self.gate.checkpoint() is RunControlState.CANCELLED:
                    self._slots.release()
                    continue
                self._work.put(path)
        finally:
            for _ in self._workers:
                self._work.put(_DONE)
            for worker in self._workers:
                worker.join()
            self._finish()

    def _work_loop(self) -> None:
        while True:
            path = self._work.get()
            if path is _DONE:
                return
            self._scan_one(path)

    def _scan_one(self, path: str) -> None:
        try:
            try:
                result = self._scanner.scan(path, self.request)
            except Exception as e:
                logger.debug("Scan of %s raised", path, exc_info=True)
                self._add_diagnostic(Diagnostic(E_SCAN_FAILED, f"Error processing {path}: {e}", path))
                result = None

            with self._emit_lock:
                if result is not None:
                    self._aggregator.record(result)
                self._processed += 1
                self._emit_locked("files_processed", self._processed)
                if result is not None:
                    self._emit_locked("file_matched", result)
        finally:
            self._slots.release()

    def _finish(self) -> None:
        if self.gate.is_cancelled():
            message = f"Scan cancelled. Files matched: {len(self._aggregator)}"
        else:
            message = f"Scan complete. Files matched: {len(self._aggregator)}"
        logger.info(message)
        self._emit("status_message", message)
        self._done.set()


class WorkerScheduler:
    """Starts runs. Each run gets its own gate, slots, pool and aggregator."""

    def __init__(
        self,
        scanner: Scanner | None = None,
        listener: ProgressListener | None = None,
    ) -> None:
        self.scanner = scanner
        self.listener = listener

    def run(self, request: ScanRequest) -> RunHandle:
        handle = RunHandle(request, self.scanner, self.listener)
        logger.info(
            "Starting scan: %d word(s), extensions %s, concurrency %d",
            len(request.words),
            ", ".join(sorted(request.extensions)),
            request.max_concurrency,
        )
        handle.start()
        return handle

    start = run
