"""
Thread-safe in-memory task snapshot with write-through mutations.

Design:
    Snapshot        : Tuple[TaskRecord, ...]    (immutable, replaced whole on rebuild)
    Document locks  : Dict[str, threading.Lock] (one writer per document at a time)
    Update queue    : rebuild requests from the watcher, drained by a worker thread

Every rebuild re-reads every document; there is no incremental update. Reads
hand out the current tuple, so a reader never sees a half-built snapshot.

Mutations read the document, check that the target line still is the line
the caller saw, patch that one line, write the whole document back and
rebuild. The result says whether that happened (MutationResult).
"""

import logging
import queue
import threading
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from tasks_overview.models.task import MutationResult, MutationStatus, TaskRecord, split_ref
from tasks_overview.models.view_state import ViewState
from tasks_overview.parsers.line_edits import (
    append_line,
    build_task_line,
    replace_line,
    split_lines,
    toggle_line,
)
from tasks_overview.parsers.task_parser import parse_document
from tasks_overview.store.documents import DocumentNotFoundError, DocumentStore
from tasks_overview.views.board import build_board
from tasks_overview.views.grouping import Board

log = logging.getLogger(__name__)

# Editor collaborator: receives the raw line, returns a replacement or None if cancelled
LineEditor = Callable[[str], Optional[str]]

_REBUILD = "rebuild"


def build_collection(store: DocumentStore) -> Tuple[Tuple[str, ...], Tuple[TaskRecord, ...]]:
    """
    Scan every document in store order and parse its task lines.

    Returns (document ids, records). Records keep document order, then line
    order. Store errors propagate.
    """
    documents = tuple(store.list_documents())
    records: List[TaskRecord] = []
    for source_id in documents:
        records.extend(parse_document(store.read(source_id), source_id))
    return documents, tuple(records)


class TaskCache:
    """
    Thread-safe task snapshot over a DocumentStore.

    Initialize with initialize(), then start the background worker with
    start_worker(). The watcher calls enqueue_rebuild() to schedule a rescan
    without blocking the watcher thread.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._lock = threading.RLock()
        self._doc_locks: Dict[str, threading.Lock] = {}
        self._doc_locks_guard = threading.Lock()
        self._documents: Tuple[str, ...] = ()
        self._tasks: Tuple[TaskRecord, ...] = ()
        self._update_queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None
        self._last_full_scan: Optional[datetime] = None
        self._scan_count = 0

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Full scan. Blocks until complete.
        Call once at server startup before starting the watcher.
        """
        log.info("Starting task scan: %s", self._store.describe())
        self.rebuild()
        log.info(
            "Task scan complete: %d documents, %d tasks",
            len(self._documents),
            len(self._tasks),
        )

    def start_worker(self) -> None:
        """Start the background queue-drain worker thread (daemon)."""
        self._worker_thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="task-cache-worker"
        )
        self._worker_thread.start()

    def stop_worker(self) -> None:
        """Signal the worker thread to stop and wait for it."""
        self._update_queue.put(None)  # sentinel
        if self._worker_thread:
            self._worker_thread.join(timeout=5)

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self) -> Tuple[TaskRecord, ...]:
        """Re-read every document and replace the snapshot."""
        with self._lock:
            documents, tasks = build_collection(self._store)
            self._documents = documents
            self._tasks = tasks
            self._last_full_scan = datetime.now()
            self._scan_count += 1
            log.debug("Rebuilt snapshot: %d documents, %d tasks", len(documents), len(tasks))
            return tasks

    def enqueue_rebuild(self) -> None:
        """Schedule a rebuild from a watcher callback (non-blocking)."""
        self._update_queue.put(_REBUILD)

    def _worker_loop(self) -> None:
        """Drain the update queue; back-to-back requests collapse into one rebuild."""
        while True:
            item = self._update_queue.get()
            if item is None:  # sentinel → stop
                break
            stop = False
            while True:
                try:
                    pending = self._update_queue.get_nowait()
                except queue.Empty:
                    break
                if pending is None:
                    stop = True
                    break
            try:
                self.rebuild()
            except Exception:
                log.exception("Worker failed to rebuild task snapshot")
            if stop:
                break

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> Tuple[TaskRecord, ...]:
        with self._lock:
            return self._tasks

    @property
    def documents(self) -> Tuple[str, ...]:
        with self._lock:
            return self._documents

    @property
    def store(self) -> DocumentStore:
        return self._store

    def get_task(self, ref: str) -> Optional[TaskRecord]:
        """Look up a task by 'source_id:line_index' in the current snapshot."""
        try:
            source_id, line_index = split_ref(ref)
        except ValueError:
            return None
        return self.find_task(source_id, line_index)

    def find_task(self, source_id: str, line_index: int) -> Optional[TaskRecord]:
        for task in self.tasks:
            if task.source_id == source_id and task.line_index == line_index:
                return task
        return None

    def query_tasks(
        self,
        *,
        completed: Optional[bool] = None,
        source_id: Optional[str] = None,
        priority: Optional[str] = None,
        tag: Optional[str] = None,
        due_before: Optional[str] = None,
        limit: int = 500,
    ) -> List[TaskRecord]:
        """
        Filter the snapshot.

        Args:
            completed: True = only done, False = only open, None = both
            source_id: Restrict to one document
            priority: Exact priority name
            tag: Tag with or without the leading '#'
            due_before: ISO date, tasks due on or before this date
            limit: Max results
        """
        if tag and not tag.startswith("#"):
            tag = f"#{tag}"
        result: List[TaskRecord] = []
        for task in self.tasks:
            if completed is not None and task.completed != completed:
                continue
            if source_id and task.source_id != source_id:
                continue
            if priority and task.priority != priority:
                continue
            if tag and tag not in task.tags:
                continue
            if due_before and (task.due_date is None or task.due_date > due_before):
                continue
            result.append(task)
            if len(result) >= limit:
                break
        return result

    def board(self, view: Optional[ViewState] = None, today: Optional[date] = None) -> Board:
        return build_board(self.tasks, view, today)

    # ------------------------------------------------------------------
    # Mutations (write-through to the store)
    # ------------------------------------------------------------------

    @contextmanager
    def _document_lock(self, source_id: str) -> Iterator[None]:
        with self._doc_locks_guard:
            lock = self._doc_locks.setdefault(source_id, threading.Lock())
        with lock:
            yield

    def _patch_line(
        self,
        task: TaskRecord,
        compute: Callable[[str], str],
    ) -> MutationResult:
        """Replace the task's line with compute(current_line) if it is still there."""
        with self._document_lock(task.source_id):
            try:
                content = self._store.read(task.source_id)
            except DocumentNotFoundError:
                log.warning("Cannot update %s: document no longer exists", task.ref)
                return MutationResult(
                    status=MutationStatus.NOT_FOUND,
                    source_id=task.source_id,
                    line_index=task.line_index,
                    message=f"Document '{task.source_id}' not found",
                )

            lines = split_lines(content)
            index = task.line_index
            if index >= len(lines) or lines[index].strip() != task.raw_line:
                log.warning("Cannot update %s: line has moved or changed", task.ref)
                return MutationResult(
                    status=MutationStatus.CONFLICT,
                    source_id=task.source_id,
                    line_index=index,
                    message=f"Line {index} of '{task.source_id}' no longer matches the task",
                )

            new_line = compute(lines[index])
            self._store.write(task.source_id, replace_line(content, index, new_line))

        self.rebuild()
        return MutationResult(
            status=MutationStatus.APPLIED,
            source_id=task.source_id,
            line_index=index,
            line=new_line,
        )

    def toggle_task(self, task: TaskRecord, today: Optional[date] = None) -> MutationResult:
        """Flip completion; completing stamps a done date."""
        return self._patch_line(task, lambda line: toggle_line(line, task.completed, today))

    def edit_task(
        self,
        task: TaskRecord,
        editor: Optional[LineEditor] = None,
        new_line: Optional[str] = None,
    ) -> MutationResult:
        """
        Replace the task's line verbatim.

        The replacement comes from the editor callable (given the raw line)
        or from new_line. A missing or empty replacement means the edit was
        cancelled and nothing is read or written.
        """
        if editor is not None:
            new_line = editor(task.raw_line)
        if not new_line:
            return MutationResult(
                status=MutationStatus.CANCELLED,
                source_id=task.source_id,
                line_index=task.line_index,
                message="Edit cancelled",
            )
        replacement = new_line.rstrip("\r\n")

        def compute(line: str) -> str:
            return replacement + "\r" if line.endswith("\r") else replacement

        return self._patch_line(task, compute)

    def create_task(
        self,
        source_id: str,
        description: str,
        *,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        today: Optional[date] = None,
    ) -> MutationResult:
        """
        Append a new task line to the end of a document.

        Raises ValueError for an empty description, unknown priority or
        malformed due date (before anything is read).
        """
        line = build_task_line(description, priority, due_date, today)

        with self._document_lock(source_id):
            try:
                content = self._store.read(source_id)
            except DocumentNotFoundError:
                log.warning("Cannot create task: document '%s' not found", source_id)
                return MutationResult(
                    status=MutationStatus.NOT_FOUND,
                    source_id=source_id,
                    message=f"Document '{source_id}' not found",
                )
            updated = append_line(content, line)
            self._store.write(source_id, updated)

        self.rebuild()
        # The appended line is the last one before the trailing newline
        line_index = len(split_lines(updated)) - 2
        return MutationResult(
            status=MutationStatus.APPLIED,
            source_id=source_id,
            line_index=line_index,
            line=line,
        )

    # ------------------------------------------------------------------
    # Status / diagnostics
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            info = {
                "documents_indexed": len(self._documents),
                "tasks_indexed": len(self._tasks),
                "open_tasks": sum(1 for t in self._tasks if not t.completed),
                "scan_count": self._scan_count,
                "last_full_scan": self._last_full_scan.isoformat() if self._last_full_scan else None,
            }
        info.update(self._store.describe())
        return info
