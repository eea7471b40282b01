import os
import logging
from collections import Counter
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .. import config
from ..database.ops import DBOperations
from ..exceptions import DatabaseError, ScanError, ScanInvariantError
from ..metadata.classify import DiagnosticHook, scan_item
from ..models import ChangeState, DeleteOp, FileAttrs, UpsertOp
from .attributes import attrs_from_entry, read_attrs, volume_name_for
from .batch import BatchApplier
from .changes import detect_change
from .hidden import is_directory_hidden, is_directory_hidden_recursive


class SessionState(Enum):
    NOT_STARTED = 'not_started'
    WALKING = 'walking'
    SWEEPING = 'sweeping'
    CLOSED = 'closed'


class ScanSession:
    """
    One reconciliation pass over a file or directory.

    Walks everything visible under the root, queuing upserts for new or
    changed entries, then deletes every catalog record under the root that
    the walk did not confirm. Use as a context manager so the pending-queue
    check runs on close.
    """
    def __init__(self,
                 db_ops: DBOperations,
                 root: Path,
                 on_error: Optional[DiagnosticHook] = None,
                 batch_size: int = config.BATCH_SIZE):
        self.db = db_ops
        self.root = Path(os.path.abspath(root))
        self.volume_name = volume_name_for(self.root)
        self.on_error = on_error
        self.applier = BatchApplier(db_ops, batch_size)
        self.state = SessionState.NOT_STARTED
        self.stats: Counter = Counter()

    @property
    def first_result(self) -> Optional[int]:
        return self.applier.first_result

    def run(self):
        if self.state is not SessionState.NOT_STARTED:
            raise ScanInvariantError(f"Scan session for {self.root} already ran")

        # 1. Scan everything visible under the root, tracking ids along the way
        start_dir = self.root if self.root.is_dir() else self.root.parent
        if is_directory_hidden_recursive(start_dir):
            logging.info(f"Skipping hidden location {self.root}")
        else:
            self.state = SessionState.WALKING
            logging.debug(f"Walking {self.root} (volume={self.volume_name})")
            try:
                self._walk()
            except DatabaseError as e:
                # Per-path I/O errors never get here; a catalog that cannot answer lookups ends the scan
                raise ScanError(f"Tree walk of {self.root} failed: {e}") from e
            self.applier.apply()

        # 2. Clean up deleted or hidden items that were not scanned above
        self.state = SessionState.SWEEPING
        try:
            self._sweep()
        except DatabaseError as e:
            raise ScanError(f"Cleanup under {self.root} failed: {e}") from e

        logging.info(
            f"Scan of {self.root} complete: {self.stats['visited']} visited, "
            f"{self.stats['unchanged']} unchanged, {self.stats['queued']} updated, "
            f"{self.stats['deleted']} removed, {self.applier.failed_batches} failed batches."
        )

    def close(self):
        if self.applier.pending:
            raise ScanInvariantError(
                f"Scan session for {self.root} closed with {len(self.applier.pending)} pending operations"
            )
        self.state = SessionState.CLOSED

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        else:
            # Aborted mid-scan; already flushed batches stay committed
            self.applier.pending.clear()
            self.state = SessionState.CLOSED
        return False

    # --- Traversal ---

    def _walk(self):
        """Depth-first pre-order walk from the root, children in name order."""
        try:
            root_attrs = read_attrs(self.root)
        except OSError as e:
            self.visit_failed(self.root, e)
            return

        stack = [(root_attrs, False)]
        while stack:
            attrs, leaving = stack.pop()
            if leaving:
                self.leave_directory(attrs)
                continue

            if not attrs.is_dir:
                self.visit_entry(attrs)
                continue

            if not self.enter_directory(attrs):
                continue
            stack.append((attrs, True))
            for child in reversed(self._list_children(attrs.path)):
                stack.append((child, False))

    def _list_children(self, directory: Path) -> List[FileAttrs]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.visit_failed(directory, e)
            return []

        children = []
        for entry in entries:
            try:
                # Links to files are cataloged; linked directories are never entered
                if entry.is_symlink():
                    if entry.is_file():
                        children.append(attrs_from_entry(entry))
                    continue
                # Sockets, fifos and devices are not media
                if not (entry.is_dir(follow_symlinks=False) or entry.is_file(follow_symlinks=False)):
                    continue
                children.append(attrs_from_entry(entry))
            except OSError as e:
                self.visit_failed(Path(entry.path), e)
        return children

    def enter_directory(self, attrs: FileAttrs) -> bool:
        """Returns False to skip the directory and its whole subtree."""
        try:
            hidden = is_directory_hidden(attrs.path)
        except OSError as e:
            self.visit_failed(attrs.path, e)
            return False
        if hidden:
            logging.debug(f"Skipping hidden directory {attrs.path}")
            return False

        # Directories get their own catalog row so children have a parent entry
        self.visit_entry(attrs)
        return True

    def visit_entry(self, attrs: FileAttrs):
        self.stats['visited'] += 1

        # Skip entries already scanned that have not changed since
        existing = self.db.lookup_path(self.volume_name, attrs.path)
        if detect_change(attrs, existing) is ChangeState.UNCHANGED:
            self.applier.mark_scanned(existing.id)
            self.stats['unchanged'] += 1
            return

        record = scan_item(attrs, self.volume_name, self.on_error)
        if record is not None:
            self.applier.add(UpsertOp(record))
            self.stats['queued'] += 1

    def visit_failed(self, path: Path, error: OSError):
        logging.warning(f"Failed to visit {path}: {error}")
        self.stats['failed'] += 1

    def leave_directory(self, attrs: FileAttrs):
        pass

    # --- Cleanup ---

    def _sweep(self):
        scanned_ids = self.applier.scanned_ids
        for record_id in self.db.ids_under_root(self.volume_name, self.root):
            if record_id not in scanned_ids:
                logging.debug(f"Cleaning {record_id}")
                self.applier.add(DeleteOp(record_id))
                self.stats['deleted'] += 1
        self.applier.apply()
