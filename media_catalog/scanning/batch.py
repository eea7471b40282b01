import logging
from typing import List, Optional, Set

from .. import config
from ..database.ops import DBOperations
from ..exceptions import DatabaseError
from ..models import Operation


class BatchApplier:
    """
    Accumulates catalog operations and submits them in bounded transactions.

    Ids returned for upserts are remembered as scanned; the first one seen is
    kept as the session's primary result. A failed batch is logged and
    dropped, never retried.
    """
    def __init__(self, db_ops: DBOperations, batch_size: int = config.BATCH_SIZE):
        self.db = db_ops
        self.batch_size = batch_size
        self.pending: List[Operation] = []
        self.scanned_ids: Set[int] = set()
        self.first_result: Optional[int] = None
        self.applied_ops = 0
        self.failed_batches = 0

    def mark_scanned(self, record_id: int):
        self.scanned_ids.add(record_id)

    def add(self, op: Operation):
        self.pending.append(op)
        self.maybe_apply()

    def maybe_apply(self):
        if len(self.pending) > self.batch_size:
            self.apply()

    def apply(self):
        if not self.pending:
            return

        results: List[Optional[int]] = []
        try:
            results = self.db.apply_batch(self.pending)
            self.applied_ops += len(self.pending)
        except DatabaseError as e:
            logging.warning(f"Failed to apply: {e}")
            self.failed_batches += 1
        finally:
            self.pending.clear()

        for record_id in results:
            if record_id is not None:
                if self.first_result is None:
                    self.first_result = record_id
                self.scanned_ids.add(record_id)
