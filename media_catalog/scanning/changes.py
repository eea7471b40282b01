from typing import Optional

from ..models import ChangeState, ExistingEntry, FileAttrs


def detect_change(attrs: FileAttrs, existing: Optional[ExistingEntry]) -> ChangeState:
    """
    Decides whether a path needs (re-)extraction.

    Size plus second-granularity mtime is the only content proxy: a file
    replaced in place with identical size and mtime is reported UNCHANGED.
    Directories never go stale once cataloged.
    """
    if existing is None:
        return ChangeState.NEW

    if attrs.is_dir:
        return ChangeState.UNCHANGED

    same_time = attrs.mtime_seconds == existing.date_modified
    same_size = attrs.size == existing.size
    if same_time and same_size:
        return ChangeState.UNCHANGED

    return ChangeState.STALE
