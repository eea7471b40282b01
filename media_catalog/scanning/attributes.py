"""
Filesystem attribute access for the scanner.
"""
import os
import stat
from pathlib import Path

from ..models import FileAttrs


def _from_stat(path: Path, st: os.stat_result, is_dir: bool) -> FileAttrs:
    # st_birthtime exists on macOS/BSD (and Windows on 3.12+); elsewhere ctime is the best we have
    ctime = getattr(st, "st_birthtime", st.st_ctime)
    return FileAttrs(
        path=path,
        size=st.st_size,
        mtime=st.st_mtime,
        ctime=ctime,
        is_dir=is_dir,
    )


def read_attrs(path: Path) -> FileAttrs:
    """
    Stats a path. A symlink to a regular file reports the target's size and
    times; any other link is described as itself. Raises OSError if unreadable.
    """
    st = path.stat(follow_symlinks=False)
    if stat.S_ISLNK(st.st_mode) and path.is_file():
        st = path.stat()
    return _from_stat(path, st, stat.S_ISDIR(st.st_mode))


def attrs_from_entry(entry: os.DirEntry) -> FileAttrs:
    """Builds attributes from a scandir entry (reuses the cached stat where possible)."""
    if entry.is_symlink():
        # Only links to regular files get here; the record keeps the link path
        return _from_stat(Path(entry.path), entry.stat(), False)
    st = entry.stat(follow_symlinks=False)
    return _from_stat(Path(entry.path), st, entry.is_dir(follow_symlinks=False))


def volume_name_for(path: Path) -> str:
    """
    Identifies the storage volume holding path by its mount point.
    Works for paths that no longer exist by climbing to the nearest mount.
    """
    current = Path(os.path.abspath(path))
    while not os.path.ismount(current):
        parent = current.parent
        if parent == current:
            break
        current = parent
    return str(current)
