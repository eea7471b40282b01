from pathlib import Path

from .. import config


def is_directory_hidden(directory: Path) -> bool:
    """True if the directory is dot-named or holds a .nomedia marker."""
    if directory.name.startswith("."):
        return True
    if (directory / config.NOMEDIA_MARKER).exists():
        return True
    return False


def is_directory_hidden_recursive(directory: Path) -> bool:
    """True if the directory or any of its ancestors is hidden."""
    for candidate in (directory, *directory.parents):
        if is_directory_hidden(candidate):
            return True
    return False
