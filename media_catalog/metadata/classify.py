"""
Routes a visited path to the extractor for its media category.
"""
import logging
import mimetypes
from typing import Callable, Optional

from .. import config
from ..models import Category, CatalogRecord, FileAttrs
from . import extract

# Called with (path, error) whenever a file is skipped because it could not be read
DiagnosticHook = Callable[[object, Exception], None]


def guess_mime_type(filename: str) -> Optional[str]:
    ext = extract.extract_extension(filename)
    if not ext:
        return None
    ext = '.' + ext.lower()
    if ext in config.EXTRA_MIME_TYPES:
        return config.EXTRA_MIME_TYPES[ext]
    mime_type, _ = mimetypes.guess_type('x' + ext, strict=False)
    return mime_type


def is_playlist_mime_type(mime_type: Optional[str]) -> bool:
    return mime_type is not None and mime_type.lower() in config.PLAYLIST_MIME_TYPES


def is_audio_mime_type(mime_type: Optional[str]) -> bool:
    return (mime_type is not None
            and mime_type.lower().startswith('audio/')
            and not is_playlist_mime_type(mime_type))


def is_video_mime_type(mime_type: Optional[str]) -> bool:
    return mime_type is not None and mime_type.lower().startswith('video/')


def is_image_mime_type(mime_type: Optional[str]) -> bool:
    return mime_type is not None and mime_type.lower().startswith('image/')


# Tested in order; the first matching predicate decides the category
CATEGORY_PREDICATES = [
    (Category.AUDIO, is_audio_mime_type),
    (Category.PLAYLIST, is_playlist_mime_type),
    (Category.VIDEO, is_video_mime_type),
    (Category.IMAGE, is_image_mime_type),
]

EXTRACTORS = {
    Category.DIRECTORY: extract.extract_directory,
    Category.AUDIO: extract.extract_audio,
    Category.PLAYLIST: extract.extract_playlist,
    Category.VIDEO: extract.extract_video,
    Category.IMAGE: extract.extract_image,
}


def classify(filename: str, is_dir: bool = False) -> Optional[Category]:
    """Returns the media category for a name, or None if it is not cataloged."""
    if filename.startswith('.'):
        return None
    if is_dir:
        return Category.DIRECTORY

    mime_type = guess_mime_type(filename)
    for category, predicate in CATEGORY_PREDICATES:
        if predicate(mime_type):
            return category
    return None


def _log_skip(path, error: Exception):
    logging.debug(f"Ignoring troubled file {path}: {error}")


def scan_item(attrs: FileAttrs,
              volume_name: str,
              on_error: Optional[DiagnosticHook] = None) -> Optional[CatalogRecord]:
    """
    Classifies and extracts a single path.

    Returns None for hidden names, unsupported types, and files whose metadata
    cannot be read; one bad file never interrupts the surrounding scan.
    """
    name = attrs.path.name
    category = classify(name, attrs.is_dir)
    if category is None:
        if not name.startswith('.'):
            logging.debug(f"Ignoring unsupported file: {attrs.path}")
        return None

    mime_type = None if attrs.is_dir else guess_mime_type(name)
    try:
        return EXTRACTORS[category](attrs, mime_type, volume_name)
    except Exception as e:
        (on_error or _log_skip)(attrs.path, e)
        return None
