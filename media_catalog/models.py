from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Optional, Union, Dict, Any


class Category(Enum):
    DIRECTORY = 'directory'
    AUDIO = 'audio'
    PLAYLIST = 'playlist'
    VIDEO = 'video'
    IMAGE = 'image'


class ChangeState(Enum):
    UNCHANGED = 'unchanged'
    STALE = 'stale'
    NEW = 'new'


@dataclass(frozen=True)
class FileAttrs:
    """
    Attributes of a path as observed on disk during a scan.
    """
    path: Path
    size: int
    mtime: float            # seconds, sub-second precision
    ctime: float            # creation (birth) time where the platform has one
    is_dir: bool

    @property
    def mtime_seconds(self) -> int:
        return int(self.mtime)


@dataclass(frozen=True)
class ExistingEntry:
    """The catalog's view of a path: just enough to detect changes."""
    id: int
    size: Optional[int]
    date_modified: Optional[int]


@dataclass
class CatalogRecord:
    """
    Normalized row for the files table. Every column is always written so an
    upsert fully replaces what a previous scan stored for the same path.
    """
    path: str
    volume_name: str
    size: int
    date_modified: int
    title: str
    mime_type: Optional[str] = None
    media_type: int = 0
    is_drm: int = 0
    width: Optional[int] = None
    height: Optional[int] = None

    # Audio / Video tags
    duration: Optional[int] = None
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    compilation: Optional[str] = None
    composer: Optional[str] = None
    album: Optional[str] = None
    track: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[str] = None

    # Audio subtypes
    is_ringtone: Optional[int] = None
    is_notification: Optional[int] = None
    is_alarm: Optional[int] = None
    is_podcast: Optional[int] = None
    is_audiobook: Optional[int] = None
    is_music: Optional[int] = None

    # Video / Image
    resolution: Optional[str] = None
    description: Optional[str] = None
    date_taken: Optional[int] = None    # epoch milliseconds
    color_standard: Optional[str] = None
    color_transfer: Optional[str] = None
    color_range: Optional[str] = None
    orientation: Optional[int] = None

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class UpsertOp:
    record: CatalogRecord


@dataclass
class DeleteOp:
    id: int


Operation = Union[UpsertOp, DeleteOp]
