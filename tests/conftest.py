import pytest
import sqlite3
from pathlib import Path
from types import SimpleNamespace

from PIL import Image

from media_catalog.database.schema import init_schema
from media_catalog.database.ops import DBOperations
from media_catalog.metadata import extract

@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()

@pytest.fixture
def db_ops(conn):
    """Returns a DBOperations instance attached to the in-memory DB."""
    return DBOperations(conn)

@pytest.fixture
def root(tmp_path):
    r = tmp_path / "library"
    r.mkdir()
    return r.resolve()


class FakeAudio(dict):
    """Stands in for a mutagen easy-tag FileType."""
    def __init__(self, tags, length=3.5):
        super().__init__({k: [v] for k, v in tags.items()})
        self.tags = self
        self.info = SimpleNamespace(length=length)


class FakeMediaInfo:
    def __init__(self, tracks):
        self.tracks = tracks


@pytest.fixture
def fake_decoders(monkeypatch):
    """
    Replaces the audio and video decoders with lookups keyed by file name.
    Files without an entry fail to decode, like a corrupt file would.
    """
    audio_tags = {}
    video_tracks = {}

    def fake_audio_file(path, easy=False):
        name = Path(path).name
        if name not in audio_tags:
            raise ValueError(f"cannot decode {name}")
        return FakeAudio(audio_tags[name])

    def fake_parse(path):
        name = Path(path).name
        if name not in video_tracks:
            raise OSError(f"cannot decode {name}")
        general, video = video_tracks[name]
        return FakeMediaInfo([
            SimpleNamespace(track_type="General", **general),
            SimpleNamespace(track_type="Video", **video),
        ])

    monkeypatch.setattr(extract, "mutagen", SimpleNamespace(File=fake_audio_file))
    monkeypatch.setattr(extract, "MediaInfo", SimpleNamespace(parse=fake_parse))
    return SimpleNamespace(audio=audio_tags, video=video_tracks)


def _make_image(path: Path, size=(10, 10), fmt=None, exif=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    with Image.new("RGB", size, color="red") as im:
        if exif is not None:
            im.save(path, format=fmt, exif=exif)
        else:
            im.save(path, format=fmt)
    return path


@pytest.fixture
def make_image():
    """Writes a small real image (optionally with EXIF bytes) and returns its path."""
    return _make_image
