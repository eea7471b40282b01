"""
Per-category metadata extractors.

Each extractor takes the observed file attributes and the guessed MIME type and
returns a fully populated CatalogRecord, or raises MetadataExtractionError.

Strategies:
  - Audio: 'mutagen' easy tags.
  - Video: 'pymediainfo' General + Video tracks.
  - Images: 'exifread' for tags, 'Pillow' for dimensions EXIF does not carry.
"""
import os
import logging
from datetime import datetime, UTC
from typing import Optional, Any

import exifread
import mutagen
from PIL import Image
from pymediainfo import MediaInfo

from .. import config
from ..exceptions import MetadataExtractionError
from ..models import CatalogRecord, FileAttrs


# --- Shared Helpers ---

def extract_name(filename: str) -> str:
    """Filename without its last extension."""
    last_dot = filename.rfind('.')
    return filename if last_dot == -1 else filename[:last_dot]


def extract_extension(filename: str) -> Optional[str]:
    last_dot = filename.rfind('.')
    return None if last_dot == -1 else filename[last_dot + 1:]


def defeat_empty(value: Any, default: Any) -> Any:
    if value is None or value == "":
        return default
    return value


def parse_date(value: Optional[str], default: Optional[int]) -> Optional[int]:
    """
    Parses a compact UTC timestamp (20200131T235959, trailing text ignored)
    into epoch milliseconds. Falls back to default when the value is missing,
    malformed, or not after the epoch.
    """
    if not value:
        return default
    try:
        dt = datetime.strptime(value[:15], config.VIDEO_DATE_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return default
    millis = int(dt.timestamp() * 1000)
    return millis if millis > 0 else default


def parse_orientation(code: Optional[int]) -> int:
    return config.EXIF_ORIENTATION_DEGREES.get(code, 0)


def generic_record(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    """Fields every category shares, derived from the file and its attributes."""
    return CatalogRecord(
        path=str(attrs.path),
        volume_name=volume_name,
        size=attrs.size,
        date_modified=attrs.mtime_seconds,
        title=extract_name(attrs.path.name),
        mime_type=mime_type,
        is_drm=0,
        width=None,
        height=None,
    )


# --- Directory / Playlist ---

def extract_directory(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    rec = generic_record(attrs, mime_type, volume_name)
    rec.media_type = config.MEDIA_TYPE_NONE
    return rec


def extract_playlist(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    rec = generic_record(attrs, mime_type, volume_name)
    rec.media_type = config.MEDIA_TYPE_PLAYLIST
    return rec


# --- Audio ---

def _easy_tag(audio, key: str) -> Optional[str]:
    values = audio.get(key) if audio.tags is not None else None
    if not values:
        return None
    first = str(values[0]).strip()
    return first or None


def audio_type_flags(path: str) -> dict:
    """
    Maps each well-known audio directory to a 0/1 flag, matched as a whole
    path segment. Files outside all of them count as music.
    """
    low_path = path.lower()
    flags = {}
    any_match = False
    for dir_name, column in config.AUDIO_TYPE_DIRS:
        match = f"{os.sep}{dir_name.lower()}{os.sep}" in low_path
        flags[column] = 1 if match else 0
        any_match |= match
    if not any_match:
        flags['is_music'] = 1
    return flags


def extract_audio(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    try:
        audio = mutagen.File(str(attrs.path), easy=True)
    except Exception as e:
        raise MetadataExtractionError(f"Audio decode failed for {attrs.path}: {e}") from e
    if audio is None:
        raise MetadataExtractionError(f"Unrecognized audio format: {attrs.path}")

    rec = generic_record(attrs, mime_type, volume_name)
    rec.media_type = config.MEDIA_TYPE_AUDIO
    rec.title = defeat_empty(_easy_tag(audio, 'title'), rec.title)

    length = getattr(audio.info, 'length', None) if audio.info is not None else None
    rec.duration = int(length * 1000) if length else None

    rec.artist = defeat_empty(_easy_tag(audio, 'artist'), config.UNKNOWN_STRING)
    rec.album_artist = _easy_tag(audio, 'albumartist')
    rec.compilation = _easy_tag(audio, 'compilation')
    rec.composer = _easy_tag(audio, 'composer')
    rec.album = defeat_empty(_easy_tag(audio, 'album'), config.UNKNOWN_STRING)
    rec.track = _easy_tag(audio, 'tracknumber')
    rec.year = _easy_tag(audio, 'date')
    rec.genre = _easy_tag(audio, 'genre')

    for column, value in audio_type_flags(rec.path).items():
        setattr(rec, column, value)

    return rec


# --- Video ---

def _track(mi, track_type: str):
    for track in mi.tracks:
        if track.track_type == track_type:
            return track
    return None


def _as_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _compact_video_date(general) -> Optional[str]:
    """
    MediaInfo reports dates as "2020-01-31 23:59:59 UTC" (or "UTC 2020-01-31
    23:59:59"); rewrite the first usable one in the compact tag form.
    """
    for field in config.VIDEO_DATE_FIELDS:
        val = getattr(general, field, None)
        if not val:
            continue
        clean = str(val).replace("UTC", "").strip()
        if "." in clean:
            clean = clean.split(".")[0]
        try:
            dt = datetime.strptime(clean, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            try:
                dt = datetime.strptime(clean[:15], config.VIDEO_DATE_FORMAT)
            except ValueError:
                continue
        return dt.strftime(config.VIDEO_DATE_FORMAT)
    return None


def extract_video(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    try:
        mi = MediaInfo.parse(str(attrs.path))
    except Exception as e:
        raise MetadataExtractionError(f"MediaInfo failed for {attrs.path}: {e}") from e

    general = _track(mi, "General")
    video = _track(mi, "Video")
    if general is None or video is None:
        raise MetadataExtractionError(f"No decodable video track in {attrs.path}")

    rec = generic_record(attrs, mime_type, volume_name)
    rec.media_type = config.MEDIA_TYPE_VIDEO
    rec.title = defeat_empty(getattr(general, 'title', None), rec.title)
    rec.width = _as_int(getattr(video, 'width', None))
    rec.height = _as_int(getattr(video, 'height', None))

    rec.duration = _as_int(getattr(general, 'duration', None))
    rec.artist = defeat_empty(getattr(general, 'performer', None), config.UNKNOWN_STRING)
    rec.album = defeat_empty(getattr(general, 'album', None), attrs.path.parent.name)
    if rec.width is not None and rec.height is not None:
        rec.resolution = f"{rec.width}x{rec.height}"
    rec.description = None
    rec.date_taken = parse_date(_compact_video_date(general), int(attrs.ctime * 1000))
    rec.color_standard = defeat_empty(getattr(video, 'color_primaries', None), None)
    rec.color_transfer = defeat_empty(getattr(video, 'transfer_characteristics', None), None)
    rec.color_range = defeat_empty(getattr(video, 'color_range', None), None)

    return rec


# --- Image ---

def _tag_int(tags, *names) -> Optional[int]:
    for name in names:
        if name in tags:
            values = getattr(tags[name], 'values', None)
            if values:
                try:
                    return int(values[0])
                except (TypeError, ValueError):
                    continue
    return None


def _ratio(value) -> float:
    num = getattr(value, 'num', value)
    den = getattr(value, 'den', 1)
    return float(num) / float(den) if den else 0.0


def _gps_datetime(tags) -> Optional[int]:
    """GPS date + time stamp, always UTC, as epoch millis."""
    if 'GPS GPSDate' not in tags or 'GPS GPSTimeStamp' not in tags:
        return None
    try:
        day = datetime.strptime(str(tags['GPS GPSDate']).strip(), "%Y:%m:%d")
        h, m, s = (_ratio(v) for v in tags['GPS GPSTimeStamp'].values)
        dt = day.replace(hour=int(h), minute=int(m), second=int(s), tzinfo=UTC)
    except (ValueError, TypeError):
        return None
    return int(dt.timestamp() * 1000)


def _exif_datetime(tags) -> Optional[int]:
    """Plain EXIF timestamp ("YYYY:MM:DD HH:MM:SS", read as UTC) as epoch millis."""
    for tag in config.IMAGE_DATE_TAGS:
        if tag in tags:
            try:
                dt_str = str(tags[tag]).replace(':', '-', 2)
                dt = datetime.strptime(dt_str, "%Y-%m-%d %H:%M:%S").replace(tzinfo=UTC)
            except ValueError:
                continue
            return int(dt.timestamp() * 1000)
    return None


def extract_image(attrs: FileAttrs, mime_type: Optional[str], volume_name: str) -> CatalogRecord:
    try:
        with attrs.path.open('rb') as f:
            # details=False skips maker notes and thumbnails
            tags = exifread.process_file(f, details=False)

        width = _tag_int(tags, 'EXIF ExifImageWidth', 'Image ImageWidth')
        height = _tag_int(tags, 'EXIF ExifImageLength', 'Image ImageLength')
        if width is None or height is None:
            with Image.open(attrs.path) as im:
                width, height = im.size
    except Exception as e:
        raise MetadataExtractionError(f"Image read failed for {attrs.path}: {e}") from e

    rec = generic_record(attrs, mime_type, volume_name)
    rec.media_type = config.MEDIA_TYPE_IMAGE
    rec.width = width
    rec.height = height

    description = str(tags['Image ImageDescription']).strip() if 'Image ImageDescription' in tags else None
    rec.description = defeat_empty(description, None)
    rec.date_taken = defeat_empty(_gps_datetime(tags), _exif_datetime(tags))
    rec.orientation = parse_orientation(_tag_int(tags, 'Image Orientation'))

    logging.debug(f"Image {attrs.path}: {width}x{height}, orientation={rec.orientation}")
    return rec
