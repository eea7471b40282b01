"""
Configuration constants for the media catalog scanner.
"""

# --- Catalog Batching ---
# Pending operations are flushed once the queue grows past this size.
BATCH_SIZE = 32

DEFAULT_DB_NAME = "media_catalog.db"

# --- Hidden Paths ---
NOMEDIA_MARKER = ".nomedia"

# --- Media Types (stored in files.media_type) ---
MEDIA_TYPE_NONE = 0
MEDIA_TYPE_IMAGE = 1
MEDIA_TYPE_AUDIO = 2
MEDIA_TYPE_VIDEO = 3
MEDIA_TYPE_PLAYLIST = 4

# Placeholder used for artist/album when tags are missing
UNKNOWN_STRING = "<unknown>"

# --- MIME Guessing ---
# Extensions the stdlib mimetypes table does not know (or guesses differently)
EXTRA_MIME_TYPES = {
    '.mp3': 'audio/mpeg',
    '.flac': 'audio/flac',
    '.m4a': 'audio/mp4',
    '.aac': 'audio/aac',
    '.ogg': 'audio/ogg',
    '.oga': 'audio/ogg',
    '.opus': 'audio/ogg',
    '.wma': 'audio/x-ms-wma',
    '.amr': 'audio/amr',
    '.mid': 'audio/midi',
    '.midi': 'audio/midi',
    '.m3u': 'audio/x-mpegurl',
    '.m3u8': 'application/vnd.apple.mpegurl',
    '.pls': 'audio/x-scpls',
    '.wpl': 'application/vnd.ms-wpl',
    '.mkv': 'video/x-matroska',
    '.webm': 'video/webm',
    '.3gp': 'video/3gpp',
    '.m4v': 'video/mp4',
    '.mts': 'video/mp2t',
    '.m2ts': 'video/mp2t',
    '.heic': 'image/heic',
    '.heif': 'image/heif',
    '.webp': 'image/webp',
    '.dng': 'image/x-adobe-dng',
    '.cr2': 'image/x-canon-cr2',
    '.nef': 'image/x-nikon-nef',
    '.arw': 'image/x-sony-arw',
}

PLAYLIST_MIME_TYPES = frozenset({
    'audio/x-mpegurl',
    'audio/mpegurl',
    'application/x-mpegurl',
    'application/vnd.apple.mpegurl',
    'audio/x-scpls',
    'application/vnd.ms-wpl',
})

# --- Audio Subtypes ---
# Directory name (matched as a whole path segment, case-insensitive) -> flag column.
# Order matters only for readability; every flag is evaluated.
AUDIO_TYPE_DIRS = (
    ('Ringtones', 'is_ringtone'),
    ('Notifications', 'is_notification'),
    ('Alarms', 'is_alarm'),
    ('Podcasts', 'is_podcast'),
    ('Audiobooks', 'is_audiobook'),
    ('Music', 'is_music'),
)

# --- Metadata Parsing ---
# Tag-provided video dates look like 20200131T235959 (UTC)
VIDEO_DATE_FORMAT = "%Y%m%dT%H%M%S"

# MediaInfo date fields, in priority order
VIDEO_DATE_FIELDS = ["recorded_date", "encoded_date", "tagged_date"]

IMAGE_DATE_TAGS = [
    'Image DateTime',
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
]

# EXIF orientation code -> rotation in degrees
EXIF_ORIENTATION_DEGREES = {
    6: 90,
    3: 180,
    8: 270,
}
