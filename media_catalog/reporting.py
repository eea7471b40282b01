import csv
import logging
from pathlib import Path
from typing import Dict, Any, List, Sequence

from .database.ops import DBOperations
from . import config

MEDIA_TYPE_NAMES = {
    config.MEDIA_TYPE_NONE: "none",
    config.MEDIA_TYPE_IMAGE: "image",
    config.MEDIA_TYPE_AUDIO: "audio",
    config.MEDIA_TYPE_VIDEO: "video",
    config.MEDIA_TYPE_PLAYLIST: "playlist",
}

class ReportGenerator:
    def __init__(self, db_ops: DBOperations):
        self.db = db_ops

    def generate_catalog_report(self, roots: Sequence[Path], output_csv: str) -> int:
        """
        Writes one CSV row per catalog record under the given roots, comparing
        each against the file currently on disk. Returns the row count.
        """
        logging.info(f"Generating catalog report -> {output_csv}")

        headers = [
            "Path",
            "Status",
            "Media Type",
            "MIME Type",
            "Size",
            "Modified",
            "Title",
        ]

        row_count = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)

            for root in roots:
                for rec in self.db.fetch_records_under_root(root):
                    writer.writerow(self._analyze_record(rec))
                    row_count += 1

        logging.info(f"Report complete. {row_count} catalog records.")
        return row_count

    def _analyze_record(self, rec: Dict[str, Any]) -> List[Any]:
        media_type = MEDIA_TYPE_NAMES.get(rec['media_type'], str(rec['media_type']))
        return [
            rec['path'],
            self._status(rec),
            media_type,
            rec['mime_type'] or "",
            rec['size'],
            rec['date_modified'],
            rec['title'] or "",
        ]

    def _status(self, rec: Dict[str, Any]) -> str:
        """Present, Changed (needs rescan), or Missing (will be swept)."""
        path = Path(rec['path'])
        try:
            st = path.stat()
        except OSError:
            return "Missing"

        if path.is_dir():
            return "Present"
        if int(st.st_mtime) != rec['date_modified'] or st.st_size != rec['size']:
            return "Changed"
        return "Present"

    def media_type_summary(self) -> Dict[str, int]:
        counts = self.db.count_by_media_type()
        return {MEDIA_TYPE_NAMES.get(k, str(k)): v for k, v in sorted(counts.items())}
