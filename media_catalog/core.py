import logging
from pathlib import Path
from typing import Optional

from .database.ops import DBOperations
from .metadata.classify import DiagnosticHook
from .scanning.session import ScanSession

class MediaScanner:
    """
    Entry points for reconciling the catalog with a location on disk.
    """
    def __init__(self, db_ops: DBOperations, on_error: Optional[DiagnosticHook] = None):
        self.db_ops = db_ops
        self.on_error = on_error

    def scan_directory(self, directory: Path):
        """
        Brings every record under directory in line with what is on disk:
        new and modified media are (re-)extracted, everything no longer
        present or now hidden is removed.
        """
        logging.info(f"Scanning directory {directory}...")
        with ScanSession(self.db_ops, directory, on_error=self.on_error) as session:
            session.run()

    def scan_file(self, file: Path) -> Optional[int]:
        """
        Reconciles a single file.

        Returns the id of the record written for it, or None if the file was
        ignored, unchanged, hidden, missing, or unreadable.
        """
        logging.info(f"Scanning file {file}...")
        with ScanSession(self.db_ops, file, on_error=self.on_error) as session:
            session.run()
            return session.first_result
