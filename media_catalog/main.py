import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .core import MediaScanner
from .database.db import DBManager
from .database.ops import DBOperations
from .reporting import ReportGenerator
from . import config

def setup_logging(log_file: Optional[Path], verbose: bool):
    """Sets up logging to the console and, if requested, a log file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Media Catalog: reconcile a media catalog with files on disk")

    p.add_argument("roots", type=Path, nargs="+", help="Directories or single files to scan")

    p.add_argument("--db", type=Path, default=Path(config.DEFAULT_DB_NAME), help="Path to the SQLite catalog")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    p.add_argument("--report", type=str, default=None, metavar="CSV",
                   help="Write a CSV report of catalog records under the roots instead of scanning")
    p.add_argument("--stats", action="store_true", help="Log record counts per media type after scanning")

    return p.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    roots = [r.resolve() for r in args.roots]

    logging.info("=== Media Catalog Started ===")
    logging.info(f"Catalog: {args.db}")

    try:
        with DBManager(args.db) as conn:
            db_ops = DBOperations(conn)

            if args.report:
                logging.info("ENTERING REPORT MODE")
                ReportGenerator(db_ops).generate_catalog_report(roots, args.report)
                return 0

            scanner = MediaScanner(db_ops)
            for root in tqdm(roots, desc="Scanning", disable=len(roots) < 2):
                if root.is_file():
                    record_id = scanner.scan_file(root)
                    logging.info(f"{root} -> record {record_id}")
                else:
                    scanner.scan_directory(root)

            if args.stats:
                for media_type, count in ReportGenerator(db_ops).media_type_summary().items():
                    logging.info(f"  {media_type}: {count}")
    except KeyboardInterrupt:
        logging.warning("Scan cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during scan.")
        return 1

    logging.info("Scan phase complete.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
