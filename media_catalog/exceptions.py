"""
Custom exception hierarchy for the media catalog scanner.

This module defines specific exception types so callers can tell per-file
problems (recoverable) apart from session-level faults (fatal).
"""


class MediaCatalogError(Exception):
    """Base exception for all media catalog errors."""
    pass


class MetadataExtractionError(MediaCatalogError):
    """Raised when metadata cannot be extracted from a file."""
    pass


class DatabaseError(MediaCatalogError):
    """Raised when a catalog batch cannot be applied."""
    pass


class ScanError(MediaCatalogError):
    """Raised when the tree walk itself faults."""
    pass


class ScanInvariantError(MediaCatalogError):
    """Raised when a scan session closes with unflushed operations."""
    pass
