"""Deletor data models."""

from deletor.models.cache_location import CacheLocation, CacheType
from deletor.models.clean_result import CleanResult
from deletor.models.file_filter import FileFilter, matches
from deletor.models.scan_result import EntryOutcome, MatchedEntry, ScanReport, ScanResult

__all__ = [
    "CacheLocation",
    "CacheType",
    "CleanResult",
    "EntryOutcome",
    "FileFilter",
    "MatchedEntry",
    "ScanReport",
    "ScanResult",
    "matches",
]
