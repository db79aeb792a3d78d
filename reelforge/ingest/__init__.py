"""Project archive ingestion."""

from reelforge.ingest.archive import (
    RELEVANT_EXTENSIONS,
    ArchiveError,
    extract_project_files,
)

__all__ = [
    "RELEVANT_EXTENSIONS",
    "ArchiveError",
    "extract_project_files",
]
