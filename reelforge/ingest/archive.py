"""Extract text sources from a zipped project.

Only files that are plausibly readable source or documentation are kept,
README files first, within a file-count and total-size budget so the
result fits in a single model prompt.
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import BinaryIO, Union

from reelforge.common.logging import get_logger
from reelforge.common.models import ProjectFile

logger = get_logger(__name__)

RELEVANT_EXTENSIONS = (
    ".txt", ".md", ".json", ".js", ".ts", ".tsx", ".jsx",
    ".html", ".css", ".py", ".java", ".c", ".cpp", ".h",
)
DEFAULT_MAX_FILES = 50
DEFAULT_MAX_TOTAL_CHARS = 500 * 1024

ArchiveSource = Union[str, Path, bytes, BinaryIO]


class ArchiveError(ValueError):
    """The archive could not be opened or read."""


def _is_relevant(filename: str) -> bool:
    return filename.lower().endswith(RELEVANT_EXTENSIONS)


def _readme_first(info: zipfile.ZipInfo) -> int:
    return 0 if "readme" in info.filename.lower() else 1


def _open(source: ArchiveSource) -> zipfile.ZipFile:
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        return zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Could not open archive: {e}") from e


def extract_project_files(
    source: ArchiveSource,
    max_files: int = DEFAULT_MAX_FILES,
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS,
) -> list[ProjectFile]:
    """Read relevant text files from a zip archive.

    Args:
        source: Path to the archive, its raw bytes, or a binary file object
        max_files: Stop after this many files
        max_total_chars: Stop once the collected text reaches this size

    Returns:
        Files in priority order (README entries first, archive order otherwise)

    Raises:
        ArchiveError: the archive is corrupt or unreadable
    """
    files: list[ProjectFile] = []
    total_chars = 0
    skipped_binary = 0

    with _open(source) as archive:
        entries = sorted(archive.infolist(), key=_readme_first)

        for info in entries:
            if len(files) >= max_files or total_chars >= max_total_chars:
                break
            if info.is_dir() or not _is_relevant(info.filename):
                continue

            try:
                raw = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                raise ArchiveError(f"Could not read {info.filename}: {e}") from e

            content = raw.decode("utf-8", errors="replace")
            if "\0" in content:
                skipped_binary += 1
                continue

            files.append(ProjectFile(name=info.filename, content=content))
            total_chars += len(content)

    logger.info(
        "archive_extracted",
        files=len(files),
        total_chars=total_chars,
        skipped_binary=skipped_binary,
    )
    return files
