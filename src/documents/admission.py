"""Admission checks for candidate files joining a session.

Check order per file:
  1. Extension     : pdf, doc, docx only
  2. Size          : at most UploadLimits.max_file_size_bytes
  3. Duplicate     : same name and size already present
  4. Running total : at most UploadLimits.max_files documents
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from src.core.config import UploadLimits
from src.core.errors import (
    AdmissionError,
    DuplicateFile,
    FileTooLarge,
    TooManyFiles,
    UnsupportedFormat,
)
from src.core.schemas import CandidateDocument, file_extension

logger = logging.getLogger(__name__)


class AdmissionReport:
    """Outcome of one admission pass."""

    def __init__(self) -> None:
        self.admitted: list[CandidateDocument] = []
        self.rejected: list[AdmissionError] = []


def check_file(
    file_name: str,
    size_bytes: int,
    present: Sequence[CandidateDocument],
    limits: UploadLimits,
) -> None:
    """Raise the matching AdmissionError if the file may not be added."""
    ext = file_extension(file_name)
    if ext not in limits.supported_extensions:
        msg = f"'{file_name}' is not a supported file type (.{ext or '?'})"
        raise UnsupportedFormat(file_name, msg)

    if size_bytes > limits.max_file_size_bytes:
        msg = (
            f"'{file_name}' is {size_bytes} bytes; "
            f"the limit is {limits.max_file_size_bytes} bytes"
        )
        raise FileTooLarge(file_name, msg)

    if any(d.file_name == file_name and d.size_bytes == size_bytes for d in present):
        msg = f"'{file_name}' has already been added"
        raise DuplicateFile(file_name, msg)

    if len(present) >= limits.max_files:
        msg = f"Maximum {limits.max_files} files allowed; '{file_name}' was not added"
        raise TooManyFiles(file_name, msg)


def admit_documents(
    existing: Sequence[CandidateDocument],
    incoming: Iterable[tuple[str, bytes]],
    limits: UploadLimits,
) -> AdmissionReport:
    """Admit (file_name, content) pairs against the documents already present.

    Rejected files are reported, never raised; admitted files count towards
    the duplicate and running-total checks of the files after them.
    """
    report = AdmissionReport()
    present = list(existing)

    for file_name, blob in incoming:
        try:
            check_file(file_name, len(blob), present, limits)
            document = CandidateDocument.from_bytes(file_name, blob)
        except AdmissionError as e:
            logger.info("Rejected %s: %s", file_name, e)
            report.rejected.append(e)
            continue
        present.append(document)
        report.admitted.append(document)

    if report.admitted:
        logger.debug("Admitted %d documents", len(report.admitted))
    return report


def read_files(paths: Iterable[str | Path]) -> list[tuple[str, bytes]]:
    """Read files from disk as (file_name, content) pairs.

    Raises:
        FileNotFoundError: If any path does not exist.
    """
    files: list[tuple[str, bytes]] = []
    for p in paths:
        path = Path(p)
        if not path.is_file():
            msg = f"CV file not found: {path}"
            raise FileNotFoundError(msg)
        files.append((path.name, path.read_bytes()))
    return files
