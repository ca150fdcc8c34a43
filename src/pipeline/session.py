"""Screening session: explicit owner of job, weights, documents and results.

Lifecycle: created at session start, reset with ``clear_all``, torn down with
``close`` (or by leaving the ``with`` block).
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType

from src.core.config import Settings, WeightConfiguration
from src.core.errors import (
    AnalysisAborted,
    MalformedResponse,
    NetworkError,
    RemoteError,
    Unauthorized,
)
from src.core.schemas import AnalysisResult, CandidateDocument
from src.documents.admission import AdmissionReport, admit_documents, read_files
from src.documents.extractor import extract_text
from src.pipeline.orchestrator import BatchOrchestrator, ProgressCallback, TextExtractor
from src.pipeline.scoring_client import ScoringClient
from src.profile.priorities import extract_priorities
from src.profile.schema import JobProfile
from src.results.store import ResultStore

logger = logging.getLogger(__name__)


class ScreeningSession:
    """State of one screening session.

    Usage::

        with ScreeningSession(settings) as session:
            session.set_job("Data Scientist", description)
            session.add_paths(["cv1.pdf", "cv2.docx"])
            await session.analyze(client)
            page = session.store.page(1)
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._weights = self._settings.weights
        self._job: JobProfile | None = None
        self._documents: list[CandidateDocument] = []
        self._store = ResultStore(page_size=self._settings.view.page_size)
        self._closed = False

    def __enter__(self) -> "ScreeningSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def job(self) -> JobProfile | None:
        return self._job

    @property
    def weights(self) -> WeightConfiguration:
        return self._weights

    @property
    def documents(self) -> tuple[CandidateDocument, ...]:
        return tuple(self._documents)

    @property
    def store(self) -> ResultStore:
        return self._store

    def set_job(self, title: str, description: str) -> JobProfile:
        """Set (or replace) the job. Raises ValidationError on an empty description."""
        self._ensure_open()
        self._job = JobProfile(title=title, description=description)
        return self._job

    def set_weights(self, weights: WeightConfiguration) -> None:
        self._ensure_open()
        self._weights = weights

    def add_files(self, files: Iterable[tuple[str, bytes]]) -> AdmissionReport:
        """Admit (file_name, content) pairs; rejected files are reported."""
        self._ensure_open()
        report = admit_documents(self._documents, files, self._settings.uploads)
        self._documents.extend(report.admitted)
        return report

    def add_paths(self, paths: Iterable[str | Path]) -> AdmissionReport:
        return self.add_files(read_files(paths))

    def remove_document(self, index: int) -> CandidateDocument:
        self._ensure_open()
        return self._documents.pop(index)

    def clear_all(self) -> None:
        """Forget job, documents and results; weights return to the configured ones."""
        self._job = None
        self._documents.clear()
        self._store.clear()
        self._weights = self._settings.weights
        logger.info("Session cleared")

    def close(self) -> None:
        self.clear_all()
        self._closed = True

    async def analyze(
        self,
        client: ScoringClient,
        *,
        extractor: TextExtractor = extract_text,
        use_priorities: bool = True,
        cancel: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[AnalysisResult]:
        """Run priority extraction and the batch pipeline, loading the store.

        Raises:
            ValueError: No job or no documents.
            ConfigurationError: Unusable credential; nothing was sent.
            AnalysisAborted: Priority extraction failed fatally; no results.
        """
        self._ensure_open()
        if self._job is None:
            msg = "Please enter a job description"
            raise ValueError(msg)
        if not self._documents:
            msg = "Please select at least one CV file"
            raise ValueError(msg)

        client.validate_credentials()

        job = self._job
        if use_priorities:
            priorities = None
            try:
                priorities = await extract_priorities(client, job.title, job.description)
            except (Unauthorized, NetworkError) as e:
                msg = f"Priority extraction failed: {e}"
                raise AnalysisAborted(msg) from e
            except (MalformedResponse, RemoteError) as e:
                logger.warning("Priority extraction failed (%s); using default scoring", e)
            job = job.with_priorities(priorities)
            self._job = job

        orchestrator = BatchOrchestrator(
            client,
            self._settings.batch,
            extractor=extractor,
            weights=self._weights,
        )
        results = await orchestrator.analyze_all(
            self._documents, job, cancel=cancel, on_progress=on_progress
        )
        self._store.load(results)

        failed = sum(1 for r in results if r.is_failure)
        logger.info("Analysis complete: %d CVs, %d failed", len(results), failed)
        return results

    def _ensure_open(self) -> None:
        if self._closed:
            msg = "ScreeningSession is closed"
            raise RuntimeError(msg)
