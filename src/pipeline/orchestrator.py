"""Batch orchestrator: extract → prompt → score → parse for many documents.

Data flow per document:
  1. Text extraction (worker thread)
  2. Prompt build (pure)
  3. Remote scoring call
  4. Response parse (never raises)

Documents run in contiguous batches of BatchConfig.batch_size. Members of a
batch run concurrently; batches are separated by BatchConfig.batch_delay_ms.
Every document yields exactly one AnalysisResult, failures included.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from src.core.config import BatchConfig, WeightConfiguration
from src.core.schemas import CANCELLED_ROLE, AnalysisResult, CandidateDocument
from src.documents.extractor import extract_text
from src.pipeline.prompt_builder import build_prompt
from src.pipeline.response_parser import parse_analysis
from src.pipeline.scoring_client import ScoringClient
from src.profile.schema import JobProfile

logger = logging.getLogger(__name__)

TextExtractor = Callable[[bytes, str], str]
ProgressCallback = Callable[[int, int], None]
Sleep = Callable[[float], Awaitable[None]]


def rank_results(results: Sequence[AnalysisResult]) -> list[AnalysisResult]:
    """Canonical baseline order: score descending, ties keep their order."""
    return sorted(results, key=lambda r: r.score, reverse=True)


def partition(documents: Sequence[CandidateDocument], size: int) -> list[list[CandidateDocument]]:
    """Split documents into contiguous batches of at most ``size``."""
    return [list(documents[i:i + size]) for i in range(0, len(documents), size)]


class BatchOrchestrator:
    """Drives the per-document pipeline across batches.

    Usage::

        orchestrator = BatchOrchestrator(client, settings.batch, weights=settings.weights)
        results = await orchestrator.analyze_all(documents, job)
    """

    def __init__(
        self,
        client: ScoringClient,
        config: BatchConfig | None = None,
        *,
        extractor: TextExtractor = extract_text,
        weights: WeightConfiguration | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._config = config or BatchConfig()
        self._extractor = extractor
        self._weights = weights
        self._sleep = sleep

    async def analyze_all(
        self,
        documents: Sequence[CandidateDocument],
        job: JobProfile,
        *,
        cancel: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[AnalysisResult]:
        """Analyze every document and return results ranked by score."""
        results = await self.run_batches(documents, job, cancel=cancel, on_progress=on_progress)
        return rank_results(results)

    async def run_batches(
        self,
        documents: Sequence[CandidateDocument],
        job: JobProfile,
        *,
        cancel: asyncio.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[AnalysisResult]:
        """Analyze every document, returning results in input order.

        Cancellation is checked between batches only: the in-flight batch
        completes and each document not yet started gets a cancelled
        sentinel.
        """
        batches = partition(documents, self._config.batch_size)
        semaphore = (
            asyncio.Semaphore(self._config.max_concurrency)
            if self._config.max_concurrency
            else None
        )
        results: list[AnalysisResult] = []
        total = len(documents)

        logger.info("Analyzing %d documents in %d batches", total, len(batches))

        for index, batch in enumerate(batches):
            if cancel is not None and cancel.is_set():
                remaining = [d for b in batches[index:] for d in b]
                logger.info("Analysis cancelled: %d documents not started", len(remaining))
                results.extend(_cancelled(d) for d in remaining)
                break

            batch_results = await asyncio.gather(
                *(self._analyze_guarded(d, job, semaphore) for d in batch)
            )
            results.extend(batch_results)
            logger.info("Batch %d/%d done (%d/%d)", index + 1, len(batches), len(results), total)

            if on_progress is not None:
                on_progress(len(results), total)

            if index < len(batches) - 1 and self._config.batch_delay_ms:
                await self._sleep(self._config.batch_delay_ms / 1000)

        return results

    async def analyze_one(self, document: CandidateDocument, job: JobProfile) -> AnalysisResult:
        """Run the pipeline for one document, raising on extraction/remote failure."""
        text = await asyncio.to_thread(
            self._extractor, document.raw_blob, document.declared_extension
        )
        if not text:
            logger.warning("No text extracted from %s", document.file_name)

        prompt = build_prompt(
            job.title,
            job.description,
            text,
            job.extracted_priorities,
            self._weights,
        )
        raw = await self._client.score(prompt)
        fields = parse_analysis(raw)
        if fields.parse_error:
            logger.warning("Unparseable analysis for %s: %s", document.file_name, fields.parse_error)
        return AnalysisResult.from_fields(document, fields, text)

    async def _analyze_guarded(
        self,
        document: CandidateDocument,
        job: JobProfile,
        semaphore: asyncio.Semaphore | None,
    ) -> AnalysisResult:
        try:
            if semaphore is None:
                return await self.analyze_one(document, job)
            async with semaphore:
                return await self.analyze_one(document, job)
        except Exception as e:
            logger.warning("Failed to analyze %s", document.file_name, exc_info=True)
            return AnalysisResult.failure(
                document,
                summary=f"Failed to analyze this CV: {e}",
                rationale=f"Analysis failed due to an error ({type(e).__name__}): {e}",
            )


def _cancelled(document: CandidateDocument) -> AnalysisResult:
    return AnalysisResult.failure(
        document,
        summary="Analysis cancelled before this CV was processed",
        rationale="The run was cancelled between batches",
        role=CANCELLED_ROLE,
    )
