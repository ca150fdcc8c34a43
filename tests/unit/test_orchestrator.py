"""Tests for the batch orchestrator."""

import asyncio
import json
import re
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from src.core.config import BatchConfig, LLMConfig, WeightConfiguration
from src.core.errors import ExtractionError, RateLimited
from src.core.schemas import CANCELLED_ROLE, FAILED_ROLE, CandidateDocument
from src.llm.base import LLMProvider
from src.pipeline.orchestrator import BatchOrchestrator, partition, rank_results
from src.pipeline.scoring_client import ScoringClient
from src.profile.schema import JobProfile, PriorityProfile

JOB = JobProfile(title="Data Scientist", description="Build ML models in Python.")

_SCORE_MARKER = re.compile(r"SCORE=(\d+)")


def _documents(*scores: int) -> list[CandidateDocument]:
    """One document per score; its text carries the score the stub will return."""
    return [
        CandidateDocument.from_bytes(f"cv{i}.pdf", f"Candidate {i} SCORE={s}".encode())
        for i, s in enumerate(scores)
    ]


def _decode(blob: bytes, extension: str) -> str:
    return blob.decode()


def _scoring_handler(prompt: str, system: str | None) -> str:
    match = _SCORE_MARKER.search(prompt)
    score = int(match.group(1)) if match else 0
    if score == 13:
        raise RateLimited("slow down", 429)
    return json.dumps({"name": f"Candidate {score}", "score": score})


def _orchestrator(
    client: ScoringClient,
    *,
    batch_size: int = 2,
    batch_delay_ms: int = 0,
    max_concurrency: int | None = None,
    **kwargs: object,
) -> BatchOrchestrator:
    config = BatchConfig(
        batch_size=batch_size,
        batch_delay_ms=batch_delay_ms,
        max_concurrency=max_concurrency,
    )
    kwargs.setdefault("extractor", _decode)
    return BatchOrchestrator(client, config, **kwargs)  # type: ignore[arg-type]


class TestHelpers:
    def test_partition(self) -> None:
        docs = _documents(1, 2, 3, 4, 5)
        batches = partition(docs, 2)
        assert [len(b) for b in batches] == [2, 2, 1]
        assert [d for b in batches for d in b] == docs

    def test_partition_empty(self) -> None:
        assert partition([], 5) == []

    def test_rank_results_stable(self) -> None:
        from src.core.schemas import AnalysisResult

        results = [
            AnalysisResult(file_name="a", score=50),
            AnalysisResult(file_name="b", score=80),
            AnalysisResult(file_name="c", score=50),
        ]
        assert [r.file_name for r in rank_results(results)] == ["b", "a", "c"]


# ---------------------------------------------------------------------------
# Pipeline behaviour
# ---------------------------------------------------------------------------


class TestRunBatches:
    async def test_one_result_per_document_in_input_order(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        docs = _documents(40, 90, 70, 10, 55)
        orchestrator = _orchestrator(make_client(_scoring_handler))

        results = await orchestrator.run_batches(docs, JOB)

        assert len(results) == len(docs)
        assert [r.file_name for r in results] == [d.file_name for d in docs]
        assert [r.score for r in results] == [40, 90, 70, 10, 55]
        assert all(r.source_document is d for r, d in zip(results, docs, strict=True))

    async def test_analyze_all_ranks(self, make_client: Callable[..., ScoringClient]) -> None:
        orchestrator = _orchestrator(make_client(_scoring_handler))
        results = await orchestrator.analyze_all(_documents(40, 90, 70), JOB)
        assert [r.score for r in results] == [90, 70, 40]

    async def test_remote_failure_becomes_sentinel(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        orchestrator = _orchestrator(make_client(_scoring_handler))

        results = await orchestrator.run_batches(_documents(60, 13, 75), JOB)

        assert len(results) == 3
        failed = results[1]
        assert failed.score == 0
        assert failed.role == FAILED_ROLE
        assert failed.name == "Error"
        assert "slow down" in failed.summary
        assert "RateLimited" in failed.rationale
        assert [results[0].score, results[2].score] == [60, 75]

    async def test_extraction_failure_becomes_sentinel(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        def _extract(blob: bytes, extension: str) -> str:
            if b"SCORE=99" in blob:
                raise ExtractionError("Could not open PDF: broken")
            return blob.decode()

        client = make_client(_scoring_handler)
        orchestrator = _orchestrator(client, extractor=_extract)

        results = await orchestrator.run_batches(_documents(99, 50), JOB)

        assert results[0].role == FAILED_ROLE
        assert results[1].score == 50
        # No remote call is made for a document whose extraction failed.
        assert len(client.provider.calls) == 1  # type: ignore[attr-defined]

    async def test_unparseable_reply_scores_zero(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        orchestrator = _orchestrator(make_client(lambda prompt, system: "no json at all"))
        results = await orchestrator.run_batches(_documents(80), JOB)
        assert results[0].score == 0
        assert results[0].name == "Parse Error"
        assert not results[0].is_failure

    @pytest.mark.parametrize(
        "reply",
        [
            '{"name": "A", "score": ' + "9" * 5000 + "}",
            '{"a":' + "[" * 100000 + "]" * 100000 + "}",
        ],
        ids=["huge-integer", "deep-nesting"],
    )
    async def test_pathological_reply_is_parse_error(
        self, make_client: Callable[..., ScoringClient], reply: str,
    ) -> None:
        orchestrator = _orchestrator(make_client(lambda prompt, system: reply))
        results = await orchestrator.run_batches(_documents(80), JOB)
        assert results[0].name == "Parse Error"
        assert results[0].role != FAILED_ROLE
        assert not results[0].is_failure

    async def test_truncated_text(self, make_client: Callable[..., ScoringClient]) -> None:
        orchestrator = _orchestrator(
            make_client(_scoring_handler), extractor=lambda blob, ext: "x" * 2000,
        )
        results = await orchestrator.run_batches(_documents(10), JOB)
        assert results[0].truncated_text == "x" * 500

    async def test_priorities_and_weights_reach_prompt(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        client = make_client(_scoring_handler)
        weights = WeightConfiguration(
            role_match=40, experience=20, skills=20, education=10, achievements=10,
        )
        job = JOB.with_priorities(PriorityProfile(industry="biotech"))
        orchestrator = _orchestrator(client, weights=weights)

        await orchestrator.run_batches(_documents(50), job)

        prompt = client.provider.calls[0]["prompt"]  # type: ignore[attr-defined]
        assert "1. ROLE MATCH (40% of score):" in prompt
        assert "Direct biotech experience" in prompt

    async def test_empty_input(self, make_client: Callable[..., ScoringClient]) -> None:
        orchestrator = _orchestrator(make_client(_scoring_handler))
        assert await orchestrator.run_batches([], JOB) == []


# ---------------------------------------------------------------------------
# Pacing, progress and cancellation
# ---------------------------------------------------------------------------


class TestPacing:
    async def test_delay_between_batches_only(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        sleep = AsyncMock()
        orchestrator = _orchestrator(
            make_client(_scoring_handler), batch_size=2, batch_delay_ms=1500, sleep=sleep,
        )

        await orchestrator.run_batches(_documents(1, 2, 3, 4, 5), JOB)

        # 3 batches -> 2 gaps
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.5)

    async def test_zero_delay_never_sleeps(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        sleep = AsyncMock()
        orchestrator = _orchestrator(make_client(_scoring_handler), batch_delay_ms=0, sleep=sleep)
        await orchestrator.run_batches(_documents(1, 2, 3, 4, 5), JOB)
        sleep.assert_not_awaited()

    async def test_progress_after_each_batch(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        progress: list[tuple[int, int]] = []
        orchestrator = _orchestrator(make_client(_scoring_handler), batch_size=2)

        await orchestrator.run_batches(
            _documents(1, 2, 3, 4, 5), JOB, on_progress=lambda d, t: progress.append((d, t)),
        )

        assert progress == [(2, 5), (4, 5), (5, 5)]


class TestCancellation:
    async def test_cancel_between_batches(
        self, make_client: Callable[..., ScoringClient],
    ) -> None:
        cancel = asyncio.Event()
        orchestrator = _orchestrator(make_client(_scoring_handler), batch_size=2)

        def _on_progress(done: int, total: int) -> None:
            cancel.set()

        results = await orchestrator.run_batches(
            _documents(10, 20, 30, 40, 50), JOB, cancel=cancel, on_progress=_on_progress,
        )

        assert len(results) == 5
        assert [r.score for r in results[:2]] == [10, 20]
        assert all(r.role == CANCELLED_ROLE for r in results[2:])
        assert all(r.is_failure for r in results[2:])

    async def test_cancel_before_start(self, make_client: Callable[..., ScoringClient]) -> None:
        cancel = asyncio.Event()
        cancel.set()
        client = make_client(_scoring_handler)
        orchestrator = _orchestrator(client)

        results = await orchestrator.run_batches(_documents(10, 20, 30), JOB, cancel=cancel)

        assert len(results) == 3
        assert all(r.role == CANCELLED_ROLE for r in results)
        assert client.provider.calls == []  # type: ignore[attr-defined]


class ConcurrencyTracker(LLMProvider):
    """Tracks how many calls are in flight at once."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.peak = 0

    @property
    def provider_id(self) -> str:
        return "tracker"

    @property
    def default_model(self) -> str:
        return "tracker"

    @property
    def env_var(self) -> None:
        return None

    async def complete(self, prompt: str, **kwargs: object) -> str:  # type: ignore[override]
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.05)
        self.in_flight -= 1
        return '{"score": 50}'


class TestConcurrency:
    @pytest.mark.parametrize(("cap", "expected_peak"), [(None, 4), (2, 2), (1, 1)])
    async def test_cap(self, cap: int | None, expected_peak: int) -> None:
        tracker = ConcurrencyTracker()
        client = ScoringClient(tracker, LLMConfig(provider="tracker"))
        orchestrator = _orchestrator(client, batch_size=4, max_concurrency=cap)

        results = await orchestrator.run_batches(_documents(1, 2, 3, 4), JOB)

        assert len(results) == 4
        assert tracker.peak == expected_peak
