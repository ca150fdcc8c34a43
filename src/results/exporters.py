"""Exporters for the current result view: CSV, JSON and a text report."""

import csv
import io
import json
from collections.abc import Sequence
from pathlib import Path

from src.core.schemas import AnalysisResult
from src.profile.schema import JobProfile
from src.results.analytics import score_band, score_distribution, skills_cloud

CSV_HEADERS = ("Score", "Name", "Role", "Company", "Duration", "Education", "Summary", "File")
EXPORT_FORMATS = ("csv", "json", "report")
DEFAULT_FILENAMES = {
    "csv": "cv_analysis_results.csv",
    "json": "cv_analysis_results.json",
    "report": "cv_analysis_report.txt",
}


def export_csv(view: Sequence[AnalysisResult]) -> str:
    """Export the view as CSV, one row per result."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in view:
        writer.writerow([
            r.score, r.name, r.role, r.company, r.duration, r.education, r.summary, r.file_name,
        ])
    return buffer.getvalue()


def export_json(view: Sequence[AnalysisResult]) -> str:
    """Export the view as a JSON array (source documents are never included)."""
    data = [r.model_dump(mode="json") for r in view]
    return json.dumps(data, indent=2)


def export_report(view: Sequence[AnalysisResult], job: JobProfile | None = None) -> str:
    """Render a plain-text screening report of the view."""
    lines: list[str] = ["CV SCREENING REPORT", "=" * 19, ""]
    if job is not None:
        lines.append(f"Job title: {job.title or 'Not specified'}")
        if job.extracted_priorities and job.extracted_priorities.industry:
            lines.append(f"Industry: {job.extracted_priorities.industry}")
        lines.append("")

    lines.append(f"Candidates: {len(view)}")
    if view:
        average = sum(r.score for r in view) / len(view)
        lines.append(f"Average score: {average:.1f}")
    lines.append("")

    lines.append("Score distribution:")
    for label, count in score_distribution(view).items():
        lines.append(f"  {label}: {count}")
    lines.append("")

    terms = skills_cloud(view, top_n=10)
    if terms:
        lines.append("Top terms: " + ", ".join(f"{word} ({count})" for word, count in terms))
        lines.append("")

    for rank, r in enumerate(view, start=1):
        band = score_band(r.score)
        lines.append(f"{rank}. {r.name} ({r.file_name}) - {r.score}/100 [{band.label}]")
        lines.append(f"   Role: {r.role} at {r.company} ({r.duration})")
        lines.append(f"   Education: {r.education}")
        lines.append(f"   Summary: {r.summary}")
        lines.append(f"   Rationale: {r.rationale}")
        if r.strengths:
            lines.append(f"   Strengths: {'; '.join(r.strengths)}")
        if r.concerns:
            lines.append(f"   Concerns: {'; '.join(r.concerns)}")
        lines.append(f"   Recommendation: {r.recommendation or band.recommendation}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_export(
    view: Sequence[AnalysisResult],
    fmt: str,
    job: JobProfile | None = None,
) -> str:
    """Render the view in one of EXPORT_FORMATS.

    Raises:
        ValueError: If the format is unknown.
    """
    if fmt == "csv":
        return export_csv(view)
    if fmt == "json":
        return export_json(view)
    if fmt == "report":
        return export_report(view, job)
    msg = f"Unknown export format '{fmt}'. Available: {', '.join(EXPORT_FORMATS)}"
    raise ValueError(msg)


def write_export(
    view: Sequence[AnalysisResult],
    fmt: str,
    path: str | Path | None = None,
    job: JobProfile | None = None,
) -> Path:
    """Write an export to disk and return its path."""
    content = render_export(view, fmt, job)
    target = Path(path) if path is not None else Path(DEFAULT_FILENAMES[fmt])
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target
