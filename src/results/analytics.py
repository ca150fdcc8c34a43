"""Score bands, score distribution and the skills word cloud."""

import re
from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from src.core.schemas import AnalysisResult


class ScoreBand(BaseModel):
    """A labelled score range with its hiring recommendation."""

    model_config = ConfigDict(frozen=True)

    minimum: int
    maximum: int
    label: str
    description: str
    recommendation: str

    @property
    def range_label(self) -> str:
        return f"{self.minimum}-{self.maximum} ({self.label})"


SCORE_BANDS: tuple[ScoreBand, ...] = (
    ScoreBand(
        minimum=85, maximum=100, label="Exceptional",
        description="Perfect match, significantly exceeds requirements",
        recommendation="Strongly recommend for interview",
    ),
    ScoreBand(
        minimum=70, maximum=84, label="Good",
        description="Meets most requirements with strong potential",
        recommendation="Recommend for interview",
    ),
    ScoreBand(
        minimum=55, maximum=69, label="Fair",
        description="Meets some requirements, significant gaps present",
        recommendation="Consider for interview if no better candidates",
    ),
    ScoreBand(
        minimum=35, maximum=54, label="Poor",
        description="Meets few requirements, major gaps",
        recommendation="Not recommended unless urgent need",
    ),
    ScoreBand(
        minimum=0, maximum=34, label="Very Poor",
        description="Does not meet requirements",
        recommendation="Do not consider",
    ),
)


def score_band(score: int) -> ScoreBand:
    """Return the band a score falls into."""
    for band in SCORE_BANDS:
        if score >= band.minimum:
            return band
    return SCORE_BANDS[-1]


def score_distribution(results: Iterable[AnalysisResult]) -> dict[str, int]:
    """Count results per band, highest band first (every band present)."""
    counts = {band.range_label: 0 for band in SCORE_BANDS}
    for r in results:
        counts[score_band(r.score).range_label] += 1
    return counts


STOP_WORDS = frozenset("""
about after again also always another around because been before being
between both candidate candidates could does each even experience first
from good have here into just know more most much must never only other
over people role said same should some such than that their them then
there these they this those through time under until very well were what
when which while will with within without work would years your
""".split())

_WORD = re.compile(r"\b[a-z][a-z0-9+#.-]*\b")


def skills_cloud(results: Iterable[AnalysisResult], top_n: int = 20) -> list[tuple[str, int]]:
    """Most frequent meaningful words across summaries and roles.

    Words of four letters or fewer and common English stop words are ignored.
    """
    counter: Counter[str] = Counter()
    for r in results:
        if r.is_failure:
            continue
        text = f"{r.summary} {r.role}".lower()
        for word in _WORD.findall(text):
            word = word.rstrip(".-")
            if len(word) > 3 and word not in STOP_WORDS:
                counter[word] += 1
    return counter.most_common(top_n)
