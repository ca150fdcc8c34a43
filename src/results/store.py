"""Result store and derived view: filter chain, sorting, pagination.

Filter order (all conjunctive):
  1. MinScoreFilter       : score >= threshold
  2. SearchTextFilter     : substring of name, role, company or summary
  3. SkillTagsFilter      : any tag in summary or rationale
  4. EducationTagsFilter  : any tag in education (underscores as spaces)

The view is always rebuilt from the canonical collection, so the result of
a sort never depends on earlier sorts.
"""

import locale
import logging
import math
from collections.abc import Callable, Iterable, Sequence

from src.core.schemas import AnalysisResult, ResultPage

logger = logging.getLogger(__name__)

# A filter is a callable that takes results and returns a subset.
ResultFilter = Callable[[list[AnalysisResult]], list[AnalysisResult]]

NUMERIC_SORT_FIELDS = ("score",)
TEXT_SORT_FIELDS = ("name", "role", "company", "duration", "education", "file_name")
DEFAULT_PAGE_SIZE = 10


def _normalize_tags(tags: Iterable[str]) -> list[str]:
    return [t.lower().strip() for t in tags if t.strip()]


class MinScoreFilter:
    """Keep results scoring at least ``min_score``."""

    def __init__(self, min_score: int) -> None:
        self._min_score = min_score

    def __call__(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        return [r for r in results if r.score >= self._min_score]


class SearchTextFilter:
    """Case-insensitive substring search over name, role, company and summary.

    Empty search text matches everything.
    """

    def __init__(self, search_text: str) -> None:
        self._needle = search_text.lower().strip()

    def __call__(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        if not self._needle:
            return results
        return [r for r in results if self._matches(r)]

    def _matches(self, result: AnalysisResult) -> bool:
        haystacks = (result.name, result.role, result.company, result.summary)
        return any(self._needle in h.lower() for h in haystacks)


class SkillTagsFilter:
    """If any skill tags are active, keep results mentioning at least one."""

    def __init__(self, skill_tags: Iterable[str]) -> None:
        self._tags = _normalize_tags(skill_tags)

    def __call__(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        if not self._tags:
            return results
        return [r for r in results if self._matches(r)]

    def _matches(self, result: AnalysisResult) -> bool:
        text = f"{result.summary} {result.rationale}".lower()
        return any(tag in text for tag in self._tags)


class EducationTagsFilter:
    """If any education tags are active, keep results whose education matches one.

    Tags use underscores for spaces (``high_school``).
    """

    def __init__(self, education_tags: Iterable[str]) -> None:
        self._tags = [t.replace("_", " ") for t in _normalize_tags(education_tags)]

    def __call__(self, results: list[AnalysisResult]) -> list[AnalysisResult]:
        if not self._tags:
            return results
        return [r for r in results if any(tag in r.education.lower() for tag in self._tags)]


def run_filter_chain(
    results: list[AnalysisResult],
    filters: Sequence[ResultFilter],
) -> list[AnalysisResult]:
    """Apply filters in order, returning the surviving results."""
    surviving = results
    for f in filters:
        surviving = f(surviving)
    return surviving


def sort_results(results: Iterable[AnalysisResult], field: str = "score") -> list[AnalysisResult]:
    """Sort numerically descending for score, locale-aware ascending for text.

    Raises:
        ValueError: If the field is not sortable.
    """
    if field in NUMERIC_SORT_FIELDS:
        return sorted(results, key=lambda r: getattr(r, field), reverse=True)
    if field in TEXT_SORT_FIELDS:
        return sorted(results, key=lambda r: locale.strxfrm(getattr(r, field).casefold()))
    valid = ", ".join(NUMERIC_SORT_FIELDS + TEXT_SORT_FIELDS)
    msg = f"Cannot sort by '{field}'. Available: {valid}"
    raise ValueError(msg)


class ResultStore:
    """Owns the canonical AnalysisResult collection and its derived view.

    Usage::

        store = ResultStore(results)
        store.apply_filters(min_score=70, search_text="python")
        store.sort_by("name")
        page = store.page(1)
    """

    def __init__(
        self,
        results: Iterable[AnalysisResult] = (),
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            msg = f"page_size must be at least 1, got {page_size}"
            raise ValueError(msg)
        self._results: tuple[AnalysisResult, ...] = tuple(results)
        self._page_size = page_size
        self._min_score = 0
        self._search_text = ""
        self._skill_tags: tuple[str, ...] = ()
        self._education_tags: tuple[str, ...] = ()
        self._sort_field = "score"
        self._current_page = 1
        self._view: list[AnalysisResult] = []
        self._recompute()

    @property
    def results(self) -> tuple[AnalysisResult, ...]:
        """The canonical collection, in baseline order."""
        return self._results

    @property
    def view(self) -> list[AnalysisResult]:
        """A copy of the current filtered and sorted view."""
        return list(self._view)

    @property
    def sort_field(self) -> str:
        return self._sort_field

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self._view) / self._page_size))

    def load(self, results: Iterable[AnalysisResult]) -> list[AnalysisResult]:
        """Replace the canonical collection, keeping filters and sort field."""
        self._results = tuple(results)
        self._current_page = 1
        self._recompute()
        return self.view

    def apply_filters(
        self,
        min_score: int = 0,
        search_text: str = "",
        skill_tags: Iterable[str] = (),
        education_tags: Iterable[str] = (),
    ) -> list[AnalysisResult]:
        """Set the active filters and return the rebuilt view."""
        self._min_score = min_score
        self._search_text = search_text
        self._skill_tags = tuple(skill_tags)
        self._education_tags = tuple(education_tags)
        self._current_page = 1
        self._recompute()
        return self.view

    def sort_by(self, field: str) -> list[AnalysisResult]:
        """Set the sort field and return the rebuilt view."""
        sorted_view = sort_results(self._filtered(), field)
        self._sort_field = field
        self._view = sorted_view
        self._current_page = 1
        return self.view

    def page(self, number: int | None = None, page_size: int | None = None) -> ResultPage:
        """Return one page of the view; the number is clamped to the valid range."""
        if page_size is not None:
            if page_size < 1:
                msg = f"page_size must be at least 1, got {page_size}"
                raise ValueError(msg)
            self._page_size = page_size
        requested = self._current_page if number is None else number
        self._current_page = min(max(1, requested), self.total_pages)

        start = (self._current_page - 1) * self._page_size
        return ResultPage(
            number=self._current_page,
            page_size=self._page_size,
            total_items=len(self._view),
            total_pages=self.total_pages,
            items=self._view[start:start + self._page_size],
        )

    def change_page(self, delta: int) -> ResultPage:
        return self.page(self._current_page + delta)

    def clear(self) -> None:
        """Drop all results and reset filters, sort and page."""
        self._results = ()
        self._min_score = 0
        self._search_text = ""
        self._skill_tags = ()
        self._education_tags = ()
        self._sort_field = "score"
        self._current_page = 1
        self._view = []

    def _filters(self) -> list[ResultFilter]:
        return [
            MinScoreFilter(self._min_score),
            SearchTextFilter(self._search_text),
            SkillTagsFilter(self._skill_tags),
            EducationTagsFilter(self._education_tags),
        ]

    def _filtered(self) -> list[AnalysisResult]:
        return run_filter_chain(list(self._results), self._filters())

    def _recompute(self) -> None:
        filtered = self._filtered()
        self._view = sort_results(filtered, self._sort_field)
        logger.debug(
            "View rebuilt: %d of %d results, sorted by %s",
            len(self._view), len(self._results), self._sort_field,
        )
