"""Performance analytics over answered questions."""
import logging
import math

from cfa_quiz.config import RECENT_WINDOW, STRENGTH_THRESHOLD, SUBJECT_LIST_CAP
from cfa_quiz.models import PerformanceSummary, SubjectStat, TrendPoint

logger = logging.getLogger(__name__)


def percent(correct: int, total: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when total is 0."""
    if total == 0:
        return 0
    return math.floor(correct / total * 100 + 0.5)


def get_readiness_label(score: float) -> str:
    if score >= 80:
        return "READY"
    elif score >= 65:
        return "LIKELY"
    elif score >= 50:
        return "NEEDS WORK"
    return "NOT READY"


def get_readiness_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def get_subject_performance(results) -> list[SubjectStat]:
    """Per-subject scores, best first; equal scores keep first-seen order."""
    totals: dict[str, list[int]] = {}
    for r in results:
        counts = totals.setdefault(r.subject, [0, 0])
        counts[1] += 1
        if r.is_correct:
            counts[0] += 1
    stats = [
        SubjectStat(subject=subject, correct=correct, total=total, score=percent(correct, total))
        for subject, (correct, total) in totals.items()
    ]
    # sorted() is stable, which keeps ties in first-appearance order
    return sorted(stats, key=lambda s: s.score, reverse=True)


def get_recent_performance(results, window: int = RECENT_WINDOW) -> list[TrendPoint]:
    tail = list(results)[-window:] if window > 0 else []
    return [
        TrendPoint(index=i, correct=r.is_correct, subject=r.subject)
        for i, r in enumerate(tail, 1)
    ]


def analyze_performance(results) -> PerformanceSummary:
    """Summarize an ordered sequence of attempt records.

    Pure: the same input always gives the same summary. Strengths are the
    subjects scoring at or above the threshold. Weaknesses are cut from the
    same best-first list, so they start with the weak subject closest to the
    threshold rather than the lowest one.
    """
    results = list(results)
    if not results:
        return PerformanceSummary()
    correct = sum(1 for r in results if r.is_correct)
    subjects = get_subject_performance(results)
    strengths = [s for s in subjects if s.score >= STRENGTH_THRESHOLD][:SUBJECT_LIST_CAP]
    weaknesses = [s for s in subjects if s.score < STRENGTH_THRESHOLD][:SUBJECT_LIST_CAP]
    return PerformanceSummary(
        overall_score=percent(correct, len(results)),
        total_questions=len(results),
        correct_answers=correct,
        subject_performance=tuple(subjects),
        recent_performance=tuple(get_recent_performance(results)),
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
    )


def subject_distribution(summary: PerformanceSummary) -> list[dict]:
    """Share of answered questions per subject, in summary order."""
    return [
        {
            "subject": s.subject,
            "label": s.label,
            "count": s.total,
            "share": percent(s.total, summary.total_questions),
        }
        for s in summary.subject_performance
    ]


class ResultsHistory:
    """Attempts from every completed session since the program started."""

    def __init__(self):
        self._results: list = []
        self.sessions_completed = 0

    @property
    def results(self) -> tuple:
        return tuple(self._results)

    def record_session(self, results) -> None:
        self._results.extend(results)
        self.sessions_completed += 1
        logger.info("recorded %d attempts (%d total)", len(results), len(self._results))

    def summary(self) -> PerformanceSummary:
        return analyze_performance(self._results)
