"""Data classes for the quiz domain model."""
from dataclasses import dataclass
from typing import Optional

from cfa_quiz.config import LABEL_MAX_LENGTH


def option_letter(option: str) -> str:
    """Letter label of an option such as "A. Diversification"."""
    return option.split(".")[0].strip().upper()


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    options: tuple
    answer: str
    subject: str

    @property
    def letters(self) -> list[str]:
        return [option_letter(o) for o in self.options]


@dataclass(frozen=True)
class AttemptRecord:
    question_id: int
    question_text: str
    selected_answer: str
    correct_answer: str
    is_correct: bool
    subject: str
    timestamp: str
    study_time_seconds: int = 0


@dataclass(frozen=True)
class SubjectStat:
    subject: str
    correct: int
    total: int
    score: int

    @property
    def label(self) -> str:
        """Chart label; the full name stays in ``subject``."""
        if len(self.subject) > LABEL_MAX_LENGTH:
            return self.subject[:LABEL_MAX_LENGTH] + "..."
        return self.subject


@dataclass(frozen=True)
class TrendPoint:
    index: int
    correct: bool
    subject: str


@dataclass(frozen=True)
class PerformanceSummary:
    overall_score: int = 0
    total_questions: int = 0
    correct_answers: int = 0
    subject_performance: tuple = ()
    recent_performance: tuple = ()
    strengths: tuple = ()
    weaknesses: tuple = ()

    @property
    def best_subject(self) -> Optional[SubjectStat]:
        return self.strengths[0] if self.strengths else None

    @property
    def weakest_subject(self) -> Optional[SubjectStat]:
        return self.weaknesses[0] if self.weaknesses else None


@dataclass(frozen=True)
class ExtractionProgress:
    step: int
    total_steps: int
    extracted_count: int = 0
    done: bool = False

    @property
    def percent(self) -> float:
        if self.total_steps == 0:
            return 100.0
        return self.step / self.total_steps * 100
