"""Quiz session state machine.

A session walks a (possibly subject-filtered) question list one question at a
time: select an answer, submit it to reveal correctness, then advance. Every
transition returns a new ``QuizSession``; the receiver is left untouched so
the caller decides when to swap state.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional

from cfa_quiz.analytics import percent
from cfa_quiz.config import ALL_SUBJECTS
from cfa_quiz.models import AttemptRecord, Question

logger = logging.getLogger(__name__)

EMPTY = "empty"
ANSWERING = "answering"
REVEALED = "revealed"
COMPLETE = "complete"


class QuizError(Exception):
    """Base class for quiz session errors."""


class QuizValidationError(QuizError):
    """User-facing condition; the session is unchanged and may be retried."""


class NoAnswerSelected(QuizValidationError):
    def __init__(self):
        super().__init__("Please select an answer before submitting.")


class InvalidTransition(QuizError):
    def __init__(self, action: str, phase: str):
        super().__init__(f"Cannot {action} while the session is {phase}.")
        self.action = action
        self.phase = phase


def filter_questions(questions, subject: str = ALL_SUBJECTS) -> tuple:
    if subject == ALL_SUBJECTS:
        return tuple(questions)
    return tuple(q for q in questions if q.subject == subject)


@dataclass(frozen=True)
class QuizSession:
    bank: tuple = ()
    subject_filter: str = ALL_SUBJECTS
    questions: tuple = ()
    current_index: int = 0
    selected_answer: str = ""
    revealed: bool = False
    results: tuple = ()
    complete: bool = False

    @classmethod
    def start(cls, questions, subject: str = ALL_SUBJECTS) -> "QuizSession":
        bank = tuple(questions)
        return cls(bank=bank, subject_filter=subject, questions=filter_questions(bank, subject))

    # --- derived state ---

    @property
    def phase(self) -> str:
        if self.complete:
            return COMPLETE
        if not self.questions:
            return EMPTY
        if self.revealed:
            return REVEALED
        return ANSWERING

    @property
    def current_question(self) -> Optional[Question]:
        if self.complete or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def subjects(self) -> list[str]:
        return sorted({q.subject for q in self.bank})

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.results if r.is_correct)

    @property
    def total_answered(self) -> int:
        return len(self.results)

    @property
    def score(self) -> int:
        return percent(self.correct_count, self.total_answered)

    @property
    def position(self) -> int:
        return self.current_index + 1

    @property
    def is_last_question(self) -> bool:
        return self.current_index == len(self.questions) - 1

    @property
    def progress_percent(self) -> float:
        if not self.questions:
            return 0.0
        return self.position / len(self.questions) * 100

    # --- transitions ---

    def _require(self, phase: str, action: str) -> None:
        if self.phase != phase:
            raise InvalidTransition(action, self.phase)

    def select_answer(self, letter: str) -> "QuizSession":
        self._require(ANSWERING, "select an answer")
        letter = letter.strip().upper()
        if letter not in self.current_question.letters:
            raise ValueError(f"{letter!r} is not an option for question {self.current_question.id}")
        return replace(self, selected_answer=letter)

    def submit_answer(self, study_seconds: int, now: Optional[datetime] = None) -> "QuizSession":
        """Record the selected answer and reveal whether it was correct.

        ``study_seconds`` is the study clock's latest reading; it is stored on
        the attempt as-is.
        """
        self._require(ANSWERING, "submit an answer")
        if not self.selected_answer:
            raise NoAnswerSelected()
        if study_seconds < 0:
            raise ValueError(f"study_seconds must be >= 0, got {study_seconds}")
        question = self.current_question
        stamp = (now or datetime.now(timezone.utc)).isoformat()
        record = AttemptRecord(
            question_id=question.id,
            question_text=question.text,
            selected_answer=self.selected_answer,
            correct_answer=question.answer,
            is_correct=self.selected_answer == question.answer,
            subject=question.subject,
            timestamp=stamp,
            study_time_seconds=int(study_seconds),
        )
        logger.debug("question %s answered %s (correct=%s)", question.id, record.selected_answer, record.is_correct)
        return replace(self, revealed=True, results=self.results + (record,))

    def advance(self, on_complete: Optional[Callable[[tuple], None]] = None) -> "QuizSession":
        self._require(REVEALED, "advance")
        if self.is_last_question:
            finished = replace(self, complete=True)
            logger.info(
                "quiz complete: %d/%d correct (%d%%)",
                finished.correct_count, finished.total_answered, finished.score,
            )
            if on_complete is not None:
                on_complete(finished.results)
            return finished
        return replace(self, current_index=self.current_index + 1, selected_answer="", revealed=False)

    def set_subject_filter(self, subject: str) -> "QuizSession":
        """Switch subjects; in-progress attempts for the old filter are discarded."""
        questions = filter_questions(self.bank, subject)
        if not questions:
            logger.info("no questions for subject %r", subject)
        return QuizSession(bank=self.bank, subject_filter=subject, questions=questions)

    def reset(self) -> "QuizSession":
        return QuizSession(bank=self.bank, subject_filter=self.subject_filter, questions=self.questions)
