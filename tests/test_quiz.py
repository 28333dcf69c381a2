# tests/test_quiz.py
from datetime import datetime, timezone

import pytest

from cfa_quiz.quiz import (
    ANSWERING, COMPLETE, EMPTY, REVEALED, InvalidTransition, NoAnswerSelected,
    QuizSession, QuizValidationError,
)
from conftest import make_question


def answer_all(session, letters, study_seconds=0):
    for letter in letters:
        session = session.select_answer(letter).submit_answer(study_seconds)
        session = session.advance()
    return session


def test_start_session(questions):
    session = QuizSession.start(questions)
    assert session.phase == ANSWERING
    assert session.current_index == 0
    assert session.current_question.id == 1
    assert session.results == ()


def test_select_answer_last_call_wins(questions):
    session = QuizSession.start(questions)
    session = session.select_answer("B").select_answer("a")
    assert session.selected_answer == "A"
    assert session.phase == ANSWERING


def test_select_answer_strips_whitespace(questions):
    session = QuizSession.start(questions).select_answer(" b ")
    assert session.selected_answer == "B"


def test_select_answer_unknown_letter(questions):
    session = QuizSession.start(questions)
    with pytest.raises(ValueError):
        session.select_answer("Z")


def test_transitions_do_not_mutate(questions):
    session = QuizSession.start(questions)
    selected = session.select_answer("A")
    assert session.selected_answer == ""
    assert selected.selected_answer == "A"


def test_submit_without_selection(questions):
    """Submitting with nothing selected is a validation condition, state unchanged."""
    session = QuizSession.start(questions)
    with pytest.raises(NoAnswerSelected) as exc:
        session.submit_answer(0)
    assert isinstance(exc.value, QuizValidationError)
    assert session.phase == ANSWERING
    assert session.results == ()


def test_submit_correct_answer(questions):
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    session = QuizSession.start(questions).select_answer("A").submit_answer(42, now=now)
    assert session.phase == REVEALED
    record = session.results[0]
    assert record.is_correct is True
    assert record.question_id == 1
    assert record.question_text == questions[0].text
    assert record.correct_answer == "A"
    assert record.subject == "Ethics"
    assert record.study_time_seconds == 42
    assert record.timestamp == now.isoformat()


def test_submit_incorrect_answer(questions):
    session = QuizSession.start(questions).select_answer("C").submit_answer(0)
    assert session.results[0].is_correct is False
    assert session.results[0].selected_answer == "C"


def test_submit_default_timestamp_is_iso(questions):
    session = QuizSession.start(questions).select_answer("A").submit_answer(0)
    datetime.fromisoformat(session.results[0].timestamp)


def test_submit_twice_does_not_double_append(questions):
    session = QuizSession.start(questions).select_answer("A").submit_answer(0)
    with pytest.raises(InvalidTransition):
        session.submit_answer(0)
    assert len(session.results) == 1


def test_submit_negative_study_time(questions):
    session = QuizSession.start(questions).select_answer("A")
    with pytest.raises(ValueError):
        session.submit_answer(-1)


def test_select_after_reveal_is_illegal(questions):
    session = QuizSession.start(questions).select_answer("A").submit_answer(0)
    with pytest.raises(InvalidTransition):
        session.select_answer("B")


def test_advance_requires_reveal(questions):
    session = QuizSession.start(questions)
    with pytest.raises(InvalidTransition):
        session.advance()


def test_advance_clears_selection(questions):
    session = QuizSession.start(questions).select_answer("A").submit_answer(0).advance()
    assert session.current_index == 1
    assert session.selected_answer == ""
    assert session.revealed is False
    assert session.phase == ANSWERING
    assert len(session.results) == session.current_index


def test_complete_after_last_question(questions):
    emitted = []
    session = QuizSession.start(questions)
    for letter in ["A", "B"]:
        session = session.select_answer(letter).submit_answer(0).advance(on_complete=emitted.append)
    session = session.select_answer("A").submit_answer(0)
    assert session.is_last_question
    session = session.advance(on_complete=emitted.append)
    assert session.phase == COMPLETE
    assert len(session.results) == len(questions)
    assert session.current_question is None
    assert emitted == [session.results]


def test_advance_after_complete_is_illegal(questions):
    session = answer_all(QuizSession.start(questions), ["A", "B", "C"])
    with pytest.raises(InvalidTransition):
        session.advance()


def test_scenario_two_of_three(questions):
    """Two right, one wrong rounds to 67%."""
    session = answer_all(QuizSession.start(questions), ["A", "B", "A"])
    assert session.correct_count == 2
    assert session.total_answered == 3
    assert session.score == 67


def test_score_zero_when_nothing_answered(questions):
    assert QuizSession.start(questions).score == 0


def test_subject_filter(questions):
    session = QuizSession.start(questions).set_subject_filter("Ethics")
    assert [q.id for q in session.questions] == [1, 3]
    assert session.subject_filter == "Ethics"
    assert session.phase == ANSWERING


def test_subject_filter_all(questions):
    session = QuizSession.start(questions, subject="Ethics").set_subject_filter("all")
    assert len(session.questions) == 3


def test_subject_filter_discards_in_progress(questions):
    session = QuizSession.start(questions).select_answer("A").submit_answer(0).advance()
    session = session.set_subject_filter("Derivatives")
    assert session.current_index == 0
    assert session.results == ()
    assert session.complete is False
    assert session.selected_answer == ""


def test_subject_filter_after_completion_restarts(questions):
    session = answer_all(QuizSession.start(questions), ["A", "B", "C"])
    session = session.set_subject_filter("Ethics")
    assert session.phase == ANSWERING
    assert session.results == ()


def test_subject_filter_no_matches(questions):
    session = QuizSession.start(questions).set_subject_filter("Fixed Income")
    assert session.phase == EMPTY
    assert session.current_question is None
    with pytest.raises(InvalidTransition):
        session.select_answer("A")


def test_empty_bank():
    session = QuizSession.start([])
    assert session.phase == EMPTY
    assert session.progress_percent == 0.0
    assert session.subjects == []


def test_subjects_sorted_unique(questions):
    assert QuizSession.start(questions).subjects == ["Derivatives", "Ethics"]


def test_reset(questions):
    session = QuizSession.start(questions, subject="Ethics")
    session = session.select_answer("A").submit_answer(5).advance()
    session = session.reset()
    assert session.current_index == 0
    assert session.results == ()
    assert session.subject_filter == "Ethics"
    assert len(session.questions) == 2
    assert session.phase == ANSWERING


def test_progress_percent(questions):
    session = QuizSession.start(questions)
    assert session.position == 1
    assert session.progress_percent == pytest.approx(100 / 3)


def test_full_run_invariant():
    """Answering every question leaves one record per question and a complete session."""
    bank = [make_question(i, subject=f"S{i % 4}") for i in range(1, 13)]
    session = answer_all(QuizSession.start(bank), ["A"] * 12)
    assert session.phase == COMPLETE
    assert len(session.results) == len(bank)
    assert [r.question_id for r in session.results] == list(range(1, 13))
