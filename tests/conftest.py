import pytest

from cfa_quiz.models import AttemptRecord, Question


def make_question(qid, subject="Ethics", answer="A"):
    return Question(
        id=qid,
        text=f"{qid}. Sample question {qid}?",
        options=("A. First", "B. Second", "C. Third"),
        answer=answer,
        subject=subject,
    )


def make_record(subject="Ethics", is_correct=True, qid=1):
    return AttemptRecord(
        question_id=qid,
        question_text=f"{qid}. Sample question {qid}?",
        selected_answer="A" if is_correct else "B",
        correct_answer="A",
        is_correct=is_correct,
        subject=subject,
        timestamp="2026-01-01T00:00:00+00:00",
        study_time_seconds=0,
    )


@pytest.fixture
def questions():
    """Three questions over two subjects."""
    return [
        make_question(1, "Ethics", "A"),
        make_question(2, "Derivatives", "B"),
        make_question(3, "Ethics", "C"),
    ]


@pytest.fixture
def sample_pdf(tmp_path):
    """A file that passes PDF validation."""
    path = tmp_path / "bank.pdf"
    path.write_bytes(b"%PDF-1.4\n%stub\n")
    return str(path)
