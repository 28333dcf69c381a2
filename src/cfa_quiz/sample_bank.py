"""Built-in CFA sample questions used by the simulated extraction."""
import json
from functools import lru_cache
from pathlib import Path

from cfa_quiz.models import Question

CONTENT_DIR = Path(__file__).parent / "content"


@lru_cache(maxsize=None)
def load_sample_bank() -> dict:
    """Subjects and question templates from sample_bank.json."""
    return json.loads((CONTENT_DIR / "sample_bank.json").read_text(encoding="utf-8"))


def get_subjects() -> list[str]:
    return list(load_sample_bank()["subjects"])


def make_sample_question(question_id: int, template_index: int, subject_index: int) -> Question:
    data = load_sample_bank()
    templates = data["templates"]
    subjects = data["subjects"]
    template = templates[template_index % len(templates)]
    return Question(
        id=question_id,
        text=f"{question_id}. {template['text']}",
        options=tuple(template["options"]),
        answer=template["answer"],
        subject=subjects[subject_index % len(subjects)],
    )


def template_count() -> int:
    return len(load_sample_bank()["templates"])
