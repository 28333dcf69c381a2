"""Question extraction from PDF question banks.

Two backends share one interface: iterate to receive ``ExtractionProgress``
ticks, call ``cancel()`` to stop early, and read ``questions`` once the last
tick (``done=True``) has been yielded.
"""
import logging
import re
import time
from pathlib import Path

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from cfa_quiz.config import (
    EXTRACTION_EMIT_EVERY, EXTRACTION_STEPS, EXTRACTION_TICK_SECONDS, PADDING_QUESTIONS,
)
from cfa_quiz.models import ExtractionProgress, Question, option_letter
from cfa_quiz.sample_bank import make_sample_question, template_count

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "General"

# Keyword mapping for auto-categorization
SUBJECT_KEYWORDS = {
    "Ethical and Professional Standards": ["code of ethics", "standards of professional conduct", "gips", "fiduciary", "misconduct", "material nonpublic", "independence and objectivity"],
    "Quantitative Methods": ["probability", "regression", "hypothesis", "standard deviation", "time value of money", "present value", "correlation", "sampling"],
    "Economics": ["gdp", "inflation", "monetary policy", "fiscal policy", "exchange rate", "elasticity", "business cycle"],
    "Financial Statement Analysis": ["balance sheet", "income statement", "cash flow statement", "ifrs", "gaap", "inventory", "depreciation", "financial ratio"],
    "Corporate Issuers": ["capital structure", "dividend", "corporate governance", "cost of capital", "capital budgeting", "share repurchase"],
    "Equity Investments": ["equity", "stock", "price-to-earnings", "dividend discount", "market efficiency", "index"],
    "Fixed Income": ["bond", "coupon", "yield to maturity", "duration", "convexity", "credit spread", "fixed income"],
    "Derivatives": ["option", "futures", "forward", "swap", "put-call parity", "derivative", "hedge"],
    "Alternative Investments": ["hedge fund", "private equity", "real estate", "commodit", "infrastructure", "alternative investment"],
    "Portfolio Management": ["portfolio", "diversification", "capm", "efficient frontier", "asset allocation", "beta", "risk tolerance"],
}

QUESTION_RE = re.compile(r"^\s*(\d+)[.)]\s+(.+)$")
OPTION_RE = re.compile(r"^\s*([A-Ha-h])[.)]\s+(.+)$")
ANSWER_RE = re.compile(r"^\s*(?:correct\s+)?answer\s*[:\-]\s*\(?([A-Ha-h])\)?", re.IGNORECASE)


class ExtractionError(Exception):
    """Base class for question extraction errors."""


class InvalidQuestionFile(ExtractionError):
    """The file is not a usable question bank."""


class ExtractionCancelled(ExtractionError):
    pass


def validate_pdf(file_path: str) -> Path:
    """Reject anything that is not a PDF before extraction starts."""
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    if path.suffix.lower() != ".pdf":
        raise InvalidQuestionFile(f"{path.name} is not a PDF file")
    with path.open("rb") as fh:
        if not fh.read(5).startswith(b"%PDF"):
            raise InvalidQuestionFile(f"{path.name} does not look like a PDF document")
    return path


def check_question_bank(questions) -> None:
    """Enforce the contract the quiz relies on: unique ids, options, one matching answer."""
    seen = set()
    for q in questions:
        if q.id in seen:
            raise InvalidQuestionFile(f"duplicate question id {q.id}")
        seen.add(q.id)
        if not q.options:
            raise InvalidQuestionFile(f"question {q.id} has no options")
        if q.letters.count(q.answer) != 1:
            raise InvalidQuestionFile(f"question {q.id} answer {q.answer!r} does not match exactly one option")


def categorize_subject(text: str) -> str:
    """Auto-categorize a question by keyword matching."""
    text_lower = text.lower()
    scores = {
        subject: sum(1 for kw in keywords if kw in text_lower)
        for subject, keywords in SUBJECT_KEYWORDS.items()
    }
    best = max(scores, key=scores.get)
    return best if scores[best] > 0 else DEFAULT_SUBJECT


class QuestionParser:
    """Line-driven parser for numbered questions with lettered options and an ``Answer: X`` line.

    Text can be fed a page at a time; a question split across pages is
    completed when the rest of it arrives. Blocks missing options or a
    matching answer are skipped.
    """

    def __init__(self):
        self.questions: list[Question] = []
        self._stem = None
        self._options: list[str] = []

    def feed(self, text: str) -> int:
        """Parse more text and return the number of questions found so far."""
        for line in text.splitlines():
            if line.strip():
                self._feed_line(line)
        return len(self.questions)

    def _feed_line(self, line: str) -> None:
        answer = ANSWER_RE.match(line)
        if answer and self._stem is not None:
            self._close(answer.group(1).upper())
            return
        option = OPTION_RE.match(line)
        if option and self._stem is not None:
            self._options.append(f"{option.group(1).upper()}. {option.group(2).strip()}")
            return
        question = QUESTION_RE.match(line)
        if question:
            self._stem, self._options = question.group(2).strip(), []
            return
        # wrapped line continues the last option, or the stem
        if self._options:
            self._options[-1] = f"{self._options[-1]} {line.strip()}"
        elif self._stem is not None:
            self._stem = f"{self._stem} {line.strip()}"

    def _close(self, letter: str) -> None:
        stem, options = self._stem, self._options
        self._stem, self._options = None, []
        if not options or [option_letter(o) for o in options].count(letter) != 1:
            logger.debug("skipping question %r: answer %s has no matching option", stem[:40], letter)
            return
        qid = len(self.questions) + 1
        self.questions.append(Question(
            id=qid,
            text=f"{qid}. {stem}",
            options=tuple(options),
            answer=letter,
            subject=categorize_subject(" ".join([stem] + options)),
        ))


def parse_questions(text: str) -> list[Question]:
    parser = QuestionParser()
    parser.feed(text)
    return parser.questions


class _Extraction:
    def __init__(self, file_path: str):
        self.file_path = file_path
        self._cancelled = False
        self._questions = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        logger.info("extraction of %s cancelled", self.file_path)

    @property
    def questions(self) -> tuple:
        if self._cancelled:
            raise ExtractionCancelled(f"extraction of {self.file_path} was cancelled")
        if self._questions is None:
            raise ExtractionError("extraction has not finished")
        return self._questions

    def _finish(self, found) -> int:
        check_question_bank(found)
        self._questions = tuple(found)
        logger.info("extracted %d questions from %s", len(found), self.file_path)
        return len(found)

    def run(self, on_progress=None) -> tuple:
        """Drive the extraction to completion and return the questions."""
        for tick in self:
            if on_progress is not None:
                on_progress(tick)
        return self.questions


class SimulatedExtraction(_Extraction):
    """Stand-in extractor that emits the built-in sample bank over a series of ticks."""

    def __init__(self, file_path: str, steps: int = EXTRACTION_STEPS,
                 tick_seconds: float = EXTRACTION_TICK_SECONDS, sleep=time.sleep):
        super().__init__(file_path)
        self.steps = steps
        self.tick_seconds = tick_seconds
        self._sleep = sleep

    def __iter__(self):
        found = []
        for i in range(self.steps):
            if self._cancelled:
                return
            self._sleep(self.tick_seconds)
            if i > 0 and i % EXTRACTION_EMIT_EVERY == 0:
                index = i // EXTRACTION_EMIT_EVERY - 1
                if index < template_count():
                    found.append(make_sample_question(index + 1, index, index))
            yield ExtractionProgress(step=i + 1, total_steps=self.steps, extracted_count=len(found))
        if self._cancelled:
            return
        for i in range(PADDING_QUESTIONS):
            found.append(make_sample_question(template_count() + 1 + i, i, i))
        count = self._finish(found)
        yield ExtractionProgress(step=self.steps, total_steps=self.steps, extracted_count=count, done=True)


class PdfTextExtraction(_Extraction):
    """Reads page text with PyPDF2 and parses it; one tick per page."""

    def _unreadable(self, error: Exception) -> InvalidQuestionFile:
        return InvalidQuestionFile(f"{Path(self.file_path).name} could not be read: {error}")

    def __iter__(self):
        try:
            reader = PdfReader(self.file_path)
            total = len(reader.pages)
        except PdfReadError as e:
            raise self._unreadable(e) from e
        parser = QuestionParser()
        for i in range(total):
            if self._cancelled:
                return
            try:
                text = reader.pages[i].extract_text() or ""
            except PdfReadError as e:
                raise self._unreadable(e) from e
            count = parser.feed(text)
            yield ExtractionProgress(step=i + 1, total_steps=total, extracted_count=count)
        if self._cancelled:
            return
        if not parser.questions:
            raise InvalidQuestionFile(f"no questions found in {Path(self.file_path).name}")
        count = self._finish(parser.questions)
        yield ExtractionProgress(step=total, total_steps=total, extracted_count=count, done=True)


def build_extractor(file_path: str, simulate: bool = True,
                    tick_seconds: float = EXTRACTION_TICK_SECONDS) -> _Extraction:
    path = validate_pdf(file_path)
    if simulate:
        return SimulatedExtraction(str(path), tick_seconds=tick_seconds)
    return PdfTextExtraction(str(path))
