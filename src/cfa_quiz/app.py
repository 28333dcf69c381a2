"""Interactive CLI application."""
import logging

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.prompt import Confirm, Prompt
from rich.table import Table

from cfa_quiz.analytics import (
    ResultsHistory, get_readiness_color, get_readiness_label, subject_distribution,
)
from cfa_quiz.config import ALL_SUBJECTS, Settings
from cfa_quiz.extraction import ExtractionError, build_extractor
from cfa_quiz.logs import setup_logging
from cfa_quiz.quiz import (
    ANSWERING, COMPLETE, EMPTY, REVEALED, QuizSession, QuizValidationError,
)
from cfa_quiz.timer import StudyTimer, format_elapsed

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a quiz session to go back to the menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


class AppState:
    """Everything the running program knows; gone when it exits."""

    def __init__(self, settings: Settings | None = None, timer: StudyTimer | None = None):
        self.settings = settings or Settings()
        self.timer = timer or StudyTimer()
        self.history = ResultsHistory()
        self.session = QuizSession.start(())

    def load_questions(self, questions) -> None:
        self.session = QuizSession.start(questions)

    @property
    def has_questions(self) -> bool:
        return bool(self.session.bank)


def show_welcome():
    console.print(Panel(
        "[bold]CFA Exam Quiz Tutor[/bold]\n[dim]Practice questions and performance tracking[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("upload", "Load a PDF question bank"),
        ("quiz", "Practice quiz"),
        ("filter", "Choose a subject"),
        ("timer", "Study timer"),
        ("performance", "Scores, strengths and weaknesses"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(session: QuizSession) -> None:
    q = session.current_question
    header = f"Question {session.position} of {len(session.questions)}"
    score = f"Score: {session.correct_count}/{session.total_answered}"
    if session.total_answered:
        score += f" ({session.score}%)"
    body = f"[bold]{q.text}[/bold]\n\n" + "\n".join(f"  [cyan]{o}[/cyan]" for o in q.options)
    console.print(Panel(body, title=header, subtitle=f"{q.subject} | {score}", border_style="cyan"))


def show_reveal(session: QuizSession) -> None:
    last = session.results[-1]
    if last.is_correct:
        console.print("[green]Correct! Well done.[/green]")
    else:
        console.print(f"[red]Incorrect.[/red] The correct answer is [green]{last.correct_answer}[/green].")


def show_completion(session: QuizSession) -> None:
    color = get_readiness_color(session.score)
    console.print(Panel(
        f"[bold]{session.correct_count}/{session.total_answered} correct[/bold]  "
        f"[{color}]{session.score}%[/{color}]",
        title="Quiz Complete!", border_style="green",
    ))


def run_quiz_session(state: AppState) -> QuizSession:
    """Drive the current session until it completes or the user exits."""
    session = state.session
    if session.phase == EMPTY:
        console.print(f"[yellow]No questions available for {session.subject_filter}.[/yellow]")
        return session
    try:
        while session.phase in (ANSWERING, REVEALED):
            if session.phase == ANSWERING:
                show_question(session)
                answer = session_prompt("Your answer", default="", show_default=False)
                try:
                    if answer.strip():
                        session = session.select_answer(answer)
                    session = session.submit_answer(state.timer.elapsed_seconds)
                except QuizValidationError as e:
                    console.print(f"[yellow]{e}[/yellow]")
                    continue
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")
                    continue
                show_reveal(session)
            else:
                label = "Complete quiz" if session.is_last_question else "Next question"
                session_prompt(f"[dim]Press Enter: {label}[/dim]", default="", show_default=False)
                session = session.advance(on_complete=state.history.record_session)
    finally:
        state.session = session
    if session.phase == COMPLETE:
        show_completion(session)
    return session


def cmd_upload(state: AppState):
    file_path = Prompt.ask("PDF path")
    try:
        extractor = build_extractor(
            file_path,
            simulate=state.settings.simulate_extraction,
            tick_seconds=state.settings.tick_seconds,
        )
    except (FileNotFoundError, ExtractionError) as e:
        console.print(f"[red]{e}[/red]")
        return
    with Progress(
        TextColumn("[bold blue]Extracting"), BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"), TextColumn("{task.fields[found]} questions"),
        console=console,
    ) as progress:
        task = progress.add_task("extract", total=100, found=0)
        try:
            for tick in extractor:
                progress.update(task, completed=tick.percent, found=tick.extracted_count)
        except KeyboardInterrupt:
            extractor.cancel()
        except ExtractionError as e:
            console.print(f"[red]{e}[/red]")
            return
    if extractor.cancelled:
        console.print("[yellow]Extraction cancelled.[/yellow]")
        return
    questions = extractor.questions
    state.load_questions(questions)
    console.print(f"[green]Successfully extracted {len(questions)} questions.[/green]")


def cmd_quiz(state: AppState):
    if not state.has_questions:
        console.print("[yellow]Upload a question bank first.[/yellow]")
        return
    if state.session.phase == COMPLETE:
        if not Confirm.ask("Take the quiz again?", default=True):
            return
        state.session = state.session.reset()
        state.timer.reset()
    state.timer.start()
    try:
        run_quiz_session(state)
    finally:
        state.timer.pause()


def cmd_filter(state: AppState):
    if not state.has_questions:
        console.print("[yellow]Upload a question bank first.[/yellow]")
        return
    subjects = state.session.subjects
    console.print("  [cyan]0[/cyan]) All Subjects")
    for i, subject in enumerate(subjects, 1):
        console.print(f"  [cyan]{i}[/cyan]) {subject}")
    choice = Prompt.ask("Select subject", choices=[str(i) for i in range(len(subjects) + 1)], default="0")
    subject = ALL_SUBJECTS if choice == "0" else subjects[int(choice) - 1]
    state.session = state.session.set_subject_filter(subject)
    console.print(f"[green]{len(state.session.questions)} questions selected.[/green]")


def cmd_timer(state: AppState):
    timer = state.timer
    status = "Studying..." if timer.running else "Ready to start"
    console.print(f"\n  Study time: [bold]{format_elapsed(timer.elapsed_seconds)}[/bold]  [dim]{status}[/dim]")
    action = Prompt.ask("Timer", choices=["start", "pause", "reset", "back"], default="back")
    if action == "start":
        timer.start()
    elif action == "pause":
        timer.pause()
    elif action == "reset":
        timer.reset()


def cmd_performance(state: AppState):
    summary = state.history.summary()
    if not summary.total_questions:
        console.print("[yellow]Complete a quiz to see your performance.[/yellow]")
        return
    color = get_readiness_color(summary.overall_score)
    label = get_readiness_label(summary.overall_score)
    best = summary.best_subject
    weak = summary.weakest_subject
    console.print(Panel(
        f"Overall Score: [bold]{summary.overall_score}%[/bold] [{color}]{label}[/{color}]\n"
        f"{summary.correct_answers} of {summary.total_questions} correct | "
        f"Across {len(summary.subject_performance)} subjects\n"
        f"Best: {best.label + f' ({best.score}%)' if best else 'N/A'} | "
        f"Focus: {weak.label + f' ({weak.score}%)' if weak else 'N/A'}",
        title="Performance", border_style="blue",
    ))

    table = Table(title="Subject Breakdown")
    table.add_column("Subject", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Share", justify="right")
    for s, dist in zip(summary.subject_performance, subject_distribution(summary)):
        sc_color = get_readiness_color(s.score)
        table.add_row(s.label, f"[{sc_color}]{s.score}%[/{sc_color}]", f"{s.correct}/{s.total}", f"{dist['share']}%")
    console.print(table)

    console.print("\n[bold]Strengths:[/bold]")
    for s in summary.strengths:
        console.print(f"  [green]{s.score}%[/green] {s.subject}")
    if not summary.strengths:
        console.print("  [dim]Keep practicing to identify your strengths.[/dim]")
    console.print("[bold]Areas for improvement:[/bold]")
    for s in summary.weaknesses:
        console.print(f"  [red]{s.score}%[/red] {s.subject}")
    if not summary.weaknesses:
        console.print("  [dim]Great job! No weak areas.[/dim]")

    trend = "".join("[green]●[/green]" if p.correct else "[red]●[/red]" for p in summary.recent_performance)
    console.print(f"\n  Recent: {trend}")


def main():
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    state = AppState(settings)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="upload" if not state.has_questions else "quiz").strip().lower()
        try:
            if choice == "upload":
                cmd_upload(state)
            elif choice == "quiz":
                cmd_quiz(state)
            elif choice == "filter":
                cmd_filter(state)
            elif choice == "timer":
                cmd_timer(state)
            elif choice == "performance":
                cmd_performance(state)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to menu. Your progress in this quiz is kept.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
