"""
Typer CLI for quizmark.

Commands:
    quizmark db init                          - Create database tables
    quizmark review TQ GROUP                  - Per-question review of a group's responses
    quizmark marks tutorial-quiz TQ           - Marks for every member of a tutorial quiz
    quizmark marks student COURSE STUDENT     - One student's marks across a course
    quizmark marks course COURSE              - Marks for selected tutorial quizzes of a course
    quizmark responses add GROUP              - Grade and store a new response
    quizmark responses edit GROUP RESPONSE    - Replace and regrade a response

Usage:
    quizmark --help
    quizmark marks tutorial-quiz 12 --export marks.csv
    quizmark marks course 3 -t 12 -t 13 --export marks.csv
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from .config import get_settings
from .db import (
    add_response,
    edit_response,
    get_engine,
    init_db,
    load_course,
    load_course_tutorial_quizzes,
    load_group,
    load_member,
    load_tutorial_quiz,
    session_scope,
)
from .errors import QuizmarkError
from .grading import ChoiceVerdict, QuestionResult, ScalarVerdict, SequenceVerdict
from .marks import MarkSheet, marks_by_course, marks_by_student, marks_by_tutorial_quiz
from .models import LineSummary, ResponseSubmission
from .report import ExportLayout, display_rows, export_csv, question_headings, username
from .review import build_group_review

console = Console()

app = typer.Typer(help="quizmark: grading and marks for tutorial group quizzes")
db_app = typer.Typer(help="Database management")
marks_app = typer.Typer(help="Mark aggregation and export")
responses_app = typer.Typer(help="Response grading")
app.add_typer(db_app, name="db")
app.add_typer(marks_app, name="marks")
app.add_typer(responses_app, name="responses")


@app.callback()
def main_callback(
    ctx: typer.Context,
    database_url: str | None = typer.Option(
        None, "--database-url", envvar="DATABASE_URL", help="Database URL (default: from config)"
    ),
):
    """Select the database for all commands."""
    ctx.obj = {"database_url": database_url}


def _engine(ctx: typer.Context):
    return get_engine(ctx.obj["database_url"])


def _fail(error: QuizmarkError) -> None:
    rprint(f"[red]✗[/red] {error}")
    raise typer.Exit(code=1)


# ========================================
# DB COMMANDS
# ========================================


@db_app.command("init")
def db_init(ctx: typer.Context) -> None:
    """Create all tables."""
    init_db(_engine(ctx))
    rprint("[green]✓[/green] Database initialized")


# ========================================
# REVIEW
# ========================================


def _verdict_summary(result: QuestionResult) -> str:
    verdict = result.results
    if verdict is None:
        return "[dim]no data[/dim]"
    if isinstance(verdict, ChoiceVerdict):
        marks = {True: "[green]✓[/green]", False: "[red]✗[/red]", None: "[dim]·[/dim]"}
        return " ".join(f"{r.choice} {marks[r.correct]}" for r in verdict.choices)
    if isinstance(verdict, ScalarVerdict):
        style = "green" if verdict.correct else "red"
        given = verdict.given if verdict.given is not None else "-"
        return f"[{style}]{given}[/{style}] (expected: {', '.join(verdict.expected)})"
    if isinstance(verdict, SequenceVerdict):
        correct = sum(1 for line in verdict.lines if line.correct)
        attempts = sum(line.attempts for line in verdict.lines)
        return f"{correct}/{len(verdict.lines)} lines correct, {attempts} attempts"
    return str(verdict)


@app.command("review")
def review(ctx: typer.Context, tutorial_quiz_id: str, group_id: str) -> None:
    """Show a group's responses question by question."""
    try:
        with session_scope(_engine(ctx)) as session:
            tutorial_quiz = load_tutorial_quiz(session, tutorial_quiz_id)
            group = load_group(session, tutorial_quiz, group_id)
    except QuizmarkError as e:
        _fail(e)

    group_review = build_group_review(tutorial_quiz, group)

    table = Table(title=f"{tutorial_quiz.quiz.name} - Group {group.name}")
    table.add_column("Q", style="cyan", justify="right")
    table.add_column("Type")
    table.add_column("Answered", justify="center")
    table.add_column("Result")
    table.add_column("Points", justify="right")
    for result in group_review.questions:
        table.add_row(
            str(result.question.number),
            result.question.type,
            "yes" if result.answered else "[dim]no[/dim]",
            _verdict_summary(result),
            str(result.score),
        )
    console.print(table)
    rprint(f"Total: [bold]{group_review.score}[/bold] ({group_review.answered_count}/{len(group_review.questions)} answered)")


# ========================================
# MARKS
# ========================================


def _print_sheet(sheet: MarkSheet, title: str) -> None:
    table = Table(title=title)
    table.add_column("Username", style="cyan")
    table.add_column("Quiz")
    table.add_column("Tutorial")
    table.add_column("Group")
    table.add_column("Mark", justify="right")
    for heading in question_headings(sheet):
        table.add_column(heading, justify="right")
    for row in display_rows(sheet):
        results = ["" if points is None else str(points) for points in row.group_result] if sheet.questions else []
        table.add_row(
            username(row.member),
            row.quiz.name,
            row.tutorial.get_display_name(),
            row.group.name,
            str(row.score),
            *results,
        )
    console.print(table)


def _write_export(sheet: MarkSheet, layout: ExportLayout, output: Path) -> None:
    export = export_csv(sheet, layout)
    output.write_text(export.body, encoding="utf-8")
    rprint(f"[green]✓[/green] Exported {len(sheet)} rows to {output} ({export.content_type})")


@marks_app.command("tutorial-quiz")
def marks_tutorial_quiz(
    ctx: typer.Context,
    tutorial_quiz_id: str,
    export: Path | None = typer.Option(None, "--export", "-o", help="Write marks as CSV"),
) -> None:
    """Marks for every member of every group in a tutorial quiz."""
    try:
        with session_scope(_engine(ctx)) as session:
            tutorial_quiz = load_tutorial_quiz(session, tutorial_quiz_id)
    except QuizmarkError as e:
        _fail(e)

    sheet = marks_by_tutorial_quiz(tutorial_quiz)
    if export:
        _write_export(sheet, ExportLayout.TUTORIAL_QUIZ, export)
        return
    _print_sheet(sheet, f"Marks: {tutorial_quiz.quiz.name} in TUT {tutorial_quiz.tutorial.get_display_name()}")


@marks_app.command("student")
def marks_student(
    ctx: typer.Context,
    course_id: str,
    student_id: str,
    export: Path | None = typer.Option(None, "--export", "-o", help="Write marks as CSV"),
) -> None:
    """One student's marks across all tutorial quizzes of a course."""
    try:
        with session_scope(_engine(ctx)) as session:
            course = load_course(session, course_id)
            student = load_member(session, student_id)
            tutorial_quizzes = load_course_tutorial_quizzes(session, course)
    except QuizmarkError as e:
        _fail(e)

    sheet = marks_by_student(course, student, tutorial_quizzes)
    if export:
        _write_export(sheet, ExportLayout.COURSE, export)
        return
    _print_sheet(sheet, f"Marks: {student.get_display_name()} in {course.code}")
    rprint(f"Total: [bold]{sheet.total}[/bold]")


@marks_app.command("course")
def marks_course(
    ctx: typer.Context,
    course_id: str,
    tutorial_quiz: Optional[List[str]] = typer.Option(
        None, "--tutorial-quiz", "-t", help="Tutorial quiz to include (repeatable, default: all)"
    ),
    export: Path | None = typer.Option(None, "--export", "-o", help="Write marks as CSV"),
) -> None:
    """Marks for the selected tutorial quizzes of a course."""
    try:
        with session_scope(_engine(ctx)) as session:
            course = load_course(session, course_id)
            tutorial_quizzes = load_course_tutorial_quizzes(session, course)
    except QuizmarkError as e:
        _fail(e)

    selected = tutorial_quiz or [tq.id for tq in tutorial_quizzes]
    sheet = marks_by_course(tutorial_quizzes, selected)
    if export:
        _write_export(sheet, ExportLayout.COURSE, export)
        return
    _print_sheet(sheet, f"Marks: {course.code}")


# ========================================
# RESPONSES
# ========================================


def _submission(
    question_id: str,
    answer: list[str] | None,
    line: list[str] | None,
    points: float | None,
) -> ResponseSubmission:
    values: dict = {"question": question_id}
    if answer is not None:
        values["answer"] = answer
    if line is not None:
        values["line_by_line_summary"] = [LineSummary(value=value) for value in line]
    if points is not None:
        values["points"] = int(points) if points.is_integer() else points
    return ResponseSubmission(**values)


@responses_app.command("add")
def responses_add(
    ctx: typer.Context,
    group_id: str,
    question: str = typer.Option(..., "--question", "-q", help="Question id"),
    answer: Optional[List[str]] = typer.Option(None, "--answer", "-a", help="Selected choice or text (repeatable)"),
    line: Optional[List[str]] = typer.Option(None, "--line", "-l", help="Traced line value (repeatable)"),
    points: float | None = typer.Option(None, "--points", "-p"),
) -> None:
    """Grade and store a new response for a group."""
    try:
        with session_scope(_engine(ctx)) as session:
            response = add_response(session, group_id, _submission(question, answer, line, points))
    except QuizmarkError as e:
        _fail(e)
    state = "[green]correct[/green]" if response.correct else "[red]incorrect[/red]"
    rprint(f"[green]✓[/green] Response {response.id} saved ({state})")


@responses_app.command("edit")
def responses_edit(
    ctx: typer.Context,
    group_id: str,
    response_id: str,
    question: str = typer.Option(..., "--question", "-q", help="Question id"),
    answer: Optional[List[str]] = typer.Option(None, "--answer", "-a", help="Selected choice or text (repeatable)"),
    line: Optional[List[str]] = typer.Option(None, "--line", "-l", help="Traced line value (repeatable)"),
    points: float | None = typer.Option(None, "--points", "-p"),
) -> None:
    """Replace a response's answer and regrade it."""
    try:
        with session_scope(_engine(ctx)) as session:
            response = edit_response(session, group_id, response_id, _submission(question, answer, line, points))
    except QuizmarkError as e:
        _fail(e)
    state = "[green]correct[/green]" if response.correct else "[red]incorrect[/red]"
    rprint(f"[green]✓[/green] Response {response.id} updated ({state})")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
