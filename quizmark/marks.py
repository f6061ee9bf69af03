"""
Mark aggregation.

Folds group responses into marks at three scopes:

- by tutorial quiz: every member of every group in one quiz instance
- by course: the same rows, flattened over a selected set of tutorial quizzes
- by student: one student's groups across all tutorial quizzes of a course

Marks are group marks: every member of a group receives the group's score.
All functions are pure and return new, immutable sheets; iteration follows
the order of the hydrated input (question order, member sort order).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .models import Course, Group, Member, Question, Quiz, Tutorial, TutorialQuiz

Points = int | float


@dataclass(frozen=True)
class MarkRow:
    """
    One member's mark in one tutorial quiz.

    ``group_result`` holds one entry per question in question order: the
    points of the group's response, or None when the group never answered.
    """

    tutorial: Tutorial
    quiz: Quiz
    group: Group
    member: Member
    score: Points
    group_result: tuple[Points | None, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "tutorial": self.tutorial.get_display_name(),
            "quiz": self.quiz.name,
            "group": self.group.name,
            "member": self.member.get_username(),
            "score": self.score,
            "group_result": list(self.group_result),
        }


@dataclass(frozen=True)
class MarkSheet:
    """Ordered mark rows plus the questions their per-question results refer to."""

    rows: tuple[MarkRow, ...] = ()
    questions: tuple[Question, ...] = ()

    @property
    def total(self) -> Points:
        return sum(row.score for row in self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)


# =============================================================================
# Group folds
# =============================================================================


def group_score(group: Group) -> Points:
    """Sum of response points; absent points count as 0."""
    return sum(response.points or 0 for response in group.responses)


def group_result(questions: Iterable[Question], group: Group) -> tuple[Points | None, ...]:
    """Per-question points in question order, None for unanswered questions."""
    results = []
    for question in questions:
        response = group.response_for(question.id)
        results.append(None if response is None else response.points or 0)
    return tuple(results)


def _group_rows(
    tutorial_quiz: TutorialQuiz,
    group: Group,
    members: Iterable[Member],
) -> tuple[MarkRow, ...]:
    score = group_score(group)
    result = group_result(tutorial_quiz.quiz.questions, group)
    return tuple(
        MarkRow(
            tutorial=tutorial_quiz.tutorial,
            quiz=tutorial_quiz.quiz,
            group=group,
            member=member,
            score=score,
            group_result=result,
        )
        for member in members
    )


def _tutorial_quiz_rows(tutorial_quiz: TutorialQuiz) -> tuple[MarkRow, ...]:
    return tuple(
        row
        for group in tutorial_quiz.groups
        for row in _group_rows(tutorial_quiz, group, group.members)
    )


# =============================================================================
# Scopes
# =============================================================================


def marks_by_tutorial_quiz(tutorial_quiz: TutorialQuiz) -> MarkSheet:
    """
    Marks for every member of every group in one tutorial quiz.

    Args:
        tutorial_quiz: Hydrated tutorial quiz (quiz questions, groups with
            members and responses)

    Returns:
        MarkSheet whose ``questions`` are the quiz's questions, so each row's
        ``group_result`` lines up with per-question columns
    """
    rows = _tutorial_quiz_rows(tutorial_quiz)
    logger.debug(
        f"Tutorial quiz {tutorial_quiz.id}: {len(tutorial_quiz.groups)} groups, {len(rows)} rows"
    )
    return MarkSheet(rows=rows, questions=tuple(tutorial_quiz.quiz.questions))


def marks_by_course(
    tutorial_quizzes: Iterable[TutorialQuiz],
    selected: Iterable[str],
) -> MarkSheet:
    """
    Marks for the selected tutorial quizzes, in the order of ``tutorial_quizzes``.

    Args:
        tutorial_quizzes: Hydrated tutorial quizzes of the course
        selected: Ids of the tutorial quizzes to include

    Returns:
        MarkSheet with rows from every selected tutorial quiz. An empty
        selection yields an empty sheet.
    """
    selected_ids = set(selected)
    rows = tuple(
        row
        for tutorial_quiz in tutorial_quizzes
        if tutorial_quiz.id in selected_ids
        for row in _tutorial_quiz_rows(tutorial_quiz)
    )
    return MarkSheet(rows=rows)


def marks_by_student(
    course: Course,
    student: Member,
    tutorial_quizzes: Iterable[TutorialQuiz],
) -> MarkSheet:
    """
    One student's marks across the tutorial quizzes of a course.

    Only tutorial quizzes held in one of the course's tutorials count, and
    only groups the student belongs to. The sheet total is the student's
    total mark.
    """
    tutorials = set(course.tutorials)
    rows = tuple(
        row
        for tutorial_quiz in tutorial_quizzes
        if tutorial_quiz.tutorial.id in tutorials
        for group in tutorial_quiz.groups
        if group.has_member(student.id)
        for row in _group_rows(tutorial_quiz, group, [student])
    )
    logger.debug(f"Student {student.get_username()}: {len(rows)} tutorial quiz marks")
    return MarkSheet(rows=rows)
