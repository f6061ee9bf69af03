"""
Hydration of the tutorial quiz graph.

Loads persisted records and converts them into the frozen entity models
the grading core works on. Visibility and ordering rules are applied here,
once, so the core never re-applies them:

- questions: quiz order, instructor questions plus approved student submissions
- members: sorted by first then last name
- groups: numeric order of their names
- group responses: restricted to the quiz's visible questions

An id that does not resolve raises MissingInputError.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import MissingInputError
from ..models import (
    Course,
    Group,
    LineSummary,
    Member,
    Question,
    Quiz,
    Response,
    Tutorial,
    TutorialQuiz,
    sorted_groups,
)
from .models import (
    CourseRecord,
    GroupRecord,
    QuestionRecord,
    QuizRecord,
    ResponseRecord,
    TutorialQuizRecord,
    TutorialRecord,
    UserRecord,
)


# =============================================================================
# Record lookup
# =============================================================================


def _key(value: str | int) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_record(session: Session, model: type, record_id: str | int, entity: str) -> Any:
    """Fetch a record by id or raise MissingInputError."""
    key = _key(record_id)
    record = session.get(model, key) if key is not None else None
    if record is None:
        logger.warning(f"{entity} not found: {record_id}")
        raise MissingInputError(entity, record_id)
    return record


# =============================================================================
# Record -> entity conversion
# =============================================================================


def _points(value: float | None) -> int | float | None:
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


def to_question(record: QuestionRecord) -> Question:
    return Question(
        id=str(record.id),
        number=record.number,
        type=record.type,
        question=record.question or "",
        code=record.code,
        choices=tuple(record.choices or ()),
        answers=tuple(record.answers or ()),
        case_sensitive=bool(record.case_sensitive),
        submitter=str(record.submitter_id) if record.submitter_id is not None else None,
        approved=bool(record.approved),
    )


def to_member(record: UserRecord) -> Member:
    return Member(
        id=str(record.id),
        username=record.username,
        first_name=record.first_name or "",
        last_name=record.last_name or "",
        attributes=record.attributes if isinstance(record.attributes, dict) else None,
    )


def _line(entry: Any) -> LineSummary:
    if not isinstance(entry, dict):
        return LineSummary()
    try:
        # Null fields fall back to the zero-credit defaults
        return LineSummary.model_validate({k: v for k, v in entry.items() if v is not None})
    except ValidationError as e:
        logger.debug(f"Malformed line summary entry {entry!r}: {e}")
        value = entry.get("value")
        return LineSummary(value=value if isinstance(value, str) else None)


def _lines(summary: list | None) -> tuple[LineSummary, ...] | None:
    if summary is None:
        return None
    if not isinstance(summary, list):
        logger.debug(f"Ignoring line summary of type {type(summary).__name__}")
        return ()
    # Malformed entries are kept as empty lines so later lines keep their index
    return tuple(_line(entry) for entry in summary)


def to_response(record: ResponseRecord) -> Response:
    return Response(
        id=str(record.id),
        question=str(record.question_id),
        group=str(record.group_id) if record.group_id is not None else None,
        answer=tuple(str(value) for value in record.answer or ()),
        line_by_line_summary=_lines(record.line_by_line_summary),
        points=_points(record.points),
        correct=bool(record.correct),
    )


def to_tutorial(record: TutorialRecord) -> Tutorial:
    return Tutorial(
        id=str(record.id),
        course=str(record.course_id),
        number=record.number,
        name=record.name,
    )


def to_quiz(record: QuizRecord) -> Quiz:
    return Quiz(
        id=str(record.id),
        name=record.name,
        questions=tuple(q for q in map(to_question, record.questions) if q.is_visible),
    )


def to_group(record: GroupRecord, question_ids: Iterable[str] | None = None) -> Group:
    members = sorted(record.members, key=lambda user: (user.first_name or "", user.last_name or ""))
    responses = [to_response(r) for r in record.responses]
    if question_ids is not None:
        visible = set(question_ids)
        responses = [r for r in responses if r.question in visible]
    return Group(
        id=str(record.id),
        name=record.name,
        members=tuple(to_member(m) for m in members),
        responses=tuple(responses),
        driver=str(record.driver_id) if record.driver_id is not None else None,
    )


def to_tutorial_quiz(record: TutorialQuizRecord) -> TutorialQuiz:
    quiz = to_quiz(record.quiz)
    question_ids = [q.id for q in quiz.questions]
    return TutorialQuiz(
        id=str(record.id),
        tutorial=to_tutorial(record.tutorial),
        quiz=quiz,
        groups=tuple(sorted_groups([to_group(g, question_ids) for g in record.groups])),
        published=bool(record.published),
        active=bool(record.active),
        archived=bool(record.archived),
        allocate_members=record.allocate_members,
        max_members_per_group=record.max_members_per_group,
    )


# =============================================================================
# Loaders
# =============================================================================


def load_tutorial_quiz(session: Session, tutorial_quiz_id: str | int) -> TutorialQuiz:
    """Load a tutorial quiz with its tutorial, visible questions and groups."""
    record = get_record(session, TutorialQuizRecord, tutorial_quiz_id, "Tutorial quiz")
    return to_tutorial_quiz(record)


def load_group(session: Session, tutorial_quiz: TutorialQuiz, group_id: str | int) -> Group:
    """Load one group of a tutorial quiz, with responses to its visible questions."""
    record = get_record(session, GroupRecord, group_id, "Group")
    if str(record.tutorial_quiz_id) != tutorial_quiz.id:
        raise MissingInputError("Group", group_id)
    return to_group(record, [q.id for q in tutorial_quiz.quiz.questions])


def load_question(session: Session, question_id: str | int) -> Question:
    return to_question(get_record(session, QuestionRecord, question_id, "Question"))


def load_response(session: Session, response_id: str | int) -> Response:
    return to_response(get_record(session, ResponseRecord, response_id, "Response"))


def load_member(session: Session, member_id: str | int) -> Member:
    return to_member(get_record(session, UserRecord, member_id, "Student"))


def load_course(session: Session, course_id: str | int) -> Course:
    record = get_record(session, CourseRecord, course_id, "Course")
    return Course(
        id=str(record.id),
        code=record.code,
        tutorials=tuple(str(t.id) for t in record.tutorials),
    )


def load_course_tutorial_quizzes(session: Session, course: Course) -> list[TutorialQuiz]:
    """All tutorial quizzes held in the course's tutorials."""
    tutorial_ids = [key for key in (_key(t) for t in course.tutorials) if key is not None]
    if not tutorial_ids:
        return []
    records = session.scalars(
        select(TutorialQuizRecord)
        .where(TutorialQuizRecord.tutorial_id.in_(tutorial_ids))
        .order_by(TutorialQuizRecord.id)
    ).all()
    return [to_tutorial_quiz(record) for record in records]


def load_tutorial_quizzes(session: Session, tutorial_quiz_ids: Iterable[str | int]) -> list[TutorialQuiz]:
    """Tutorial quizzes by id; ids that do not resolve are skipped."""
    keys = [key for key in (_key(i) for i in tutorial_quiz_ids) if key is not None]
    if not keys:
        return []
    records = session.scalars(
        select(TutorialQuizRecord)
        .where(TutorialQuizRecord.id.in_(keys))
        .order_by(TutorialQuizRecord.id)
    ).all()
    return [to_tutorial_quiz(record) for record in records]
