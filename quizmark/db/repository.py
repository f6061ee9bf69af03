"""
Write operations: response grading on save and tutorial quiz settings.

Callers own the transaction (see ``session_scope``); these functions only
flush, so a failure anywhere rolls the whole request back.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

from ..errors import MissingInputError
from ..grading import apply_edit, grade_response
from ..models import Response, ResponseSubmission, TutorialQuiz, settings_update
from .hydrate import get_record, to_question, to_response, to_tutorial_quiz
from .models import GroupRecord, QuestionRecord, ResponseRecord, TutorialQuizRecord

# Tutorial quiz fields that can be changed from the conduct page
SETTINGS_FIELDS = ("allocate_members", "max_members_per_group", "published", "active", "archived")


def _store_response(record: ResponseRecord, response: Response) -> None:
    record.answer = list(response.answer)
    record.line_by_line_summary = (
        [line.model_dump() for line in response.line_by_line_summary]
        if response.line_by_line_summary is not None
        else None
    )
    record.points = response.points
    record.correct = response.correct


def add_response(session: Session, group_id: str | int, submission: ResponseSubmission) -> Response:
    """
    Grade and store a new response for a group.

    Raises:
        MissingInputError: If the group or the answered question does not exist
    """
    group = get_record(session, GroupRecord, group_id, "Group")
    question = to_question(get_record(session, QuestionRecord, submission.question, "Question"))

    record = ResponseRecord(question_id=int(question.id), group_id=group.id)
    session.add(record)
    session.flush()

    draft = Response(id=str(record.id), question=question.id, group=str(group.id), **submission.supplied())
    graded = grade_response(question, draft)
    _store_response(record, graded)
    session.flush()

    logger.info(f"Response for question {question.number} added (group {group.name}, correct={graded.correct})")
    return to_response(record)


def edit_response(
    session: Session,
    group_id: str | int,
    response_id: str | int,
    submission: ResponseSubmission,
) -> Response:
    """
    Replace a response's answer with the submitted one and regrade it.

    Raises:
        MissingInputError: If the group, question or response does not exist
    """
    group = get_record(session, GroupRecord, group_id, "Group")
    question = to_question(get_record(session, QuestionRecord, submission.question, "Question"))
    record = get_record(session, ResponseRecord, response_id, "Response")

    edited = apply_edit(question, to_response(record), submission)
    record.question_id = int(question.id)
    record.group_id = group.id
    _store_response(record, edited)
    session.flush()

    logger.info(f"Response for question {question.number} updated (group {group.name}, correct={edited.correct})")
    return to_response(record)


def _write_settings(record: TutorialQuizRecord, tutorial_quiz: TutorialQuiz) -> None:
    for field in SETTINGS_FIELDS:
        setattr(record, field, getattr(tutorial_quiz, field))


def update_tutorial_quiz_settings(
    session: Session,
    tutorial_quiz_id: str | int,
    body: dict[str, Any],
) -> TutorialQuiz:
    """
    Apply the conduct-page settings form to one tutorial quiz.

    Every settings field is written; unchecked status flags become False.
    """
    record = get_record(session, TutorialQuizRecord, tutorial_quiz_id, "Tutorial quiz")
    updated = to_tutorial_quiz(record).with_settings(settings_update(list(SETTINGS_FIELDS), body))
    _write_settings(record, updated)
    session.flush()
    logger.info(f"Settings updated for {updated.quiz.name} in TUT {updated.tutorial.get_display_name()}")
    return updated


def bulk_update_tutorial_quizzes(
    session: Session,
    tutorial_quiz_ids: Iterable[str | int],
    fields: Iterable[str],
    body: dict[str, Any],
) -> int:
    """
    Apply the named settings fields of a form body to several tutorial quizzes.

    Returns:
        Number of tutorial quizzes updated
    """
    fields = list(fields)
    unknown = [f for f in fields if f not in SETTINGS_FIELDS]
    if unknown:
        logger.warning(f"Ignoring unknown tutorial quiz fields: {', '.join(unknown)}")
    update = settings_update([f for f in fields if f in SETTINGS_FIELDS], body)

    count = 0
    for tutorial_quiz_id in tutorial_quiz_ids:
        try:
            record = get_record(session, TutorialQuizRecord, tutorial_quiz_id, "Tutorial quiz")
        except MissingInputError:
            continue
        _write_settings(record, to_tutorial_quiz(record).with_settings(update))
        count += 1

    session.flush()
    logger.info(f"{count} tutorial quizzes updated")
    return count
