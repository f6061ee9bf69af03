"""
Submit-time response grading.

Sets the boolean ``correct`` flag stored with a response when it is added
or edited. This is a different rule set from the review verdicts built by
``comparator``:

- multiple choice / multiple select: exact set equality, no partial credit
- short answer: any accepted answer matches (case-folded unless case sensitive)
- code tracing: the trimmed traced values must equal the expected sequence,
  whereas review verdicts read the per-line ``correct`` flags

Grading is idempotent: grading an already graded response again yields
the same ``correct`` value and answer.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from ..errors import UnrecognizedQuestionType
from ..models import LineSummary, Question, QuestionType, Response, ResponseSubmission


def grade_choices(question: Question, answer: Sequence[str]) -> bool:
    """Correct only if exactly the expected choices were selected."""
    return sorted(question.answers) == sorted(answer)


def normalize_short_answer(question: Question, answer: Sequence[str]) -> tuple[str, ...]:
    """Lower-case the given answer unless the question is case sensitive."""
    if question.case_sensitive:
        return tuple(answer)
    return tuple(value.lower() for value in answer)


def grade_short_answer(question: Question, answer: Sequence[str]) -> bool:
    """Correct if any given value is an accepted answer."""
    expected = question.answers
    if not question.case_sensitive:
        expected = tuple(value.lower() for value in expected)
    return bool(set(expected) & set(normalize_short_answer(question, answer)))


def grade_code_tracing(question: Question, lines: Sequence[LineSummary] | None) -> bool:
    """Correct if every traced line, trimmed, equals the expected line in order."""
    if not lines:
        # Nothing traced: zero credit even for an empty expected sequence
        return False
    return list(question.answers) == [(line.value or "").strip() for line in lines]


def _grade(kind: QuestionType, question: Question, response: Response) -> Response:
    if kind is QuestionType.MULTIPLE_CHOICE or kind is QuestionType.MULTIPLE_SELECT:
        return response.model_copy(update={"correct": grade_choices(question, response.answer)})
    elif kind is QuestionType.SHORT_ANSWER:
        return response.model_copy(update={
            "answer": normalize_short_answer(question, response.answer),
            "correct": grade_short_answer(question, response.answer),
        })
    elif kind is QuestionType.CODE_TRACING:
        return response.model_copy(update={
            "correct": grade_code_tracing(question, response.line_by_line_summary),
        })
    raise UnrecognizedQuestionType(kind)


def grade_response(question: Question, response: Response) -> Response:
    """
    Grade a response against its question.

    Args:
        question: The question the response answers
        response: Response as it will be persisted

    Returns:
        A copy of the response with ``correct`` (and, for case-insensitive
        short answers, the lower-cased ``answer``) set. Responses to
        unrecognized question types are returned unchanged.
    """
    kind = question.kind
    try:
        if kind is None:
            raise UnrecognizedQuestionType(question.type)
        return _grade(kind, question, response)
    except UnrecognizedQuestionType as e:
        logger.warning(f"Response {response.id} left ungraded: {e}")
        return response


def apply_edit(question: Question, response: Response, submission: ResponseSubmission) -> Response:
    """
    Apply an edit to an existing response and regrade it.

    The previous answer is cleared before the submitted fields are applied,
    so an edit without an ``answer`` leaves the response with no answer.
    Fields the submission does not supply keep their stored values.
    """
    update = {"answer": (), **submission.supplied(), "question": question.id}
    edited = Response.model_validate({**dict(response), **update})
    return grade_response(question, edited)
