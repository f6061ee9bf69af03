"""
Review-time answer comparison.

Given a question and a normalized submission, build the verdict shown
when an instructor reviews a group's answers. Comparison is pure and
never raises on absent or malformed answer data.
"""

from __future__ import annotations

from loguru import logger

from ..errors import UnrecognizedQuestionType
from ..models import Question, QuestionType
from .base import (
    ChoiceResult,
    ChoiceVerdict,
    LineResult,
    ScalarVerdict,
    SequenceVerdict,
    Submission,
    Verdict,
)


def compare_choices(question: Question, submission: Submission) -> ChoiceVerdict:
    """Per-choice breakdown in the question's choice order."""
    results = []
    for choice in question.choices:
        expected = question.is_answer(choice)
        given = choice in submission.answer
        if expected and given:
            correct: bool | None = True
        elif expected != given:
            correct = False
        else:
            correct = None
        results.append(ChoiceResult(choice=choice, expected=expected, given=given, correct=correct))
    return ChoiceVerdict(choices=tuple(results))


def compare_short_answer(question: Question, submission: Submission) -> ScalarVerdict:
    """Membership of the first given value in the accepted answers, case-folded unless case sensitive."""
    given = submission.first_answer
    if given is None:
        correct = False
    elif question.case_sensitive:
        correct = given in question.answers
    else:
        correct = given.lower() in {answer.lower() for answer in question.answers}
    return ScalarVerdict(expected=tuple(question.answers), given=given, correct=correct)


def compare_code_tracing(question: Question, submission: Submission) -> SequenceVerdict:
    """One record per expected line, taking correctness from the traced line."""
    lines = []
    for index, expected in enumerate(question.answers):
        line = submission.line(index)
        if line is None:
            lines.append(LineResult(expected=expected, given=None, attempts=0, correct=False))
            continue
        lines.append(
            LineResult(
                expected=expected,
                given=line.value,
                attempts=line.attempts or 0,
                correct=bool(line.correct),
            )
        )
    return SequenceVerdict(lines=tuple(lines))


def _dispatch(kind: QuestionType, question: Question, submission: Submission) -> Verdict:
    if kind is QuestionType.MULTIPLE_CHOICE or kind is QuestionType.MULTIPLE_SELECT:
        return compare_choices(question, submission)
    elif kind is QuestionType.SHORT_ANSWER:
        return compare_short_answer(question, submission)
    elif kind is QuestionType.CODE_TRACING:
        return compare_code_tracing(question, submission)
    raise UnrecognizedQuestionType(kind)


def compare(question: Question, submission: Submission) -> Verdict | None:
    """
    Build the review verdict for one question.

    Args:
        question: Question with its expected answers
        submission: Normalized submission (absent responses included)

    Returns:
        The verdict, or None when the question type is not recognized
    """
    kind = question.kind
    try:
        if kind is None:
            raise UnrecognizedQuestionType(question.type)
        return _dispatch(kind, question, submission)
    except UnrecognizedQuestionType as e:
        logger.warning(f"No verdict for question {question.number}: {e}")
        return None
