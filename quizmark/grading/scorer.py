"""
Per-question scoring for review and reports.
"""

from __future__ import annotations

from ..models import Question, Response
from .base import QuestionResult, Submission
from .comparator import compare


def score_question(question: Question, response: Response | None) -> QuestionResult:
    """
    Score one question against a group's (possibly absent) response.

    The score is the response's recorded points, 0 when the response or
    its points are absent.
    """
    submission = Submission.from_response(response)
    return QuestionResult(
        question=question,
        response=response,
        submission=submission,
        score=submission.points,
        results=compare(question, submission),
    )
