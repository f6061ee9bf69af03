"""
Grading.

Two independent correctness computations over the same question types:
- comparator: review-time verdicts (per-choice / per-line breakdowns)
- grader: submit-time boolean ``correct`` stored with each response

plus the per-question scorer that feeds reviews and reports.
"""

from .base import (
    ChoiceResult,
    ChoiceVerdict,
    LineResult,
    QuestionResult,
    ScalarVerdict,
    SequenceVerdict,
    Submission,
    Verdict,
)
from .comparator import compare
from .grader import apply_edit, grade_response
from .scorer import score_question

__all__ = [
    # Types
    "ChoiceResult",
    "ChoiceVerdict",
    "LineResult",
    "QuestionResult",
    "ScalarVerdict",
    "SequenceVerdict",
    "Submission",
    "Verdict",
    # Operations
    "compare",
    "score_question",
    "grade_response",
    "apply_edit",
]
