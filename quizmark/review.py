"""
Per-group response review.

Joins a tutorial quiz's questions with one group's responses so an
instructor can adjudicate each answer. Every question appears in the
review, answered or not, in the quiz's question order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from .grading import QuestionResult, score_question
from .models import Group, TutorialQuiz


@dataclass(frozen=True)
class GroupReview:
    """Review model for one group in one tutorial quiz."""

    tutorial_quiz: TutorialQuiz
    group: Group
    questions: tuple[QuestionResult, ...]

    @property
    def score(self) -> int | float:
        return sum(result.score for result in self.questions)

    @property
    def answered_count(self) -> int:
        return sum(1 for result in self.questions if result.answered)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tutorial_quiz": self.tutorial_quiz.id,
            "group": self.group.name,
            "score": self.score,
            "questions": [result.to_dict() for result in self.questions],
        }


def build_group_review(tutorial_quiz: TutorialQuiz, group: Group) -> GroupReview:
    """
    Build the per-question review of a group's responses.

    Args:
        tutorial_quiz: Hydrated tutorial quiz; its questions are already
            restricted to visible (instructor or approved) questions
        group: Group with its responses to those questions

    Returns:
        GroupReview with one entry per question. Unanswered questions carry
        an absent, zero-point submission.
    """
    questions = tuple(
        score_question(question, group.response_for(question.id))
        for question in tutorial_quiz.quiz.questions
    )
    logger.debug(
        f"Review for group {group.name}: {sum(1 for q in questions if q.answered)}"
        f"/{len(questions)} questions answered"
    )
    return GroupReview(tutorial_quiz=tutorial_quiz, group=group, questions=questions)
