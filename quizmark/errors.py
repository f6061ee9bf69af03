"""
Exceptions raised by quizmark.

Only hydration-level failures propagate to callers. Per-item problems
(absent responses, malformed line summaries, unknown question types) are
absorbed into neutral verdicts by the grading code.
"""


class QuizmarkError(Exception):
    """Base class for quizmark errors."""
    pass


class MissingInputError(QuizmarkError):
    """Raised when an entity referenced by id cannot be found."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class UnrecognizedQuestionType(QuizmarkError):
    """Raised by type dispatch for a question type outside the known set."""

    def __init__(self, question_type: object):
        self.question_type = question_type
        super().__init__(f"Unrecognized question type: {question_type!r}")
