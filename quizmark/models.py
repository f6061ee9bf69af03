"""
Entity models for the tutorial quiz graph.

These are the hydrated, read-only inputs of the grading core:

    TutorialQuiz
      -> Tutorial
      -> Quiz -> Question*
      -> Group* -> Member*, Response*

All models are frozen; grading and aggregation return new objects rather
than mutating what the persistence layer handed over.

Question Types:
- multiple choice: one choice expected
- multiple select: any number of choices expected
- short answer: free text, any accepted answer matches
- code tracing: one expected value per traced line
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class QuestionType(str, Enum):
    """Supported question types."""

    MULTIPLE_CHOICE = "multiple choice"
    MULTIPLE_SELECT = "multiple select"
    SHORT_ANSWER = "short answer"
    CODE_TRACING = "code tracing"

    @classmethod
    def parse(cls, value: str | QuestionType | None) -> QuestionType | None:
        """Map a stored type string to a QuestionType, or None if unknown."""
        if isinstance(value, QuestionType):
            return value
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTIPLE_SELECT)


# Fields of a tutorial quiz that are always coerced to booleans on update
STATUS_FIELDS = ("published", "active", "archived")


class Entity(BaseModel):
    """Base for all persisted entities."""

    model_config = ConfigDict(frozen=True)

    id: str


class Question(Entity):
    number: int
    type: str
    question: str = ""
    code: str | None = None
    choices: tuple[str, ...] = ()
    answers: tuple[str, ...] = ()
    case_sensitive: bool = False
    submitter: str | None = None
    approved: bool = False

    @property
    def kind(self) -> QuestionType | None:
        return QuestionType.parse(self.type)

    @property
    def is_visible(self) -> bool:
        """Instructor questions, or student-submitted ones that were approved."""
        return self.submitter is None or self.approved

    def is_answer(self, value: str | None) -> bool:
        return value is not None and value in self.answers


class LineSummary(BaseModel):
    """Per-line record of a code tracing attempt."""

    model_config = ConfigDict(frozen=True)

    value: str | None = None
    attempts: int = 0
    correct: bool = False


class Response(Entity):
    question: str
    group: str | None = None
    answer: tuple[str, ...] = ()
    line_by_line_summary: tuple[LineSummary, ...] | None = None
    points: int | float | None = None
    correct: bool = False

    def is_answer(self, value: str) -> bool:
        return value in self.answer


class ResponseSubmission(BaseModel):
    """
    Body of a response add/edit request.

    Only the fields actually supplied are applied on edit
    (see ``model_fields_set``).
    """

    question: str
    answer: tuple[str, ...] = ()
    line_by_line_summary: tuple[LineSummary, ...] | None = None
    points: int | float | None = None

    def supplied(self) -> dict[str, Any]:
        """Supplied fields, excluding the question reference."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "question"
        }


class Member(Entity):
    username: str
    first_name: str = ""
    last_name: str = ""
    attributes: dict[str, Any] | None = None

    def get_username(self) -> str:
        return self.username

    def get_display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username

    def get_external_id(self, key: str) -> str:
        """
        Decode an external identifier from the member's attributes.

        Attribute values are JSON encoded strings. Raises KeyError when the
        attribute is missing, ValueError when it is not valid JSON and
        TypeError when it is not a string; members without any attributes
        have no external id.
        """
        if not self.attributes:
            return ""
        value = json.loads(self.attributes[key])
        return "" if value is None else str(value)


class Course(Entity):
    code: str
    tutorials: tuple[str, ...] = ()


class Tutorial(Entity):
    course: str | None = None
    number: str
    name: str | None = None

    def get_display_name(self) -> str:
        return self.name or self.number


class Quiz(Entity):
    name: str
    questions: tuple[Question, ...] = ()


class Group(Entity):
    name: str
    members: tuple[Member, ...] = ()
    responses: tuple[Response, ...] = ()
    driver: str | None = None

    def has_member(self, member_id: str) -> bool:
        return any(member.id == member_id for member in self.members)

    def response_for(self, question_id: str) -> Response | None:
        """First response to a question, or None when the group never answered."""
        return next((r for r in self.responses if r.question == question_id), None)


class TutorialQuiz(Entity):
    tutorial: Tutorial
    quiz: Quiz
    groups: tuple[Group, ...] = ()
    published: bool = False
    active: bool = False
    archived: bool = False
    allocate_members: str | None = None
    max_members_per_group: int | None = None

    def with_settings(self, update: dict[str, Any]) -> TutorialQuiz:
        """Return a copy with settings applied; status flags are coerced to bool."""
        values = dict(self)
        for field, value in update.items():
            values[field] = bool(value) if field in STATUS_FIELDS else value
        return type(self).model_validate(values)


def settings_update(fields: list[str], body: dict[str, Any]) -> dict[str, Any]:
    """
    Build a settings update from the named fields of a form body.

    Status fields absent from the body become False, so unchecked
    checkboxes switch a flag off.
    """
    return {
        field: bool(body.get(field)) if field in STATUS_FIELDS else body.get(field)
        for field in fields
    }


def _group_order(group: Group) -> int:
    try:
        return int(group.name)
    except ValueError:
        return 0


def sorted_groups(groups: tuple[Group, ...] | list[Group]) -> list[Group]:
    """Groups in the numeric order of their names ("2" before "10")."""
    return sorted(groups, key=_group_order)
