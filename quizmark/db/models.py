"""
SQLAlchemy models for quiz persistence.

Tables:
- users: Students and instructors, with external attributes
- courses / tutorials: Course sections
- quizzes / questions: Quiz content, questions ordered by position
- tutorial_quizzes: One quiz scheduled in one tutorial
- groups / group_members: Student groups of a tutorial quiz
- responses: One group's answer to one question

Question content (choices, answers) and response answer data
(answer, line_by_line_summary) are stored as JSON.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, Boolean, Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), default="")
    last_name: Mapped[str] = mapped_column(String(120), default="")
    # Attribute values are JSON encoded strings, keyed by attribute URN
    attributes: Mapped[Optional[dict]] = mapped_column(JSON)

    def __repr__(self) -> str:
        return f"<UserRecord(username={self.username})>"


class CourseRecord(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False)

    tutorials: Mapped[List["TutorialRecord"]] = relationship(
        back_populates="course",
        order_by="TutorialRecord.id",
    )


class TutorialRecord(Base):
    __tablename__ = "tutorials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    number: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(120))

    course: Mapped["CourseRecord"] = relationship(back_populates="tutorials")


class QuizRecord(Base):
    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    questions: Mapped[List["QuestionRecord"]] = relationship(
        back_populates="quiz",
        order_by="QuestionRecord.position",
    )


class QuestionRecord(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    question: Mapped[str] = mapped_column(Text, default="")
    code: Mapped[Optional[str]] = mapped_column(Text)
    choices: Mapped[list] = mapped_column(JSON, default=list)
    answers: Mapped[list] = mapped_column(JSON, default=list)
    case_sensitive: Mapped[bool] = mapped_column(Boolean, default=False)

    # Student-submitted questions only count once approved
    submitter_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    approved: Mapped[bool] = mapped_column(Boolean, default=False)

    quiz: Mapped["QuizRecord"] = relationship(back_populates="questions")

    def __repr__(self) -> str:
        return f"<QuestionRecord(number={self.number}, type={self.type})>"


class TutorialQuizRecord(Base):
    __tablename__ = "tutorial_quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tutorial_id: Mapped[int] = mapped_column(ForeignKey("tutorials.id", ondelete="CASCADE"), nullable=False)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)

    published: Mapped[bool] = mapped_column(Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    allocate_members: Mapped[Optional[str]] = mapped_column(String(32))
    max_members_per_group: Mapped[Optional[int]] = mapped_column(Integer)

    tutorial: Mapped["TutorialRecord"] = relationship()
    quiz: Mapped["QuizRecord"] = relationship()
    groups: Mapped[List["GroupRecord"]] = relationship(
        back_populates="tutorial_quiz",
        order_by="GroupRecord.id",
    )


class GroupRecord(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tutorial_quiz_id: Mapped[int] = mapped_column(
        ForeignKey("tutorial_quizzes.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(32), nullable=False)
    driver_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    tutorial_quiz: Mapped["TutorialQuizRecord"] = relationship(back_populates="groups")
    members: Mapped[List["UserRecord"]] = relationship(secondary=group_members)
    responses: Mapped[List["ResponseRecord"]] = relationship(
        back_populates="group",
        order_by="ResponseRecord.id",
    )


class ResponseRecord(Base):
    __tablename__ = "responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[Optional[int]] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"))
    answer: Mapped[list] = mapped_column(JSON, default=list)
    # [{"value": ..., "attempts": ..., "correct": ...}, ...] for code tracing
    line_by_line_summary: Mapped[Optional[list]] = mapped_column(JSON)
    points: Mapped[Optional[float]] = mapped_column(Float)
    correct: Mapped[bool] = mapped_column(Boolean, default=False)

    group: Mapped[Optional["GroupRecord"]] = relationship(back_populates="responses")

    def __repr__(self) -> str:
        return f"<ResponseRecord(question={self.question_id}, group={self.group_id}, points={self.points})>"
