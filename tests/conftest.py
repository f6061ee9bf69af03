"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizmark.db.models import (  # noqa: E402
    Base,
    CourseRecord,
    GroupRecord,
    QuestionRecord,
    QuizRecord,
    ResponseRecord,
    TutorialQuizRecord,
    TutorialRecord,
    UserRecord,
)
from quizmark.models import (  # noqa: E402
    Group,
    LineSummary,
    Member,
    Question,
    Quiz,
    Response,
    Tutorial,
    TutorialQuiz,
)

UTORID_KEY = "urn:oid:1.3.6.1.4.1.15465.3.1.8"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ========================================
# Entity fixtures
# ========================================


@pytest.fixture
def mc_question():
    """Multiple choice question expecting A."""
    return Question(
        id="q1",
        number=1,
        type="multiple choice",
        question="Which keyword defines a function?",
        choices=("A", "B", "C", "D"),
        answers=("A",),
    )


@pytest.fixture
def ms_question():
    """Multiple select question expecting B and C."""
    return Question(
        id="q2",
        number=2,
        type="multiple select",
        question="Which of these are immutable?",
        choices=("A", "B", "C", "D"),
        answers=("B", "C"),
    )


@pytest.fixture
def short_question():
    """Case-insensitive short answer question."""
    return Question(
        id="q3",
        number=3,
        type="short answer",
        question="What is the capital of France?",
        answers=("Paris",),
    )


@pytest.fixture
def tracing_question():
    """Two-line code tracing question."""
    return Question(
        id="q4",
        number=4,
        type="code tracing",
        question="Trace the program.",
        code="x = 1\ny = x + 1",
        answers=("x=1", "y=2"),
    )


@pytest.fixture
def members():
    return (
        Member(
            id="m1",
            username="adaada",
            first_name="Ada",
            last_name="Lovelace",
            attributes={UTORID_KEY: '"lovelac1"'},
        ),
        Member(id="m2", username="alantu", first_name="Alan", last_name="Turing"),
    )


@pytest.fixture
def tutorial():
    return Tutorial(id="t1", course="c1", number="0101")


def make_tutorial_quiz(questions, groups, tutorial=None, tq_id="tq1", quiz_name="Quiz 1"):
    """Assemble a hydrated tutorial quiz from parts."""
    return TutorialQuiz(
        id=tq_id,
        tutorial=tutorial or Tutorial(id="t1", course="c1", number="0101"),
        quiz=Quiz(id=f"{tq_id}-quiz", name=quiz_name, questions=tuple(questions)),
        groups=tuple(groups),
    )


@pytest.fixture
def build_tutorial_quiz():
    return make_tutorial_quiz


@pytest.fixture
def traced_lines():
    return (
        LineSummary(value="x=1 ", attempts=1, correct=True),
        LineSummary(value="y=2", attempts=3, correct=True),
    )


@pytest.fixture
def answered_group(members, mc_question, ms_question):
    """Group of two that answered both choice questions (1 + 2 points)."""
    return Group(
        id="g1",
        name="1",
        members=members,
        responses=(
            Response(id="r1", question=mc_question.id, group="g1", answer=("A",), points=1, correct=True),
            Response(id="r2", question=ms_question.id, group="g1", answer=("C", "B"), points=2, correct=True),
        ),
    )


# ========================================
# Database fixtures
# ========================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seeded(session):
    """
    One course, one tutorial quiz with three visible questions and one
    unapproved student question, two groups.

    Group "2" (Ada, Alan) answered Q1 (1 point) and Q2 (2 points).
    Group "10" (Grace) answered nothing.
    """
    course = CourseRecord(code="CSC108")
    tutorial = TutorialRecord(course=course, number="0101")
    other_course = CourseRecord(code="CSC148")
    other_tutorial = TutorialRecord(course=other_course, number="0201")

    ada = UserRecord(username="adaada", first_name="Ada", last_name="Lovelace",
                     attributes={UTORID_KEY: '"lovelac1"'})
    alan = UserRecord(username="alantu", first_name="Alan", last_name="Turing")
    grace = UserRecord(username="gracho", first_name="Grace", last_name="Hopper")

    quiz = QuizRecord(name="Week 3")
    q1 = QuestionRecord(quiz=quiz, position=0, number=1, type="multiple choice",
                        choices=["A", "B", "C"], answers=["A"])
    q2 = QuestionRecord(quiz=quiz, position=1, number=2, type="multiple select",
                        choices=["A", "B", "C"], answers=["B", "C"])
    q3 = QuestionRecord(quiz=quiz, position=2, number=3, type="short answer", answers=["Paris"])
    session.add_all([course, tutorial, other_course, other_tutorial, ada, alan, grace, quiz, q1, q2, q3])
    session.flush()

    pending = QuestionRecord(quiz=quiz, position=3, number=4, type="short answer",
                             answers=["x"], submitter_id=grace.id, approved=False)
    session.add(pending)

    tutorial_quiz = TutorialQuizRecord(tutorial=tutorial, quiz=quiz)
    other_tutorial_quiz = TutorialQuizRecord(tutorial=other_tutorial, quiz=quiz)
    # Members added in reverse name order to check sorting on hydration
    group_a = GroupRecord(tutorial_quiz=tutorial_quiz, name="2", members=[alan, ada])
    group_b = GroupRecord(tutorial_quiz=tutorial_quiz, name="10", members=[grace])
    session.add_all([tutorial_quiz, other_tutorial_quiz, group_a, group_b])
    session.flush()

    session.add_all([
        ResponseRecord(question_id=q1.id, group=group_a, answer=["A"], points=1, correct=True),
        ResponseRecord(question_id=q2.id, group=group_a, answer=["B", "C"], points=2, correct=True),
        ResponseRecord(question_id=pending.id, group=group_a, answer=["x"], points=5, correct=True),
    ])
    session.commit()

    return {
        "course": course,
        "other_course": other_course,
        "tutorial_quiz": tutorial_quiz,
        "other_tutorial_quiz": other_tutorial_quiz,
        "group_a": group_a,
        "group_b": group_b,
        "questions": [q1, q2, q3],
        "pending": pending,
        "ada": ada,
        "alan": alan,
        "grace": grace,
    }
