# Persistence: SQLAlchemy models, sessions, hydration and writes
from .database import get_engine, get_sessionmaker, init_db, session_scope
from .hydrate import (
    load_course,
    load_course_tutorial_quizzes,
    load_group,
    load_member,
    load_question,
    load_response,
    load_tutorial_quiz,
    load_tutorial_quizzes,
)
from .models import Base
from .repository import (
    add_response,
    bulk_update_tutorial_quizzes,
    edit_response,
    update_tutorial_quiz_settings,
)

__all__ = [
    # Sessions
    "Base",
    "get_engine",
    "get_sessionmaker",
    "init_db",
    "session_scope",
    # Hydration
    "load_course",
    "load_course_tutorial_quizzes",
    "load_group",
    "load_member",
    "load_question",
    "load_response",
    "load_tutorial_quiz",
    "load_tutorial_quizzes",
    # Writes
    "add_response",
    "bulk_update_tutorial_quizzes",
    "edit_response",
    "update_tutorial_quiz_settings",
]
