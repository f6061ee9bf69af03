"""
Report projections of mark sheets.

The interactive marks page and the CSV download read the same MarkSheet:
- display_rows(): rows unchanged, for rendering
- export_rows(): header + flat rows with a fixed column contract
- export_csv(): the rows serialized as a ``marks.csv`` attachment
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from .config import get_settings
from .marks import MarkRow, MarkSheet
from .models import Member

Cell = str | int | float


class ExportLayout(str, Enum):
    """Column layouts for exported marks."""

    # Username, UTORid, Quiz, Tutorial, Group, Mark, Q<n> [<i>]...
    TUTORIAL_QUIZ = "tutorial_quiz"
    # Username, Quiz, Tutorial, Group, Mark
    COURSE = "course"


@dataclass(frozen=True)
class MarksExport:
    """A serialized export, ready to be sent as an attachment."""

    filename: str
    content_type: str
    body: str

    @property
    def content_disposition(self) -> str:
        return f"attachment; filename={self.filename}"


def display_rows(sheet: MarkSheet) -> tuple[MarkRow, ...]:
    """Rows for template rendering."""
    return sheet.rows


def question_headings(sheet: MarkSheet) -> list[str]:
    return [f"Q{question.number} [{index}]" for index, question in enumerate(sheet.questions)]


def _identifier(member: Member, accessor: Callable[[], str], label: str) -> str:
    try:
        return accessor() or ""
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        logger.debug(f"No {label} for member {member.id}: {e}")
        return ""


def username(member: Member) -> str:
    return _identifier(member, member.get_username, "username")


def external_id(member: Member, attribute: str | None = None) -> str:
    key = attribute or get_settings().external_id_attribute
    return _identifier(member, lambda: member.get_external_id(key), "external id")


def _result_cell(points: int | float | None) -> Cell:
    return "" if points is None else points


def export_rows(
    sheet: MarkSheet,
    layout: ExportLayout = ExportLayout.TUTORIAL_QUIZ,
    external_id_attribute: str | None = None,
) -> list[list[Cell]]:
    """
    Flatten a mark sheet into export rows.

    Args:
        sheet: Aggregated marks
        layout: Column layout; TUTORIAL_QUIZ adds the external id and one
            column per question of ``sheet.questions``
        external_id_attribute: Attribute key of the external id
            (defaults to the configured key)

    Returns:
        Header row followed by one row per mark row, all of equal length
    """
    if layout is ExportLayout.COURSE:
        header: list[Cell] = ["Username", "Quiz", "Tutorial", "Group", "Mark"]
        data = [
            [
                username(row.member),
                row.quiz.name,
                row.tutorial.get_display_name(),
                row.group.name,
                row.score,
            ]
            for row in sheet.rows
        ]
        return [header, *data]

    header = ["Username", "UTORid", "Quiz", "Tutorial", "Group", "Mark", *question_headings(sheet)]
    width = len(sheet.questions)
    data = []
    for row in sheet.rows:
        results = [_result_cell(points) for points in row.group_result[:width]]
        results += [""] * (width - len(results))
        data.append([
            username(row.member),
            external_id(row.member, external_id_attribute),
            row.quiz.name,
            row.tutorial.get_display_name(),
            row.group.name,
            row.score,
            *results,
        ])
    return [header, *data]


def render_csv(rows: list[list[Cell]]) -> str:
    """Serialize rows as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def export_csv(
    sheet: MarkSheet,
    layout: ExportLayout = ExportLayout.TUTORIAL_QUIZ,
) -> MarksExport:
    """Export a mark sheet as the configured CSV attachment."""
    settings = get_settings()
    rows = export_rows(sheet, layout, settings.external_id_attribute)
    logger.info(f"Exporting {len(rows) - 1} mark rows ({layout.value})")
    return MarksExport(
        filename=settings.export_filename,
        content_type=settings.export_content_type,
        body=render_csv(rows),
    )
