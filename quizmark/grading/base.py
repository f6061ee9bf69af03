"""
Verdict types and response normalization.

A verdict is the structured, per-question breakdown shown when reviewing a
group's answers. It is derived on every request and never stored.

Three shapes exist, one per family of question types:
- ChoiceVerdict: per-choice expected/given/correct triples
- ScalarVerdict: accepted answers vs the single given value
- SequenceVerdict: per-line expected/given/attempts/correct records
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from ..models import LineSummary, Question, Response


# =============================================================================
# Normalized Submission
# =============================================================================


@dataclass(frozen=True)
class Submission:
    """
    The answer data of a response, with absent fields filled in.

    This is the only place where "no response" and "partial response" are
    turned into zero-credit defaults; everything downstream reads a
    Submission and never checks for None.
    """

    answer: tuple[str, ...] = ()
    lines: tuple[LineSummary, ...] = ()
    points: int | float = 0
    present: bool = False

    @classmethod
    def absent(cls) -> Submission:
        return cls()

    @classmethod
    def from_response(cls, response: Response | None) -> Submission:
        if response is None:
            return cls.absent()
        return cls(
            answer=tuple(response.answer or ()),
            lines=tuple(response.line_by_line_summary or ()),
            points=response.points or 0,
            present=True,
        )

    @property
    def first_answer(self) -> str | None:
        return self.answer[0] if self.answer else None

    def line(self, index: int) -> LineSummary | None:
        return self.lines[index] if index < len(self.lines) else None


# =============================================================================
# Verdicts
# =============================================================================


@dataclass(frozen=True)
class ChoiceResult:
    """
    One choice of a choice question.

    ``correct`` is three-valued: True when the choice was expected and
    given, False when expected and given disagree, None when the choice was
    neither expected nor given.
    """

    choice: str
    expected: bool
    given: bool
    correct: bool | None


@dataclass(frozen=True)
class ChoiceVerdict:
    choices: tuple[ChoiceResult, ...]

    @property
    def correct(self) -> bool:
        return all(result.correct is not False for result in self.choices)

    def to_dict(self) -> dict[str, Any]:
        return {
            "choices": [
                {
                    "choice": r.choice,
                    "expected": r.expected,
                    "given": r.given,
                    "correct": r.correct,
                }
                for r in self.choices
            ]
        }


@dataclass(frozen=True)
class ScalarVerdict:
    expected: tuple[str, ...]
    given: str | None
    correct: bool

    def to_dict(self) -> dict[str, Any]:
        return {"expected": list(self.expected), "given": self.given, "correct": self.correct}


@dataclass(frozen=True)
class LineResult:
    """
    One traced line.

    ``correct`` is the flag recorded while the line was being traced.
    ``value_matches`` compares the expected value with the trimmed given
    value, as the submit-time grader does; the two can disagree.
    """

    expected: str
    given: str | None
    attempts: int
    correct: bool

    @property
    def value_matches(self) -> bool:
        return self.given is not None and self.expected == self.given.strip()


@dataclass(frozen=True)
class SequenceVerdict:
    lines: tuple[LineResult, ...]

    @property
    def correct(self) -> bool:
        return bool(self.lines) and all(line.correct for line in self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lines": [
                {
                    "expected": line.expected,
                    "given": line.given,
                    "attempts": line.attempts,
                    "correct": line.correct,
                    "value_matches": line.value_matches,
                }
                for line in self.lines
            ]
        }


Verdict = Union[ChoiceVerdict, ScalarVerdict, SequenceVerdict]


# =============================================================================
# Question Result
# =============================================================================


@dataclass(frozen=True)
class QuestionResult:
    """Per-question result record used by the review and report views."""

    question: Question
    response: Response | None
    submission: Submission = field(default_factory=Submission.absent)
    score: int | float = 0
    results: Verdict | None = None

    @property
    def answered(self) -> bool:
        return self.response is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question.id,
            "number": self.question.number,
            "type": self.question.type,
            "answered": self.answered,
            "score": self.score,
            "results": self.results.to_dict() if self.results is not None else None,
        }
