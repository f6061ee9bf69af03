"""
Unit tests for review-time answer comparison.

Tests the verdicts shown when reviewing a group's answers:
- Per-choice three-valued breakdown for choice questions
- Case-folded membership for short answers
- Per-line records for code tracing, read from the traced flags
- Absent responses and unknown question types

Run: pytest tests/unit/test_answer_comparator.py -v
"""

import pytest

from quizmark.grading import (
    ChoiceVerdict,
    ScalarVerdict,
    SequenceVerdict,
    Submission,
    compare,
)
from quizmark.models import LineSummary, Question, Response


def submitted(**fields):
    return Submission.from_response(Response(id="r", question="q", **fields))


class TestChoiceVerdict:
    """Per-choice breakdown for multiple choice / multiple select."""

    def test_choices_in_question_order(self, ms_question):
        verdict = compare(ms_question, submitted(answer=("C", "A")))
        assert isinstance(verdict, ChoiceVerdict)
        assert [r.choice for r in verdict.choices] == ["A", "B", "C", "D"]

    def test_three_valued_correctness(self, ms_question):
        """Expected B, C; given A, C."""
        verdict = compare(ms_question, submitted(answer=("A", "C")))
        by_choice = {r.choice: r for r in verdict.choices}

        # Given but not expected
        assert by_choice["A"].expected is False
        assert by_choice["A"].given is True
        assert by_choice["A"].correct is False
        # Expected but not given
        assert by_choice["B"].correct is False
        # Expected and given
        assert by_choice["C"].correct is True
        # Neither: neutral, not wrong
        assert by_choice["D"].correct is None

    def test_all_agree_is_correct(self, mc_question):
        verdict = compare(mc_question, submitted(answer=("A",)))
        assert verdict.correct is True

    def test_absent_response_marks_nothing_given(self, ms_question):
        verdict = compare(ms_question, Submission.absent())
        assert all(r.given is False for r in verdict.choices)
        assert [r.correct for r in verdict.choices] == [None, False, False, None]
        assert verdict.correct is False


class TestScalarVerdict:
    """Short answer membership."""

    def test_given_is_first_answer(self, short_question):
        verdict = compare(short_question, submitted(answer=("paris", "London")))
        assert isinstance(verdict, ScalarVerdict)
        assert verdict.given == "paris"
        assert verdict.expected == ("Paris",)

    def test_case_folded_when_not_case_sensitive(self, short_question):
        assert compare(short_question, submitted(answer=("PARIS",))).correct is True

    def test_case_sensitive(self, short_question):
        question = short_question.model_copy(update={"case_sensitive": True})
        assert compare(question, submitted(answer=("PARIS",))).correct is False
        assert compare(question, submitted(answer=("Paris",))).correct is True

    def test_any_accepted_answer(self, short_question):
        question = short_question.model_copy(update={"answers": ("Paris", "Paname")})
        assert compare(question, submitted(answer=("paname",))).correct is True

    def test_absent_response(self, short_question):
        verdict = compare(short_question, Submission.absent())
        assert verdict.given is None
        assert verdict.correct is False


class TestSequenceVerdict:
    """Code tracing per-line records."""

    def test_one_line_per_expected_answer(self, tracing_question, traced_lines):
        verdict = compare(tracing_question, submitted(line_by_line_summary=traced_lines))
        assert isinstance(verdict, SequenceVerdict)
        assert [line.expected for line in verdict.lines] == ["x=1", "y=2"]
        assert [line.given for line in verdict.lines] == ["x=1 ", "y=2"]
        assert [line.attempts for line in verdict.lines] == [1, 3]

    def test_correctness_read_from_traced_flag(self, tracing_question):
        """The stored flag wins even when the values differ."""
        lines = (
            LineSummary(value="x = 1", attempts=2, correct=True),
            LineSummary(value="y=2", attempts=1, correct=False),
        )
        verdict = compare(tracing_question, submitted(line_by_line_summary=lines))
        assert [line.correct for line in verdict.lines] == [True, False]
        assert [line.value_matches for line in verdict.lines] == [False, True]
        assert verdict.correct is False

    def test_value_match_ignores_surrounding_whitespace(self, tracing_question, traced_lines):
        """Same trimming as submit-time grading: "x=1 " matches "x=1"."""
        verdict = compare(tracing_question, submitted(line_by_line_summary=traced_lines))
        assert [line.value_matches for line in verdict.lines] == [True, True]
        assert verdict.to_dict()["lines"][0]["value_matches"] is True

    def test_short_summary_pads_with_absent_lines(self, tracing_question):
        lines = (LineSummary(value="x=1", attempts=1, correct=True),)
        verdict = compare(tracing_question, submitted(line_by_line_summary=lines))
        assert len(verdict.lines) == 2
        last = verdict.lines[1]
        assert (last.given, last.attempts, last.correct) == (None, 0, False)

    def test_missing_summary(self, tracing_question):
        verdict = compare(tracing_question, Submission.absent())
        assert [(l.given, l.attempts, l.correct) for l in verdict.lines] == [(None, 0, False)] * 2


class TestDispatch:

    def test_unknown_type_has_no_verdict(self):
        question = Question(id="q", number=9, type="essay", answers=("anything",))
        assert compare(question, submitted(answer=("anything",))) is None

    @pytest.mark.parametrize("stored", ["Multiple Choice", " multiple choice "])
    def test_type_strings_are_normalized(self, stored):
        question = Question(id="q", number=1, type=stored, choices=("A",), answers=("A",))
        assert isinstance(compare(question, submitted(answer=("A",))), ChoiceVerdict)

    def test_to_dict_keeps_null_correctness(self, mc_question):
        data = compare(mc_question, submitted(answer=("A",))).to_dict()
        assert data["choices"][1] == {"choice": "B", "expected": False, "given": False, "correct": None}
