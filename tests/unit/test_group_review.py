"""
Unit tests for question scoring and the per-group review.
"""

from quizmark.grading import ChoiceVerdict, Submission, score_question
from quizmark.models import Group, Question, Response
from quizmark.review import build_group_review


class TestScoreQuestion:

    def test_score_is_response_points(self, mc_question):
        result = score_question(mc_question, Response(id="r", question="q1", answer=("A",), points=4))
        assert result.score == 4
        assert result.answered is True
        assert isinstance(result.results, ChoiceVerdict)

    def test_absent_points_score_zero(self, mc_question):
        result = score_question(mc_question, Response(id="r", question="q1", answer=("A",)))
        assert result.score == 0

    def test_absent_response(self, mc_question):
        result = score_question(mc_question, None)
        assert result.response is None
        assert result.answered is False
        assert result.score == 0
        assert result.submission == Submission.absent()
        assert result.submission.answer == ()

    def test_unknown_type_passes_through(self):
        question = Question(id="q9", number=9, type="drawing")
        response = Response(id="r", question="q9", answer=("sketch",), points=2)
        result = score_question(question, response)
        assert result.results is None
        assert result.response is response
        assert result.score == 2


class TestGroupReview:

    def test_every_question_present_in_order(
        self, build_tutorial_quiz, mc_question, ms_question, short_question, tracing_question, members
    ):
        questions = [mc_question, ms_question, short_question, tracing_question]
        group = Group(
            id="g1",
            name="1",
            members=members,
            responses=(Response(id="r3", question=short_question.id, answer=("paris",), points=1),),
        )
        review = build_group_review(build_tutorial_quiz(questions, [group]), group)

        assert [r.question.number for r in review.questions] == [1, 2, 3, 4]
        assert [r.answered for r in review.questions] == [False, False, True, False]
        assert review.answered_count == 1
        assert review.score == 1

    def test_unanswered_questions_get_zero_point_submission(self, build_tutorial_quiz, mc_question, ms_question):
        group = Group(id="g1", name="1")
        review = build_group_review(build_tutorial_quiz([mc_question, ms_question], [group]), group)
        assert len(review.questions) == 2
        for result in review.questions:
            assert result.score == 0
            assert result.submission.points == 0
            assert result.submission.answer == ()
            assert result.submission.present is False

    def test_matches_response_by_question(self, build_tutorial_quiz, mc_question, ms_question, answered_group):
        review = build_group_review(build_tutorial_quiz([ms_question, mc_question], [answered_group]), answered_group)
        assert [r.response.id for r in review.questions] == ["r2", "r1"]
        assert [r.score for r in review.questions] == [2, 1]
        assert review.score == 3

    def test_empty_quiz(self, build_tutorial_quiz, answered_group):
        review = build_group_review(build_tutorial_quiz([], [answered_group]), answered_group)
        assert review.questions == ()
        assert review.score == 0

    def test_to_dict(self, build_tutorial_quiz, mc_question, answered_group):
        review = build_group_review(build_tutorial_quiz([mc_question], [answered_group]), answered_group)
        data = review.to_dict()
        assert data["group"] == "1"
        assert data["score"] == 1
        assert data["questions"][0]["answered"] is True
        assert data["questions"][0]["results"]["choices"][0]["correct"] is True
