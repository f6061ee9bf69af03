"""
quizmark: grading and mark aggregation for tutorial group quizzes.

Modules:
- models: Immutable entity graph (tutorial quiz -> quiz -> questions, groups -> members/responses)
- grading: Review-time verdicts, per-question scoring, submit-time grading
- review: Per-group question review
- marks: Mark aggregation by student, tutorial quiz and course
- report: Display and CSV export projections
"""

__version__ = "1.0.0"
