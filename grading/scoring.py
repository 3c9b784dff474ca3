"""
Quiz scoring engine.

Pure functions: no database access, no Django models required. Questions are
read through their ``id``, ``question_type``, ``correct_answer`` and
``points`` attributes, submitted answers are plain ``{"question_id",
"answer"}`` mappings. The attempt ledger and the review workflow persist the
results.

Two denominators are used on purpose:

* right after submission the score only covers auto-gradable questions,
  so a quiz made only of manual-review questions scores 0;
* once an instructor reviews an answer the score is recomputed over the
  points of every question.

In both cases an attempt with an answer still waiting for review is not
passed.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from quizzes.constants import MANUAL_REVIEW_TYPES


@dataclass
class GradedAnswer:
    question_id: int
    answer: str
    is_correct: Optional[bool]
    points_earned: float
    needs_review: bool


@dataclass
class GradingResult:
    answers: List[GradedAnswer] = field(default_factory=list)
    score: int = 0
    points_earned: float = 0.0
    total_points: int = 0
    auto_gradable_points: int = 0
    passed: bool = False

    @property
    def pending_review(self):
        return any(a.needs_review for a in self.answers)


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero (66.5 -> 67)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(earned, possible) -> int:
    if possible <= 0:
        return 0
    return round_half_up(100 * earned / possible)


def is_manual_review_type(question_type) -> bool:
    return question_type in MANUAL_REVIEW_TYPES


def normalize_answer(value) -> str:
    """
    Canonical string form of a submitted answer.

    JSON clients may send ``true`` or ``1`` instead of ``"true"`` / ``"1"``;
    those are mapped to the stored token encoding. Strings are kept as-is,
    comparison stays exact.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if value is None:
        return ""
    return str(value)


def grade_answer(question, raw_answer) -> GradedAnswer:
    answer = normalize_answer(raw_answer)
    if is_manual_review_type(question.question_type):
        return GradedAnswer(
            question_id=question.id,
            answer=answer,
            is_correct=None,
            points_earned=0,
            needs_review=True,
        )

    is_correct = question.correct_answer == answer
    return GradedAnswer(
        question_id=question.id,
        answer=answer,
        is_correct=is_correct,
        points_earned=question.points if is_correct else 0,
        needs_review=False,
    )


def grade_submission(questions: Iterable, submitted_answers: Iterable[dict], passing_score: int) -> GradingResult:
    """
    Grade a submitted answer set against a quiz definition.

    Answers whose question is not part of the quiz are dropped. When the same
    question is answered more than once only the first answer counts.
    """
    questions = list(questions)
    by_id = {str(q.id): q for q in questions}

    graded = []
    seen = set()
    for submitted in submitted_answers:
        key = str(submitted.get("question_id"))
        question = by_id.get(key)
        if question is None or key in seen:
            continue
        seen.add(key)
        graded.append(grade_answer(question, submitted.get("answer")))

    total_points = sum(q.points for q in questions)
    auto_gradable_points = sum(q.points for q in questions if not is_manual_review_type(q.question_type))
    earned_auto_points = sum(a.points_earned for a in graded if not a.needs_review)

    score = percentage(earned_auto_points, auto_gradable_points)
    result = GradingResult(
        answers=graded,
        score=score,
        points_earned=earned_auto_points,
        total_points=total_points,
        auto_gradable_points=auto_gradable_points,
    )
    result.passed = score >= passing_score and not result.pending_review
    return result


def recalculate_after_review(total_points, answers: Iterable, passing_score: int):
    """
    Recompute an attempt's aggregate after a manual review.

    ``answers`` are objects exposing ``points_earned`` and ``needs_review``.
    The denominator is the sum of *all* question points.
    Returns ``(score, points_earned, passed)``.
    """
    answers = list(answers)
    points_earned = sum(a.points_earned or 0 for a in answers)
    score = percentage(points_earned, total_points)
    pending = any(a.needs_review for a in answers)
    passed = score >= passing_score and not pending
    return score, points_earned, passed
