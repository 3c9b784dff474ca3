from types import SimpleNamespace

from django.test import SimpleTestCase

from grading.scoring import (
    grade_answer,
    grade_submission,
    normalize_answer,
    percentage,
    recalculate_after_review,
    round_half_up,
)
from quizzes.constants import BROAD_TEXT, ESSAY, MULTIPLE_CHOICE, SHORT_ANSWER, TRUE_FALSE


def question(pk, question_type=MULTIPLE_CHOICE, correct_answer='0', points=1):
    return SimpleNamespace(id=pk, question_type=question_type, correct_answer=correct_answer, points=points)


class RoundingTests(SimpleTestCase):
    def test_halves_round_up(self):
        self.assertEqual(round_half_up(66.5), 67)
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(66.4), 66)

    def test_percentage(self):
        self.assertEqual(percentage(2, 3), 67)
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(5, 5), 100)

    def test_percentage_zero_denominator(self):
        self.assertEqual(percentage(0, 0), 0)


class GradeAnswerTests(SimpleTestCase):
    def test_multiple_choice_exact_match(self):
        graded = grade_answer(question(1, correct_answer='2', points=3), '2')
        self.assertTrue(graded.is_correct)
        self.assertEqual(graded.points_earned, 3)
        self.assertFalse(graded.needs_review)

    def test_integer_answer_is_normalized(self):
        self.assertTrue(grade_answer(question(1, correct_answer='2'), 2).is_correct)

    def test_true_false_accepts_json_booleans(self):
        q = question(1, question_type=TRUE_FALSE, correct_answer='false')
        self.assertTrue(grade_answer(q, False).is_correct)
        self.assertFalse(grade_answer(q, 'true').is_correct)

    def test_short_answer_comparison_is_exact(self):
        q = question(1, question_type=SHORT_ANSWER, correct_answer='Paris')
        self.assertTrue(grade_answer(q, 'Paris').is_correct)
        self.assertFalse(grade_answer(q, 'paris').is_correct)

    def test_manual_review_types(self):
        for question_type in (BROAD_TEXT, ESSAY):
            graded = grade_answer(question(1, question_type=question_type, points=4), 'some prose')
            self.assertIsNone(graded.is_correct)
            self.assertEqual(graded.points_earned, 0)
            self.assertTrue(graded.needs_review)

    def test_normalize_none(self):
        self.assertEqual(normalize_answer(None), '')


class GradeSubmissionTests(SimpleTestCase):
    def setUp(self):
        self.questions = [question(1, points=2), question(2, points=1)]

    def test_partially_correct_submission(self):
        result = grade_submission(self.questions, [
            {'question_id': 1, 'answer': '0'},
            {'question_id': 2, 'answer': '1'},
        ], passing_score=70)
        self.assertEqual(result.points_earned, 2)
        self.assertEqual(result.total_points, 3)
        self.assertEqual(result.score, 67)
        self.assertFalse(result.passed)

    def test_all_correct_submission(self):
        result = grade_submission(self.questions, [
            {'question_id': 1, 'answer': '0'},
            {'question_id': 2, 'answer': '0'},
        ], passing_score=70)
        self.assertEqual(result.score, 100)
        self.assertTrue(result.passed)

    def test_unanswered_questions_score_zero(self):
        result = grade_submission(self.questions, [{'question_id': 1, 'answer': '0'}], passing_score=70)
        self.assertEqual(result.score, 67)
        self.assertEqual(len(result.answers), 1)

    def test_unknown_and_duplicate_answers_are_dropped(self):
        result = grade_submission(self.questions, [
            {'question_id': 99, 'answer': '0'},
            {'question_id': '1', 'answer': '1'},
            {'question_id': 1, 'answer': '0'},
        ], passing_score=70)
        self.assertEqual([a.question_id for a in result.answers], [1])
        self.assertFalse(result.answers[0].is_correct)

    def test_auto_only_denominator_with_pending_review(self):
        questions = [question(1, points=2, correct_answer='1'), question(2, question_type=BROAD_TEXT, points=3)]
        result = grade_submission(questions, [
            {'question_id': 1, 'answer': '1'},
            {'question_id': 2, 'answer': 'essay text'},
        ], passing_score=70)
        self.assertEqual(result.score, 100)
        self.assertEqual(result.auto_gradable_points, 2)
        self.assertEqual(result.total_points, 5)
        self.assertTrue(result.pending_review)
        self.assertFalse(result.passed)

    def test_skipped_manual_question_is_not_queued_for_review(self):
        questions = [question(1, points=2, correct_answer='1'), question(2, question_type=BROAD_TEXT, points=3)]
        result = grade_submission(questions, [{'question_id': 1, 'answer': '1'}], passing_score=70)
        self.assertEqual(len(result.answers), 1)
        self.assertFalse(result.pending_review)
        self.assertEqual(result.score, 100)
        self.assertTrue(result.passed)

    def test_manual_only_quiz_scores_zero(self):
        questions = [question(1, question_type=ESSAY, points=5)]
        result = grade_submission(questions, [{'question_id': 1, 'answer': 'text'}], passing_score=0)
        self.assertEqual(result.score, 0)
        self.assertFalse(result.passed)

    def test_zero_passing_score_passes_any_auto_quiz(self):
        result = grade_submission(self.questions, [], passing_score=0)
        self.assertEqual(result.score, 0)
        self.assertTrue(result.passed)


class RecalculateAfterReviewTests(SimpleTestCase):
    def test_all_points_denominator(self):
        answers = [
            SimpleNamespace(points_earned=2, needs_review=False),
            SimpleNamespace(points_earned=3, needs_review=False),
        ]
        self.assertEqual(recalculate_after_review(5, answers, 70), (100, 5, True))

    def test_pending_answer_blocks_pass(self):
        answers = [
            SimpleNamespace(points_earned=2, needs_review=False),
            SimpleNamespace(points_earned=0, needs_review=True),
            SimpleNamespace(points_earned=3, needs_review=False),
        ]
        score, earned, passed = recalculate_after_review(8, answers, 50)
        self.assertEqual(score, 63)
        self.assertEqual(earned, 5)
        self.assertFalse(passed)

    def test_partial_review_below_threshold(self):
        answers = [
            SimpleNamespace(points_earned=2, needs_review=False),
            SimpleNamespace(points_earned=1, needs_review=False),
        ]
        self.assertEqual(recalculate_after_review(5, answers, 70), (60, 3, False))
