import logging
import math

from django.db import transaction
from django.utils import timezone

from audit.services import ANSWER_REVIEWED, record_event
from grading.scoring import is_manual_review_type, recalculate_after_review
from learnhub.exceptions import (
    AccessDeniedError,
    InvalidQuestionTypeError,
    NotFoundError,
    ValidationError,
)
from quizzes.models import AttemptAnswer, Question, QuizAttempt
from quizzes.services.attempt_service import publish_outcome

logger = logging.getLogger(__name__)


class GradingService:

    @staticmethod
    def _parse_points(points_earned):
        if isinstance(points_earned, bool):
            raise ValidationError("Invalid points.", errors={'points_earned': "Must be a number."})
        try:
            points = float(points_earned)
        except (TypeError, ValueError):
            raise ValidationError("Invalid points.", errors={'points_earned': "Must be a number."})
        if not math.isfinite(points):
            raise ValidationError("Invalid points.", errors={'points_earned': "Must be a finite number."})
        if points < 0:
            raise ValidationError("Invalid points.", errors={'points_earned': "Must not be negative."})
        return points

    @staticmethod
    def review_answer(instructor, attempt_id, question_id, points_earned, notes=''):
        """
        Grade one manual-review answer and recompute the attempt.

        The score is recomputed over the points of every question; the
        attempt only passes once no answer is waiting for review. A newly
        passed attempt is forwarded to course progress without counting an
        extra attempt.
        """
        attempt = QuizAttempt.objects.select_related('quiz', 'student').filter(pk=attempt_id).first()
        if attempt is None:
            raise NotFoundError("Quiz attempt not found.")

        quiz = attempt.quiz
        if quiz.created_by_id != instructor.pk and not instructor.is_admin:
            raise AccessDeniedError("You can only review attempts of your own quizzes.")

        points = GradingService._parse_points(points_earned)

        question = Question.objects.filter(pk=question_id, quiz=quiz).first()
        if question is None:
            raise NotFoundError("Question not found in this quiz.")
        if not is_manual_review_type(question.question_type):
            raise InvalidQuestionTypeError()
        if points > question.points:
            raise ValidationError(
                "Invalid points.",
                errors={'points_earned': f"Must not exceed the question's {question.points} point(s)."},
            )

        answer = AttemptAnswer.objects.filter(attempt=attempt, question=question).first()
        if answer is None:
            raise NotFoundError("Answer not found for this question.")

        was_passed = attempt.passed
        with transaction.atomic():
            answer.points_earned = points
            answer.is_correct = points > 0
            answer.needs_review = False
            answer.reviewed_by = instructor
            answer.reviewed_at = timezone.now()
            answer.review_notes = notes or ''
            answer.save()

            score, total_earned, passed = recalculate_after_review(
                attempt.total_points, attempt.answers.all(), quiz.passing_score
            )
            attempt.score = score
            attempt.points_earned = total_earned
            attempt.passed = passed
            attempt.save(update_fields=['score', 'points_earned', 'passed'])

        logger.info(
            f"Instructor {instructor.pk} reviewed question {question.pk} of attempt {attempt.pk}: "
            f"{points}/{question.points}, score={score} passed={passed}"
        )

        if passed:
            publish_outcome(attempt.student, quiz.course_id, quiz.id, score, passed, count_attempt=False)

        record_event(
            instructor,
            ANSWER_REVIEWED,
            'quiz_attempt',
            target_id=attempt.pk,
            target_name=quiz.title,
            details={
                'question_id': question.pk,
                'points_earned': points,
                'score': score,
                'passed': passed,
                'was_passed': was_passed,
            },
        )
        return attempt, answer

    @staticmethod
    def list_pending_reviews(instructor):
        """Completed attempts of the instructor's quizzes with answers still waiting for review."""
        attempts = QuizAttempt.objects.filter(
            status=QuizAttempt.Status.COMPLETED,
            answers__needs_review=True,
        )
        if not instructor.is_admin:
            attempts = attempts.filter(quiz__created_by=instructor)
        return (
            attempts.select_related('quiz', 'student')
            .prefetch_related('answers')
            .distinct()
            .order_by('completed_at', 'id')
        )
