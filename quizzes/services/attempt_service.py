import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from audit.services import QUIZ_SUBMITTED, record_event
from courses.services.enrollment_service import require_enrollment
from grading.scoring import grade_submission
from learnhub.exceptions import (
    AlreadySubmittedError,
    AttemptLimitExceededError,
    NotFoundError,
    OwnershipError,
    PrerequisiteNotMetError,
    TimeLimitExceededError,
    ValidationError,
)
from quizzes.models import AttemptAnswer, Quiz, QuizAttempt
from quizzes.services.quiz_service import get_active_quiz, lecture_prerequisite_met
from quizzes.signals import quiz_outcome_recorded

logger = logging.getLogger(__name__)


def publish_outcome(student, course_id, quiz_id, score, passed, count_attempt=True):
    """
    Notify listeners (course progress) of a graded outcome.
    Receiver failures are logged and never undo the grading.
    """
    responses = quiz_outcome_recorded.send_robust(
        sender=QuizAttempt,
        student=student,
        course_id=course_id,
        quiz_id=quiz_id,
        score=score,
        passed=passed,
        count_attempt=count_attempt,
    )
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                f"Quiz outcome receiver {getattr(receiver, '__name__', receiver)} failed "
                f"for student {student.pk}, quiz {quiz_id}: {str(response)}",
                exc_info=(type(response), response, response.__traceback__),
            )


def start_attempt(student, quiz_id):
    quiz = get_active_quiz(quiz_id)
    require_enrollment(student, quiz.course_id)

    if not lecture_prerequisite_met(student, quiz):
        raise PrerequisiteNotMetError()

    # Count-then-insert: concurrent starts may both pass the limit check.
    existing_attempts = QuizAttempt.objects.filter(quiz=quiz, student=student).count()
    if quiz.enforce_attempt_limit and existing_attempts >= quiz.attempts_allowed:
        raise AttemptLimitExceededError(f"Maximum attempts ({quiz.attempts_allowed}) reached for this quiz.")

    attempt = QuizAttempt.objects.create(
        quiz=quiz,
        student=student,
        course_id=quiz.course_id,
        attempt_number=existing_attempts + 1,
        total_points=quiz.total_points,
        status=QuizAttempt.Status.IN_PROGRESS,
        started_at=timezone.now(),
    )
    logger.info(f"Student {student.pk} started attempt {attempt.attempt_number} of quiz {quiz.id}")
    return attempt


def _validate_answers(answers):
    if not isinstance(answers, list):
        raise ValidationError("Answers must be a list.", errors={'answers': "Expected a list of {question_id, answer} objects."})

    errors = {}
    for index, item in enumerate(answers):
        if not isinstance(item, dict):
            errors[f"answers[{index}]"] = "Each answer must be an object."
            continue
        if item.get('question_id') in (None, ''):
            errors[f"answers[{index}].question_id"] = "Question ID is required."
        if 'answer' not in item:
            errors[f"answers[{index}].answer"] = "Answer is required."
    if errors:
        raise ValidationError("Invalid answer format.", errors=errors)


def _acquire_submission_lock(attempt_id):
    """Atomic in_progress -> processing transition. Zero rows means someone else got there first."""
    updated = QuizAttempt.objects.filter(
        pk=attempt_id,
        status=QuizAttempt.Status.IN_PROGRESS,
    ).update(status=QuizAttempt.Status.PROCESSING, locked_at=timezone.now())
    if not updated:
        raise AlreadySubmittedError()


def _release_submission_lock(attempt_id):
    QuizAttempt.objects.filter(
        pk=attempt_id,
        status=QuizAttempt.Status.PROCESSING,
    ).update(status=QuizAttempt.Status.IN_PROGRESS, locked_at=None)


def submit_attempt(student, quiz_id, attempt_id, answers):
    _validate_answers(answers)

    try:
        attempt = QuizAttempt.objects.select_related('quiz').get(pk=attempt_id)
    except QuizAttempt.DoesNotExist:
        raise NotFoundError("Quiz attempt not found.")

    if attempt.student_id != student.pk or attempt.quiz_id != int(quiz_id):
        raise OwnershipError()

    quiz = attempt.quiz
    require_enrollment(student, quiz.course_id)

    _acquire_submission_lock(attempt.pk)

    completed_at = timezone.now()
    time_spent = max(int((completed_at - attempt.started_at).total_seconds()), 0)
    if quiz.enforce_time_limit and quiz.time_limit and time_spent > quiz.time_limit * 60:
        _release_submission_lock(attempt.pk)
        logger.warning(f"Rejected late submission of attempt {attempt.pk}: {time_spent}s > {quiz.time_limit}min")
        raise TimeLimitExceededError()

    # A scoring failure leaves the attempt in processing; the reaper releases it.
    questions = list(quiz.questions.all())
    result = grade_submission(questions, answers, quiz.passing_score)

    with transaction.atomic():
        AttemptAnswer.objects.bulk_create([
            AttemptAnswer(
                attempt=attempt,
                question_id=graded.question_id,
                answer=graded.answer,
                is_correct=graded.is_correct,
                points_earned=graded.points_earned,
                needs_review=graded.needs_review,
            )
            for graded in result.answers
        ])
        attempt.score = result.score
        attempt.points_earned = result.points_earned
        attempt.total_points = result.total_points
        attempt.passed = result.passed
        attempt.completed_at = completed_at
        attempt.time_spent = time_spent
        attempt.status = QuizAttempt.Status.COMPLETED
        attempt.locked_at = None
        attempt.save(update_fields=[
            'score', 'points_earned', 'total_points', 'passed',
            'completed_at', 'time_spent', 'status', 'locked_at',
        ])

    logger.info(
        f"Student {student.pk} submitted attempt {attempt.pk} of quiz {quiz.id}: "
        f"score={result.score} passed={result.passed} pending_review={result.pending_review}"
    )

    publish_outcome(student, quiz.course_id, quiz.id, result.score, result.passed)
    record_event(
        student,
        QUIZ_SUBMITTED,
        'quiz_attempt',
        target_id=attempt.pk,
        target_name=quiz.title,
        details={
            'quiz_id': quiz.id,
            'attempt_number': attempt.attempt_number,
            'score': result.score,
            'passed': result.passed,
        },
    )
    return attempt, result


def get_attempt_results(student, quiz_id):
    """
    All of the student's attempts plus the answer detail of the most recent
    completed one.
    """
    try:
        quiz = Quiz.objects.get(id=quiz_id)
    except Quiz.DoesNotExist:
        raise NotFoundError("Quiz not found.")
    require_enrollment(student, quiz.course_id)

    attempts = list(QuizAttempt.objects.filter(quiz=quiz, student=student).order_by('attempt_number', 'id'))
    completed = [a for a in attempts if a.status == QuizAttempt.Status.COMPLETED]
    latest = completed[-1] if completed else None

    answers = []
    if latest is not None:
        for answer in latest.answers.select_related('question'):
            question = answer.question
            answers.append({
                'question_id': answer.question_id,
                'question': question.prompt if question else "Question not found",
                'question_type': question.question_type if question else None,
                'user_answer': answer.answer,
                'is_correct': answer.is_correct,
                'correct_answer': question.correct_answer if question else "",
                'points': question.points if question else 0,
                'points_earned': answer.points_earned,
                'needs_review': answer.needs_review,
                'review_notes': answer.review_notes,
            })

    return {
        'quiz': {
            'id': quiz.id,
            'course_id': quiz.course_id,
            'title': quiz.title,
            'quiz_type': quiz.quiz_type,
            'passing_score': quiz.passing_score,
            'attempts_allowed': quiz.attempts_allowed,
        },
        'score': latest.score if latest else 0,
        'passed': latest.passed if latest else False,
        'answers': answers,
        'attempts': attempts,
    }


def release_stuck_attempts(older_than=None):
    """
    Return attempts stuck in processing for longer than ``older_than``
    (default: QUIZ_PROCESSING_TIMEOUT seconds) to in_progress.
    """
    if older_than is None:
        older_than = timedelta(seconds=settings.QUIZ_PROCESSING_TIMEOUT)
    cutoff = timezone.now() - older_than

    stuck = QuizAttempt.objects.filter(status=QuizAttempt.Status.PROCESSING, locked_at__lt=cutoff)
    released = stuck.update(status=QuizAttempt.Status.IN_PROGRESS, locked_at=None)
    if released:
        logger.warning(f"Released {released} quiz attempt(s) stuck in processing since before {cutoff.isoformat()}")
    return released
