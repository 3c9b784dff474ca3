import logging

from django.db import transaction
from django.utils import timezone

from audit.services import PROGRESS_RESET, record_event
from courses.services.catalog_service import get_course, get_lecture, get_lecture_ids
from courses.services.enrollment_service import require_enrollment
from grading.scoring import round_half_up
from learnhub.exceptions import NotFoundError, ValidationError
from progress.models import CourseProgress, LectureProgress, QuizProgress
from quizzes.models import Quiz

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Derived state
# ---------------------------------------------------------------------------

def calculate_progress_percentage(progress):
    """
    50% weight on fully watched lectures, 50% on completed active quizzes.
    A term whose denominator is zero contributes nothing.
    """
    lecture_ids = get_lecture_ids(progress.course_id)
    active_quiz_ids = set(Quiz.objects.filter(course_id=progress.course_id, is_active=True).values_list('id', flat=True))

    watched = progress.lectures_progress.filter(lecture_id__in=lecture_ids, progress_value__gte=1).count()
    completed_quizzes = progress.quizzes_progress.filter(quiz_id__in=active_quiz_ids, completed=True).count()

    value = 0.0
    if lecture_ids:
        value += 50 * watched / len(lecture_ids)
    if active_quiz_ids:
        value += 50 * completed_quizzes / len(active_quiz_ids)
    return min(round_half_up(value), 100)


def is_course_complete(progress):
    """Every catalog lecture fully watched and every active quiz of the course completed."""
    lecture_ids = set(get_lecture_ids(progress.course_id))
    watched_ids = set(
        progress.lectures_progress.filter(progress_value__gte=1).values_list('lecture_id', flat=True)
    )
    if not lecture_ids <= watched_ids:
        return False

    active_quiz_ids = set(Quiz.objects.filter(course_id=progress.course_id, is_active=True).values_list('id', flat=True))
    completed_quiz_ids = set(progress.quizzes_progress.filter(completed=True).values_list('quiz_id', flat=True))
    return active_quiz_ids <= completed_quiz_ids


def _refresh(progress, check_completion=True):
    progress.progress_percentage = calculate_progress_percentage(progress)
    if check_completion and not progress.completed and is_course_complete(progress):
        progress.completed = True
        progress.completion_date = timezone.now()
        logger.info(f"Student {progress.student_id} completed course {progress.course_id}")
    progress.save()
    return progress


def _get_or_create_progress(student, course_id):
    progress, _ = CourseProgress.objects.get_or_create(student=student, course_id=course_id)
    return progress


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@transaction.atomic
def record_lecture_view(student, course_id, lecture_id, progress_value=1, is_rewatch=False):
    lecture = get_lecture(course_id, lecture_id)
    require_enrollment(student, course_id)

    if isinstance(progress_value, bool) or not isinstance(progress_value, (int, float)):
        raise ValidationError("Invalid progress value.", errors={'progress_value': "Must be a number between 0 and 1."})
    if not 0 <= progress_value <= 1:
        raise ValidationError("Invalid progress value.", errors={'progress_value': "Must be between 0 and 1."})
    if not isinstance(is_rewatch, bool):
        raise ValidationError("Invalid rewatch flag.", errors={'is_rewatch': "Must be a boolean."})

    now = timezone.now()
    progress = _get_or_create_progress(student, course_id)
    entry, _ = LectureProgress.objects.get_or_create(course_progress=progress, lecture=lecture)

    # Keep the furthest point reached
    entry.progress_value = max(entry.progress_value, float(progress_value))
    if entry.progress_value >= 1 and not entry.viewed:
        entry.viewed = True
        entry.date_viewed = now
    if is_rewatch:
        entry.rewatch_count += 1
    entry.last_watched_at = now
    entry.save()

    return _refresh(progress, check_completion=not is_rewatch)


@transaction.atomic
def record_quiz_outcome(student, course_id, quiz_id, score, passed, count_attempt=True):
    """
    Fold one graded outcome into the quiz entry. ``count_attempt=False`` is
    used when a review changes an already counted attempt.
    """
    if not Quiz.objects.filter(id=quiz_id, course_id=course_id).exists():
        raise NotFoundError("Quiz not found in this course.")
    if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
        raise ValidationError("Invalid score.", errors={'score': "Must be an integer between 0 and 100."})
    if not isinstance(passed, bool):
        raise ValidationError("Invalid passed flag.", errors={'passed': "Must be a boolean."})

    progress = _get_or_create_progress(student, course_id)
    entry, _ = QuizProgress.objects.get_or_create(course_progress=progress, quiz_id=quiz_id)

    if count_attempt:
        entry.attempts += 1
    entry.best_score = max(entry.best_score, score)
    if passed:
        entry.completed = True
    entry.last_attempt_date = timezone.now()
    entry.save()

    logger.info(
        f"Quiz progress for student {student.pk}, quiz {quiz_id}: "
        f"best={entry.best_score} completed={entry.completed} attempts={entry.attempts}"
    )
    return _refresh(progress)


def get_course_progress(student, course_id):
    """Returns ``(course, progress)``; progress is None before the first recorded activity."""
    course = get_course(course_id)
    require_enrollment(student, course_id)
    progress = (
        CourseProgress.objects.filter(student=student, course=course)
        .prefetch_related('lectures_progress', 'quizzes_progress')
        .first()
    )
    return course, progress


@transaction.atomic
def reset_course_progress(student, course_id):
    progress = CourseProgress.objects.filter(student=student, course_id=course_id).first()
    if progress is None:
        raise NotFoundError("Progress not found.")

    progress.lectures_progress.all().delete()
    progress.quizzes_progress.all().delete()
    progress.completed = False
    progress.completion_date = None
    progress.progress_percentage = 0
    progress.save()

    logger.info(f"Student {student.pk} reset progress for course {course_id}")
    record_event(student, PROGRESS_RESET, 'course_progress', target_id=progress.pk, details={'course_id': progress.course_id})
    return progress


# ---------------------------------------------------------------------------
# Prerequisite predicate (QUIZ_PREREQUISITE_CHECKER)
# ---------------------------------------------------------------------------

def has_completed_lecture(student, lecture):
    """True once the student has watched the whole lecture. Accepts a Lecture or its id."""
    lecture_id = getattr(lecture, 'pk', lecture)
    return LectureProgress.objects.filter(
        course_progress__student=student,
        lecture_id=lecture_id,
        progress_value__gte=1,
    ).exists()
