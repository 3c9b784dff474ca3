import logging

from django.db import DatabaseError, IntegrityError

from courses.models import Course, Enrollment
from learnhub.exceptions import AccessDeniedError, DependencyError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def is_enrolled(student, course_id):
    """
    Membership predicate of the enrollment store: True when the student holds
    an enrollment with completed payment for the course.
    """
    try:
        return Enrollment.objects.filter(
            student=student,
            course_id=course_id,
            payment_status='completed',
        ).exists()
    except DatabaseError as e:
        logger.error(f"Enrollment lookup failed for student {student.pk}, course {course_id}: {str(e)}", exc_info=True)
        raise DependencyError("Enrollment store is unavailable.") from e


def require_enrollment(student, course_id):
    if not is_enrolled(student, course_id):
        raise AccessDeniedError("Access denied. Course not purchased.")


def process_payment_stub(student, course):
    """Payment gateway stand-in: every payment succeeds for the listed price."""
    return True, course.price


def enroll_in_course(student, course_id):
    """
    Enroll a student in a published course.
    Payment is handled by a stub that always succeeds, so the enrollment is
    created directly with payment_status='completed'.
    """
    try:
        course = Course.objects.get(id=course_id, is_published=True)
    except Course.DoesNotExist:
        raise NotFoundError("Course not found.")

    if course.instructor_id == student.pk:
        raise ValidationError("Instructors cannot enroll in their own course.")

    if Enrollment.objects.filter(student=student, course=course).exists():
        raise ValidationError("Already enrolled in this course.")

    _, paid_amount = process_payment_stub(student, course)
    try:
        enrollment = Enrollment.objects.create(
            student=student,
            course=course,
            paid_amount=paid_amount,
            payment_status='completed',
        )
    except IntegrityError:
        # A concurrent request created it first.
        raise ValidationError("Already enrolled in this course.")

    logger.info(f"Student {student.pk} enrolled in course {course.id}")
    return enrollment
