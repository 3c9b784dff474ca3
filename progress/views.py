from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from accounts.models import User
from accounts.permissions import IsInstructor, IsStudent
from courses.services.catalog_service import get_course
from learnhub.exceptions import AccessDeniedError, NotFoundError, ValidationError
from learnhub.responses import success_response
from progress.serializers import CourseProgressSerializer, empty_progress
from progress.services.progress_service import (
    get_course_progress,
    record_lecture_view,
    record_quiz_outcome,
    reset_course_progress,
)


@api_view(['POST'])
@permission_classes([IsStudent])
def record_lecture_view_view(request, course_id, lecture_id):
    """
    Body: ``{"progress_value": 0..1, "is_rewatch": bool}``.
    ``progress_value`` defaults to 1 (lecture fully watched).
    """
    progress = record_lecture_view(
        request.user,
        course_id,
        lecture_id,
        progress_value=request.data.get('progress_value', 1),
        is_rewatch=request.data.get('is_rewatch', False),
    )
    return success_response(CourseProgressSerializer(progress).data, "Lecture progress recorded.")


@api_view(['POST'])
@permission_classes([IsInstructor])
def record_quiz_outcome_view(request, course_id):
    """Manual quiz outcome entry by the course instructor or an admin."""
    course = get_course(course_id)
    if course.instructor_id != request.user.pk and not request.user.is_admin:
        raise AccessDeniedError("Only the course instructor can record quiz outcomes.")

    data = request.data
    missing = {name: "This field is required." for name in ('student_id', 'quiz_id', 'score', 'passed') if name not in data}
    if missing:
        raise ValidationError("Invalid quiz outcome.", errors=missing)
    invalid = {name: "Must be an integer ID." for name in ('student_id', 'quiz_id') if not str(data[name]).isdigit()}
    if invalid:
        raise ValidationError("Invalid quiz outcome.", errors=invalid)

    student = User.objects.filter(pk=data['student_id']).first()
    if student is None:
        raise NotFoundError("Student not found.")

    progress = record_quiz_outcome(
        student,
        course.id,
        data['quiz_id'],
        data['score'],
        data['passed'],
        count_attempt=data.get('count_attempt', True),
    )
    return success_response(CourseProgressSerializer(progress).data, "Quiz progress updated.")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_course_progress_view(request, course_id):
    course, progress = get_course_progress(request.user, course_id)
    if progress is None:
        return success_response(
            empty_progress(request.user, course),
            "No progress found, you can start watching the course.",
        )
    return success_response(CourseProgressSerializer(progress).data, "Course progress retrieved successfully.")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reset_course_progress_view(request, course_id):
    progress = reset_course_progress(request.user, course_id)
    return success_response(CourseProgressSerializer(progress).data, "Course progress has been reset.")
