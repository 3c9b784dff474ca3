from courses.models import Course, Lecture
from learnhub.exceptions import NotFoundError


def get_course(course_id):
    try:
        return Course.objects.get(id=course_id)
    except Course.DoesNotExist:
        raise NotFoundError("Course not found.")


def get_lecture(course_id, lecture_id):
    """Return the lecture if it belongs to the course, NotFoundError otherwise."""
    try:
        return Lecture.objects.get(id=lecture_id, course_id=course_id)
    except Lecture.DoesNotExist:
        raise NotFoundError("Lecture not found in this course.")


def get_lecture_ids(course_id):
    """Ordered lecture ids of the course curriculum."""
    return list(
        Lecture.objects.filter(course_id=course_id).order_by('order', 'id').values_list('id', flat=True)
    )
