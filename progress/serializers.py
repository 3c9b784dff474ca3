from rest_framework import serializers

from progress.models import CourseProgress, LectureProgress, QuizProgress


class LectureProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = LectureProgress
        fields = ['lecture', 'viewed', 'date_viewed', 'progress_value', 'rewatch_count', 'last_watched_at']


class QuizProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuizProgress
        fields = ['quiz', 'completed', 'best_score', 'attempts', 'last_attempt_date']


class CourseProgressSerializer(serializers.ModelSerializer):
    lectures_progress = LectureProgressSerializer(many=True, read_only=True)
    quizzes_progress = QuizProgressSerializer(many=True, read_only=True)

    class Meta:
        model = CourseProgress
        fields = [
            'id', 'student', 'course', 'completed', 'completion_date',
            'progress_percentage', 'lectures_progress', 'quizzes_progress',
        ]


def empty_progress(student, course):
    """Shape returned before a student has any recorded activity."""
    return {
        'id': None,
        'student': student.pk,
        'course': course.pk,
        'completed': False,
        'completion_date': None,
        'progress_percentage': 0,
        'lectures_progress': [],
        'quizzes_progress': [],
    }
