from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from accounts.permissions import IsInstructor
from learnhub.responses import success_response
from quizzes.serializers import InstructorAttemptSerializer, QuizSerializer
from quizzes.services.quiz_service import (
    create_quiz,
    delete_quiz,
    get_quiz_attempts_for_instructor,
    get_quiz_for_instructor,
    list_quizzes_for_instructor,
    update_quiz,
)

__all__ = [
    'instructor_quiz_create_view',
    'instructor_course_quizzes_view',
    'instructor_quiz_detail_view',
    'instructor_quiz_attempts_view',
]


@api_view(['POST'])
@permission_classes([IsInstructor])
def instructor_quiz_create_view(request):
    """
    Create a quiz with its questions.

    Every invalid field is reported at once under ``errors``.
    """
    quiz = create_quiz(request.user, request.data)
    return success_response(QuizSerializer(quiz).data, "Quiz created successfully.", status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsInstructor])
def instructor_course_quizzes_view(request, course_id):
    quizzes = list_quizzes_for_instructor(request.user, course_id)
    return success_response(QuizSerializer(quizzes, many=True).data, "Quizzes retrieved successfully.")


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsInstructor])
def instructor_quiz_detail_view(request, quiz_id):
    if request.method == 'PATCH':
        quiz = update_quiz(request.user, quiz_id, request.data)
        return success_response(QuizSerializer(quiz).data, "Quiz updated successfully.")

    if request.method == 'DELETE':
        delete_quiz(request.user, quiz_id)
        return success_response(None, "Quiz deleted successfully.")

    quiz = get_quiz_for_instructor(request.user, quiz_id)
    return success_response(QuizSerializer(quiz).data, "Quiz retrieved successfully.")


@api_view(['GET'])
@permission_classes([IsInstructor])
def instructor_quiz_attempts_view(request, quiz_id):
    """All attempts of an owned quiz, grouped by student."""
    quiz, attempts = get_quiz_attempts_for_instructor(request.user, quiz_id)
    return success_response({
        'quiz': QuizSerializer(quiz).data,
        'attempts': InstructorAttemptSerializer(attempts, many=True).data,
    }, "Quiz attempts retrieved successfully.")
