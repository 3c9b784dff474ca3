from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from accounts.permissions import IsStudent
from learnhub.responses import success_response
from quizzes.serializers import AttemptSummarySerializer, StartedAttemptSerializer, StudentQuizSerializer
from quizzes.services.attempt_service import get_attempt_results, start_attempt, submit_attempt
from quizzes.services.quiz_service import get_quiz_for_student, list_quizzes_for_course

__all__ = [
    'student_course_quizzes_view',
    'student_quiz_detail_view',
    'start_attempt_view',
    'submit_attempt_view',
    'attempt_results_view',
]

FALSE_VALUES = ('0', 'false', 'no', 'off')


@api_view(['GET'])
@permission_classes([IsStudent])
def student_course_quizzes_view(request, course_id):
    """
    Active quizzes of an enrolled course with the student's attempts.
    ``?prerequisite_filter=false`` also lists lesson quizzes whose lecture
    has not been fully watched yet.
    """
    prerequisite_filter = request.query_params.get('prerequisite_filter', 'true').lower() not in FALSE_VALUES
    quizzes = list_quizzes_for_course(request.user, course_id, with_prerequisite_filter=prerequisite_filter)
    return success_response(StudentQuizSerializer(quizzes, many=True).data, "Quizzes retrieved successfully.")


@api_view(['GET'])
@permission_classes([IsStudent])
def student_quiz_detail_view(request, quiz_id):
    quiz = get_quiz_for_student(request.user, quiz_id)
    return success_response(StudentQuizSerializer(quiz).data, "Quiz retrieved successfully.")


@api_view(['POST'])
@permission_classes([IsStudent])
def start_attempt_view(request, quiz_id):
    attempt = start_attempt(request.user, quiz_id)
    return success_response(
        StartedAttemptSerializer(attempt).data,
        "Quiz attempt started successfully.",
        status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([IsStudent])
def submit_attempt_view(request, quiz_id, attempt_id):
    answers = request.data.get('answers') if hasattr(request.data, 'get') else None
    attempt, result = submit_attempt(request.user, quiz_id, attempt_id, answers)
    return success_response({
        'attempt_id': attempt.id,
        'score': result.score,
        'points_earned': result.points_earned,
        'total_points': result.total_points,
        'passed': result.passed,
        'pending_review': result.pending_review,
        'time_spent': attempt.time_spent,
        'course_id': attempt.course_id,
    }, "Quiz submitted successfully.")


@api_view(['GET'])
@permission_classes([IsStudent])
def attempt_results_view(request, quiz_id):
    results = get_attempt_results(request.user, quiz_id)
    results['attempts'] = AttemptSummarySerializer(results['attempts'], many=True).data
    return success_response(results, "Quiz results retrieved successfully.")
