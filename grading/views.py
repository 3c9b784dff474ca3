from rest_framework.views import APIView

from accounts.permissions import IsInstructor
from grading.serializers import PendingReviewSerializer, ReviewAnswerSerializer
from grading.services import GradingService
from learnhub.exceptions import ValidationError
from learnhub.responses import success_response


class ReviewAnswerView(APIView):
    permission_classes = [IsInstructor]

    def post(self, request, attempt_id, question_id):
        """
        Grades a manual-review answer.
        Body: {
            "points_earned": float,  # 0 .. question points
            "notes": string (optional)
        }
        """
        serializer = ReviewAnswerSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Invalid review.", errors=serializer.errors)

        attempt, answer = GradingService.review_answer(
            request.user,
            attempt_id,
            question_id,
            serializer.validated_data['points_earned'],
            serializer.validated_data['notes'],
        )
        return success_response({
            'attempt_id': attempt.id,
            'question_id': answer.question_id,
            'points_earned': answer.points_earned,
            'is_correct': answer.is_correct,
            'score': attempt.score,
            'total_points_earned': attempt.points_earned,
            'passed': attempt.passed,
        }, "Answer reviewed successfully.")


class PendingReviewsView(APIView):
    permission_classes = [IsInstructor]

    def get(self, request):
        attempts = GradingService.list_pending_reviews(request.user)
        return success_response(PendingReviewSerializer(attempts, many=True).data, "Pending reviews retrieved successfully.")
