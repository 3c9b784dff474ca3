from rest_framework import serializers

from quizzes.models import AttemptAnswer, QuizAttempt


class ReviewAnswerSerializer(serializers.Serializer):
    points_earned = serializers.FloatField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PendingAnswerSerializer(serializers.ModelSerializer):
    question_prompt = serializers.CharField(source='question.prompt', read_only=True, default=None)
    question_points = serializers.IntegerField(source='question.points', read_only=True, default=None)

    class Meta:
        model = AttemptAnswer
        fields = ['id', 'question', 'question_prompt', 'question_points', 'answer', 'needs_review']


class PendingReviewSerializer(serializers.ModelSerializer):
    quiz_title = serializers.CharField(source='quiz.title', read_only=True)
    student_email = serializers.EmailField(source='student.email', read_only=True)
    pending_answers = serializers.SerializerMethodField()

    class Meta:
        model = QuizAttempt
        fields = [
            'id', 'quiz', 'quiz_title', 'course', 'student', 'student_email',
            'attempt_number', 'score', 'completed_at', 'pending_answers',
        ]

    def get_pending_answers(self, obj):
        pending = [a for a in obj.answers.all() if a.needs_review]
        return PendingAnswerSerializer(pending, many=True).data
